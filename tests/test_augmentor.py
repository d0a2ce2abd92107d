"""Tests for RetrievalAugmentor."""

import pytest

from ragrouter import (
    Query,
    RetrievalError,
    RetrievedContent,
    StaticQueryRouter,
    TextSegment,
)
from ragrouter.augmentor import SYSTEM_PROMPT


@pytest.fixture
def local_source(stub_retriever_factory):
    return stub_retriever_factory("rag.pdf", ["local one", "local two"])


@pytest.fixture
def web_source(stub_retriever_factory):
    return stub_retriever_factory("web", ["web one", "web two", "web three"])


def test_no_selected_retrievers_means_plain_request(augmentor_factory, local_source):
    augmentor = augmentor_factory(StaticQueryRouter())

    request = augmentor.augment(Query(text="Hello there"))

    assert not request.has_context
    assert request.contents == []
    assert request.messages == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "Hello there"},
    ]
    assert local_source.calls == 0


@pytest.mark.parametrize("parallel", [False, True])
def test_merge_groups_by_retriever_in_selection_order(
    augmentor_factory, local_source, web_source, parallel
):
    augmentor = augmentor_factory(
        StaticQueryRouter(web_source, local_source), parallel=parallel
    )

    request = augmentor.augment(Query(text="What is RAG?"))

    assert [c.segment.text for c in request.contents] == [
        "web one",
        "web two",
        "web three",
        "local one",
        "local two",
    ]
    assert [c.source for c in request.contents] == ["web"] * 3 + ["rag.pdf"] * 2


def test_no_cross_source_resorting(augmentor_factory, stub_retriever_factory):
    low = stub_retriever_factory("low", ["a"])
    high = stub_retriever_factory("high", ["b"])
    low_first = augmentor_factory(StaticQueryRouter(low, high))

    request = low_first.augment(Query(text="q"))

    assert [c.source for c in request.contents] == ["low", "high"]


def test_failing_retriever_contributes_nothing(
    augmentor_factory, stub_retriever_factory, local_source
):
    broken = stub_retriever_factory("web", error=RetrievalError("search down"))
    augmentor = augmentor_factory(StaticQueryRouter(broken, local_source))

    request = augmentor.augment(Query(text="What is RAG?"))

    assert broken.calls == 1
    assert [c.segment.text for c in request.contents] == ["local one", "local two"]


def test_all_retrievers_failing_still_produces_request(
    augmentor_factory, stub_retriever_factory
):
    broken = stub_retriever_factory("web", error=RuntimeError("boom"))
    augmentor = augmentor_factory(StaticQueryRouter(broken))

    request = augmentor.augment(Query(text="What is RAG?"))

    assert request.contents == []
    assert request.messages[-1] == {"role": "user", "content": "What is RAG?"}


def test_context_is_labeled_with_source(augmentor_factory, local_source):
    augmentor = augmentor_factory(StaticQueryRouter(local_source))

    request = augmentor.augment(Query(text="What is RAG?"))

    user_message = request.messages[-1]["content"]
    assert user_message.startswith("What is RAG?\n\nAnswer using the following")
    assert "[Context 1] (Source: rag.pdf, Score: 1.0000)\nlocal one" in user_message
    assert "[Context 2] (Source: rag.pdf, Score: 0.9000)\nlocal two" in user_message


def test_history_goes_between_system_prompt_and_query(
    augmentor_factory, memory_factory
):
    augmentor = augmentor_factory(StaticQueryRouter())
    memory = memory_factory(turns=2)

    request = augmentor.augment(Query(text="Next question"), memory.turns())

    assert [m["role"] for m in request.messages] == [
        "system",
        "user",
        "assistant",
        "user",
        "assistant",
        "user",
    ]
    assert request.messages[1]["content"] == "Question 0"
    assert request.messages[4]["content"] == "Answer 1"
    assert request.messages[5]["content"] == "Next question"


def test_web_content_shows_url(augmentor_factory):
    contents = [
        RetrievedContent(
            segment=TextSegment(text="Sunny", metadata={"url": "https://w.example"}),
            score=None,
            source="web",
        )
    ]

    rendered = augmentor_factory(StaticQueryRouter()).format_contents(contents)

    assert rendered == "[Context 1] (Source: web (https://w.example), Score: n/a)\nSunny"
