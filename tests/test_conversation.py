"""Tests for ChatMemory and ConversationSession."""

import pytest

from ragrouter import (
    ChatMemory,
    ConversationSession,
    GenerationError,
    RetrievalAugmentor,
    StaticQueryRouter,
)


@pytest.fixture
def session_factory(scripted_chat_model_factory, memory_factory):
    def _create(replies, *, router=None, max_turns=5, end_sentinel=None):  # noqa: ANN202
        model = scripted_chat_model_factory(replies)
        session = ConversationSession(
            RetrievalAugmentor(router or StaticQueryRouter()),
            model,
            memory=memory_factory(max_turns=max_turns),
            end_sentinel=end_sentinel,
        )
        return session, model

    return _create


def test_memory_evicts_oldest_first(memory_factory):
    memory = memory_factory(max_turns=3, turns=5)

    assert len(memory) == 3
    assert [t.user_question for t in memory.turns()] == [
        "Question 2",
        "Question 3",
        "Question 4",
    ]


def test_memory_rejects_non_positive_window():
    with pytest.raises(ValueError, match="must be positive"):
        ChatMemory(max_turns=0)


def test_memory_clear(memory_factory):
    memory = memory_factory(turns=2)

    memory.clear()

    assert len(memory) == 0


def test_turn_returns_answer_and_records_history(session_factory):
    session, _ = session_factory(["Paris."])

    answer = session.turn("What is the capital of France?")

    assert answer == "Paris."
    turns = session.memory.turns()
    assert len(turns) == 1
    assert turns[0].user_question == "What is the capital of France?"
    assert turns[0].bot_response == "Paris."
    assert turns[0].retrieved_contexts == []


def test_turn_records_retrieved_contexts(session_factory, stub_retriever_factory):
    source = stub_retriever_factory("rag.pdf", ["RAG means retrieval-augmented generation"])
    session, _ = session_factory(["RAG is..."], router=StaticQueryRouter(source))

    session.turn("What is RAG?")

    contexts = session.memory.turns()[0].retrieved_contexts
    assert [c.source for c in contexts] == ["rag.pdf"]


def test_history_window_in_generation_request(session_factory):
    window = 3
    session, model = session_factory(
        [f"Answer {i}" for i in range(window + 2)], max_turns=window
    )

    for i in range(window + 1):
        session.turn(f"Question {i}")
    session.turn("Final question")

    last_request = model.prompts[-1]
    history_questions = [m["content"] for m in last_request[1:-1] if m["role"] == "user"]
    assert history_questions == ["Question 1", "Question 2", "Question 3"]
    assert "Question 0" not in str(last_request)


def test_generation_failure_leaves_history_and_session_usable(session_factory):
    session, _ = session_factory(["First answer", GenerationError("timeout"), "Third"])

    session.turn("First question")
    with pytest.raises(GenerationError):
        session.turn("Second question")
    answer = session.turn("Third question")

    assert answer == "Third"
    assert [t.user_question for t in session.memory.turns()] == [
        "First question",
        "Third question",
    ]


@pytest.mark.parametrize("text", ["exit", "EXIT", "  Exit  "])
def test_default_end_sentinel(session_factory, text):
    session, _ = session_factory([])

    assert session.is_end(text)
    assert not session.is_end("exit now")


def test_custom_end_sentinel(session_factory):
    session, _ = session_factory([], end_sentinel="fin")

    assert session.is_end("FIN")
    assert not session.is_end("exit")


def test_turn_after_end_raises(session_factory):
    session, _ = session_factory(["Answer"])
    session.turn("Question")

    session.end()

    assert session.closed
    assert len(session.memory) == 0
    with pytest.raises(RuntimeError, match="has ended"):
        session.turn("Another question")
