"""OpenAI chat model wrapper used for routing prompts and final answers."""

from openai import OpenAI, OpenAIError

from .config import config
from .exceptions import GenerationError

logger = config.get_logger(__name__)

Messages = list[dict[str, str]]


class ChatModel:
    """Turns a prompt or a list of chat messages into a text reply."""

    def __init__(  # noqa: PLR0913
        self,
        api_key: str | None = None,
        model: str | None = None,
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the chat model client.

        Args:
            api_key: OpenAI API key. If None, reads OPENAI_API_KEY.
            model: Chat model name. If None, uses config.CHAT_MODEL.
            max_tokens: Completion cap. If None, uses config.CHAT_MAX_TOKENS.
            temperature: Sampling temperature. If None, uses
                config.CHAT_TEMPERATURE.
            timeout: Per-request timeout in seconds. If None, uses
                config.REQUEST_TIMEOUT.
        """
        default_headers = config.get_api_headers()
        self.client = OpenAI(
            api_key=api_key or config.get_openai_api_key(),
            base_url=config.OPENAI_BASE_URL,
            default_headers=default_headers or None,
            timeout=timeout if timeout is not None else config.REQUEST_TIMEOUT,
            max_retries=0,
        )
        self.model = model or config.CHAT_MODEL
        self.max_tokens = max_tokens if max_tokens is not None else config.CHAT_MAX_TOKENS
        self.temperature = (
            temperature if temperature is not None else config.CHAT_TEMPERATURE
        )

    def generate(
        self,
        prompt: str | Messages,
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """Send a prompt (plain string or chat messages) and return the reply text.

        Raises:
            GenerationError: If the API call fails, times out, or returns no text.
        """
        messages = (
            [{"role": "user", "content": prompt}] if isinstance(prompt, str) else prompt
        )
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore[arg-type]
                max_tokens=max_tokens if max_tokens is not None else self.max_tokens,
                temperature=(
                    temperature if temperature is not None else self.temperature
                ),
            )
        except OpenAIError as e:
            logger.exception("Chat completion failed")
            msg = f"Chat completion failed: {e!s}"
            raise GenerationError(msg) from e

        content = response.choices[0].message.content
        if not content:
            msg = "Chat completion returned an empty message"
            raise GenerationError(msg)
        return content.strip()
