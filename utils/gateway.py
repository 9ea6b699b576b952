import logging
import socket
from typing import Any, Callable, Iterator, Optional

from langchain_google_genai import ChatGoogleGenerativeAI

from config import GatewaySettings
from errors import FailureKind, GatewayConfigurationError
from models import CompletionOptions, CompletionResult, Usage

logger = logging.getLogger(__name__)

CONNECTION_ERRORS = (ConnectionError, socket.gaierror)
# Client libraries that do not subclass the builtin ConnectionError (httpx, requests, openai)
CONNECTION_ERROR_NAMES = {"ConnectError", "ConnectionError", "APIConnectionError"}

PING_PROMPT = "Hello, can you reply?"

LLMFactory = Callable[[str, CompletionOptions, GatewaySettings], Any]


def build_chat_model(model: str, options: CompletionOptions, settings: GatewaySettings) -> ChatGoogleGenerativeAI:
    """Default client: one Gemini chat model per request, single attempt, fixed timeout."""
    if not settings.api_key:
        raise GatewayConfigurationError("GOOGLE_API_KEY is not set. Add it to your .env file.")

    kwargs = {
        "model": model,
        "google_api_key": settings.api_key,
        "temperature": options.temperature,
        "top_p": options.top_p,
        "max_output_tokens": options.max_tokens,
        "timeout": settings.timeout,
        "max_retries": 1,
    }
    if options.frequency_penalty:
        kwargs["frequency_penalty"] = options.frequency_penalty
    if options.presence_penalty:
        kwargs["presence_penalty"] = options.presence_penalty
    return ChatGoogleGenerativeAI(**kwargs)


def _exception_chain(exc: Optional[BaseException]) -> Iterator[BaseException]:
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        yield exc
        exc = exc.__cause__ or exc.__context__


def _status_code(exc: BaseException) -> Optional[int]:
    response = getattr(exc, "response", None)
    for candidate in (
        getattr(exc, "status_code", None),
        getattr(exc, "code", None),
        getattr(response, "status_code", None),
    ):
        if isinstance(candidate, int) and not isinstance(candidate, bool):
            return candidate
    return None


def classify_remote_error(exc: BaseException) -> FailureKind:
    """Map a provider exception (or anything in its cause chain) to a failure kind."""
    for error in _exception_chain(exc):
        if isinstance(error, CONNECTION_ERRORS) or type(error).__name__ in CONNECTION_ERROR_NAMES:
            return FailureKind.REMOTE_UNAVAILABLE

        status = _status_code(error)
        if status is None:
            continue
        if status in (401, 403):
            return FailureKind.REMOTE_UNAUTHORIZED
        if status == 429:
            return FailureKind.REMOTE_RATE_LIMITED
        if 500 <= status < 600:
            return FailureKind.REMOTE_SERVER_ERROR
        return FailureKind.REMOTE_UNKNOWN_ERROR

    return FailureKind.REMOTE_UNKNOWN_ERROR


def _response_text(response: Any) -> str:
    content = getattr(response, "content", response)
    if isinstance(content, list):
        # Gemini may answer with a list of content parts
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(part.get("text", ""))
        content = "".join(parts)
    return content if isinstance(content, str) else ""


def _response_usage(response: Any) -> Usage:
    usage = getattr(response, "usage_metadata", None) or {}
    return Usage(
        input_tokens=usage.get("input_tokens", 0),
        output_tokens=usage.get("output_tokens", 0),
        total_tokens=usage.get("total_tokens", 0),
    )


class CompletionGateway:
    """Single-attempt client over the remote completion provider.

    Holds only the read-only settings it was built with, so one instance can
    serve concurrent pipeline runs. Provider errors are returned as a failed
    CompletionResult carrying a FailureKind; a client that cannot even be built
    (GatewayConfigurationError) propagates to the caller.
    """

    def __init__(self, settings: GatewaySettings, llm_factory: Optional[LLMFactory] = None):
        self.settings = settings
        self._llm_factory = llm_factory or build_chat_model

    def resolve_model(self, model_alias: str) -> str:
        return self.settings.models.get(model_alias, model_alias)

    def send_completion(
        self,
        prompt: str,
        model_alias: str = "chat",
        options: Optional[CompletionOptions] = None,
    ) -> CompletionResult:
        options = options or CompletionOptions()
        model = self.resolve_model(model_alias)
        llm = self._llm_factory(model, options, self.settings)

        logger.info(f"Sending completion request: model={model}, max_tokens={options.max_tokens}, prompt_chars={len(prompt)}")
        try:
            response = llm.invoke(prompt)
        except Exception as e:
            kind = classify_remote_error(e)
            logger.error(f"Completion request failed ({kind.value}): {e}")
            return CompletionResult(success=False, model=model, error_kind=kind, error_message=str(e))

        text = _response_text(response)
        if not text.strip():
            logger.error(f"Completion request returned no content: model={model}")
            return CompletionResult(
                success=False,
                model=model,
                error_kind=FailureKind.REMOTE_UNKNOWN_ERROR,
                error_message="Empty completion",
            )

        usage = _response_usage(response)
        logger.info(f"Completion received: model={model}, total_tokens={usage.total_tokens}")
        return CompletionResult(success=True, content=text, usage=usage, model=model)

    def ping(self) -> CompletionResult:
        """Connectivity check with a tiny chat completion."""
        return self.send_completion(PING_PROMPT, "chat", CompletionOptions(max_tokens=50))
