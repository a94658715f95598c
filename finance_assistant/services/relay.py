import logging
from typing import Iterable, List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from finance_assistant.config import Settings
from finance_assistant.errors import (
    AssistantError,
    BackendCredentialsError,
    BackendPermissionError,
    ModelUnavailableError,
    RateLimitedError,
)

logger = logging.getLogger(__name__)

ACKNOWLEDGMENT = (
    "I understand. I'm ready to help you with your expense tracking and financial questions. "
    "I have access to your spending data and can provide personalized insights. "
    "How can I assist you today?"
)

# Structured provider codes, by HTTP status and by canonical status name
_ERRORS_BY_CODE = {
    429: RateLimitedError,
    401: BackendCredentialsError,
    403: BackendPermissionError,
    404: ModelUnavailableError,
    503: ModelUnavailableError,
}
_ERRORS_BY_STATUS = {
    "RESOURCE_EXHAUSTED": RateLimitedError,
    "UNAUTHENTICATED": BackendCredentialsError,
    "PERMISSION_DENIED": BackendPermissionError,
    "NOT_FOUND": ModelUnavailableError,
    "UNAVAILABLE": ModelUnavailableError,
}
_ERRORS_BY_REASON = {
    "API_KEY_INVALID": BackendCredentialsError,
    "API_KEY_SERVICE_BLOCKED": BackendPermissionError,
    "RATE_LIMIT_EXCEEDED": RateLimitedError,
}


def _exception_chain(exc: BaseException):
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        yield exc
        exc = exc.__cause__ or exc.__context__


def _reasons(exc: BaseException) -> List[str]:
    reasons = []
    reason = getattr(exc, "reason", None)
    if isinstance(reason, str):
        reasons.append(reason)

    # google-genai style errors carry the raw error body in ``details``
    details = getattr(exc, "details", None)
    if isinstance(details, dict):
        for item in details.get("error", {}).get("details", []) or []:
            if isinstance(item, dict) and isinstance(item.get("reason"), str):
                reasons.append(item["reason"])
    return reasons


def _status_name(exc: BaseException) -> Optional[str]:
    status = getattr(exc, "status", None)
    if isinstance(status, str):
        return status.upper()
    grpc_code = getattr(exc, "grpc_status_code", None)
    return getattr(grpc_code, "name", None)


def _status_code(exc: BaseException) -> Optional[int]:
    for attr in ("code", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return int(value)
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int):
        return value
    return None


def classify_backend_error(exc: BaseException) -> AssistantError:
    """Map a provider exception onto the assistant error taxonomy."""
    for err in _exception_chain(exc):
        if isinstance(err, AssistantError):
            return err
        for reason in _reasons(err):
            if reason in _ERRORS_BY_REASON:
                return _ERRORS_BY_REASON[reason]()
        status = _status_name(err)
        if status in _ERRORS_BY_STATUS:
            return _ERRORS_BY_STATUS[status]()
        code = _status_code(err)
        if code in _ERRORS_BY_CODE:
            return _ERRORS_BY_CODE[code]()
    return AssistantError()


def _turn_fields(turn):
    if isinstance(turn, dict):
        return turn.get("role"), turn.get("content", "")
    return turn.role, turn.content


def build_messages(system_prompt: str, prior_turns: Iterable, new_message: str) -> List[BaseMessage]:
    """System prompt and acknowledgment first, then the replayed history, then the new message."""
    messages: List[BaseMessage] = [
        HumanMessage(content=system_prompt),
        AIMessage(content=ACKNOWLEDGMENT),
    ]
    for turn in prior_turns or []:
        role, content = _turn_fields(turn)
        if role == "assistant":
            messages.append(AIMessage(content=content))
        else:
            messages.append(HumanMessage(content=content))
    messages.append(HumanMessage(content=new_message))
    return messages


def _reply_text(response) -> str:
    content = getattr(response, "content", response)
    if isinstance(content, str):
        return content.strip()
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type", "text") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts).strip()


class ConversationRelay:
    """One stateless call to the chat model per assistant request."""

    def __init__(self, llm):
        self.llm = llm

    async def converse(self, system_prompt: str, prior_turns: Iterable, new_message: str) -> str:
        messages = build_messages(system_prompt, prior_turns, new_message)
        try:
            response = await self.llm.ainvoke(messages)
        except Exception as e:
            error = classify_backend_error(e)
            logger.error(f"❌ AI backend call failed ({type(error).__name__}): {e}")
            raise error from e

        reply = _reply_text(response)
        if not reply:
            logger.warning("⚠️ AI backend returned an empty reply")
            raise AssistantError()
        return reply


def create_relay(settings: Settings) -> Optional[ConversationRelay]:
    """Gemini-backed relay, or None when no API key is configured."""
    if not settings.gemini_api_key:
        logger.warning("⚠️ No Gemini API key found - the AI assistant is disabled")
        return None

    llm = ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=settings.gemini_api_key,
        temperature=settings.gemini_temperature,
        timeout=settings.gemini_timeout_seconds,
        max_retries=0,
    )
    logger.info(f"🤖 AI assistant initialized with model {settings.gemini_model}")
    return ConversationRelay(llm)
