import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from finance_assistant.database import get_db
from finance_assistant.errors import BackendCredentialsError
from finance_assistant.models.schemas import ChatRequest, ChatResponse
from finance_assistant.security import get_current_user_id
from finance_assistant.services.context import build_context
from finance_assistant.services.prompt import compose_system_prompt
from finance_assistant.services.relay import ConversationRelay

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["assistant"])


def get_relay(request: Request) -> Optional[ConversationRelay]:
    return request.app.state.relay


@router.post("/ai", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    user_id: int = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db),
    relay: Optional[ConversationRelay] = Depends(get_relay),
):
    """Answer a question about the caller's finances."""
    if relay is None:
        logger.error("❌ AI request received but no Gemini API key is configured")
        raise BackendCredentialsError()

    history = payload.history or []
    logger.info(f"🤖 Assistant query from user {user_id} ({len(history)} prior turns)")

    context = await build_context(session, user_id)
    system_prompt = compose_system_prompt(context)
    reply = await relay.converse(system_prompt, history, payload.message)

    return ChatResponse(response=reply)
