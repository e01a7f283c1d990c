"""
AI Assistant Endpoint
"""

import logging
from fastapi import APIRouter

from app.api.v1.errors import to_http_exception
from app.schemas.chat import ChatRequest, ChatResponse
from app.services.base import ServiceError
from app.services.llm import get_chat_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ChatResponse)
async def chat(request: ChatRequest):
    """
    Ask the AI assistant about a company.

    The ticker is taken from `symbol` or detected in the prompt; its
    fundamentals and indicators are passed to the model as context.
    """
    chat_service = get_chat_service()

    try:
        return await chat_service.answer(request)
    except ServiceError as e:
        logger.error(f"Chat request failed: {e}")
        raise to_http_exception(e)
