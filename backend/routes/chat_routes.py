import json
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from auth import get_current_user
from models.chat_message import ChatRequest
from services.chat_service import ChatService, ChatServiceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["Chat"])


@router.get("/history")
async def chat_history(user_id: str = Depends(get_current_user)):
    try:
        return await ChatService.history(user_id)
    except Exception as e:
        logger.error(f"Error loading chat history for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load chat history")


@router.post("/stream")
async def chat_stream(body: ChatRequest, user_id: str = Depends(get_current_user)):
    """Stream the assistant's reply as Server-Sent Events."""

    async def event_generator():
        try:
            async for delta in ChatService.stream_reply(user_id, body.message):
                yield f"data: {json.dumps({'content': delta})}\n\n"
        except ChatServiceError as e:
            yield f"data: {json.dumps({'error': str(e)})}\n\n"
        yield "data: [DONE]\n\n"

    return StreamingResponse(event_generator(), media_type="text/event-stream")
