"""Chat turn endpoint."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ollama_chat.api.deps import get_orchestrator
from ollama_chat.chat.orchestrator import TurnOrchestrator
from ollama_chat.db import MAX_ID
from ollama_chat.errors import ChatError

router = APIRouter(tags=["chat"])


class ChatMessageRequest(BaseModel):
    conversation_id: int = Field(default=0, ge=0, le=MAX_ID)
    question: str = Field(min_length=1)


class ChatMessageResponse(BaseModel):
    conversation_id: int
    conversation_name: str
    question: str
    answer: str


@router.post("/chat_message", response_model=ChatMessageResponse)
async def chat_message(
    data: ChatMessageRequest,
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
) -> ChatMessageResponse:
    """
    Submit one user turn and get the model's answer.

    conversation_id 0 starts a new, automatically named conversation.
    """
    try:
        result = await orchestrator.run(data.conversation_id, data.question)
    except ChatError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    return ChatMessageResponse(
        conversation_id=result.conversation_id,
        conversation_name=result.conversation_name,
        question=result.question,
        answer=result.answer,
    )
