"""Conversation CRUD endpoints."""

from datetime import datetime

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel, ConfigDict, Field

from ollama_chat.api.deps import get_store
from ollama_chat.db import MAX_ID, Conversation, Message, Role
from ollama_chat.errors import ChatError
from ollama_chat.store import ConversationStore

router = APIRouter(prefix="/conversations", tags=["conversations"])

ConversationId = Annotated[int, Path(ge=1, le=MAX_ID)]


# --- Schemas ---


class ConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int
    sender: Role = Field(validation_alias="role")  # wire name used by the web client
    content: str
    created_at: datetime


class RenameRequest(BaseModel):
    name: str = Field(min_length=1)


class Ack(BaseModel):
    message: str


def _http_error(e: ChatError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.detail)


# --- Routes ---


@router.get("", response_model=list[ConversationResponse])
async def list_conversations(
    store: ConversationStore = Depends(get_store),
) -> list[Conversation]:
    """List all conversations, newest first."""
    try:
        return await store.list_conversations()
    except ChatError as e:
        raise _http_error(e)


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: ConversationId,
    store: ConversationStore = Depends(get_store),
) -> Conversation:
    """Get a single conversation."""
    try:
        return await store.get(conversation_id)
    except ChatError as e:
        raise _http_error(e)


@router.put("/{conversation_id}/name", response_model=ConversationResponse)
async def rename_conversation(
    conversation_id: ConversationId,
    data: RenameRequest,
    store: ConversationStore = Depends(get_store),
) -> Conversation:
    """Rename a conversation."""
    if not data.name.strip():
        raise HTTPException(status_code=400, detail="Name must not be empty")
    try:
        return await store.rename(conversation_id, data.name)
    except ChatError as e:
        raise _http_error(e)


@router.delete("/{conversation_id}", response_model=Ack)
async def delete_conversation(
    conversation_id: ConversationId,
    store: ConversationStore = Depends(get_store),
) -> Ack:
    """Delete a conversation together with all of its messages."""
    try:
        await store.delete_conversation(conversation_id)
    except ChatError as e:
        raise _http_error(e)
    return Ack(message="Conversation deleted")


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: ConversationId,
    store: ConversationStore = Depends(get_store),
) -> list[Message]:
    """List a conversation's messages, oldest first."""
    try:
        return await store.list_messages(conversation_id)
    except ChatError as e:
        raise _http_error(e)


@router.delete("/{conversation_id}/messages", response_model=Ack)
async def clear_messages(
    conversation_id: ConversationId,
    store: ConversationStore = Depends(get_store),
) -> Ack:
    """Remove all messages but keep the conversation."""
    try:
        await store.clear_messages(conversation_id)
    except ChatError as e:
        raise _http_error(e)
    return Ack(message="Conversation messages cleared")
