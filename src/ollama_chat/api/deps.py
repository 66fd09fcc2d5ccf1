"""Request-scoped dependencies shared by the routers."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ollama_chat.chat.locks import ConversationLocks
from ollama_chat.chat.orchestrator import TurnOrchestrator
from ollama_chat.config import Settings
from ollama_chat.db import get_session
from ollama_chat.llm import CompletionClient
from ollama_chat.store import ConversationStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_completion_client(request: Request) -> CompletionClient:
    return request.app.state.completion_client


def get_system_prompt(request: Request) -> str:
    return request.app.state.system_prompt


def get_conversation_locks(request: Request) -> ConversationLocks:
    return request.app.state.conversation_locks


def get_store(db: AsyncSession = Depends(get_session)) -> ConversationStore:
    return ConversationStore(db)


def get_orchestrator(
    store: ConversationStore = Depends(get_store),
    client: CompletionClient = Depends(get_completion_client),
    system_prompt: str = Depends(get_system_prompt),
    locks: ConversationLocks = Depends(get_conversation_locks),
) -> TurnOrchestrator:
    return TurnOrchestrator(store, client, system_prompt, locks=locks)
