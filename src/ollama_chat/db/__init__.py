"""Database module for the chat service."""

from .models import MAX_ID, Base, Conversation, Message, Role
from .session import DATABASE_URL, async_session, enable_sqlite_foreign_keys, engine, get_session

__all__ = [
    "MAX_ID",
    "Base",
    "Conversation",
    "Message",
    "Role",
    "engine",
    "async_session",
    "enable_sqlite_foreign_keys",
    "get_session",
    "DATABASE_URL",
]
