"""Durable conversation store on top of an async SQLAlchemy session."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ollama_chat.db import MAX_ID, Conversation, Message, Role
from ollama_chat.errors import InvalidRole, PersistenceFailed, SessionNotFound, TransactionFailed

logger = logging.getLogger(__name__)


class ConversationStore:
    """
    Maps conversation ids to their ordered message log.

    Every mutating call commits on its own, so whatever it wrote is
    durable once it returns. Read or write failures are rolled back and
    raised as PersistenceFailed.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _rollback(self, action: str, error: SQLAlchemyError) -> None:
        logger.error("Store failure while %s: %s", action, error)
        await self.db.rollback()

    async def get(self, conversation_id: int) -> Conversation:
        """Fetch a conversation or raise SessionNotFound."""
        if not 0 < conversation_id <= MAX_ID:
            raise SessionNotFound("Conversation not found")
        try:
            conversation = await self.db.get(Conversation, conversation_id)
        except SQLAlchemyError as e:
            await self._rollback("loading conversation", e)
            raise PersistenceFailed(f"Failed to load conversation: {e}") from e
        if conversation is None:
            raise SessionNotFound("Conversation not found")
        return conversation

    async def resolve(self, conversation_id: int | None = None) -> tuple[Conversation, bool]:
        """
        Look up an existing conversation, or create an empty one.

        An id of None or 0 means "start a new conversation". Returns the
        conversation and whether it was created by this call.
        """
        if conversation_id:
            return await self.get(conversation_id), False

        conversation = Conversation(name="")
        self.db.add(conversation)
        try:
            await self.db.commit()
            await self.db.refresh(conversation)
        except SQLAlchemyError as e:
            await self._rollback("creating conversation", e)
            raise PersistenceFailed(f"Failed to create conversation: {e}") from e

        logger.info("Created conversation %s", conversation.id)
        return conversation, True

    async def append_message(self, conversation_id: int, role: Role, content: str) -> Message:
        """Append an immutable message stamped with the current time."""
        try:
            role = Role(role)
        except ValueError as e:
            raise InvalidRole(f"Unknown message role: {role!r}") from e

        message = Message(conversation_id=conversation_id, role=role, content=content)
        self.db.add(message)
        try:
            await self.db.commit()
            await self.db.refresh(message)
        except SQLAlchemyError as e:
            await self._rollback("appending message", e)
            raise PersistenceFailed(f"Failed to save message: {e}") from e
        return message

    async def list_messages(self, conversation_id: int) -> list[Message]:
        """All messages of a conversation in insertion order."""
        try:
            result = await self.db.execute(
                select(Message)
                .where(Message.conversation_id == conversation_id)
                .order_by(Message.id.asc())
            )
        except SQLAlchemyError as e:
            await self._rollback("listing messages", e)
            raise PersistenceFailed(f"Failed to load messages: {e}") from e
        return list(result.scalars().all())

    async def rename(self, conversation_id: int, name: str) -> Conversation:
        """Change the display name only."""
        conversation = await self.get(conversation_id)
        conversation.name = name
        try:
            await self.db.commit()
            await self.db.refresh(conversation)
        except SQLAlchemyError as e:
            await self._rollback("renaming conversation", e)
            raise PersistenceFailed(f"Failed to rename conversation: {e}") from e
        return conversation

    async def delete_conversation(self, conversation_id: int) -> None:
        """
        Remove a conversation and all of its messages in one transaction.

        Any failure rolls the whole transaction back, so either both the
        conversation and its messages remain or neither does.
        """
        try:
            await self.db.execute(delete(Message).where(Message.conversation_id == conversation_id))
            await self.db.execute(delete(Conversation).where(Conversation.id == conversation_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._rollback("deleting conversation", e)
            raise TransactionFailed(f"Failed to delete conversation: {e}") from e
        logger.info("Deleted conversation %s", conversation_id)

    async def clear_messages(self, conversation_id: int) -> None:
        """Remove every message but keep the conversation and its name."""
        try:
            await self.db.execute(delete(Message).where(Message.conversation_id == conversation_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._rollback("clearing messages", e)
            raise PersistenceFailed(f"Failed to clear messages: {e}") from e

    async def list_conversations(self) -> list[Conversation]:
        """All conversations, most recently created first. Messages are not loaded."""
        try:
            result = await self.db.execute(
                select(Conversation).order_by(Conversation.id.desc())
            )
        except SQLAlchemyError as e:
            await self._rollback("listing conversations", e)
            raise PersistenceFailed(f"Failed to load conversations: {e}") from e
        return list(result.scalars().all())
