"""State machine driving one chat turn end to end."""

import enum
import logging
from contextlib import nullcontext
from dataclasses import dataclass

from ollama_chat.chat.history import HISTORY_LIMIT, build_history_window
from ollama_chat.chat.locks import ConversationLocks
from ollama_chat.chat.prompt import ChatMessage, PromptRequest, assemble_prompt
from ollama_chat.db import Conversation, Message, Role
from ollama_chat.errors import BadRequest, ChatError, CompletionError, CompletionFailed, NamingFailed
from ollama_chat.llm import CompletionClient
from ollama_chat.store import ConversationStore

logger = logging.getLogger(__name__)

NAMING_TEMPERATURE = 0.5
CHAT_TEMPERATURE = 0.8

NAMING_PROMPT = (
    "Generate a short conversation name (at most 20 characters) "
    "for the following question: {question}"
)


class TurnState(str, enum.Enum):
    RESOLVING_SESSION = "resolving_session"
    NAMING_SESSION = "naming_session"
    PERSISTING_USER_TURN = "persisting_user_turn"
    BUILDING_PROMPT = "building_prompt"
    AWAITING_COMPLETION = "awaiting_completion"
    PERSISTING_ASSISTANT_TURN = "persisting_assistant_turn"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class TurnResult:
    conversation_id: int
    conversation_name: str
    question: str
    answer: str


class TurnOrchestrator:
    """
    Runs a single user turn against a conversation.

    The question is stored before the model is called, so a completion
    failure loses only the answer. Failures are raised as ChatError
    subclasses; `failed_in` records the state that raised.

    One instance handles one turn.
    """

    def __init__(
        self,
        store: ConversationStore,
        client: CompletionClient,
        system_prompt: str,
        locks: ConversationLocks | None = None,
        history_limit: int = HISTORY_LIMIT,
    ):
        self.store = store
        self.client = client
        self.system_prompt = system_prompt
        self.locks = locks
        self.history_limit = history_limit
        self.state = TurnState.RESOLVING_SESSION
        self.failed_in: TurnState | None = None

    def _enter(self, state: TurnState, conversation_id: int | None = None) -> None:
        logger.debug("Turn %s -> %s (conversation %s)", self.state.value, state.value, conversation_id)
        self.state = state

    def _hold(self, conversation_id: int):
        if self.locks is None:
            return nullcontext()
        return self.locks.hold(conversation_id)

    async def resolve_session(self, conversation_id: int | None) -> tuple[Conversation, bool]:
        self._enter(TurnState.RESOLVING_SESSION, conversation_id)
        return await self.store.resolve(conversation_id)

    async def name_session(self, conversation: Conversation, question: str) -> str:
        """Ask the model for a name. The conversation is kept even if this fails."""
        self._enter(TurnState.NAMING_SESSION, conversation.id)
        request = PromptRequest(
            messages=(ChatMessage(role="user", content=NAMING_PROMPT.format(question=question)),),
            temperature=NAMING_TEMPERATURE,
        )
        try:
            name = await self.client.complete(request)
        except CompletionError as e:
            raise NamingFailed(f"Failed to generate conversation name: {e}") from e

        renamed = await self.store.rename(conversation.id, name.strip())
        return renamed.name

    async def persist_user_turn(self, conversation: Conversation, question: str) -> Message:
        self._enter(TurnState.PERSISTING_USER_TURN, conversation.id)
        return await self.store.append_message(conversation.id, Role.USER, question)

    async def build_prompt(self, conversation: Conversation, user_message: Message) -> PromptRequest:
        """Window the prior messages and wrap them with instruction and question."""
        self._enter(TurnState.BUILDING_PROMPT, conversation.id)
        messages = await self.store.list_messages(conversation.id)
        prior = [m for m in messages if m.id != user_message.id]
        history = build_history_window(prior, self.history_limit)
        return assemble_prompt(
            self.system_prompt,
            history,
            user_message.content,
            temperature=CHAT_TEMPERATURE,
        )

    async def await_completion(self, conversation: Conversation, request: PromptRequest) -> str:
        self._enter(TurnState.AWAITING_COMPLETION, conversation.id)
        try:
            return await self.client.complete(request)
        except CompletionError as e:
            raise CompletionFailed(f"Failed to get an answer from the model: {e}") from e

    async def persist_assistant_turn(self, conversation: Conversation, answer: str) -> Message:
        self._enter(TurnState.PERSISTING_ASSISTANT_TURN, conversation.id)
        return await self.store.append_message(conversation.id, Role.ASSISTANT, answer)

    async def run(self, conversation_id: int | None, question: str) -> TurnResult:
        """Resolve, name (new only), store question, ask model, store answer."""
        if not question or not question.strip():
            raise BadRequest("Question must not be empty")

        conversation_ref = conversation_id
        try:
            conversation, created = await self.resolve_session(conversation_id)
            conversation_ref = conversation.id

            async with self._hold(conversation.id):
                if created:
                    await self.name_session(conversation, question)

                user_message = await self.persist_user_turn(conversation, question)
                request = await self.build_prompt(conversation, user_message)
                answer = await self.await_completion(conversation, request)
                await self.persist_assistant_turn(conversation, answer)
        except ChatError as e:
            self.failed_in = self.state
            self._enter(TurnState.FAILED, conversation_ref)
            logger.warning(
                "Turn failed in %s for conversation %s: %s (%s)",
                self.failed_in.value,
                conversation_ref,
                type(e).__name__,
                e.detail,
            )
            raise

        self._enter(TurnState.DONE, conversation.id)
        return TurnResult(
            conversation_id=conversation.id,
            conversation_name=conversation.name,
            question=question,
            answer=answer,
        )
