"""Ollama chat completion client."""

import logging
from typing import Any, Protocol

import httpx

from ollama_chat.chat.prompt import PromptRequest
from ollama_chat.errors import CompletionError

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """Prompt in, generated text out."""

    model: str

    async def complete(self, request: PromptRequest) -> str: ...


class OllamaClient:
    """
    Calls /api/chat with stream=false.

    Timeouts, transport errors, non-2xx responses and malformed bodies
    are all raised as CompletionError. No retries.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        model: str,
        timeout_s: float = 120.0,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout_s = timeout_s

    async def complete(self, request: PromptRequest) -> str:
        url = f"{self.base_url}/api/chat"
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": request.to_payload(),
            "stream": False,
            "options": {"temperature": request.temperature},
        }

        try:
            r = await self.client.post(url, json=payload, timeout=self.timeout_s)
            r.raise_for_status()
            data = r.json()
        except httpx.TimeoutException as e:
            logger.warning("Ollama request timed out after %ss", self.timeout_s)
            raise CompletionError(f"Ollama request timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise CompletionError(f"Ollama returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise CompletionError(f"Ollama request failed: {e}") from e
        except ValueError as e:
            raise CompletionError(f"Ollama returned invalid JSON: {e}") from e

        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            raise CompletionError("Ollama response has no message content")
        return message["content"]
