"""Completion model clients."""

from .ollama import CompletionClient, OllamaClient

__all__ = ["CompletionClient", "OllamaClient"]
