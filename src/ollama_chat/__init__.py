"""Conversational backend persisting chat sessions in front of an Ollama model."""

__version__ = "1.0.0"
