"""Service configuration: environment first, YAML file as fallback."""

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import yaml

from ollama_chat.errors import ConfigError

# Relative to the working directory the server is started from
DEFAULT_CONFIG_PATH = Path("config.yaml")
DEFAULT_SYSTEM_PROMPT_PATH = Path("prompt.md")

DEFAULT_TIMEOUT_S = 120.0


@dataclass(frozen=True)
class Settings:
    ollama_base_url: str
    ollama_model: str
    ollama_timeout_s: float = DEFAULT_TIMEOUT_S
    system_prompt_path: Path = DEFAULT_SYSTEM_PROMPT_PATH
    log_level: str = "INFO"


def _read_config_file(path: Path) -> dict:
    """Read the `ollama` section of the YAML config file."""
    try:
        raw = yaml.safe_load(path.read_text())
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse config file {path}: {e}") from e

    if not isinstance(raw, dict):
        return {}
    section = raw.get("ollama") or {}
    return section if isinstance(section, dict) else {}


def load_settings(
    environ: Mapping[str, str] | None = None,
    config_path: Path | None = None,
) -> Settings:
    """
    Resolve settings for the process.

    OLLAMA_BASE_URL and OLLAMA_MODEL come from the environment; the YAML
    file is only consulted when one of them is missing. Both must end up
    non-empty or ConfigError is raised.
    """
    env = os.environ if environ is None else environ

    base_url = env.get("OLLAMA_BASE_URL", "").strip()
    model = env.get("OLLAMA_MODEL", "").strip()

    if not base_url or not model:
        path = config_path or Path(env.get("CONFIG_PATH", DEFAULT_CONFIG_PATH))
        section = _read_config_file(path)
        base_url = base_url or str(section.get("base_url") or "").strip()
        model = model or str(section.get("model") or "").strip()

    if not base_url:
        raise ConfigError("Ollama base URL is not set")
    if not model:
        raise ConfigError("Ollama model is not set")

    try:
        timeout_s = float(env.get("OLLAMA_TIMEOUT", DEFAULT_TIMEOUT_S))
    except ValueError as e:
        raise ConfigError(f"Invalid OLLAMA_TIMEOUT: {e}") from e

    return Settings(
        ollama_base_url=base_url,
        ollama_model=model,
        ollama_timeout_s=timeout_s,
        system_prompt_path=Path(env.get("SYSTEM_PROMPT_PATH", DEFAULT_SYSTEM_PROMPT_PATH)),
        log_level=env.get("LOG_LEVEL", "INFO"),
    )


def load_system_prompt(path: Path) -> str:
    """Read the fixed system instruction. Called once at start-up."""
    try:
        return Path(path).read_text()
    except OSError as e:
        raise ConfigError(f"Cannot read system prompt {path}: {e}") from e


def setup_logging(level: str = "INFO") -> None:
    """Single stdout handler on the root logger."""
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    root.setLevel(numeric_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(
        logging.Formatter(fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )

    # Uvicorn reloads would otherwise stack handlers
    root.handlers.clear()
    root.addHandler(handler)
