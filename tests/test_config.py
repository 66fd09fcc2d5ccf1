"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest

from ollama_chat.config import load_settings, load_system_prompt
from ollama_chat.errors import ConfigError

CONFIG = """
ollama:
  base_url: "http://from-file:11434"
  model: "file-model"
"""


def test_environment_only(tmp_path):
    env = {"OLLAMA_BASE_URL": "http://env:11434", "OLLAMA_MODEL": "env-model"}

    settings = load_settings(env, config_path=tmp_path / "missing.yaml")

    assert settings.ollama_base_url == "http://env:11434"
    assert settings.ollama_model == "env-model"
    assert settings.ollama_timeout_s == 120.0


def test_file_fills_missing_values(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text(CONFIG)

    settings = load_settings({"OLLAMA_MODEL": "env-model"}, config_path=config)

    assert settings.ollama_base_url == "http://from-file:11434"
    assert settings.ollama_model == "env-model"


def test_config_path_from_environment(tmp_path):
    config = tmp_path / "other.yaml"
    config.write_text(CONFIG)

    settings = load_settings({"CONFIG_PATH": str(config)})

    assert settings.ollama_model == "file-model"


def test_missing_file_refuses_to_start(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read"):
        load_settings({}, config_path=tmp_path / "missing.yaml")


def test_unresolved_model_refuses_to_start(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text('ollama:\n  base_url: "http://from-file:11434"\n')

    with pytest.raises(ConfigError, match="model"):
        load_settings({}, config_path=config)


def test_invalid_yaml(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("ollama: [unclosed")

    with pytest.raises(ConfigError, match="parse"):
        load_settings({}, config_path=config)


def test_optional_settings(tmp_path):
    env = {
        "OLLAMA_BASE_URL": "http://env:11434",
        "OLLAMA_MODEL": "env-model",
        "OLLAMA_TIMEOUT": "30",
        "SYSTEM_PROMPT_PATH": str(tmp_path / "p.md"),
        "LOG_LEVEL": "DEBUG",
    }

    settings = load_settings(env)

    assert settings.ollama_timeout_s == 30.0
    assert settings.system_prompt_path == tmp_path / "p.md"
    assert settings.log_level == "DEBUG"


def test_load_system_prompt(tmp_path):
    prompt = tmp_path / "prompt.md"
    prompt.write_text("Be nice.")

    assert load_system_prompt(prompt) == "Be nice."

    with pytest.raises(ConfigError):
        load_system_prompt(tmp_path / "nope.md")


def test_default_paths_follow_working_directory(tmp_path, monkeypatch):
    (tmp_path / "config.yaml").write_text(CONFIG)
    monkeypatch.chdir(tmp_path)

    settings = load_settings({})

    assert settings.ollama_base_url == "http://from-file:11434"
    assert settings.system_prompt_path == Path("prompt.md")
    assert settings.system_prompt_path.resolve() == (tmp_path / "prompt.md").resolve()
