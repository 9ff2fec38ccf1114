"""Tests for configuration loader."""

import pytest
import yaml

from cal_assistant.config.config_loader import ConfigLoader, load_config
from cal_assistant.config.config_schema import AgentConfig, AppConfig


def write_config(tmp_path, config_dict):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config_dict), encoding="utf-8")
    return str(path)


def test_load_config_valid(tmp_path):
    """Test loading a valid configuration."""
    config_dict = {
        "llm": {
            "provider": "ollama",
            "ollama": {"model": "llama3.1", "base_url": "http://localhost:11434"},
        },
        "booking": {"api_key": "cal_test", "user_id": 1, "event_type_id": 42},
        "agent": {"max_steps": 2, "timeout_seconds": 30},
    }

    config = load_config(write_config(tmp_path, config_dict))

    assert isinstance(config, AppConfig)
    assert config.llm.ollama.model == "llama3.1"
    assert config.booking.event_type_id == 42
    assert config.agent.max_steps == 2
    assert config.email.agent_email == "assistant@cal.ai"


def test_defaults_are_single_shot():
    agent = AgentConfig()
    assert agent.max_steps == 1
    assert agent.default_timezone == "UTC"


def test_load_config_missing_file():
    """Test loading a non-existent configuration file."""
    with pytest.raises(FileNotFoundError):
        load_config("nonexistent.yaml")


def test_load_config_from_env_path(tmp_path, monkeypatch):
    path = write_config(tmp_path, {"llm": {"provider": "ollama", "ollama": {}}})
    monkeypatch.setenv("CAL_ASSISTANT_CONFIG", path)

    assert load_config().llm.provider == "ollama"


def test_env_var_expansion(monkeypatch):
    """Test that ${VAR} references are filled from the environment."""
    monkeypatch.setenv("TEST_OPENAI_KEY", "sk-test")
    config = ConfigLoader.from_dict(
        {"llm": {"provider": "openai", "openai": {"api_key": "${TEST_OPENAI_KEY}"}}}
    )
    assert config.llm.openai.api_key == "sk-test"


def test_provider_section_required():
    """Test that the selected provider must be configured."""
    with pytest.raises(ValueError, match="configuration is required"):
        ConfigLoader.from_dict({"llm": {"provider": "gemini"}})


def test_unknown_provider():
    with pytest.raises(ValueError, match="Unknown LLM provider"):
        ConfigLoader.from_dict({"llm": {"provider": "llamafile"}})


def test_invalid_timezone():
    with pytest.raises(ValueError, match="Invalid timezone"):
        AgentConfig(default_timezone="Mars/Base")


def test_empty_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    with pytest.raises(ValueError, match="empty"):
        load_config(str(path))


def test_max_steps_bounds():
    with pytest.raises(ValueError):
        AgentConfig(max_steps=0)
