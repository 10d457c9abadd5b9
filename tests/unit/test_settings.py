"""Unit tests for Settings validation and the YAML loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from ragchat.config.loader import load_settings
from ragchat.config.settings import OPENROUTER_BASE_URL, Settings
from ragchat.utils.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("OPENAI_API_KEY", "OPENROUTER_API_KEY", "CHUNK_SIZE", "CHUNK_OVERLAP", "CHAT_MODEL"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)

        assert settings.chunk_size == 1000
        assert settings.chunk_overlap == 200
        assert settings.retrieval_top_k == 3
        assert settings.answer_timeout_seconds == 10.0
        assert settings.chat_timeout_seconds is None
        assert settings.summary_max_input_chars == 3000
        assert settings.openai_base_url == OPENROUTER_BASE_URL
        assert settings.memory_max_messages == 0

    def test_openrouter_key_alias(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")
        assert Settings(_env_file=None).openai_api_key == "or-key"

    def test_env_overrides_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHUNK_SIZE", "500")
        monkeypatch.setenv("CHUNK_OVERLAP", "50")

        settings = Settings(_env_file=None)

        assert settings.chunk_size == 500
        assert settings.chunk_overlap == 50

    @pytest.mark.parametrize(
        "overrides",
        [
            {"chunk_size": 0},
            {"chunk_size": 100, "chunk_overlap": 100},
            {"chunk_overlap": -1},
            {"retrieval_top_k": 0},
        ],
    )
    def test_invalid_values_rejected(self, overrides: dict) -> None:
        with pytest.raises(ConfigurationError):
            Settings(_env_file=None, **overrides)

    def test_available_providers(self) -> None:
        assert Settings(_env_file=None).get_available_providers() == []
        assert Settings(_env_file=None, openai_api_key="k").get_available_providers() == [
            "llm",
            "embedding",
        ]
        local = Settings(_env_file=None, embedding_backend="sentence_transformer")
        assert local.get_available_providers() == ["embedding"]


class TestLoadSettings:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(str(tmp_path / "absent.yaml"), _env_file=None)
        assert settings.chunk_size == 1000

    def test_sections_are_flattened(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text(
            "ingestion:\n  chunk_size: 800\n  chunk_overlap: 150\n"
            "llm:\n  chat_model: some/model\n",
            encoding="utf-8",
        )

        settings = load_settings(str(config), _env_file=None)

        assert settings.chunk_size == 800
        assert settings.chunk_overlap == 150
        assert settings.chat_model == "some/model"

    def test_environment_beats_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("llm:\n  chat_model: from-yaml\n", encoding="utf-8")
        monkeypatch.setenv("CHAT_MODEL", "from-env")

        assert load_settings(str(config), _env_file=None).chat_model == "from-env"

    def test_overrides_beat_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("retrieval:\n  retrieval_top_k: 7\n", encoding="utf-8")

        settings = load_settings(str(config), _env_file=None, retrieval_top_k=2)

        assert settings.retrieval_top_k == 2

    def test_unknown_keys_ignored(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("misc:\n  not_a_setting: 1\n  chunk_size: 900\n", encoding="utf-8")

        assert load_settings(str(config), _env_file=None).chunk_size == 900

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("ingestion: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_settings(str(config), _env_file=None)

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_settings(str(config), _env_file=None)
