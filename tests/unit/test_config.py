"""Unit tests for MemorySettings configuration."""

import pytest

from semantic_memory.config import MemorySettings


class TestMemorySettings:
    """Tests for MemorySettings defaults, overrides and validation."""

    def test_default_settings(self):
        """Test that default settings are applied correctly."""
        settings = MemorySettings(_env_file=None)

        assert settings.server_name == "semantic-memory"
        assert settings.top_k == 3
        assert settings.context_window == 6
        assert settings.completion_marker == "<attempt_completion>"
        assert settings.tool_timeout == 30.0
        assert settings.log_level == "INFO"

    def test_env_override(self, monkeypatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("SEMANTIC_MEMORY_SERVER_NAME", "memory-alt")
        monkeypatch.setenv("SEMANTIC_MEMORY_TOP_K", "5")
        monkeypatch.setenv("SEMANTIC_MEMORY_LOG_LEVEL", "DEBUG")

        settings = MemorySettings(_env_file=None)

        assert settings.server_name == "memory-alt"
        assert settings.top_k == 5
        assert settings.log_level == "DEBUG"

    def test_top_k_validation(self):
        """Test that top_k must be positive."""
        with pytest.raises(ValueError):
            MemorySettings(_env_file=None, top_k=0)

    def test_context_window_validation(self):
        """Test that context_window cannot be negative."""
        assert MemorySettings(_env_file=None, context_window=0).context_window == 0
        with pytest.raises(ValueError):
            MemorySettings(_env_file=None, context_window=-1)

    def test_timeout_validation(self):
        """Test that tool_timeout must be positive."""
        with pytest.raises(ValueError):
            MemorySettings(_env_file=None, tool_timeout=0)
