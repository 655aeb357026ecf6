"""Configuration settings for the semantic memory integration.

This module provides Pydantic Settings for configuration management with:
- Environment variable support (SEMANTIC_MEMORY_ prefix)
- Optional .env file loading
- Type validation and defaults
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MemorySettings(BaseSettings):
    """Configuration settings for the semantic memory integration.

    Settings are loaded from environment variables with the SEMANTIC_MEMORY_
    prefix. Explicit keyword arguments override the environment.

    Attributes:
        server_name: Name of the memory server in the host's MCP hub
        top_k: Number of memories requested per enrichment
        context_window: Number of trailing history messages sent as context
        completion_marker: Assistant text marker that triggers a full sync
        tool_timeout: Read timeout in seconds for hub tool calls
        log_level: Logging level (default: INFO)

    Example:
        >>> settings = MemorySettings()
        >>> print(settings.server_name)
        semantic-memory

        >>> # Override via environment
        >>> # SEMANTIC_MEMORY_TOP_K=5
        >>> settings = MemorySettings()
        >>> print(settings.top_k)
        5
    """

    model_config = SettingsConfigDict(
        env_prefix="SEMANTIC_MEMORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Memory server
    server_name: str = Field(
        default="semantic-memory",
        description="Name of the memory server entry in the MCP hub",
    )
    tool_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Read timeout in seconds for tool calls made through the session hub",
    )

    # Enrichment
    top_k: int = Field(
        default=3,
        ge=1,
        description="Number of recalled memories requested per user turn",
    )
    context_window: int = Field(
        default=6,
        ge=0,
        description="Trailing history messages sent as conversation context (3 exchanges)",
    )

    # Storage
    completion_marker: str = Field(
        default="<attempt_completion>",
        min_length=1,
        description="Assistant text marker that triggers a full history sync",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
