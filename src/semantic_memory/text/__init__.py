"""Text handling for the semantic memory integration.

This module provides the sanitizer rule table and the helpers that derive
plain text from host messages.
"""

from semantic_memory.text.extract import (
    BLOCK_SEPARATOR,
    extract_text,
    extract_user_message,
    is_recall_block,
    message_role,
    message_text,
    message_timestamp,
)
from semantic_memory.text.sanitize import (
    DEFAULT_RULES,
    RECALL_BLOCK_CLOSE,
    RECALL_BLOCK_OPEN,
    RuleAction,
    SanitizeRule,
    Sanitizer,
    sanitize,
)

__all__ = [
    "BLOCK_SEPARATOR",
    "DEFAULT_RULES",
    "RECALL_BLOCK_CLOSE",
    "RECALL_BLOCK_OPEN",
    "RuleAction",
    "SanitizeRule",
    "Sanitizer",
    "extract_text",
    "extract_user_message",
    "is_recall_block",
    "message_role",
    "message_text",
    "message_timestamp",
    "sanitize",
]
