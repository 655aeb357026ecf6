"""Text extraction from host messages and content blocks.

Only ``text`` blocks and ``tool_result`` blocks (through their nested
content) contribute text. Images and other block types are skipped here and
are never removed from the original content.
"""

import re
from typing import Any, Optional

from semantic_memory.text.sanitize import RECALL_BLOCK_OPEN
from semantic_memory.types import ContentBlock, Message, field_value

BLOCK_SEPARATOR = "\n\n"

_USER_MESSAGE_SECTION = re.compile(r"<user_message>([\s\S]*?)</user_message>")


def extract_text(content: Any) -> str:
    """Derive plain text from message content.

    Args:
        content: A string or an ordered sequence of content blocks

    Returns:
        The string itself, or the text of every text block and every
        tool_result's nested content joined with a blank line
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content

    parts: list[str] = []
    for block in content:
        block_type = field_value(block, "type")
        if block_type == "text":
            parts.append(field_value(block, "text", "") or "")
        elif block_type == "tool_result":
            parts.append(extract_text(field_value(block, "content")))
    return BLOCK_SEPARATOR.join(parts)


def message_text(message: Message) -> str:
    """Derive plain text from a message's content."""
    return extract_text(field_value(message, "content"))


def message_role(message: Message) -> Optional[str]:
    """Return a message's role, or None."""
    return field_value(message, "role")


def message_timestamp(message: Message) -> Optional[Any]:
    """Return a message's timestamp (``ts``, falling back to ``timestamp``)."""
    ts = field_value(message, "ts")
    if ts is None:
        ts = field_value(message, "timestamp")
    return ts


def extract_user_message(text: str) -> str:
    """Reduce framed user text to the user's own words.

    Hosts wrap the user's words in a ``<user_message>`` section surrounded by
    framing. When exactly one such section with content is present, only its
    inner text is kept.

    Args:
        text: Derived user message text

    Returns:
        The stripped inner text of the single section, or the text unchanged
    """
    sections = _USER_MESSAGE_SECTION.findall(text)
    if len(sections) == 1 and sections[0].strip():
        return sections[0].strip()
    return text


def is_recall_block(block: ContentBlock) -> bool:
    """Check whether a content block is a previously injected recall block."""
    if field_value(block, "type") != "text":
        return False
    text = field_value(block, "text", "") or ""
    return text.lstrip().startswith(RECALL_BLOCK_OPEN)
