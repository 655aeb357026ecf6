"""Rule-table sanitizer for message text.

Removes system metadata, previously injected recall blocks, diff markup and
tool-call markup from text before it is used as a query or stored. The rules
are data: each ``SanitizeRule`` names an action and a target, and the
``Sanitizer`` compiles and applies them in order.

Rule actions:
- DROP_SPAN: Remove a delimited span (raw regex) together with its content
- DROP_BLOCK: Remove a named tool tag together with everything inside it
- STRIP_TAG: Remove the open/close tags of a named tag, keep the inner text
- STRIP_ALL: Remove every match of a raw regex

Unknown tags are removed by the generic residual rule: losing wrapper markup
is preferred over storing noise the memory service cannot interpret.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

RECALL_BLOCK_OPEN = "[Recalled Memories]"
RECALL_BLOCK_CLOSE = "[/Recalled Memories]"


class RuleAction(Enum):
    """How a sanitize rule treats its target."""
    DROP_SPAN = "drop_span"
    DROP_BLOCK = "drop_block"
    STRIP_TAG = "strip_tag"
    STRIP_ALL = "strip_all"


@dataclass(frozen=True)
class SanitizeRule:
    """One entry of the sanitizer rule table.

    Attributes:
        name: Rule name, used in tests and debugging
        action: What to do with matches
        target: Tag name for DROP_BLOCK / STRIP_TAG, regex for DROP_SPAN / STRIP_ALL
    """
    name: str
    action: RuleAction
    target: str

    def compile(self) -> re.Pattern[str]:
        """Build the regex this rule removes."""
        if self.action is RuleAction.DROP_BLOCK:
            tag = re.escape(self.target)
            return re.compile(rf"<{tag}(?:\s+[^>]*)?>[\s\S]*?</{tag}>\n?")
        if self.action is RuleAction.STRIP_TAG:
            tag = re.escape(self.target)
            return re.compile(rf"<{tag}(?:\s+[^>]*)?>|</{tag}>")
        return re.compile(self.target)


# Content-free tool blocks: their text is discarded, not kept
DROPPED_TOOL_BLOCKS = (
    "ask_followup_question",
    "attempt_completion",
)

# Structural tool and argument tags: tags go, inner text stays
STRIPPED_TOOL_TAGS = (
    "read_file",
    "apply_diff",
    "search_files",
    "list_files",
    "write_to_file",
    "insert_content",
    "search_and_replace",
    "execute_command",
    "use_mcp_tool",
    "access_mcp_resource",
    "switch_mode",
    "new_task",
    "fetch_instructions",
    "args",
    "file",
    "path",
    "content",
    "diff",
    "query",
    "mode",
    "message",
    "result",
    "command",
    "server_name",
    "tool_name",
    "arguments",
    "uri",
    "task",
)

DEFAULT_RULES: tuple[SanitizeRule, ...] = (
    SanitizeRule(
        "environment_details",
        RuleAction.DROP_SPAN,
        r"<environment_details>[\s\S]*?</environment_details>\n?",
    ),
    SanitizeRule(
        "recall_block",
        RuleAction.DROP_SPAN,
        re.escape(RECALL_BLOCK_OPEN) + r"[\s\S]*?" + re.escape(RECALL_BLOCK_CLOSE) + r"\n?",
    ),
    SanitizeRule(
        "search_replace_diff",
        RuleAction.DROP_SPAN,
        r"<<<<<<< SEARCH[\s\S]*?>>>>>>> REPLACE\n?",
    ),
    *(SanitizeRule(tag, RuleAction.DROP_BLOCK, tag) for tag in DROPPED_TOOL_BLOCKS),
    SanitizeRule("self_closing_tag", RuleAction.STRIP_ALL, r"<[a-zA-Z0-9_:]+\s*/>"),
    *(SanitizeRule(tag, RuleAction.STRIP_TAG, tag) for tag in STRIPPED_TOOL_TAGS),
    SanitizeRule("residual_tag", RuleAction.STRIP_ALL, r"<[/!]?[a-zA-Z0-9_:]+[^>]*>"),
)

_BLANK_LINES = re.compile(r"\n\s*\n")


class Sanitizer:
    """Applies a sanitize rule table to text.

    The full pass is repeated until the text stops changing, so a removal
    that brings two fragments together can never leave a new removable token
    behind. Each pass only deletes characters, which bounds the loop.

    Args:
        rules: Ordered rule table (default: DEFAULT_RULES)

    Example:
        >>> Sanitizer().sanitize("<read_file><path>a.py</path></read_file>")
        'a.py'
    """

    def __init__(self, rules: Iterable[SanitizeRule] = DEFAULT_RULES):
        self.rules = tuple(rules)
        self._patterns = [rule.compile() for rule in self.rules]

    def _apply_once(self, text: str) -> str:
        for pattern in self._patterns:
            text = pattern.sub("", text)
        text = _BLANK_LINES.sub("\n\n", text)
        return text.strip()

    def sanitize(self, text: str) -> str:
        """Clean text for use as a memory query or stored exchange.

        Args:
            text: Raw message text

        Returns:
            Cleaned text; an empty string means there is no content
        """
        if not text:
            return ""

        cleaned = self._apply_once(text)
        while True:
            again = self._apply_once(cleaned)
            if again == cleaned:
                return cleaned
            cleaned = again


_default_sanitizer = Sanitizer()


def sanitize(text: str) -> str:
    """Clean text with the default rule table. See ``Sanitizer.sanitize``."""
    return _default_sanitizer.sanitize(text)
