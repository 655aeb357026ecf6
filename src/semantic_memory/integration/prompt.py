"""Core identity section of the agent's system prompt.

The memory server keeps a structured core identity for the agent. The
section is the identity rendered as JSON; when it cannot be fetched the
section instead tells the agent to fetch it with the get_core_identity tool
before doing anything else.
"""

import json
import logging
from typing import Optional

from semantic_memory.service.client import GET_CORE_IDENTITY_TOOL, MemoryClient

logger = logging.getLogger(__name__)


def _missing_identity(server_name: str, reason: str = "") -> str:
    return (
        f"[CRITICAL] My core identity is missing{reason}. I must use the "
        f"'{GET_CORE_IDENTITY_TOOL}' tool from the '{server_name}' server to retrieve it "
        f"before proceeding with any other action.\n\n"
    )


async def build_core_identity_section(
    client: Optional[MemoryClient],
    server_name: str = "semantic-memory",
) -> str:
    """Build the core identity prompt section.

    Args:
        client: Memory client, or None when the host has no MCP hub
        server_name: Server named in the fallback instruction when client is None

    Returns:
        Pretty-printed identity JSON followed by a blank line, or a
        [CRITICAL] fallback instruction
    """
    if client is None:
        return _missing_identity(server_name, " because the MCP hub is not available")

    server_name = client.server_name
    if not client.is_available():
        return _missing_identity(server_name, f" because the {server_name} server is not available")

    identity = await client.get_core_identity()
    if identity is None:
        logger.warning("Core identity unavailable for system prompt")
        return _missing_identity(server_name)

    return f"{json.dumps(identity, indent=2)}\n\n"
