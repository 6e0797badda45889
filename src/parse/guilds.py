"""Locate guild tables inside the saved-variables dump."""
import logging
import re

from src.config import config
from src.parse.models import GuildEntry
from src.parse.spans import extract_balanced_span, iter_keyed_tables, trim_outer_braces

logger = logging.getLogger(__name__)

_GUILD_ID_PATTERN = re.compile(r"\[(\d+)\]")
_GUILD_NAME_PATTERN = re.compile(r'\["guildName"\]\s*=\s*"([^"]+)"', re.DOTALL)
_SALES_MARKER = '["sales"]'


def extract_root_table(content: str, anchor: str = config.DUMP_ANCHOR) -> str:
    """Return the inner text of the table assigned to the anchor, or ""."""
    anchor_index = content.find(anchor)
    if anchor_index == -1:
        logger.warning(f"Anchor {anchor!r} not found in dump")
        return ""

    brace_index = content.find("{", anchor_index)
    if brace_index == -1:
        logger.warning(f"No table follows anchor {anchor!r}")
        return ""

    block = extract_balanced_span(content, brace_index)
    if block is None:
        logger.warning(f"Table after anchor {anchor!r} is not closed")
        return ""
    return trim_outer_braces(block)


def extract_sales_span(guild_inner: str) -> str:
    """Return the inner text of a guild's ["sales"] table, or ""."""
    sales_index = guild_inner.find(_SALES_MARKER)
    if sales_index == -1:
        return ""
    brace_index = guild_inner.find("{", sales_index)
    if brace_index == -1:
        return ""
    block = extract_balanced_span(guild_inner, brace_index)
    if block is None:
        return ""
    return trim_outer_braces(block)


def extract_guild_entries(content: str, anchor: str = config.DUMP_ANCHOR) -> list[GuildEntry]:
    """Split a dump into one GuildEntry per `[guildId] = { ... }` table."""
    root_inner = extract_root_table(content, anchor)
    if not root_inner:
        return []

    entries = []
    for key_text, inner in iter_keyed_tables(root_inner):
        id_match = _GUILD_ID_PATTERN.search(key_text)
        guild_id = int(id_match.group(1)) if id_match else 0

        name_match = _GUILD_NAME_PATTERN.search(inner)
        guild_name = name_match.group(1) if name_match else f"Guild {guild_id}"

        entries.append(
            GuildEntry(
                guild_id=guild_id,
                guild_name=guild_name,
                sales_span=extract_sales_span(inner),
            )
        )

    logger.debug(f"Found {len(entries)} guild entries")
    return entries
