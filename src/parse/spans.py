"""Balanced-brace scanning for the saved-variables table literal."""
import logging
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

OPEN = "{"
CLOSE = "}"


def extract_balanced_span(text: str, open_index: int) -> Optional[str]:
    """
    Return text[open_index:] up to and including the brace that closes it.
    Returns None when open_index is not an opening brace or the text ends first.
    """
    if open_index < 0 or open_index >= len(text) or text[open_index] != OPEN:
        return None

    depth = 0
    for j in range(open_index, len(text)):
        char = text[j]
        if char == OPEN:
            depth += 1
        elif char == CLOSE:
            depth -= 1
            if depth == 0:
                return text[open_index:j + 1]
    return None


def trim_outer_braces(block: str) -> str:
    """Strip one surrounding pair of braces (and outer whitespace)."""
    block = block.strip()
    if len(block) >= 2 and block[0] == OPEN and block[-1] == CLOSE:
        return block[1:-1]
    return block


def iter_keyed_tables(text: str) -> Iterator[tuple[str, str]]:
    """
    Yield (key_text, inner_text) for each `[key] = { ... }` entry at this level.

    key_text is the raw text from the opening bracket up to the '='.
    Entries whose value is not a table, or whose table never closes, are skipped
    and scanning resumes right after them.
    """
    i = 0
    length = len(text)
    while i < length:
        key_start = text.find("[", i)
        if key_start == -1:
            break
        equals_index = text.find("=", key_start)
        if equals_index == -1:
            break

        value_start = equals_index + 1
        while value_start < length and text[value_start].isspace():
            value_start += 1
        if value_start >= length or text[value_start] != OPEN:
            # scalar value such as ["version"] = 1
            i = equals_index + 1
            continue

        block = extract_balanced_span(text, value_start)
        if block is None:
            logger.debug(f"Unbalanced table at offset {value_start}, skipping")
            i = value_start + 1
            continue

        yield text[key_start:equals_index], trim_outer_braces(block)
        i = value_start + len(block)
