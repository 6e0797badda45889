"""Extract sale records from a guild's ["sales"] table."""
import logging
import re

from src.parse.models import SaleRecord
from src.parse.spans import iter_keyed_tables

logger = logging.getLogger(__name__)

# Compressed field tags written by the addon
_STRING_FIELDS = {
    "item_link": "l",
    "buyer": "b",
    "seller": "s",
}
_INT_FIELDS = {
    "quantity": "n",
    "price": "p",
    "sale_timestamp": "ts",
}


def _string_pattern(tag: str) -> re.Pattern:
    return re.compile(r'\["' + tag + r'"\]\s*=\s*"([^"]+)"')


def _int_pattern(tag: str) -> re.Pattern:
    return re.compile(r'\["' + tag + r'"\]\s*=\s*"?(\d+)"?')


_STRING_PATTERNS = {field: _string_pattern(tag) for field, tag in _STRING_FIELDS.items()}
_INT_PATTERNS = {field: _int_pattern(tag) for field, tag in _INT_FIELDS.items()}


def extract_sale_blocks(sales_span: str) -> list[str]:
    """Return the inner text of every non-empty `[n] = { ... }` sale table."""
    return [inner for _, inner in iter_keyed_tables(sales_span) if inner.strip()]


def parse_sale_block(block: str) -> SaleRecord:
    """
    Build a SaleRecord from one sale table.
    Each field is matched on its own; missing fields keep their zero value.
    """
    fields = {}
    for field, pattern in _STRING_PATTERNS.items():
        match = pattern.search(block)
        if match:
            fields[field] = match.group(1)
    for field, pattern in _INT_PATTERNS.items():
        match = pattern.search(block)
        if match:
            fields[field] = int(match.group(1))

    if not fields:
        logger.debug(f"Sale block matched no fields: {block[:80]!r}")
    return SaleRecord(**fields)


def extract_sales(sales_span: str) -> list[SaleRecord]:
    """Parse every sale table in a guild's sales span, in order."""
    return [parse_sale_block(block) for block in extract_sale_blocks(sales_span)]
