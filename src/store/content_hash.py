"""Stable 64-bit content hash used to deduplicate stored sales.

The digest input and byte layout are part of the stored data: rows imported
earlier are matched against hashes computed now, so neither may change.
"""
import hashlib

from src.parse.models import SaleRecord


def content_hash_input(record: SaleRecord, item_id: int) -> str:
    return (
        f"{record.sale_timestamp}|{record.seller}|{record.buyer}|"
        f"{record.quantity}|{record.price}|{item_id}"
    )


def compute_content_hash(record: SaleRecord, item_id: int) -> int:
    """SHA-256 of the sale fields and item id, truncated to a signed 64-bit int."""
    digest = hashlib.sha256(content_hash_input(record, item_id).encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big", signed=True)
