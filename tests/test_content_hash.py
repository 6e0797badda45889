"""Tests for the stored-sale content hash."""
import hashlib

from src.parse.models import SaleRecord
from src.store.content_hash import compute_content_hash, content_hash_input


def _sale(**overrides) -> SaleRecord:
    fields = dict(
        item_link="|H0:item:1|h|h",
        seller="@Alice",
        buyer="@Bob",
        quantity=3,
        price=900,
        sale_timestamp=1700000000,
    )
    fields.update(overrides)
    return SaleRecord(**fields)


def test_hash_input_field_order():
    """Test the digest input layout."""
    assert content_hash_input(_sale(), 12) == "1700000000|@Alice|@Bob|3|900|12"


def test_hash_is_known_value():
    """Test the hash is the first 8 SHA-256 bytes as a signed big-endian int."""
    digest = hashlib.sha256(b"1700000000|@Alice|@Bob|3|900|12").digest()
    expected = int.from_bytes(digest[:8], "big", signed=True)

    assert compute_content_hash(_sale(), 12) == expected


def test_hash_fits_signed_64_bit():
    """Test the hash fits an SQLite INTEGER."""
    value = compute_content_hash(_sale(), 1)
    assert -(2**63) <= value < 2**63


def test_hash_ignores_duplicate_index_and_guild():
    """Test duplicate index, guild and link text do not affect the hash."""
    base = compute_content_hash(_sale(), 4)

    assert compute_content_hash(_sale(duplicate_index=3), 4) == base
    assert compute_content_hash(_sale(guild_id=9, guild_name="Other"), 4) == base
    assert compute_content_hash(_sale(item_link="different link"), 4) == base


def test_hash_depends_on_item_id_and_fields():
    """Test item id and each business field change the hash."""
    base = compute_content_hash(_sale(), 4)

    assert compute_content_hash(_sale(), 5) != base
    assert compute_content_hash(_sale(price=901), 4) != base
    assert compute_content_hash(_sale(seller="@Carol"), 4) != base
    assert compute_content_hash(_sale(sale_timestamp=1700000001), 4) != base
