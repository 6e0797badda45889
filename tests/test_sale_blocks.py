"""Tests for sale block parsing."""
from src.parse.sales import extract_sale_blocks, extract_sales, parse_sale_block


def test_parse_sale_block_all_fields():
    """Test all six tags are recovered."""
    block = """
        ["l"] = "|H0:item:1|h|h",
        ["b"] = "@Bob",
        ["s"] = "@Alice",
        ["n"] = 3,
        ["p"] = 900,
        ["ts"] = 1700000000,
    """
    sale = parse_sale_block(block)

    assert sale.item_link == "|H0:item:1|h|h"
    assert sale.buyer == "@Bob"
    assert sale.seller == "@Alice"
    assert sale.quantity == 3
    assert sale.price == 900
    assert sale.sale_timestamp == 1700000000
    assert sale.total_value == 2700


def test_parse_sale_block_field_order_independent():
    """Test fields are matched regardless of their order."""
    block = '["ts"] = 5, ["p"] = 7, ["n"] = 2, ["s"] = "S", ["b"] = "B", ["l"] = "L"'
    sale = parse_sale_block(block)

    assert (sale.item_link, sale.buyer, sale.seller) == ("L", "B", "S")
    assert (sale.quantity, sale.price, sale.sale_timestamp) == (2, 7, 5)


def test_parse_sale_block_quoted_integers():
    """Test integer fields written as quoted digits."""
    sale = parse_sale_block('["n"] = "3", ["p"] = "900", ["ts"] = "1700000000"')

    assert sale.quantity == 3
    assert sale.price == 900
    assert sale.sale_timestamp == 1700000000


def test_parse_sale_block_missing_fields_default():
    """Test missing fields keep empty/zero values."""
    sale = parse_sale_block('["p"] = 50')

    assert sale.price == 50
    assert sale.item_link == ""
    assert sale.buyer == ""
    assert sale.quantity == 0
    assert sale.sale_timestamp == 0


def test_parse_sale_block_no_fields_still_produces_record():
    """Test a block matching nothing still becomes a zero-valued record."""
    sale = parse_sale_block('["unknown"] = "x"')

    assert sale.item_link == ""
    assert sale.price == 0
    assert sale.duplicate_index == 1


def test_seller_tag_not_confused_with_ts():
    """Test ["s"] does not match inside ["ts"]."""
    sale = parse_sale_block('["ts"] = 99')
    assert sale.seller == ""


def test_extract_sale_blocks_skips_empty_tables():
    """Test whitespace-only sale tables are dropped."""
    span = '[1] = { ["p"] = 1 }, [2] = {   }, [3] = { ["p"] = 3 }'
    blocks = extract_sale_blocks(span)

    assert len(blocks) == 2


def test_extract_sales_keeps_order():
    """Test sales come back in source order."""
    span = '[1] = { ["p"] = 1 }, [2] = { ["p"] = 2 }, [3] = { ["p"] = 3 }'
    assert [s.price for s in extract_sales(span)] == [1, 2, 3]


def test_extract_sales_recovers_after_truncated_block():
    """Test a truncated sale table is skipped."""
    span = '[1] = { ["p"] = 1 }, [2] = { ["p"] = 2'
    assert [s.price for s in extract_sales(span)] == [1]
