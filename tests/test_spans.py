"""Tests for balanced-brace scanning."""
import pytest
from src.parse.spans import extract_balanced_span, iter_keyed_tables, trim_outer_braces


def test_extract_balanced_span_nested():
    """Test span ends at the brace closing the opening one."""
    text = 'x = { a = { b = {} }, c = {} } tail'
    start = text.index("{")
    span = extract_balanced_span(text, start)

    assert span == '{ a = { b = {} }, c = {} }'
    assert span.count("{") == span.count("}")


def test_extract_balanced_span_inner_start():
    """Test extraction from a nested opening brace."""
    text = "{ outer { inner } rest }"
    start = text.index("{", 1)
    assert extract_balanced_span(text, start) == "{ inner }"


def test_extract_balanced_span_truncated():
    """Test truncated input yields None."""
    assert extract_balanced_span("{ a = { b = 1 }", 0) is None


@pytest.mark.parametrize("index", [-1, 2, 100])
def test_extract_balanced_span_not_at_brace(index):
    """Test an index that is not an opening brace yields None."""
    assert extract_balanced_span("ab { }", index) is None


def test_trim_outer_braces():
    """Test one pair of outer braces is removed."""
    assert trim_outer_braces("  { {a} }  ") == " {a} "
    assert trim_outer_braces("no braces") == "no braces"
    assert trim_outer_braces("{}") == ""


def test_iter_keyed_tables_in_order():
    """Test every keyed table is yielded once, in order, without descending."""
    text = """
        [1] = { ["x"] = { ["deep"] = 1 } },
        [2] = { ["y"] = 2 },
    """
    entries = list(iter_keyed_tables(text))

    assert [key.strip() for key, _ in entries] == ["[1]", "[2]"]
    assert '["deep"]' in entries[0][1]
    assert entries[1][1].strip() == '["y"] = 2'


def test_iter_keyed_tables_skips_scalar_values():
    """Test a scalar entry does not swallow the next table."""
    text = '["version"] = 3, [7] = { ["a"] = 1 }'
    entries = list(iter_keyed_tables(text))

    assert len(entries) == 1
    assert entries[0][0].strip() == "[7]"


def test_iter_keyed_tables_unbalanced_entry():
    """Test an unclosed table is skipped without raising."""
    text = "[1] = { [2] = { } "
    entries = list(iter_keyed_tables(text))

    # the outer table never closes; its nested table is still recovered
    assert [key.strip() for key, _ in entries] == ["[2]"]
