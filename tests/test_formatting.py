import json
from decimal import Decimal

from archive_mcp.client import Page
from archive_mcp.formatting import MAX_PAGINATED_ITEMS, format_page, format_response


def _split(text):
    header, _, body = text.partition("\n\n")
    return header, json.loads(body)


def _records(n):
    return [{"i": i, "px": str(100 + i)} for i in range(n)]


def test_empty_list():
    assert format_response([]) == "Returned 0 records\n\n[]"
    assert format_response([], paginated=True) == "Returned 0 records\n\n[]"


def test_single_record_is_singular():
    header, body = _split(format_response([{"coin": "BTC"}]))
    assert header == "Returned 1 record"
    assert body == [{"coin": "BTC"}]


def test_unpaginated_lists_are_never_truncated():
    records = _records(500)
    header, body = _split(format_response(records))
    assert header == "Returned 500 records"
    assert body == records


def test_paginated_lists_are_capped():
    records = _records(120)
    header, body = _split(format_response(records, paginated=True))
    assert header == f"Returned 120 records (showing first {MAX_PAGINATED_ITEMS}; use cursor to get more)"
    assert body == records[:MAX_PAGINATED_ITEMS]


def test_paginated_list_at_the_cap_is_untouched():
    records = _records(MAX_PAGINATED_ITEMS)
    header, body = _split(format_response(records, paginated=True))
    assert header == "Returned 50 records"
    assert body == records


def test_cursor_line_after_header():
    header, _ = _split(format_response(_records(3), next_cursor="abc123", paginated=True))
    assert header == 'Returned 3 records\nNext page cursor: "abc123"'


def test_cursor_without_header():
    text = format_response({"bids": [], "asks": []}, next_cursor="abc123")
    header, body = _split(text)
    assert header == 'Use cursor: "abc123" to get the next page'
    assert body == {"asks": [], "bids": []}


def test_objects_are_plain_sorted_json():
    assert format_response({"b": 1, "a": {"d": 2, "c": 3}}) == '{\n  "a": {\n    "c": 3,\n    "d": 2\n  },\n  "b": 1\n}'


def test_scalars_and_none():
    assert format_response(None) == "null"
    assert format_response("ok") == '"ok"'


def test_unserializable_values_use_str():
    header, body = _split(format_response([{"px": Decimal("1.5")}]))
    assert body == [{"px": "1.5"}]


def test_mixed_key_types_do_not_raise():
    text = format_response({1: "a", "b": 2})
    assert json.loads(text) == {"1": "a", "b": 2}


def test_format_page():
    assert format_page(Page(data=[], next_cursor=None)) == "Returned 0 records\n\n[]"

    records = _records(60)
    header, body = _split(format_page(Page(data=records, next_cursor="next-1")))
    assert header.startswith("Returned 60 records (showing first 50")
    assert header.endswith('\nNext page cursor: "next-1"')
    assert len(body) == 50
