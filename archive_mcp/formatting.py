# archive_mcp/formatting.py

import json
from typing import Any, Optional

# Paginated listings are capped so a single page does not flood the model's
# context; the caller can follow the cursor for the rest.
MAX_PAGINATED_ITEMS = 50


def to_json(payload: Any) -> str:
    """Stable pretty-printed JSON; values JSON cannot encode are rendered with str()."""
    try:
        return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False, default=str)
    except TypeError:
        # Mixed key types cannot be sorted
        return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


def format_response(data: Any, next_cursor: Optional[str] = None, paginated: bool = False) -> str:
    """Renders a tool result as text for the calling agent.

    Lists get a "Returned N records" header. Paginated lists longer than
    MAX_PAGINATED_ITEMS are cut to the first MAX_PAGINATED_ITEMS entries;
    unpaginated lists (instrument lists, snapshots) are always returned whole.
    A next-page cursor, when present, is appended to the header.
    """
    header = ""
    body = data

    if isinstance(data, (list, tuple)):
        count = len(data)
        header = f"Returned {count} record{'' if count == 1 else 's'}"
        if paginated and count > MAX_PAGINATED_ITEMS:
            header += f" (showing first {MAX_PAGINATED_ITEMS}; use cursor to get more)"
            body = list(data[:MAX_PAGINATED_ITEMS])

    if next_cursor:
        if header:
            header += f'\nNext page cursor: "{next_cursor}"'
        else:
            header = f'Use cursor: "{next_cursor}" to get the next page'

    text = to_json(body)
    return f"{header}\n\n{text}" if header else text


def format_page(page) -> str:
    """Formats a cursor-paginated `Page` result."""
    return format_response(page.data, next_cursor=page.next_cursor, paginated=True)
