# archive_mcp/errors.py

import re
from typing import Optional

PRICING_URL = "https://0xarchive.io/pricing"

MISSING_KEY_MESSAGE = (
    "API key not configured. To use 0xArchive tools:\n\n"
    "1. Sign up at https://0xarchive.io and go to Dashboard to create an API key\n"
    "2. Set the OXARCHIVE_API_KEY environment variable for the MCP server process, e.g.:\n\n"
    "   claude mcp remove 0xarchive\n"
    "   claude mcp add 0xarchive -s user -t stdio -e OXARCHIVE_API_KEY=0xa_your_key -- oxarchive-mcp\n\n"
    "3. Restart the MCP client session\n\n"
    f"Free tier includes BTC historical data. Upgrade at {PRICING_URL} for all coins."
)

TIER_PRICING = (
    "This endpoint may require a higher tier. Pricing:\n"
    "  - Build: $49/mo - REST API, 25 WS subs, 50x replay\n"
    "  - Pro: $199/mo - Full orderbook depth, 100 WS subs, 100x replay\n"
    "  - Enterprise: $499/mo - Tick data, 200 WS subs, 1000x replay"
)

# Tier-gate errors that the API reports as 400 instead of 403
TIER_GATE_PATTERN = re.compile(r"plan only allows|upgrade|tier", re.IGNORECASE)


class ArchiveMCPError(Exception):
    """Base error for the 0xArchive MCP server."""


class ArchiveAPIError(ArchiveMCPError):
    """Structured error returned by the 0xArchive API."""

    def __init__(self, code: int, message: str, request_id: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.request_id = request_id

    def __str__(self):
        return f"0xArchive API Error (code={self.code}): {self.message}"


class InvalidTimestamp(ArchiveMCPError, ValueError):
    """Raised when a timestamp string cannot be parsed as a date."""

    def __init__(self, value):
        self.value = value
        super().__init__(f'Invalid timestamp: "{value}"')


def is_tier_gate(error: ArchiveAPIError) -> bool:
    return error.code == 400 and bool(TIER_GATE_PATTERN.search(error.message or ""))


def _translate_api_error(error: ArchiveAPIError) -> str:
    if error.code == 403:
        return (
            f"Access denied: {error.message}\n\n"
            f"{TIER_PRICING}\n\n"
            f"Upgrade at {PRICING_URL}"
        )
    if error.code == 429:
        return (
            f"Rate limited: {error.message}\n\n"
            "Wait a moment and retry. If you hit limits frequently, consider upgrading:\n"
            f"{PRICING_URL}"
        )
    if error.code == 404:
        return (
            f"Not found: {error.message}\n\n"
            "Check the coin symbol is correct. Use get_instruments, get_hip3_instruments, "
            "or get_lighter_instruments to list available markets."
        )
    if is_tier_gate(error):
        return (
            f"{error.message}\n\n"
            "Upgrade your plan to access more coins and features:\n"
            f"{PRICING_URL}"
        )

    text = f"API error ({error.code}): {error.message}"
    if error.request_id:
        text += f"\nRequest ID: {error.request_id}"
    return text


def translate_error(error: BaseException) -> str:
    """Turns any failure raised while serving a tool call into text for the calling agent.

    `ArchiveAPIError`s are mapped by status code: 403 and tier-gated 400s get
    pricing and upgrade guidance, 429 gets retry guidance, 404 points at the
    instrument-listing tools. Everything else becomes a generic message.
    """
    if isinstance(error, ArchiveAPIError):
        return _translate_api_error(error)
    return f"Error: {error}"
