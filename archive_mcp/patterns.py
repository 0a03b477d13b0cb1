# archive_mcp/patterns.py

"""
Generic request shapes shared by the 0xArchive tools.

Every tool is one of a handful of call descriptors. A descriptor names the
upstream client method by attribute path (e.g. ``("lighter", "trades",
"list")``) and carries only what is needed to rebuild the request: the
symbol-normalization rule and, for history calls, the extra parameters the
endpoint accepts. ``execute`` performs exactly one client call and returns
the formatted text; errors propagate to the dispatcher.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from archive_mcp.formatting import format_page, format_response
from archive_mcp.timeutil import Timestamp, resolve_limit, resolve_time_range, to_absolute_time

Operation = Tuple[str, ...]

CANDLE_INTERVALS = ("1m", "5m", "15m", "30m", "1h", "4h", "1d", "1w")
INCIDENT_STATUSES = ("open", "investigating", "identified", "monitoring", "resolved")
HISTORY_EXTRAS = ("depth", "interval")


# --- Symbol normalization ---

def upper_symbol(symbol: str) -> str:
    return symbol.upper()


def verbatim_symbol(symbol: str) -> str:
    return symbol  # case-sensitive


@dataclass(frozen=True)
class SymbolFamily:
    """How one exchange integration spells its market symbols."""
    name: str
    normalize: Callable[[str], str]
    help: str


HYPERLIQUID = SymbolFamily(
    name="hyperliquid",
    normalize=upper_symbol,
    help="Coin/market symbol, e.g. 'BTC', 'ETH', 'SOL'",
)
HIP3 = SymbolFamily(
    name="hip3",
    normalize=verbatim_symbol,
    help="HIP-3 coin symbol (CASE-SENSITIVE), e.g. 'km:US500', 'km:TSLA'. "
         "Use get_hip3_instruments to list available symbols.",
)
LIGHTER = SymbolFamily(
    name="lighter",
    normalize=upper_symbol,
    help="Lighter.xyz coin symbol, e.g. 'BTC', 'ETH'",
)


def resolve_operation(client: Any, operation: Operation) -> Callable:
    """Walks an attribute path such as ('hyperliquid', 'hip3', 'trades', 'list') on the client."""
    target = client
    for attr in operation:
        target = getattr(target, attr)
    return target


# --- Market-data patterns ---

@dataclass(frozen=True)
class InstrumentsCall:
    """No parameters; the whole result is returned untruncated."""
    operation: Operation

    async def execute(self, client: Any) -> str:
        data = await resolve_operation(client, self.operation)()
        return format_response(data)


@dataclass(frozen=True)
class CurrentCall:
    """Latest snapshot for one symbol."""
    operation: Operation
    family: SymbolFamily

    async def execute(self, client: Any, symbol: str) -> str:
        data = await resolve_operation(client, self.operation)(self.family.normalize(symbol))
        return format_response(data)


@dataclass(frozen=True)
class OrderbookCall:
    """Current orderbook for one symbol; depth is forwarded only when the caller gives one."""
    operation: Operation
    family: SymbolFamily

    @staticmethod
    def build_params(depth: Optional[int] = None) -> Optional[Dict[str, Any]]:
        return {"depth": depth} if depth is not None else None

    async def execute(self, client: Any, symbol: str, depth: Optional[int] = None) -> str:
        data = await resolve_operation(client, self.operation)(
            self.family.normalize(symbol), self.build_params(depth)
        )
        return format_response(data)


@dataclass(frozen=True)
class HistoryCall:
    """Cursor-paginated history over a time range.

    ``extras`` lists the endpoint-specific parameters (from HISTORY_EXTRAS)
    that are forwarded when the caller sets them.
    """
    operation: Operation
    family: SymbolFamily
    extras: Tuple[str, ...] = ()

    def __post_init__(self):
        unknown = set(self.extras) - set(HISTORY_EXTRAS)
        if unknown:
            raise ValueError(f"Unsupported history parameters: {sorted(unknown)}")

    def build_params(
        self,
        start: Optional[Timestamp] = None,
        end: Optional[Timestamp] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        **extras: Any,
    ) -> Dict[str, Any]:
        unexpected = set(extras) - set(self.extras)
        if unexpected:
            raise TypeError(f"Unexpected parameters: {sorted(unexpected)}")

        params = resolve_time_range(start, end).as_params()
        params["limit"] = resolve_limit(limit)
        if cursor:
            params["cursor"] = cursor
        for name in self.extras:
            value = extras.get(name)
            if value is not None:
                params[name] = value
        return params

    async def execute(self, client: Any, symbol: str, **arguments: Any) -> str:
        params = self.build_params(**arguments)
        page = await resolve_operation(client, self.operation)(self.family.normalize(symbol), params)
        return format_page(page)


@dataclass(frozen=True)
class CandlesCall(HistoryCall):
    """History call with an `interval` granularity; unset intervals use the server default (1h)."""
    extras: Tuple[str, ...] = ("interval",)

    def build_params(self, start=None, end=None, limit=None, cursor=None, **extras: Any) -> Dict[str, Any]:
        interval = extras.get("interval")
        if interval is not None and interval not in CANDLE_INTERVALS:
            raise ValueError(f"Invalid interval '{interval}'. Must be one of: {', '.join(CANDLE_INTERVALS)}")
        return super().build_params(start, end, limit, cursor, **extras)


# --- Data-quality patterns ---

@dataclass(frozen=True)
class SymbolCoverageCall:
    """Coverage and gap report for one symbol; the gap-detection window is sent as from/to."""
    operation: Operation

    @staticmethod
    def build_options(start: Optional[Timestamp] = None, end: Optional[Timestamp] = None) -> Optional[Dict[str, int]]:
        options = {}
        if start is not None:
            options["from"] = to_absolute_time(start)
        if end is not None:
            options["to"] = to_absolute_time(end)
        return options or None

    async def execute(
        self,
        client: Any,
        exchange: str,
        symbol: str,
        start: Optional[Timestamp] = None,
        end: Optional[Timestamp] = None,
    ) -> str:
        data = await resolve_operation(client, self.operation)(exchange, symbol, self.build_options(start, end))
        return format_response(data)


@dataclass(frozen=True)
class IncidentsCall:
    operation: Operation

    @staticmethod
    def build_params(
        status: Optional[str] = None,
        exchange: Optional[str] = None,
        since: Optional[Timestamp] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Optional[Dict[str, Any]]:
        if status is not None and status not in INCIDENT_STATUSES:
            raise ValueError(f"Invalid status '{status}'. Must be one of: {', '.join(INCIDENT_STATUSES)}")
        params: Dict[str, Any] = {}
        if status:
            params["status"] = status
        if exchange:
            params["exchange"] = exchange
        if since is not None:
            params["since"] = to_absolute_time(since)
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset
        return params or None

    async def execute(self, client: Any, **arguments: Any) -> str:
        data = await resolve_operation(client, self.operation)(self.build_params(**arguments))
        return format_response(data)


@dataclass(frozen=True)
class SlaCall:
    operation: Operation

    @staticmethod
    def build_params(year: Optional[int] = None, month: Optional[int] = None) -> Optional[Dict[str, int]]:
        if month is not None and not 1 <= month <= 12:
            raise ValueError(f"Invalid month {month}. Must be between 1 and 12.")
        params = {}
        if year is not None:
            params["year"] = year
        if month is not None:
            params["month"] = month
        return params or None

    async def execute(self, client: Any, year: Optional[int] = None, month: Optional[int] = None) -> str:
        data = await resolve_operation(client, self.operation)(self.build_params(year, month))
        return format_response(data)


CALL_TYPES = (InstrumentsCall, CurrentCall, OrderbookCall, HistoryCall, SymbolCoverageCall, IncidentsCall, SlaCall)
