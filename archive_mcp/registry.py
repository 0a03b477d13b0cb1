# archive_mcp/registry.py

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Tuple

from archive_mcp.patterns import (
    CALL_TYPES,
    HIP3,
    HYPERLIQUID,
    LIGHTER,
    CandlesCall,
    CurrentCall,
    HistoryCall,
    IncidentsCall,
    InstrumentsCall,
    OrderbookCall,
    SlaCall,
    SymbolCoverageCall,
)


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    call: Any
    tags: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not isinstance(self.call, CALL_TYPES):
            raise TypeError(f"Tool '{self.name}' has unsupported call descriptor {type(self.call).__name__}")


def _tool(name: str, description: str, call: Any, *tags: str) -> ToolDescriptor:
    return ToolDescriptor(name=name, description=description, call=call, tags=frozenset(tags))


# --- Hyperliquid ---

HYPERLIQUID_TOOLS = (
    _tool(
        "get_instruments",
        "List all available Hyperliquid perpetual and spot instruments with leverage, decimals, and active status. "
        "Use this to discover valid coin symbols before querying other endpoints.",
        InstrumentsCall(("hyperliquid", "instruments", "list")),
        "hyperliquid", "instruments",
    ),
    _tool(
        "get_orderbook",
        "Get the current Hyperliquid L2 orderbook snapshot for a coin. Returns bids, asks, mid price, and spread. "
        "Optionally specify depth (price levels per side). Requires Pro tier or higher for full depth.",
        OrderbookCall(("hyperliquid", "orderbook", "get"), HYPERLIQUID),
        "hyperliquid", "orderbook",
    ),
    _tool(
        "get_orderbook_history",
        "Get historical Hyperliquid orderbook snapshots (~1.2s resolution). Returns L2 snapshots with bids/asks "
        "over a time range. Data available from April 2023. Requires Pro tier.",
        HistoryCall(("hyperliquid", "orderbook", "history"), HYPERLIQUID, extras=("depth",)),
        "hyperliquid", "orderbook", "history",
    ),
    _tool(
        "get_trades",
        "Get Hyperliquid trade/fill history for a coin over a time range. Returns price, size, side, timestamps, "
        "and user addresses. Data available from April 2023. Supports cursor pagination.",
        HistoryCall(("hyperliquid", "trades", "list"), HYPERLIQUID),
        "hyperliquid", "trades", "history",
    ),
    _tool(
        "get_candles",
        "Get Hyperliquid OHLCV candle data for a coin. Intervals: 1m, 5m, 15m, 30m, 1h, 4h, 1d, 1w (default 1h). "
        "Returns open, high, low, close, volume. Data available from April 2023.",
        CandlesCall(("hyperliquid", "candles", "history"), HYPERLIQUID),
        "hyperliquid", "candles", "history",
    ),
    _tool(
        "get_funding_current",
        "Get the current Hyperliquid funding rate for a coin. Returns the latest funding rate, premium, and timestamp.",
        CurrentCall(("hyperliquid", "funding", "current"), HYPERLIQUID),
        "hyperliquid", "funding",
    ),
    _tool(
        "get_funding_history",
        "Get Hyperliquid funding rate history for a coin over a time range. Returns timestamped funding rates "
        "and premiums. Data available from May 2023.",
        HistoryCall(("hyperliquid", "funding", "history"), HYPERLIQUID),
        "hyperliquid", "funding", "history",
    ),
    _tool(
        "get_open_interest",
        "Get the current Hyperliquid open interest for a coin. Returns OI, mark price, oracle price, and 24h volume.",
        CurrentCall(("hyperliquid", "open_interest", "current"), HYPERLIQUID),
        "hyperliquid", "open_interest",
    ),
    _tool(
        "get_open_interest_history",
        "Get Hyperliquid open interest history for a coin over a time range. Returns timestamped OI snapshots "
        "with mark/oracle prices. Data available from May 2023.",
        HistoryCall(("hyperliquid", "open_interest", "history"), HYPERLIQUID),
        "hyperliquid", "open_interest", "history",
    ),
    _tool(
        "get_liquidations",
        "Get Hyperliquid liquidation history for a coin over a time range. Returns liquidated/liquidator addresses, "
        "price, size, side, and PnL. Data available from April 2023.",
        HistoryCall(("hyperliquid", "liquidations", "history"), HYPERLIQUID),
        "hyperliquid", "liquidations", "history",
    ),
)

# --- HIP-3 (builder perps on Hyperliquid, case-sensitive symbols) ---

HIP3_TOOLS = (
    _tool(
        "get_hip3_instruments",
        "List all available HIP-3 builder perp instruments on Hyperliquid. HIP-3 symbols are CASE-SENSITIVE "
        "(e.g. 'km:US500', 'km:TSLA'). Use this to discover valid symbols before querying HIP-3 data.",
        InstrumentsCall(("hyperliquid", "hip3", "instruments", "list")),
        "hip3", "instruments",
    ),
    _tool(
        "get_hip3_orderbook",
        "Get the current HIP-3 orderbook snapshot. Symbols are CASE-SENSITIVE (e.g. 'km:US500'). "
        "Returns bids, asks, mid price. Requires Pro tier for full depth.",
        OrderbookCall(("hyperliquid", "hip3", "orderbook", "get"), HIP3),
        "hip3", "orderbook",
    ),
    _tool(
        "get_hip3_trades",
        "Get HIP-3 trade history. Symbols are CASE-SENSITIVE (e.g. 'km:US500'). Returns trades with price, size, "
        "side, and timestamps over a time range. Supports cursor pagination.",
        HistoryCall(("hyperliquid", "hip3", "trades", "list"), HIP3),
        "hip3", "trades", "history",
    ),
    _tool(
        "get_hip3_candles",
        "Get HIP-3 OHLCV candle data. Symbols are CASE-SENSITIVE (e.g. 'km:US500'). Intervals: 1m to 1w "
        "(default 1h). Returns open, high, low, close, volume.",
        CandlesCall(("hyperliquid", "hip3", "candles", "history"), HIP3),
        "hip3", "candles", "history",
    ),
    _tool(
        "get_hip3_funding",
        "Get HIP-3 funding rate history. Symbols are CASE-SENSITIVE (e.g. 'km:US500'). Returns timestamped "
        "funding rates over a time range. Supports cursor pagination.",
        HistoryCall(("hyperliquid", "hip3", "funding", "history"), HIP3),
        "hip3", "funding", "history",
    ),
)

# --- Lighter.xyz ---

LIGHTER_TOOLS = (
    _tool(
        "get_lighter_instruments",
        "List all available Lighter.xyz instruments with market IDs, fees, size/price decimals, and active status. "
        "Use this to discover valid Lighter symbols.",
        InstrumentsCall(("lighter", "instruments", "list")),
        "lighter", "instruments",
    ),
    _tool(
        "get_lighter_orderbook",
        "Get the current Lighter.xyz orderbook snapshot for a coin. Returns bids, asks, mid price, and spread. "
        "Optionally specify depth. Requires Pro tier for full depth.",
        OrderbookCall(("lighter", "orderbook", "get"), LIGHTER),
        "lighter", "orderbook",
    ),
    _tool(
        "get_lighter_trades",
        "Get Lighter.xyz trade history for a coin over a time range. Returns price, size, side, and timestamps. "
        "Supports cursor pagination.",
        HistoryCall(("lighter", "trades", "list"), LIGHTER),
        "lighter", "trades", "history",
    ),
    _tool(
        "get_lighter_candles",
        "Get Lighter.xyz OHLCV candle data for a coin. Intervals: 1m to 1w (default 1h). "
        "Returns open, high, low, close, volume.",
        CandlesCall(("lighter", "candles", "history"), LIGHTER),
        "lighter", "candles", "history",
    ),
    _tool(
        "get_lighter_funding",
        "Get Lighter.xyz funding rate history for a coin over a time range. Returns timestamped funding rates. "
        "Supports cursor pagination.",
        HistoryCall(("lighter", "funding", "history"), LIGHTER),
        "lighter", "funding", "history",
    ),
)

# --- Data quality ---

DATA_QUALITY_TOOLS = (
    _tool(
        "get_data_quality_status",
        "Get the current system status for all exchanges and data types. Returns overall health "
        "(operational/degraded/outage), per-exchange status with latency, per-data-type completeness, "
        "and active incident count.",
        InstrumentsCall(("data_quality", "status")),
        "data_quality", "status",
    ),
    _tool(
        "get_data_coverage",
        "Get data coverage across all exchanges. Returns earliest/latest timestamps, total records, symbol count, "
        "resolution, lag, and completeness per data type per exchange.",
        InstrumentsCall(("data_quality", "coverage")),
        "data_quality", "coverage",
    ),
    _tool(
        "get_symbol_coverage",
        "Get detailed data coverage for a specific symbol on an exchange. Returns per-data-type coverage with "
        "earliest/latest, total records, completeness, detected data gaps, and cadence metrics.",
        SymbolCoverageCall(("data_quality", "symbol_coverage")),
        "data_quality", "coverage",
    ),
    _tool(
        "get_data_incidents",
        "List data quality incidents (outages, gaps, degradations). Filter by status, exchange, or time. Returns "
        "incident details including severity, affected data types, duration, root cause, and resolution.",
        IncidentsCall(("data_quality", "list_incidents")),
        "data_quality", "incidents",
    ),
    _tool(
        "get_data_latency",
        "Get current latency metrics for all exchanges. Returns WebSocket latency (current, 1h avg, 24h avg), "
        "REST API latency, and data freshness lag per data type (orderbook, fills, funding, OI).",
        InstrumentsCall(("data_quality", "latency")),
        "data_quality", "latency",
    ),
    _tool(
        "get_data_sla",
        "Get SLA compliance report for a given month. Returns uptime, data completeness, API latency P99 - each "
        "with target vs actual and met/missed status. Also shows incident count and total downtime.",
        SlaCall(("data_quality", "sla")),
        "data_quality", "sla",
    ),
)

TOOLS: Tuple[ToolDescriptor, ...] = HYPERLIQUID_TOOLS + HIP3_TOOLS + LIGHTER_TOOLS + DATA_QUALITY_TOOLS

_BY_NAME: Dict[str, ToolDescriptor] = {tool.name: tool for tool in TOOLS}
if len(_BY_NAME) != len(TOOLS):
    raise RuntimeError("Duplicate tool names in registry")


def get_tool(name: str) -> ToolDescriptor:
    """Looks up a registered tool by name. Raises KeyError for unknown names."""
    return _BY_NAME[name]


def tool_names() -> Tuple[str, ...]:
    return tuple(tool.name for tool in TOOLS)
