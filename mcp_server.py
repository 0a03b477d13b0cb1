# mcp_server.py

import asyncio
import logging
import signal
import sys
from typing import Annotated, Callable, Literal, Optional, Union

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from mcp.types import ToolAnnotations
from pydantic import Field

from archive_mcp.config import ClientState, build_client_state, get_settings
from archive_mcp.dispatch import Dispatcher, ResultEnvelope
from archive_mcp.log import configure_logging
from archive_mcp.patterns import (
    CandlesCall,
    CurrentCall,
    HistoryCall,
    IncidentsCall,
    InstrumentsCall,
    OrderbookCall,
    SlaCall,
    SymbolCoverageCall,
)
from archive_mcp.registry import TOOLS, ToolDescriptor

logger = logging.getLogger("archive_mcp.server")

SERVER_NAME = "0xarchive"

# All tools are read-only queries against an external service
TOOL_ANNOTATIONS = ToolAnnotations(
    readOnlyHint=True,
    destructiveHint=False,
    idempotentHint=True,
    openWorldHint=True,
)

IntervalLiteral = Literal['1m', '5m', '15m', '30m', '1h', '4h', '1d', '1w']
IncidentStatusLiteral = Literal['open', 'investigating', 'identified', 'monitoring', 'resolved']

# --- Shared parameter types ---

StartParam = Annotated[Optional[Union[int, str]], Field(description="Start timestamp (Unix ms or ISO 8601). Defaults to 24h ago.")]
EndParam = Annotated[Optional[Union[int, str]], Field(description="End timestamp (Unix ms or ISO 8601). Defaults to now.")]
LimitParam = Annotated[Optional[int], Field(description="Max records to return (default 100, max 1000).", gt=0)]
CursorParam = Annotated[Optional[str], Field(description="Pagination cursor from the previous response's next page cursor.")]
DepthParam = Annotated[Optional[int], Field(description="Orderbook depth: number of price levels per side.", gt=0)]
IntervalParam = Annotated[Optional[IntervalLiteral], Field(description="Candle interval (default '1h').")]
ExchangeParam = Annotated[Optional[str], Field(description="Exchange name: 'hyperliquid', 'lighter', or 'hip3'.")]


def _unwrap(envelope: ResultEnvelope) -> str:
    """Maps a dispatch envelope onto the MCP result: error envelopes become isError results."""
    if envelope.is_error:
        raise ToolError(envelope.text)
    return envelope.text


# --- Handlers per call pattern ---
# Each builder returns the coroutine FastMCP registers; its signature is the tool's input schema.

def _instruments_handler(tool: ToolDescriptor, dispatcher: Dispatcher) -> Callable:
    async def handler() -> str:
        return _unwrap(await dispatcher.dispatch(tool))
    return handler


def _current_handler(tool: ToolDescriptor, dispatcher: Dispatcher) -> Callable:
    family = tool.call.family

    async def handler(
        symbol: Annotated[str, Field(description=family.help)],
    ) -> str:
        return _unwrap(await dispatcher.dispatch(tool, {"symbol": symbol}))
    return handler


def _orderbook_handler(tool: ToolDescriptor, dispatcher: Dispatcher) -> Callable:
    family = tool.call.family

    async def handler(
        symbol: Annotated[str, Field(description=family.help)],
        depth: DepthParam = None,
    ) -> str:
        return _unwrap(await dispatcher.dispatch(tool, {"symbol": symbol, "depth": depth}))
    return handler


def _history_handler(tool: ToolDescriptor, dispatcher: Dispatcher) -> Callable:
    family = tool.call.family

    if "depth" in tool.call.extras:
        async def handler(
            symbol: Annotated[str, Field(description=family.help)],
            start: StartParam = None,
            end: EndParam = None,
            limit: LimitParam = None,
            cursor: CursorParam = None,
            depth: DepthParam = None,
        ) -> str:
            arguments = {"symbol": symbol, "start": start, "end": end, "limit": limit, "cursor": cursor, "depth": depth}
            return _unwrap(await dispatcher.dispatch(tool, arguments))
        return handler

    async def handler(
        symbol: Annotated[str, Field(description=family.help)],
        start: StartParam = None,
        end: EndParam = None,
        limit: LimitParam = None,
        cursor: CursorParam = None,
    ) -> str:
        arguments = {"symbol": symbol, "start": start, "end": end, "limit": limit, "cursor": cursor}
        return _unwrap(await dispatcher.dispatch(tool, arguments))
    return handler


def _candles_handler(tool: ToolDescriptor, dispatcher: Dispatcher) -> Callable:
    family = tool.call.family

    async def handler(
        symbol: Annotated[str, Field(description=family.help)],
        interval: IntervalParam = None,
        start: StartParam = None,
        end: EndParam = None,
        limit: LimitParam = None,
        cursor: CursorParam = None,
    ) -> str:
        arguments = {"symbol": symbol, "start": start, "end": end, "limit": limit, "cursor": cursor, "interval": interval}
        return _unwrap(await dispatcher.dispatch(tool, arguments))
    return handler


def _symbol_coverage_handler(tool: ToolDescriptor, dispatcher: Dispatcher) -> Callable:
    async def handler(
        exchange: Annotated[str, Field(description="Exchange: 'hyperliquid', 'lighter', or 'hip3'.")],
        symbol: Annotated[str, Field(description="Symbol, e.g. 'BTC', 'ETH', 'km:US500'. Case-sensitive for HIP-3.")],
        start: Annotated[Optional[Union[int, str]], Field(alias="from", description="Start of gap detection window (Unix ms or ISO 8601). Defaults to 30 days ago.")] = None,
        end: Annotated[Optional[Union[int, str]], Field(alias="to", description="End of gap detection window (Unix ms or ISO 8601). Defaults to now.")] = None,
    ) -> str:
        arguments = {"exchange": exchange, "symbol": symbol, "start": start, "end": end}
        return _unwrap(await dispatcher.dispatch(tool, arguments))
    return handler


def _incidents_handler(tool: ToolDescriptor, dispatcher: Dispatcher) -> Callable:
    async def handler(
        status: Annotated[Optional[IncidentStatusLiteral], Field(description="Filter incidents by status.")] = None,
        exchange: ExchangeParam = None,
        since: Annotated[Optional[Union[int, str]], Field(description="Only incidents after this time (Unix ms or ISO 8601).")] = None,
        limit: Annotated[Optional[int], Field(description="Max results (default 20, max 100).", gt=0)] = None,
        offset: Annotated[Optional[int], Field(description="Pagination offset.", ge=0)] = None,
    ) -> str:
        arguments = {"status": status, "exchange": exchange, "since": since, "limit": limit, "offset": offset}
        return _unwrap(await dispatcher.dispatch(tool, arguments))
    return handler


def _sla_handler(tool: ToolDescriptor, dispatcher: Dispatcher) -> Callable:
    async def handler(
        year: Annotated[Optional[int], Field(description="Year (defaults to current year).")] = None,
        month: Annotated[Optional[int], Field(description="Month 1-12 (defaults to current month).", ge=1, le=12)] = None,
    ) -> str:
        return _unwrap(await dispatcher.dispatch(tool, {"year": year, "month": month}))
    return handler


# CandlesCall subclasses HistoryCall, so it has to be matched first
HANDLER_BUILDERS = (
    (CandlesCall, _candles_handler),
    (HistoryCall, _history_handler),
    (InstrumentsCall, _instruments_handler),
    (CurrentCall, _current_handler),
    (OrderbookCall, _orderbook_handler),
    (SymbolCoverageCall, _symbol_coverage_handler),
    (IncidentsCall, _incidents_handler),
    (SlaCall, _sla_handler),
)


def build_handler(tool: ToolDescriptor, dispatcher: Dispatcher) -> Callable:
    for call_type, builder in HANDLER_BUILDERS:
        if isinstance(tool.call, call_type):
            return builder(tool, dispatcher)
    raise TypeError(f"No handler for call descriptor {type(tool.call).__name__} ({tool.name})")


# --- Server assembly ---

def create_server(state: ClientState) -> FastMCP:
    """
    Builds the FastMCP server with every registered tool bound to one dispatcher.

    Args:
        state: The client configuration resolved at startup. An unconfigured
               state still registers every tool; each call then returns the
               setup instructions.

    Returns:
        A FastMCP instance ready for `serve()`. Sessions share the upstream
        client; closing it is left to `serve()`.
    """
    dispatcher = Dispatcher(state)

    mcp = FastMCP(SERVER_NAME)
    for tool in TOOLS:
        mcp.tool(
            name=tool.name,
            description=tool.description,
            tags=set(tool.tags),
            annotations=TOOL_ANNOTATIONS,
        )(build_handler(tool, dispatcher))
    return mcp


async def serve(mcp: FastMCP, state: ClientState, transport: str = "stdio") -> None:
    """Runs the server until the transport ends, then closes the upstream client."""
    try:
        await mcp.run_async(transport=transport)
    finally:
        if state.client is not None:
            await state.client.aclose()
            logger.debug("Upstream client closed")


def _handle_sigterm(signum, frame):
    raise KeyboardInterrupt


# --- Main execution (for running the server) ---

def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    state = build_client_state(settings)
    if not state.is_configured:
        logger.warning("OXARCHIVE_API_KEY not set. Server will start but all tools will return setup instructions.")

    mcp = create_server(state)
    signal.signal(signal.SIGTERM, _handle_sigterm)

    logger.info("Starting 0xArchive MCP server on stdio (%d tools)...", len(TOOLS))
    try:
        asyncio.run(serve(mcp, state))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
