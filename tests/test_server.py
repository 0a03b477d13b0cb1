from types import SimpleNamespace

import pytest
from fastmcp import Client

from archive_mcp.client import Page
from archive_mcp.config import ClientState
from archive_mcp.dispatch import Dispatcher
from archive_mcp.errors import MISSING_KEY_MESSAGE, ArchiveAPIError
from archive_mcp.registry import tool_names
from mcp_server import TOOL_ANNOTATIONS, build_handler, create_server, serve

JAN_1_2024_MS = 1_704_067_200_000


def _enum_values(schema):
    """Collects enum values from a property schema, looking through anyOf/Optional wrappers."""
    if "enum" in schema:
        return list(schema["enum"])
    for option in schema.get("anyOf", []):
        if "enum" in option:
            return list(option["enum"])
    return []


def _text(result):
    return result.content[0].text


@pytest.mark.asyncio
async def test_lists_every_tool_with_annotations(fake_archive):
    mcp = create_server(ClientState.configured(fake_archive))
    async with Client(mcp) as client:
        tools = await client.list_tools()

    assert {tool.name for tool in tools} == set(tool_names())
    for tool in tools:
        assert tool.annotations.readOnlyHint is True
        assert tool.annotations.destructiveHint is False
        assert tool.annotations.idempotentHint is True
        assert tool.annotations.openWorldHint is True


@pytest.mark.asyncio
async def test_input_schemas_follow_call_pattern(fake_archive):
    mcp = create_server(ClientState.configured(fake_archive))
    async with Client(mcp) as client:
        schemas = {tool.name: tool.inputSchema for tool in await client.list_tools()}

    assert schemas["get_instruments"].get("properties", {}) == {}

    assert set(schemas["get_orderbook"]["properties"]) == {"symbol", "depth"}
    assert schemas["get_orderbook"]["required"] == ["symbol"]

    assert set(schemas["get_trades"]["properties"]) == {"symbol", "start", "end", "limit", "cursor"}
    assert set(schemas["get_orderbook_history"]["properties"]) == {"symbol", "start", "end", "limit", "cursor", "depth"}

    candles = schemas["get_lighter_candles"]["properties"]
    assert _enum_values(candles["interval"]) == ["1m", "5m", "15m", "30m", "1h", "4h", "1d", "1w"]

    incidents = schemas["get_data_incidents"]["properties"]
    assert _enum_values(incidents["status"]) == ["open", "investigating", "identified", "monitoring", "resolved"]
    assert set(schemas["get_symbol_coverage"]["required"]) == {"exchange", "symbol"}
    assert set(schemas["get_symbol_coverage"]["properties"]) == {"exchange", "symbol", "from", "to"}
    assert set(schemas["get_data_sla"]["properties"]) == {"year", "month"}

    assert "CASE-SENSITIVE" in schemas["get_hip3_trades"]["properties"]["symbol"]["description"]


@pytest.mark.asyncio
async def test_missing_key_returns_setup_instructions():
    mcp = create_server(ClientState.unconfigured())
    async with Client(mcp) as client:
        result = await client.call_tool("get_candles", {"symbol": "BTC"}, raise_on_error=False)

    assert result.is_error
    assert _text(result) == MISSING_KEY_MESSAGE


@pytest.mark.asyncio
async def test_call_returns_formatted_text(fake_archive, frozen_now):
    fake_archive.respond("hyperliquid.candles.history", Page(data=[{"o": "1"}], next_cursor="c2"))
    mcp = create_server(ClientState.configured(fake_archive))
    async with Client(mcp) as client:
        result = await client.call_tool("get_candles", {"symbol": "eth", "interval": "4h", "limit": 10}, raise_on_error=False)

    assert not result.is_error
    assert _text(result).startswith('Returned 1 record\nNext page cursor: "c2"\n\n')
    operation, (symbol, params) = fake_archive.calls[0]
    assert operation == "hyperliquid.candles.history"
    assert symbol == "ETH"
    assert params["interval"] == "4h"
    assert params["limit"] == 10
    assert "cursor" not in params


@pytest.mark.asyncio
async def test_upstream_error_is_an_error_result(fake_archive):
    fake_archive.respond("lighter.orderbook.get", ArchiveAPIError(404, "Unknown coin FOO"))
    mcp = create_server(ClientState.configured(fake_archive))
    async with Client(mcp) as client:
        result = await client.call_tool("get_lighter_orderbook", {"symbol": "foo"}, raise_on_error=False)

    assert result.is_error
    assert _text(result).startswith("Not found: Unknown coin FOO")
    assert fake_archive.calls == [("lighter.orderbook.get", ("FOO", None))]


def test_build_handler_rejects_unknown_descriptor(fake_archive):
    tool = SimpleNamespace(name="odd", call=object())
    with pytest.raises(TypeError):
        build_handler(tool, Dispatcher(ClientState.configured(fake_archive)))


def test_annotations_mark_tools_read_only():
    assert TOOL_ANNOTATIONS.readOnlyHint is True
    assert TOOL_ANNOTATIONS.destructiveHint is False


@pytest.mark.asyncio
async def test_symbol_coverage_window_uses_from_and_to(fake_archive):
    fake_archive.respond("data_quality.symbol_coverage", {"symbol": "BTC", "gaps": []})
    mcp = create_server(ClientState.configured(fake_archive))
    async with Client(mcp) as client:
        result = await client.call_tool(
            "get_symbol_coverage",
            {"exchange": "hyperliquid", "symbol": "BTC", "from": "2024-01-01", "to": JAN_1_2024_MS + 1000},
            raise_on_error=False,
        )

    assert not result.is_error
    assert fake_archive.calls == [
        ("data_quality.symbol_coverage", ("hyperliquid", "BTC", {"from": JAN_1_2024_MS, "to": JAN_1_2024_MS + 1000}))
    ]


@pytest.mark.asyncio
async def test_client_outlives_sessions(fake_archive):
    fake_archive.respond("hyperliquid.instruments.list", [])
    mcp = create_server(ClientState.configured(fake_archive))

    for _ in range(2):
        async with Client(mcp) as client:
            result = await client.call_tool("get_instruments", {}, raise_on_error=False)
        assert not result.is_error
        assert _text(result).startswith("Returned 0 records")

    assert not fake_archive.closed
    assert len(fake_archive.calls) == 2


class _StubServer:
    def __init__(self, error=None):
        self.error = error
        self.transport = None

    async def run_async(self, transport=None):
        self.transport = transport
        if self.error is not None:
            raise self.error


@pytest.mark.asyncio
async def test_serve_closes_client_on_exit(fake_archive):
    server = _StubServer()
    await serve(server, ClientState.configured(fake_archive))
    assert server.transport == "stdio"
    assert fake_archive.closed


@pytest.mark.asyncio
async def test_serve_closes_client_on_failure(fake_archive):
    with pytest.raises(RuntimeError):
        await serve(_StubServer(RuntimeError("transport failed")), ClientState.configured(fake_archive))
    assert fake_archive.closed


@pytest.mark.asyncio
async def test_serve_without_client():
    server = _StubServer()
    await serve(server, ClientState.unconfigured())
    assert server.transport == "stdio"
