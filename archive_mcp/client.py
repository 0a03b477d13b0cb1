# archive_mcp/client.py

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from archive_mcp import __version__
from archive_mcp.errors import ArchiveAPIError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.0xarchive.io/v1"
DEFAULT_TIMEOUT_SECONDS = 60.0


@dataclass
class Page:
    """One page of a cursor-paginated listing. `next_cursor` is None on the last page."""
    data: Any = field(default_factory=list)
    next_cursor: Optional[str] = None


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _error_message(payload: Any, response: httpx.Response) -> str:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            error = error.get("message")
        message = error or payload.get("message") or payload.get("detail")
        if message:
            return str(message)
    return response.text.strip() or response.reason_phrase or f"HTTP {response.status_code}"


def _request_id(payload: Any, response: httpx.Response) -> Optional[str]:
    if isinstance(payload, dict):
        meta = payload.get("meta")
        if isinstance(meta, dict) and meta.get("request_id"):
            return str(meta["request_id"])
        if payload.get("request_id"):
            return str(payload["request_id"])
    return response.headers.get("x-request-id")


class ArchiveClient:
    """
    Thin asynchronous client for the 0xArchive REST API (v1).
    Groups endpoints the way the API does: one resource per exchange
    (`hyperliquid`, `hyperliquid.hip3`, `lighter`) plus `data_quality`.

    Every call performs exactly one HTTP request. Non-2xx answers raise
    `ArchiveAPIError`; transport failures propagate as `httpx.HTTPError`.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={
                "X-API-Key": api_key,
                "Accept": "application/json",
                "User-Agent": f"oxarchive-mcp/{__version__}",
            },
        )
        self.hyperliquid = HyperliquidResource(self)
        self.lighter = ExchangeResource(self, "/lighter")
        self.data_quality = DataQualityResource(self)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        logger.debug("GET %s params=%s", path, params)
        response = await self._http.get(path, params=params or None)
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            raise ArchiveAPIError(
                response.status_code,
                _error_message(payload, response),
                _request_id(payload, response),
            )
        if isinstance(payload, dict) and "data" in payload:
            return payload
        return {"data": payload}

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Fetches a non-paginated value and unwraps the response envelope."""
        payload = await self._request(path, params)
        return payload["data"]

    async def get_page(self, path: str, params: Optional[Dict[str, Any]] = None) -> Page:
        """Fetches one page of a cursor-paginated listing."""
        payload = await self._request(path, params)
        meta = payload.get("meta") or {}
        next_cursor = meta.get("next_cursor") or meta.get("nextCursor") or payload.get("next_cursor")
        return Page(data=payload["data"], next_cursor=next_cursor or None)


# --- Per-exchange sub-resources ---

class _Resource:
    def __init__(self, client: ArchiveClient, prefix: str):
        self._client = client
        self._prefix = prefix

    def _path(self, *parts: str) -> str:
        return "/".join([self._prefix, *parts])


class InstrumentsResource(_Resource):
    async def list(self) -> Any:
        return await self._client.get(self._path("instruments"))


class OrderbookResource(_Resource):
    async def get(self, coin: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._client.get(self._path("orderbook", _segment(coin)), params)

    async def history(self, coin: str, params: Dict[str, Any]) -> Page:
        return await self._client.get_page(self._path("orderbook", _segment(coin), "history"), params)


class TradesResource(_Resource):
    async def list(self, coin: str, params: Dict[str, Any]) -> Page:
        return await self._client.get_page(self._path("trades", _segment(coin)), params)


class CandlesResource(_Resource):
    async def history(self, coin: str, params: Dict[str, Any]) -> Page:
        return await self._client.get_page(self._path("candles", _segment(coin)), params)


class FundingResource(_Resource):
    async def current(self, coin: str) -> Any:
        return await self._client.get(self._path("funding", _segment(coin), "current"))

    async def history(self, coin: str, params: Dict[str, Any]) -> Page:
        return await self._client.get_page(self._path("funding", _segment(coin)), params)


class OpenInterestResource(_Resource):
    async def current(self, coin: str) -> Any:
        return await self._client.get(self._path("openinterest", _segment(coin), "current"))

    async def history(self, coin: str, params: Dict[str, Any]) -> Page:
        return await self._client.get_page(self._path("openinterest", _segment(coin)), params)


class LiquidationsResource(_Resource):
    async def history(self, coin: str, params: Dict[str, Any]) -> Page:
        return await self._client.get_page(self._path("liquidations", _segment(coin)), params)


class ExchangeResource:
    def __init__(self, client: ArchiveClient, prefix: str):
        self.instruments = InstrumentsResource(client, prefix)
        self.orderbook = OrderbookResource(client, prefix)
        self.trades = TradesResource(client, prefix)
        self.candles = CandlesResource(client, prefix)
        self.funding = FundingResource(client, prefix)
        self.open_interest = OpenInterestResource(client, prefix)
        self.liquidations = LiquidationsResource(client, prefix)


class HyperliquidResource(ExchangeResource):
    def __init__(self, client: ArchiveClient):
        super().__init__(client, "/hyperliquid")
        self.hip3 = ExchangeResource(client, "/hyperliquid/hip3")


class DataQualityResource(_Resource):
    def __init__(self, client: ArchiveClient):
        super().__init__(client, "/data-quality")

    async def status(self) -> Any:
        return await self._client.get(self._path("status"))

    async def coverage(self) -> Any:
        return await self._client.get(self._path("coverage"))

    async def symbol_coverage(self, exchange: str, symbol: str, options: Optional[Dict[str, Any]] = None) -> Any:
        return await self._client.get(self._path("coverage", _segment(exchange), _segment(symbol)), options)

    async def list_incidents(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._client.get(self._path("incidents"), params)

    async def latency(self) -> Any:
        return await self._client.get(self._path("latency"))

    async def sla(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._client.get(self._path("sla"), params)
