from __future__ import annotations

from pydantic import ValidationError

from app.domain.entities import MARKET_DATA_SERVICE, ConnectionStatus, MarketQuote, TrendingCoin, TrendingList
from app.domain.errors import InvalidResponseError, NotFoundError
from app.infrastructure.clients.base import BaseClient


PING_REPLY = "(V3) To the Moon!"


class MarketDataClient(BaseClient):
    """CoinGecko v3 price feed. No API key; the public tier is rate-limited."""

    service = MARKET_DATA_SERVICE
    display_name = "CoinGecko"
    timeout_setting = "market_timeout_seconds"

    def _url(self, path: str) -> str:
        return f"{self.settings.coingecko_base_url.rstrip('/')}{path}"

    async def get_price(self, symbol: str) -> MarketQuote:
        response = await self._request(
            "GET",
            self._url("/simple/price"),
            params={
                "ids": symbol,
                "vs_currencies": "usd",
                "include_24hr_change": "true",
                "include_market_cap": "true",
                "include_24hr_vol": "true",
            },
            subject=symbol,
        )
        payload = self._json(response)
        data = payload.get(symbol) if isinstance(payload, dict) else None
        if not data:
            raise NotFoundError(self.service, f"Cryptocurrency '{symbol}' not found", code="SYMBOL_NOT_FOUND")
        if not isinstance(data, dict):
            raise InvalidResponseError(self.service, "CoinGecko price payload is malformed")

        try:
            return MarketQuote(
                symbol=symbol,
                price=data.get("usd"),
                change_24h=data.get("usd_24h_change"),
                market_cap=data.get("usd_market_cap"),
                volume_24h=data.get("usd_24h_vol"),
            )
        except ValidationError as exc:
            raise InvalidResponseError(self.service, "CoinGecko price payload is malformed") from exc

    async def get_trending(self) -> TrendingList:
        response = await self._request("GET", self._url("/search/trending"))
        payload = self._json(response)
        try:
            coins = [
                TrendingCoin(
                    id=coin["item"]["id"],
                    name=coin["item"]["name"],
                    symbol=coin["item"]["symbol"],
                    rank=coin["item"].get("market_cap_rank"),
                )
                for coin in payload["coins"]
            ]
        except (AttributeError, KeyError, TypeError, ValidationError) as exc:
            raise InvalidResponseError(self.service, "CoinGecko trending payload is malformed") from exc
        return TrendingList(trending=coins)

    async def _probe(self) -> ConnectionStatus:
        response = await self._request("GET", self._url("/ping"))
        payload = self._json(response)
        if isinstance(payload, dict) and payload.get("gecko_says") == PING_REPLY:
            return ConnectionStatus.connected(self.service)
        return ConnectionStatus.failed(self.service, "Unexpected response from CoinGecko", "INVALID_RESPONSE")
