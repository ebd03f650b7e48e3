from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from app.domain.watchlist.errors import QuoteProviderError
from app.infrastructure.clients.yahoo_mapper import map_chart_payload_to_price

logger = logging.getLogger(__name__)

_USER_AGENT = "stock-watchlist/0.1"


class YahooQuoteClient:
    def __init__(
        self,
        *,
        base_url: str = "https://query1.finance.yahoo.com",
        symbol_suffix: str = "",
        timeout_seconds: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be greater than zero")

        self.base_url = base_url.rstrip("/")
        self.symbol_suffix = symbol_suffix
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout_seconds,
            headers={"User-Agent": _USER_AGENT, "Accept": "application/json"},
            transport=transport,
        )

    def provider_symbol(self, symbol: str) -> str:
        return f"{symbol}{self.symbol_suffix}"

    def fetch_price(self, symbol: str) -> float | None:
        provider_symbol = self.provider_symbol(symbol)
        path = f"/v8/finance/chart/{quote(provider_symbol, safe='')}"
        try:
            response = self._client.get(path, params={"interval": "1d", "range": "1d"})
        except httpx.TimeoutException as exc:
            logger.warning("Quote request timed out", extra={"symbol": provider_symbol})
            raise QuoteProviderError(f"Quote request for {provider_symbol} timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("Quote request failed", extra={"symbol": provider_symbol, "error": str(exc)})
            raise QuoteProviderError(f"Quote request for {provider_symbol} failed") from exc

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            logger.warning(
                "Quote provider returned error status",
                extra={"symbol": provider_symbol, "status_code": response.status_code},
            )
            raise QuoteProviderError(f"Quote provider returned HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise QuoteProviderError("Quote response is not valid JSON") from exc
        return map_chart_payload_to_price(payload)

    def close(self) -> None:
        self._client.close()
