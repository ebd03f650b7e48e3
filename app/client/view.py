from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

import httpx

from app.client.api import StocksApiClient
from app.client.scheduler import TimerScheduler
from app.core.config import Settings
from app.domain.watchlist.symbols import normalize_symbol

logger = logging.getLogger(__name__)

MESSAGE_TTL_SECONDS = 3.0


@dataclass(slots=True)
class WatchlistState:
    symbols: list[str] = field(default_factory=list)
    input_text: str = ""
    search_term: str = ""
    error: str = ""
    success: str = ""
    loading: bool = False
    fetching: bool = False


class WatchlistView:
    """Local mirror of the server watchlist with transient error/success banners.

    Banners are cleared ``message_ttl_seconds`` after they are shown. Clearing
    goes through ``scheduler.call_later`` and a newer banner cancels the pending
    clear of the one it replaces.
    """

    def __init__(
        self,
        *,
        api: StocksApiClient,
        scheduler: TimerScheduler | None = None,
        message_ttl_seconds: float = MESSAGE_TTL_SECONDS,
    ) -> None:
        self.api = api
        self.state = WatchlistState()
        self._scheduler = scheduler or TimerScheduler()
        self._message_ttl_seconds = message_ttl_seconds
        self._pending_clears: dict[str, Any] = {}
        self._lock = threading.RLock()

    def load(self) -> None:
        self.state.fetching = True
        self.set_error("")
        try:
            response = self.api.list_stocks()
        except httpx.HTTPError:
            logger.exception("Error fetching stocks")
            self.set_error("Could not load watchlist from server.")
            return
        finally:
            self.state.fetching = False

        if not response.ok:
            logger.warning("Watchlist request failed", extra={"status_code": response.status_code})
            self.set_error("Could not load watchlist from server.")
            return
        self.state.symbols = _symbols_from_body(response.body)

    def add(self, raw: str | None = None) -> bool:
        self.set_error("")
        self.set_success("")
        symbol = normalize_symbol(self.state.input_text if raw is None else raw)
        if symbol is None:
            self.set_error("Stock symbol must be 1-5 uppercase letters only.")
            return False
        if symbol in self.state.symbols:
            self.set_error(f"{symbol} is already in your watchlist.")
            return False

        self.state.loading = True
        try:
            response = self.api.add_stock(symbol)
        except httpx.HTTPError:
            logger.exception("Error adding stock", extra={"symbol": symbol})
            self.set_error("Server not reachable.")
            return False
        finally:
            self.state.loading = False

        if response.status_code == 201:
            self.state.symbols.append(symbol)
            self.state.input_text = ""
            self.set_success(f"{symbol} added successfully!")
            return True
        if response.status_code == 200:
            # The server already tracked it and refreshed the price.
            if symbol not in self.state.symbols:
                self.state.symbols.append(symbol)
            self.state.input_text = ""
            self.set_success(f"{symbol} updated successfully!")
            return True

        self.set_error(response.message or "Failed to add stock.")
        return False

    def remove(self, symbol: str) -> bool:
        try:
            self.api.remove_stock(symbol)
        except httpx.HTTPError:
            logger.exception("Error removing stock", extra={"symbol": symbol})
            self.set_error("Failed to remove stock.")
            return False
        self.state.symbols = [s for s in self.state.symbols if s != symbol]
        self.set_success(f"{symbol} removed successfully!")
        return True

    def clear_all(self) -> bool:
        try:
            for symbol in list(self.state.symbols):
                self.api.remove_stock(symbol)
        except httpx.HTTPError:
            logger.exception("Error clearing watchlist")
            self.set_error("Failed to clear watchlist.")
            return False
        self.state.symbols = []
        self.set_success("Watchlist cleared.")
        return True

    def visible_symbols(self) -> list[str]:
        term = self.state.search_term.lower()
        return [symbol for symbol in self.state.symbols if term in symbol.lower()]

    def set_error(self, message: str) -> None:
        self._show("error", message)

    def set_success(self, message: str) -> None:
        self._show("success", message)

    def render(self) -> str:
        lines = [f"Stock Watchlist ({len(self.state.symbols)} stocks)"]
        if self.state.error:
            lines.append(f"! {self.state.error}")
        if self.state.success:
            lines.append(f"* {self.state.success}")
        if self.state.fetching:
            lines.append("Loading watchlist...")
            return "\n".join(lines)

        visible = self.visible_symbols()
        if not visible:
            lines.append("No stocks match your search." if self.state.symbols else "Your watchlist is empty.")
        lines.extend(f"  {symbol}" for symbol in visible)
        return "\n".join(lines)

    def _show(self, kind: str, message: str) -> None:
        with self._lock:
            pending = self._pending_clears.pop(kind, None)
            if pending is not None:
                pending.cancel()
            setattr(self.state, kind, message)
            if message:
                self._pending_clears[kind] = self._scheduler.call_later(
                    self._message_ttl_seconds,
                    lambda: self._expire(kind, message),
                )

    def _expire(self, kind: str, message: str) -> None:
        with self._lock:
            if getattr(self.state, kind) == message:
                setattr(self.state, kind, "")
                self._pending_clears.pop(kind, None)


def _symbols_from_body(body: object) -> list[str]:
    if not isinstance(body, list):
        return []
    symbols: list[str] = []
    for item in body:
        name = item if isinstance(item, str) else item.get("name") if isinstance(item, dict) else None
        if isinstance(name, str):
            symbols.append(name)
    return symbols


def build_view(settings: Settings) -> WatchlistView:
    api = StocksApiClient(base_url=settings.client_api_base_url)
    return WatchlistView(api=api, message_ttl_seconds=settings.client_message_ttl_seconds)
