from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from app.domain.watchlist.errors import (
    AlreadyExistsError,
    DuplicateKeyError,
    EntryNotFoundError,
    InvalidFormatError,
    QuoteProviderError,
    SymbolNotFoundError,
    UpstreamUnavailableError,
)
from app.domain.watchlist.schemas import AddOutcome, AddResult, WatchlistEntry
from app.domain.watchlist.symbols import normalize_deletion_key, normalize_symbol
from app.infrastructure.clients.yahoo import YahooQuoteClient
from app.infrastructure.db.uow import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)

INVALID_FORMAT_MESSAGE = "Stock name must be 1-5 uppercase letters."
SYMBOL_NOT_FOUND_MESSAGE = "Invalid stock symbol or no data found."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WatchlistApplicationService:
    def __init__(
        self,
        *,
        uow: SqlAlchemyUnitOfWork,
        quote_client: YahooQuoteClient | None = None,
        enrichment_enabled: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if enrichment_enabled and quote_client is None:
            raise ValueError("quote_client is required when enrichment is enabled")
        self._uow = uow
        self._quote_client = quote_client if enrichment_enabled else None
        self._enrichment_enabled = enrichment_enabled
        self._clock = clock

    @property
    def enrichment_enabled(self) -> bool:
        return self._enrichment_enabled

    def list_entries(self) -> list[WatchlistEntry]:
        with self._uow as uow:
            repo = _require_watchlist_repo(uow)
            return repo.list_all()

    def add_entry(self, *, raw_symbol: object) -> AddResult:
        symbol = normalize_symbol(raw_symbol)
        if symbol is None:
            raise InvalidFormatError(INVALID_FORMAT_MESSAGE)

        if self._enrichment_enabled:
            return self._add_enriched(symbol=symbol, price=self._fetch_price(symbol))
        return self._add_plain(symbol=symbol)

    def remove_entry(self, *, raw_symbol: str) -> None:
        symbol = normalize_deletion_key(raw_symbol)
        if not symbol:
            raise EntryNotFoundError("Stock not found")
        with self._uow as uow:
            repo = _require_watchlist_repo(uow)
            removed = repo.delete_by_symbol(symbol)
            if not removed:
                raise EntryNotFoundError("Stock not found")
            uow.commit()
        logger.info("Removed watchlist entry", extra={"symbol": symbol})

    def _fetch_price(self, symbol: str) -> float:
        try:
            price = self._quote_client.fetch_price(symbol)
        except QuoteProviderError as exc:
            logger.warning("Quote lookup failed", extra={"symbol": symbol, "error": str(exc)})
            raise UpstreamUnavailableError("Quote provider unavailable") from exc
        if price is None:
            raise SymbolNotFoundError(SYMBOL_NOT_FOUND_MESSAGE)
        return price

    def _add_enriched(self, *, symbol: str, price: float) -> AddResult:
        entry = WatchlistEntry(symbol=symbol, price=price, updated_at=self._clock())
        try:
            with self._uow as uow:
                repo = _require_watchlist_repo(uow)
                if repo.find_by_symbol(symbol) is None:
                    outcome = AddOutcome.CREATED
                    stored = repo.insert(entry)
                else:
                    outcome = AddOutcome.UPDATED
                    stored = repo.upsert(entry)
                uow.commit()
        except DuplicateKeyError as exc:
            raise AlreadyExistsError(f"{symbol} is already in the watchlist") from exc

        logger.info("Stored watchlist entry", extra={"symbol": symbol, "outcome": outcome.value})
        return AddResult(outcome=outcome, entry=stored)

    def _add_plain(self, *, symbol: str) -> AddResult:
        try:
            with self._uow as uow:
                repo = _require_watchlist_repo(uow)
                if repo.find_by_symbol(symbol) is not None:
                    raise AlreadyExistsError(f"{symbol} is already in the watchlist")
                stored = repo.insert(WatchlistEntry(symbol=symbol, updated_at=self._clock()))
                uow.commit()
        except DuplicateKeyError as exc:
            raise AlreadyExistsError(f"{symbol} is already in the watchlist") from exc

        logger.info("Stored watchlist entry", extra={"symbol": symbol, "outcome": AddOutcome.CREATED.value})
        return AddResult(outcome=AddOutcome.CREATED, entry=stored)


def _require_watchlist_repo(uow: SqlAlchemyUnitOfWork):
    if uow.watchlist_repo is None:
        raise RuntimeError("Watchlist repository not configured")
    return uow.watchlist_repo
