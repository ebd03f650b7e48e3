from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.deps import get_watchlist_service
from app.api.errors import install_api_error_handlers
from app.api.v1.router import api_router
from app.application.watchlist.service import WatchlistApplicationService
from app.domain.watchlist.errors import DuplicateKeyError, QuoteProviderError
from app.domain.watchlist.schemas import WatchlistEntry

T0 = datetime(2026, 2, 10, 9, 15, 0, tzinfo=timezone.utc)


class FakeWatchlistRepository:
    def __init__(self) -> None:
        self.items: dict[str, WatchlistEntry] = {}
        self.fail_with: Exception | None = None
        self.raise_duplicate_on_insert = False

    def list_all(self) -> list[WatchlistEntry]:
        self._maybe_fail()
        return [self.items[symbol] for symbol in sorted(self.items)]

    def find_by_symbol(self, symbol: str) -> WatchlistEntry | None:
        self._maybe_fail()
        return self.items.get(symbol)

    def insert(self, entry: WatchlistEntry) -> WatchlistEntry:
        self._maybe_fail()
        if self.raise_duplicate_on_insert or entry.symbol in self.items:
            raise DuplicateKeyError(f"{entry.symbol} already exists")
        return self._store(entry)

    def upsert(self, entry: WatchlistEntry) -> WatchlistEntry:
        self._maybe_fail()
        return self._store(entry)

    def _store(self, entry: WatchlistEntry) -> WatchlistEntry:
        self.items[entry.symbol] = entry
        return entry

    def delete_by_symbol(self, symbol: str) -> bool:
        self._maybe_fail()
        return self.items.pop(symbol, None) is not None

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with


class FakeUoW:
    def __init__(self, *, watchlist_repo: FakeWatchlistRepository) -> None:
        self.watchlist_repo = watchlist_repo

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return None

    def commit(self) -> None:
        return None

    def rollback(self) -> None:
        return None


class FakeQuoteClient:
    def __init__(self) -> None:
        self.prices: dict[str, list[float]] = {}
        self.fail = False

    def fetch_price(self, symbol: str) -> float | None:
        if self.fail:
            raise QuoteProviderError("provider down")
        queued = self.prices.get(symbol)
        if not queued:
            return None
        return queued.pop(0)


class SteppingClock:
    def __init__(self) -> None:
        self._next = T0

    def __call__(self) -> datetime:
        current = self._next
        self._next = current + timedelta(minutes=1)
        return current


@pytest.fixture
def watchlist_repo() -> FakeWatchlistRepository:
    return FakeWatchlistRepository()


@pytest.fixture
def quote_client() -> FakeQuoteClient:
    return FakeQuoteClient()


def _build_client(service: WatchlistApplicationService) -> TestClient:
    app = FastAPI()
    install_api_error_handlers(app)
    app.include_router(api_router)
    app.dependency_overrides[get_watchlist_service] = lambda: service
    return TestClient(app)


@pytest.fixture
def api_client(watchlist_repo: FakeWatchlistRepository) -> Generator[TestClient, None, None]:
    service = WatchlistApplicationService(
        uow=FakeUoW(watchlist_repo=watchlist_repo),
        enrichment_enabled=False,
        clock=SteppingClock(),
    )
    with _build_client(service) as client:
        yield client


@pytest.fixture
def enriched_api_client(
    watchlist_repo: FakeWatchlistRepository,
    quote_client: FakeQuoteClient,
) -> Generator[TestClient, None, None]:
    service = WatchlistApplicationService(
        uow=FakeUoW(watchlist_repo=watchlist_repo),
        quote_client=quote_client,
        enrichment_enabled=True,
        clock=SteppingClock(),
    )
    with _build_client(service) as client:
        yield client
