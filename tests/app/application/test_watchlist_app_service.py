from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.application.watchlist.service import WatchlistApplicationService
from app.domain.watchlist.errors import (
    AlreadyExistsError,
    DuplicateKeyError,
    EntryNotFoundError,
    InvalidFormatError,
    QuoteProviderError,
    StoreUnavailableError,
    SymbolNotFoundError,
    UpstreamUnavailableError,
)
from app.domain.watchlist.schemas import AddOutcome, WatchlistEntry

T0 = datetime(2026, 2, 10, 9, 15, 0, tzinfo=timezone.utc)


class FakeWatchlistRepository:
    def __init__(self) -> None:
        self.items: dict[str, WatchlistEntry] = {}
        self.writes: list[WatchlistEntry] = []
        self.raise_duplicate_on_insert = False
        self.fail_with: Exception | None = None

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
        self.writes.append(entry)
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
        self.commits = 0
        self.rollbacks = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type:
            self.rollback()
        return None

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class FakeQuoteClient:
    def __init__(self, prices: list[float | None] | None = None) -> None:
        self.prices = list(prices or [])
        self.requested: list[str] = []
        self.error: Exception | None = None

    def fetch_price(self, symbol: str) -> float | None:
        self.requested.append(symbol)
        if self.error is not None:
            raise self.error
        return self.prices.pop(0)


class SteppingClock:
    def __init__(self, start: datetime = T0, step: timedelta = timedelta(minutes=1)) -> None:
        self._next = start
        self._step = step

    def __call__(self) -> datetime:
        current = self._next
        self._next = current + self._step
        return current


def _plain_service(repo: FakeWatchlistRepository) -> tuple[WatchlistApplicationService, FakeUoW]:
    uow = FakeUoW(watchlist_repo=repo)
    service = WatchlistApplicationService(uow=uow, enrichment_enabled=False, clock=SteppingClock())
    return service, uow


def _enriched_service(
    repo: FakeWatchlistRepository,
    quotes: FakeQuoteClient,
) -> tuple[WatchlistApplicationService, FakeUoW]:
    uow = FakeUoW(watchlist_repo=repo)
    service = WatchlistApplicationService(
        uow=uow,
        quote_client=quotes,
        enrichment_enabled=True,
        clock=SteppingClock(),
    )
    return service, uow


def test_enrichment_requires_quote_client() -> None:
    repo = FakeWatchlistRepository()
    with pytest.raises(ValueError, match="quote_client"):
        WatchlistApplicationService(uow=FakeUoW(watchlist_repo=repo), enrichment_enabled=True)


def test_add_plain_normalizes_and_creates_entry() -> None:
    repo = FakeWatchlistRepository()
    service, uow = _plain_service(repo)

    result = service.add_entry(raw_symbol=" tcs ")

    assert result.outcome is AddOutcome.CREATED
    assert result.entry.symbol == "TCS"
    assert result.entry.price is None
    assert result.entry.updated_at == T0
    assert list(repo.items) == ["TCS"]
    assert uow.commits == 1


def test_add_plain_twice_rejects_second_add() -> None:
    repo = FakeWatchlistRepository()
    service, uow = _plain_service(repo)
    service.add_entry(raw_symbol="INFY")

    with pytest.raises(AlreadyExistsError):
        service.add_entry(raw_symbol="infy")

    assert list(repo.items) == ["INFY"]
    assert len(repo.writes) == 1
    assert uow.rollbacks == 1


def test_add_translates_duplicate_key_race_to_already_exists() -> None:
    repo = FakeWatchlistRepository()
    repo.raise_duplicate_on_insert = True
    service, _ = _plain_service(repo)

    with pytest.raises(AlreadyExistsError):
        service.add_entry(raw_symbol="TCS")

    assert repo.items == {}


@pytest.mark.parametrize("raw", ["tcs1", "TOOLONG", "", "AB3"])
def test_add_rejects_invalid_format_before_touching_store(raw: str) -> None:
    repo = FakeWatchlistRepository()
    quotes = FakeQuoteClient()
    service, uow = _enriched_service(repo, quotes)

    with pytest.raises(InvalidFormatError):
        service.add_entry(raw_symbol=raw)

    assert quotes.requested == []
    assert repo.writes == []
    assert uow.commits == 0


def test_add_enriched_creates_then_updates_price() -> None:
    repo = FakeWatchlistRepository()
    quotes = FakeQuoteClient(prices=[3500.5, 3512.25])
    service, _ = _enriched_service(repo, quotes)

    first = service.add_entry(raw_symbol="tcs")
    second = service.add_entry(raw_symbol="TCS")

    assert first.outcome is AddOutcome.CREATED
    assert first.entry.price == 3500.5
    assert second.outcome is AddOutcome.UPDATED
    assert second.entry.price == 3512.25
    assert second.entry.updated_at > first.entry.updated_at
    assert list(repo.items) == ["TCS"]
    assert quotes.requested == ["TCS", "TCS"]


def test_add_enriched_without_price_raises_symbol_not_found() -> None:
    repo = FakeWatchlistRepository()
    service, _ = _enriched_service(repo, FakeQuoteClient(prices=[None]))

    with pytest.raises(SymbolNotFoundError):
        service.add_entry(raw_symbol="RELI")

    assert repo.items == {}


def test_add_enriched_provider_failure_raises_upstream_unavailable() -> None:
    repo = FakeWatchlistRepository()
    quotes = FakeQuoteClient()
    quotes.error = QuoteProviderError("timed out")
    service, _ = _enriched_service(repo, quotes)

    with pytest.raises(UpstreamUnavailableError):
        service.add_entry(raw_symbol="TCS")

    assert repo.items == {}


def test_add_enriched_leaves_existing_entry_untouched_on_provider_failure() -> None:
    repo = FakeWatchlistRepository()
    repo.items["TCS"] = WatchlistEntry(symbol="TCS", price=3400.0, updated_at=T0)
    quotes = FakeQuoteClient()
    quotes.error = QuoteProviderError("boom")
    service, _ = _enriched_service(repo, quotes)

    with pytest.raises(UpstreamUnavailableError):
        service.add_entry(raw_symbol="TCS")

    assert repo.items["TCS"].price == 3400.0


def test_store_failures_propagate() -> None:
    repo = FakeWatchlistRepository()
    repo.fail_with = StoreUnavailableError("down")
    service, _ = _plain_service(repo)

    with pytest.raises(StoreUnavailableError):
        service.list_entries()
    with pytest.raises(StoreUnavailableError):
        service.add_entry(raw_symbol="TCS")


def test_remove_missing_symbol_raises_not_found() -> None:
    repo = FakeWatchlistRepository()
    repo.items["INFY"] = WatchlistEntry(symbol="INFY", updated_at=T0)
    service, uow = _plain_service(repo)

    with pytest.raises(EntryNotFoundError):
        service.remove_entry(raw_symbol="RELI")

    assert list(repo.items) == ["INFY"]
    assert uow.commits == 0


def test_remove_uppercases_key_without_format_check() -> None:
    repo = FakeWatchlistRepository()
    repo.items["TCS1"] = WatchlistEntry(symbol="TCS1", updated_at=T0)
    service, uow = _plain_service(repo)

    service.remove_entry(raw_symbol="tcs1")

    assert repo.items == {}
    assert uow.commits == 1


def test_add_then_remove_restores_previous_listing() -> None:
    repo = FakeWatchlistRepository()
    repo.items["TCS"] = WatchlistEntry(symbol="TCS", updated_at=T0)
    service, _ = _plain_service(repo)
    before = service.list_entries()

    service.add_entry(raw_symbol="INFY")
    service.remove_entry(raw_symbol="INFY")

    after = service.list_entries()
    assert after == before
    assert all(entry.symbol != "INFY" for entry in after)
