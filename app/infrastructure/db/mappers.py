from __future__ import annotations

from datetime import datetime, timezone

from app.domain.watchlist.schemas import WatchlistEntry
from app.infrastructure.db.models.stock import StockModel


def stock_to_domain(model: StockModel) -> WatchlistEntry:
    return WatchlistEntry(
        symbol=model.symbol,
        price=model.price,
        updated_at=_ensure_utc(model.updated_at),
    )


def apply_entry_to_stock(model: StockModel, entry: WatchlistEntry) -> StockModel:
    model.symbol = entry.symbol
    model.price = entry.price
    model.updated_at = entry.updated_at
    return model


def _ensure_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
