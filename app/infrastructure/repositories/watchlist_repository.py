from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.watchlist.errors import DuplicateKeyError, StoreUnavailableError
from app.domain.watchlist.schemas import WatchlistEntry
from app.infrastructure.db.mappers import apply_entry_to_stock, stock_to_domain
from app.infrastructure.db.models.stock import StockModel

logger = logging.getLogger(__name__)


class SqlAlchemyWatchlistRepository:
    def __init__(self, *, session: Session) -> None:
        self._session = session

    def list_all(self) -> list[WatchlistEntry]:
        try:
            rows = self._session.execute(select(StockModel).order_by(StockModel.symbol)).scalars().all()
        except SQLAlchemyError as exc:
            raise _store_unavailable("list_all", exc) from exc
        return [stock_to_domain(row) for row in rows]

    def find_by_symbol(self, symbol: str) -> WatchlistEntry | None:
        try:
            row = self._find_row(symbol)
        except SQLAlchemyError as exc:
            raise _store_unavailable("find_by_symbol", exc, symbol=symbol) from exc
        return stock_to_domain(row) if row is not None else None

    def insert(self, entry: WatchlistEntry) -> WatchlistEntry:
        """Insert without a lookup so the unique constraint decides concurrent adds."""
        row = apply_entry_to_stock(StockModel(), entry)
        try:
            self._session.add(row)
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            raise DuplicateKeyError(f"{entry.symbol} already exists") from exc
        except SQLAlchemyError as exc:
            raise _store_unavailable("insert", exc, symbol=entry.symbol) from exc
        return stock_to_domain(row)

    def upsert(self, entry: WatchlistEntry) -> WatchlistEntry:
        try:
            row = self._find_row(entry.symbol)
            if row is None:
                row = apply_entry_to_stock(StockModel(), entry)
                self._session.add(row)
            else:
                apply_entry_to_stock(row, entry)
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            raise DuplicateKeyError(f"{entry.symbol} already exists") from exc
        except SQLAlchemyError as exc:
            raise _store_unavailable("upsert", exc, symbol=entry.symbol) from exc
        return stock_to_domain(row)

    def delete_by_symbol(self, symbol: str) -> bool:
        try:
            result = self._session.execute(delete(StockModel).where(StockModel.symbol == symbol))
            self._session.flush()
        except SQLAlchemyError as exc:
            raise _store_unavailable("delete_by_symbol", exc, symbol=symbol) from exc
        return result.rowcount > 0

    def _find_row(self, symbol: str) -> StockModel | None:
        return self._session.execute(select(StockModel).where(StockModel.symbol == symbol)).scalar_one_or_none()


def _store_unavailable(operation: str, exc: SQLAlchemyError, *, symbol: str | None = None) -> StoreUnavailableError:
    logger.error(
        "Watchlist store operation failed",
        extra={"operation": operation, "symbol": symbol, "error": str(exc)},
    )
    return StoreUnavailableError("Watchlist store unavailable")
