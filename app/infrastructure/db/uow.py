from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.watchlist.errors import DuplicateKeyError, StoreUnavailableError
from app.infrastructure.repositories.watchlist_repository import SqlAlchemyWatchlistRepository

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:
    def __init__(self, *, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory
        self.session: Session | None = None
        self.watchlist_repo: SqlAlchemyWatchlistRepository | None = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self._session_factory()
        self.watchlist_repo = SqlAlchemyWatchlistRepository(session=self.session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.session is None:
            return
        try:
            if exc_type is not None:
                self.session.rollback()
        finally:
            self.session.close()
            self.session = None
            self.watchlist_repo = None

    def commit(self) -> None:
        if self.session is None:
            raise RuntimeError("Unit of work has no active session")
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise DuplicateKeyError("Stock already exists") from exc
        except SQLAlchemyError as exc:
            logger.exception("Watchlist commit failed")
            raise StoreUnavailableError("Watchlist store unavailable") from exc

    def rollback(self) -> None:
        if self.session is None:
            raise RuntimeError("Unit of work has no active session")
        self.session.rollback()
