from app.infrastructure.repositories.watchlist_repository import SqlAlchemyWatchlistRepository

__all__ = [
    "SqlAlchemyWatchlistRepository",
]
