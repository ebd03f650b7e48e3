from __future__ import annotations

import logging

from app.application.watchlist.service import WatchlistApplicationService
from app.core.config import Settings
from app.infrastructure.clients.yahoo import YahooQuoteClient
from app.infrastructure.db.session import Database
from app.infrastructure.db.uow import SqlAlchemyUnitOfWork

logger = logging.getLogger(__name__)


class Container:
    """Holds the process-wide resources and builds per-request services from them."""

    def __init__(
        self,
        *,
        settings: Settings,
        database: Database | None = None,
        quote_client: YahooQuoteClient | None = None,
    ) -> None:
        self.settings = settings
        self.database = database or Database(url=settings.database_url, echo=settings.database_echo)
        if quote_client is None and settings.quote_enrichment_enabled:
            quote_client = YahooQuoteClient(
                base_url=settings.quote_provider_base_url,
                symbol_suffix=settings.quote_symbol_suffix,
                timeout_seconds=settings.quote_timeout_seconds,
            )
        self.quote_client = quote_client

    def startup(self) -> None:
        self.database.create_schema()
        logger.info(
            "Watchlist store ready",
            extra={"enrichment_enabled": self.settings.quote_enrichment_enabled},
        )

    def build_uow(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory=self.database.session)

    def build_watchlist_service(self) -> WatchlistApplicationService:
        return WatchlistApplicationService(
            uow=self.build_uow(),
            quote_client=self.quote_client,
            enrichment_enabled=self.settings.quote_enrichment_enabled,
        )

    def close(self) -> None:
        if self.quote_client is not None:
            self.quote_client.close()
        self.database.dispose()
