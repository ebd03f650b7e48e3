from __future__ import annotations

from fastapi import Depends, Request

from app.application.container import Container
from app.application.watchlist.service import WatchlistApplicationService


def get_container(request: Request) -> Container:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Application container not configured")
    return container


def get_watchlist_service(container: Container = Depends(get_container)) -> WatchlistApplicationService:
    return container.build_watchlist_service()
