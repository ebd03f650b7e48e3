from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_watchlist_service
from app.api.errors import raise_api_error
from app.api.v1.dto.mappers import to_stock_mutation_out, to_stock_out
from app.api.v1.dto.stocks import MessageOut, StockCreate, StockMutationOut, StockOut
from app.application.watchlist.service import WatchlistApplicationService
from app.domain.watchlist.errors import WatchlistError
from app.domain.watchlist.schemas import AddOutcome

router = APIRouter()

_ERROR_STATUS = {
    "INVALID_FORMAT": 400,
    "SYMBOL_NOT_FOUND": 400,
    "ALREADY_EXISTS": 400,
    "UPSTREAM_UNAVAILABLE": 502,
    "NOT_FOUND": 404,
    "STORE_UNAVAILABLE": 500,
}
_GENERIC_MESSAGES = {
    "UPSTREAM_UNAVAILABLE": "Quote provider unavailable",
    "STORE_UNAVAILABLE": "Server error",
}


@router.get("", response_model=list[StockOut])
def list_stocks(
    service: WatchlistApplicationService = Depends(get_watchlist_service),
) -> list[StockOut]:
    try:
        entries = service.list_entries()
    except WatchlistError as exc:
        _raise_watchlist_error(exc)
    return [to_stock_out(entry) for entry in entries]


@router.post("", response_model=StockMutationOut, status_code=status.HTTP_201_CREATED)
def add_stock(
    payload: StockCreate,
    response: Response,
    service: WatchlistApplicationService = Depends(get_watchlist_service),
) -> StockMutationOut:
    try:
        result = service.add_entry(raw_symbol=payload.name)
    except WatchlistError as exc:
        _raise_watchlist_error(exc)
    if result.outcome is AddOutcome.UPDATED:
        response.status_code = status.HTTP_200_OK
    return to_stock_mutation_out(result)


@router.delete("/{name}", response_model=MessageOut)
def remove_stock(
    name: str,
    service: WatchlistApplicationService = Depends(get_watchlist_service),
) -> MessageOut:
    try:
        service.remove_entry(raw_symbol=name)
    except WatchlistError as exc:
        _raise_watchlist_error(exc)
    return MessageOut(msg="Stock removed")


def _raise_watchlist_error(exc: WatchlistError) -> None:
    # Duplicate inserts that slipped past the existence check surface as conflicts.
    code = "ALREADY_EXISTS" if exc.code == "DUPLICATE_KEY" else exc.code
    raise_api_error(
        status_code=_ERROR_STATUS.get(code, 500),
        code=code,
        message=_GENERIC_MESSAGES.get(code, exc.message),
    )
