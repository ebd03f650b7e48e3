from __future__ import annotations

from app.api.v1.dto.stocks import StockMutationOut, StockOut
from app.domain.watchlist.schemas import AddOutcome, AddResult, WatchlistEntry

_ADD_MESSAGES = {
    AddOutcome.CREATED: "Stock added",
    AddOutcome.UPDATED: "Stock updated",
}


def to_stock_out(entry: WatchlistEntry) -> StockOut:
    return StockOut(
        name=entry.symbol,
        price=entry.price,
        updated_at=entry.updated_at,
    )


def to_stock_mutation_out(result: AddResult) -> StockMutationOut:
    return StockMutationOut(msg=_ADD_MESSAGES[result.outcome], stock=to_stock_out(result.entry))
