from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(slots=True)
class WatchlistEntry:
    symbol: str
    updated_at: datetime
    price: float | None = None


class AddOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass(slots=True)
class AddResult:
    outcome: AddOutcome
    entry: WatchlistEntry
