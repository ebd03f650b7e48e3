from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class StockCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: StrictStr


class StockOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    price: float | None = None
    updated_at: datetime = Field(alias="updatedAt")


class StockMutationOut(BaseModel):
    msg: str
    stock: StockOut


class MessageOut(BaseModel):
    msg: str
