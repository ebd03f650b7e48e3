from app.infrastructure.db.models.stock import StockModel

__all__ = ["StockModel"]
