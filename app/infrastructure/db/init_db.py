from __future__ import annotations

from sqlalchemy import Engine

from app.infrastructure.db.base import Base

# Ensure models are registered with SQLAlchemy metadata.
from app.infrastructure.db import models  # noqa: F401


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)
