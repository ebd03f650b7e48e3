from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from app.api.cors import OriginAllowListMiddleware
from app.api.errors import install_api_error_handlers
from app.api.v1.router import api_router
from app.application.container import Container
from app.core.config import Settings, settings as default_settings
from app.core.log import configure_logging


def create_app(*, settings: Settings | None = None, container: Container | None = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)
    container = container or Container(settings=settings)

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        container.startup()
        try:
            yield
        finally:
            container.close()

    application = FastAPI(title="Stock Watchlist API", version="0.1.0", lifespan=lifespan)
    application.state.container = container
    install_api_error_handlers(application)

    application.add_middleware(
        OriginAllowListMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_allow_origins,
    )

    application.include_router(api_router, prefix=settings.api_prefix)

    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
