from __future__ import annotations

import logging
from collections.abc import Iterable

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from app.api.errors import error_payload

logger = logging.getLogger(__name__)

DEFAULT_ALLOW_METHODS = ("GET", "POST", "DELETE", "OPTIONS")
DEFAULT_ALLOW_HEADERS = ("Content-Type", "Authorization")


class OriginAllowListMiddleware(BaseHTTPMiddleware):
    """CORS for an explicit origin allow-list; unknown origins get 403 instead of a silent pass."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        allow_origins: Iterable[str],
        allow_methods: Iterable[str] = DEFAULT_ALLOW_METHODS,
        allow_headers: Iterable[str] = DEFAULT_ALLOW_HEADERS,
        max_age: int = 600,
    ) -> None:
        super().__init__(app)
        origins = {origin.rstrip("/") for origin in allow_origins}
        self._allow_any = "*" in origins
        self._allow_origins = origins - {"*"}
        self._allow_methods = ", ".join(allow_methods)
        self._allow_headers = ", ".join(allow_headers)
        self._max_age = str(max_age)

    def is_allowed(self, origin: str) -> bool:
        return self._allow_any or origin.rstrip("/") in self._allow_origins

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        origin = request.headers.get("origin")
        if origin is None:
            return await call_next(request)

        if not self.is_allowed(origin):
            logger.info("Rejected request from origin", extra={"origin": origin, "path": request.url.path})
            return JSONResponse(
                status_code=403,
                content=error_payload(code="ORIGIN_NOT_ALLOWED", message="Origin not allowed"),
            )

        if request.method == "OPTIONS":
            response = Response(status_code=200)
            response.headers["Access-Control-Allow-Methods"] = self._allow_methods
            response.headers["Access-Control-Allow-Headers"] = self._allow_headers
            response.headers["Access-Control-Max-Age"] = self._max_age
        else:
            response = await call_next(request)

        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Vary"] = "Origin"
        return response
