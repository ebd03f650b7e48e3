from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: dict | None = None


def raise_api_error(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict | None = None,
) -> None:
    raise ApiError(status_code=status_code, code=code, message=message, details=details)


def error_payload(*, code: str, message: str, details: dict | None = None) -> dict:
    payload: dict = {"msg": message, "code": code}
    if details is not None:
        payload["details"] = details
    return payload


def install_api_error_handlers(application: FastAPI) -> None:
    @application.exception_handler(ApiError)
    async def _handle_api_error(_, exc: ApiError) -> JSONResponse:  # type: ignore[override]
        return JSONResponse(
            status_code=exc.status_code,
            content=error_payload(code=exc.code, message=exc.message, details=exc.details),
        )

    @application.exception_handler(RequestValidationError)
    async def _handle_validation_error(_, exc: RequestValidationError) -> JSONResponse:  # type: ignore[override]
        fields = [".".join(str(part) for part in error.get("loc", ())) for error in exc.errors()]
        logger.info("Rejected malformed request body", extra={"fields": fields})
        return JSONResponse(
            status_code=400,
            content=error_payload(
                code="INVALID_FORMAT",
                message="Request body must be a JSON object with a string 'name'.",
                details={"fields": fields},
            ),
        )
