"""Translate domain errors into HTTP responses in one place."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from restaurant_kpi.core.errors import ErrorKind, KpiError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}


def error_body(kind: str, message: str, detail: object = None) -> dict[str, object]:
    return {"error": kind, "message": message, "detail": jsonable_encoder(detail)}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(KpiError)
    async def _kpi_error(request: Request, exc: KpiError) -> JSONResponse:
        return JSONResponse(
            status_code=STATUS_BY_KIND[exc.kind],
            content=error_body(exc.kind.value, exc.message, exc.detail),
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(ErrorKind.VALIDATION.value, "Validation failed", errors),
        )

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("internal", "Internal server error"),
        )


__all__ = ["STATUS_BY_KIND", "error_body", "register_error_handlers"]
