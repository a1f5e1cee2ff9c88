"""Глобальный перехват и логирование ошибок HTTP API."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from trustfeed.errors import AuthError, PayloadValidationError, jsonable_errors


async def _auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    logger.warning(
        "Отклонён запрос {method} {path}: {reason}",
        method=request.method,
        path=request.url.path,
        reason=str(exc) or "bad secret",
    )
    return JSONResponse({"error": "Unauthorized"}, status_code=status.HTTP_401_UNAUTHORIZED)


async def _payload_error_handler(request: Request, exc: PayloadValidationError) -> JSONResponse:
    logger.info("Невалидный payload на {path}: {message}", path=request.url.path, message=exc.message)
    body = {"error": exc.message}
    if exc.details is not None:
        body["details"] = exc.details
    return JSONResponse(body, status_code=status.HTTP_400_BAD_REQUEST)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        {"error": "Invalid parameters", "details": jsonable_errors(exc.errors())},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Необработанная ошибка {method} {path}: {error}",
        method=request.method,
        path=request.url.path,
        error=exc,
    )
    return JSONResponse(
        {"error": "Internal server error"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, _auth_error_handler)
    app.add_exception_handler(PayloadValidationError, _payload_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)


__all__ = ["register_error_handlers"]
