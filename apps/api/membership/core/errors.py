from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from membership.core.logging import get_logger

logger = get_logger(__name__)


class InvalidCredentials(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=401, detail="Invalid credentials")


class Unauthorized(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=401, detail="Unauthorized")


class NotFound(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=404, detail="Not Found")


class ValidationError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=400, detail=detail)


class ConflictError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=409, detail=detail)


class StorageFault(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=500, detail="Internal Server Error")


class ServiceUnavailable(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=503, detail=detail)


def _validation_message(exc: RequestValidationError) -> list[dict]:
    # Keep loc/msg only; pydantic's "input" echo can carry passwords.
    return [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "request failed",
            method=request.method,
            path=request.url.path,
            status_code=exc.status_code,
            detail=exc.detail,
        )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = _validation_message(exc)
        logger.warning("request rejected", method=request.method, path=request.url.path, errors=errors)
        return JSONResponse(status_code=400, content={"detail": "Validation Error", "errors": errors})

    @app.exception_handler(SQLAlchemyError)
    async def storage_error(request: Request, exc: SQLAlchemyError):
        logger.error(
            "storage fault",
            method=request.method,
            path=request.url.path,
            exc_type=type(exc).__name__,
            error=str(exc),
        )
        fault = StorageFault()
        return JSONResponse(status_code=fault.status_code, content={"detail": fault.detail})
