import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = logging.getLogger(__name__)


class Unauthenticated(Exception):
    """The bearer credential is missing, malformed or rejected."""


class IdentityProviderError(Exception):
    """The identity provider client could not be constructed."""


def message(status_code: int, text: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": text})


async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = message(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def invalid_input(request: Request, exc: RequestValidationError) -> JSONResponse:
    log.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return message(400, "Invalid input")


async def crash(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled error in %s %s", request.method, request.url.path)
    return message(500, "Internal Server Error")


def register_error_handlers(app: FastAPI) -> None:
    """Render every error as ``{"message": ...}``."""
    app.add_exception_handler(StarletteHTTPException, http_error)
    app.add_exception_handler(RequestValidationError, invalid_input)
    app.add_exception_handler(Exception, crash)
