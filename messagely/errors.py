"""Domain errors and the JSON error responder."""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base error carrying the HTTP status it should be answered with."""

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(AppError):
    status_code = 400


class NotFoundError(AppError):
    status_code = 400


class UserAlreadyExistsError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


def error_body(message: str, status: int) -> dict:
    return {'error': {'message': message, 'status': status}}


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        # drop the leading 'body' / 'path' / 'query' segment
        loc = '.'.join(str(p) for p in err.get('loc', ())[1:])
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get('msg')))
    return '; '.join(parts) or 'Invalid request'


def register_error_handlers(app: FastAPI) -> None:
    """Route every failure through one JSON shape."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.warning({'msg': 'request_failed', 'path': request.url.path,
                        'status': exc.status_code, 'error': exc.message})
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.status_code))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.warning({'msg': 'request_invalid', 'path': request.url.path, 'error': message})
        return JSONResponse(status_code=400, content=error_body(message, 400))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail), exc.status_code),
                            headers=getattr(exc, 'headers', None))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception({'msg': 'request_crashed', 'path': request.url.path})
        return JSONResponse(status_code=500, content=error_body('Internal Server Error', 500))
