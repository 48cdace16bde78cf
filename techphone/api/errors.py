import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from techphone.core.config import ENVIRONMENT
from techphone.core.exceptions import AccountDisabledError, ConflictError, NotFoundError
from techphone.utils.validators import ValidationError

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


def register_error_handlers(app: FastAPI):

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            return error_response(404, "Not Found", path=request.url.path)
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)},
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        message = f"{where}: {first.get('msg')}" if where else str(first.get("msg", "Invalid request"))
        return error_response(400, message)

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return error_response(400, exc.message, **({"field": exc.field} if exc.field else {}))

    @app.exception_handler(NotFoundError)
    @app.exception_handler(NoResultFound)
    async def not_found(request: Request, exc: Exception):
        return error_response(404, str(exc) or "Not Found")

    @app.exception_handler(AccountDisabledError)
    async def account_disabled(request: Request, exc: AccountDisabledError):
        return error_response(403, str(exc))

    @app.exception_handler(ConflictError)
    async def conflict(request: Request, exc: ConflictError):
        return error_response(409, str(exc))

    @app.exception_handler(IntegrityError)
    async def integrity_error(request: Request, exc: IntegrityError):
        logger.warning(f"[API] Integrity error on {request.method} {request.url.path}: {exc.orig}")
        return error_response(409, "Resource already exists or violates a constraint")

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception):
        logger.error(f"[API Error] {request.method} {request.url.path}: {exc}", exc_info=True)
        message = str(exc) if ENVIRONMENT == "development" else "Something went wrong"
        return error_response(500, "Internal Server Error", message=message)
