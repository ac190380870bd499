import logging
from fastapi import FastAPI, Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from sweetshop.core.errors import CatalogError
from sweetshop.schemas.response import new_request_id

log = logging.getLogger("sweetshop.errors")


def _error_body(code: str, message, **extra) -> dict:
    error = {"code": code, "message": message}
    error.update(extra)
    return {"success": False, "error": error, "request_id": new_request_id()}


# ----------- Exception Handlers (called by FastAPI) -----------

def catalog_exception_handler(request: Request, exc: CatalogError):
    """Handles domain errors raised by the services (400/401/403/404/500)."""
    if exc.status_code >= 500:
        # Detail was logged where it happened; the caller only sees a generic message.
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.code, "Server error"))
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.code, exc.message))


def http_exception_handler(request: Request, exc: HTTPException):
    """Handles exceptions raised by HTTPException (e.g., 404, 500)."""
    return JSONResponse(status_code=exc.status_code, content=_error_body("http_error", exc.detail))


def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed requests (bad JSON, bad UUID in the path) are reported as 400."""
    body = _error_body("validation_error", "Invalid input data", details=jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=400, content=body)


def generic_exception_handler(request: Request, exc: Exception):
    """Handles all unhandled exceptions (500 Internal Server Error)."""
    log.exception(f"Unhandled exception on path: {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content=_error_body("server_error", "Internal Server Error"))


# ----------- Registration Function -----------

def setup_exception_handlers(app: FastAPI):
    """Registers all custom exception handlers with the FastAPI application."""
    app.add_exception_handler(CatalogError, catalog_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    return app
