"""Maps expense errors to HTTP responses. The only place status codes are chosen."""
import logging
from typing import Dict, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from services.exceptions import (
    EmptyUpdateError,
    ExpenseError,
    ExpenseValidationError,
    InvalidIdError,
    NotFoundError,
    StoreError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Most specific class wins; lookup walks the exception's MRO.
ERROR_STATUS_CODES: Dict[Type[ExpenseError], int] = {
    ExpenseValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidIdError: status.HTTP_400_BAD_REQUEST,
    EmptyUpdateError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    StoreError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: ExpenseError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def expense_error_handler(request: Request, exc: ExpenseError) -> JSONResponse:
    status_code = status_for(exc)
    if isinstance(exc, ExpenseValidationError):
        logger.info(f"{request.method} {request.url.path} rejected: {exc.errors}")
        return JSONResponse(status_code=status_code, content={"errors": exc.errors})
    if status_code >= 500:
        # Never leak driver details to the client
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=status_code, content={"message": INTERNAL_ERROR_MESSAGE})
    return JSONResponse(status_code=status_code, content={"message": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or a non-object body. Answered like a field validation failure."""
    errors = [str(error.get("msg", "Invalid request body")) for error in exc.errors()]
    logger.info(f"{request.method} {request.url.path} malformed body: {errors}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": errors})


async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INTERNAL_ERROR_MESSAGE},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ExpenseError, expense_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, server_error_handler)
