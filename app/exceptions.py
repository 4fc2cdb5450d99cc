import logging
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Optional, Tuple

from .domain import errors

logger = logging.getLogger(__name__)


def create_error_response(error_message: str, code: Optional[str] = None) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message,
        "code": code,
    }

def create_success_response(data, **extra) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "data": data,
        "error": None,
        **extra,
    }


def status_for(exc: errors.AppointmentError) -> Tuple[int, str]:
    """HTTP status and error code for a core failure."""
    if isinstance(exc, errors.AppointmentNotFound):
        return 404, "NOT_FOUND"
    if isinstance(exc, errors.SlotConflict):
        return 409, "CONFLICT"
    if isinstance(exc, errors.DuplicateAppointment):
        return 409, "DUPLICATE_ID"
    if isinstance(exc, errors.RescheduleWindowViolation):
        return 400, "INVALID_DATE"
    if isinstance(exc, errors.ValidationError):
        return 400, "VALIDATION_ERROR"
    if isinstance(exc, (errors.InvalidTransition, errors.UnmodifiableState,
                        errors.DeletedAppointment, errors.AppointmentTimingError)):
        return 400, "INVALID_OPERATION"
    return 500, "INTERNAL_ERROR"


async def appointment_exception_handler(request: Request, exc: errors.AppointmentError) -> JSONResponse:
    status_code, code = status_for(exc)
    logger.info(f"{request.method} {request.url.path} rejected: {exc.code} {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content=create_error_response(exc.message, code),
    )

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail)),
    )

async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies get the same envelope as domain validation failures"""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg', 'Invalid request')}" if location else first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content=create_error_response(message, "VALIDATION_ERROR"),
    )
