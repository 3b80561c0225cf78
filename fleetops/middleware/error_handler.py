import logging
import traceback
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
from fleetops.utils.exceptions import AppException, ErrorCode

logger = logging.getLogger(__name__)

# Unique columns whose violation means something specific to the client.
# Matched against the driver message: SQLite names "table.column",
# PostgreSQL names the constraint ("vehicles_plate_key").
UNIQUE_VIOLATIONS = (
    ("assignedOperatorId", ErrorCode.OPERATOR_HAS_VEHICLE, "Operator already has a vehicle assigned", None),
    ("plate",              ErrorCode.DUPLICATE_ENTRY,      "Plate already registered",               "plate"),
    ("email",              ErrorCode.DUPLICATE_ENTRY,      "Email already registered",               "email"),
    ("itemId",             ErrorCode.DUPLICATE_ENTRY,      "Checklist item id already exists",       "itemId"),
)


def _error(status_code: int, message: str, code: str, details=None, field=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "error": {"code": code, "details": details, "field": field},
        }
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle all AppException subclasses (our custom exceptions)."""
    detail = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": detail.get("message", "An error occurred"),
            "error": detail.get("error", {"code": ErrorCode.INTERNAL_SERVER_ERROR}),
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Request body / query validation errors (422).

    `field` is the dotted location without the "body" prefix, so a bad
    checklist answer reads "answers.tires" and a bad odometer "newMileage".
    """
    details = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field = ".".join(str(l) for l in loc if l != "body") if loc else "unknown"
        details.append({"field": field, "message": error.get("msg", "Invalid value")})

    return _error(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error. Please check your input.",
        ErrorCode.VALIDATION_ERROR,
        details=details,
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """
    Unique / foreign key violations that slipped past the service pre-checks,
    typically two requests racing for the same vehicle, plate or email.
    """
    raw = str(exc.orig)
    logger.warning(f"IntegrityError on {request.method} {request.url.path}: {raw}")

    for column, code, message, field in UNIQUE_VIOLATIONS:
        if column in raw:
            return _error(status.HTTP_409_CONFLICT, message, code, field=field)

    return _error(status.HTTP_409_CONFLICT, "A record with this data already exists.", ErrorCode.DUPLICATE_ENTRY)


async def stale_data_error_handler(request: Request, exc: StaleDataError) -> JSONResponse:
    """A versioned row (vehicles) changed between our read and our write."""
    logger.warning(f"Version conflict on {request.method} {request.url.path}: {exc}")
    return _error(
        status.HTTP_409_CONFLICT,
        "The record was modified by another request, please reload and retry.",
        ErrorCode.CONFLICT,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else: log the traceback, answer a safe 500."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}\n"
        f"{''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}"
    )
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        ErrorCode.INTERNAL_SERVER_ERROR,
    )
