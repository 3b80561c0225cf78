from fastapi import HTTPException, status


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES: machine-readable constants for frontend switch/case
# ═══════════════════════════════════════════════════════════════════════════════
class ErrorCode:
    VALIDATION_ERROR                 = "VALIDATION_ERROR"
    UNAUTHORIZED                     = "UNAUTHORIZED"
    TOKEN_EXPIRED                    = "TOKEN_EXPIRED"
    FORBIDDEN                        = "FORBIDDEN"
    ACCOUNT_INACTIVE                 = "ACCOUNT_INACTIVE"
    NOT_FOUND                        = "NOT_FOUND"
    DUPLICATE_ENTRY                  = "DUPLICATE_ENTRY"
    CONFLICT                         = "CONFLICT"
    VEHICLE_ALREADY_ASSIGNED         = "VEHICLE_ALREADY_ASSIGNED"
    VEHICLE_UNAVAILABLE              = "VEHICLE_UNAVAILABLE"
    VEHICLE_IN_USE                   = "VEHICLE_IN_USE"
    OPERATOR_HAS_VEHICLE             = "OPERATOR_HAS_VEHICLE"
    VEHICLE_NOT_ASSIGNED_TO_OPERATOR = "VEHICLE_NOT_ASSIGNED_TO_OPERATOR"
    MILEAGE_DECREASE                 = "MILEAGE_DECREASE"
    INVALID_MAINTENANCE_STATUS       = "INVALID_MAINTENANCE_STATUS"
    CHECKLIST_INVALID                = "CHECKLIST_INVALID"
    INVALID_DATE_RANGE               = "INVALID_DATE_RANGE"
    INTERNAL_SERVER_ERROR            = "INTERNAL_SERVER_ERROR"


# ═══════════════════════════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════════════════════════
class AppException(HTTPException):
    """
    Base exception for all application-level errors.
    Carries a machine-readable error_code for frontend handling.
    """
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str,
        details: list | None = None,
        field: str | None = None,
    ):
        super().__init__(status_code=status_code, detail={
            "message": message,
            "error": {
                "code": error_code,
                "details": details,
                "field": field,
            }
        })

    @property
    def message(self) -> str:
        return self.detail["message"]

    @property
    def error_code(self) -> str:
        return self.detail["error"]["code"]


# ═══════════════════════════════════════════════════════════════════════════════
# SESSION / ACCESS
# ═══════════════════════════════════════════════════════════════════════════════

class UnauthorizedException(AppException):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, message, ErrorCode.UNAUTHORIZED)


class TokenExpiredException(AppException):
    def __init__(self):
        super().__init__(status.HTTP_401_UNAUTHORIZED, "Access token has expired", ErrorCode.TOKEN_EXPIRED)


class ForbiddenException(AppException):
    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(status.HTTP_403_FORBIDDEN, message, ErrorCode.FORBIDDEN)


class AccountInactiveException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_403_FORBIDDEN,
            "Your account has been deactivated. Contact admin.",
            ErrorCode.ACCOUNT_INACTIVE,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# NOT FOUND
# ═══════════════════════════════════════════════════════════════════════════════

class NotFoundException(AppException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{resource} not found", ErrorCode.NOT_FOUND)


# ═══════════════════════════════════════════════════════════════════════════════
# CONFLICT
# ═══════════════════════════════════════════════════════════════════════════════

class ConflictException(AppException):
    def __init__(
        self,
        message: str = "The request conflicts with the current state",
        error_code: str = ErrorCode.CONFLICT,
        field: str | None = None,
    ):
        super().__init__(status.HTTP_409_CONFLICT, message, error_code, field=field)


class DuplicateEntryException(ConflictException):
    def __init__(self, message: str = "Record already exists", field: str | None = None):
        super().__init__(message, ErrorCode.DUPLICATE_ENTRY, field=field)


class VehicleAlreadyAssignedException(ConflictException):
    def __init__(self):
        super().__init__("Vehicle is already assigned to an operator", ErrorCode.VEHICLE_ALREADY_ASSIGNED)


class VehicleUnavailableException(ConflictException):
    def __init__(self, status_value: str):
        super().__init__(
            f"Vehicle is not active (current status: {status_value})",
            ErrorCode.VEHICLE_UNAVAILABLE,
        )


class VehicleInUseException(ConflictException):
    def __init__(self, message: str = "Vehicle is currently assigned to an operator"):
        super().__init__(message, ErrorCode.VEHICLE_IN_USE)


class OperatorHasVehicleException(ConflictException):
    def __init__(self):
        super().__init__("Operator already has a vehicle assigned", ErrorCode.OPERATOR_HAS_VEHICLE)


class VehicleNotAssignedToOperatorException(ConflictException):
    def __init__(self):
        super().__init__(
            "Vehicle is not assigned to this operator",
            ErrorCode.VEHICLE_NOT_ASSIGNED_TO_OPERATOR,
        )


class InvalidMaintenanceStatusException(ConflictException):
    def __init__(self, message: str):
        super().__init__(message, ErrorCode.INVALID_MAINTENANCE_STATUS)


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════════════════════

class ValidationException(AppException):
    def __init__(
        self,
        message: str = "Invalid input",
        error_code: str = ErrorCode.VALIDATION_ERROR,
        details: list | None = None,
        field: str | None = None,
    ):
        super().__init__(status.HTTP_400_BAD_REQUEST, message, error_code, details=details, field=field)


class MileageDecreaseException(ValidationException):
    def __init__(self, new_mileage: int, current_mileage: int, field: str = "newMileage"):
        super().__init__(
            f"New mileage ({new_mileage}) cannot be lower than the current mileage ({current_mileage})",
            ErrorCode.MILEAGE_DECREASE,
            field=field,
        )


class ChecklistInvalidException(ValidationException):
    def __init__(self, details: list):
        super().__init__("Checklist answers are invalid", ErrorCode.CHECKLIST_INVALID, details=details)


class InvalidDateRangeException(ValidationException):
    def __init__(self, message: str = "End date must be after start date"):
        super().__init__(message, ErrorCode.INVALID_DATE_RANGE)
