from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from typing import Dict, Any, Union
from pydantic import ValidationError as PydanticValidationError

# Custom exception classes
class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class BadRequestError(HTTPException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

class ValidationError(BadRequestError):
    """A required field is missing or invalid; nothing was written."""
    def __init__(self, detail: str = "Validation error"):
        super().__init__(detail=detail)

class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )

class SessionExpiredError(UnauthorizedError):
    """No usable session: the client has to sign in again."""
    def __init__(self, detail: str = "Session expired, please sign in again"):
        super().__init__(detail=detail)

class ConflictError(HTTPException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

class SetupRequiredError(HTTPException):
    """Signed in, but no hotel row exists for this owner yet."""
    def __init__(self, detail: str = "Hotel setup required"):
        super().__init__(
            status_code=status.HTTP_428_PRECONDITION_REQUIRED,
            detail=detail,
            headers={"Location": "/hotel/setup"}
        )

class ServerError(HTTPException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

class PersistenceError(ServerError):
    """A datastore call failed. Never retried."""
    def __init__(self, detail: str = "Database error"):
        super().__init__(detail=detail)

class PartialWriteError(Exception):
    """Secondary write failed after the primary row was committed."""
    def __init__(self, message: str, primary_id: Any = None):
        super().__init__(message)
        self.primary_id = primary_id

# Error body for request validation errors (RequestValidationError or pydantic's)
def handle_validation_error(exc: Union[RequestValidationError, PydanticValidationError]) -> Dict[str, Any]:
    errors = {}
    for error in exc.errors():
        # Drop the "body"/"query" prefix FastAPI puts in front of field names
        loc = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        field_name = ".".join(loc) or "request"
        errors[field_name] = error["msg"]

    return {
        "success": False,
        "error": "Validation error",
        "details": errors
    }

def describe_db_error(exc: Exception) -> str:
    """Short category for a database exception, used in logs"""
    error_message = str(exc)

    if "UNIQUE constraint failed" in error_message or "duplicate key" in error_message:
        return "Resource already exists"
    elif "FOREIGN KEY constraint failed" in error_message or "foreign key constraint" in error_message:
        return "Referenced resource not found"
    return "Database error"
