"""
Error Handlers - ZZIK Scoring Service
zzik/core/error_handlers.py

JSON error bodies share one shape: error_code, message, details, timestamp.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from zzik.core.exceptions import DataSourceException, InvalidScoringInputException

logger = structlog.get_logger(__name__)



#  Validation Error Messages


FIELD_MESSAGES = {
    "id": {
        "missing": "Popup id is required",
        "string_too_short": "Popup id cannot be empty",
    },
    "popup_id": {
        "missing": "Popup id is required",
        "string_too_short": "Popup id cannot be empty",
    },
    "daily_momentum": {
        "value_error": "Daily momentum values must be non-negative",
    },
    "avg_participation_time": {
        "less_than_equal": "Participation hour must be between 0 and 23",
        "greater_than_equal": "Participation hour must be between 0 and 23",
    },
}

DEFAULT_MESSAGES = {
    "missing": "Field '{field}' is required",
    "string_too_short": "Field '{field}' is too short",
    "string_too_long": "Field '{field}' is too long",
    "less_than_equal": "Field '{field}' exceeds maximum allowed value",
    "less_than": "Field '{field}' exceeds maximum allowed value",
    "greater_than_equal": "Field '{field}' is below minimum allowed value",
    "greater_than": "Field '{field}' is below minimum allowed value",
    "enum": "Field '{field}' has an unsupported value",
    "string_type": "Field '{field}' must be a string",
    "float_type": "Field '{field}' must be a number",
    "float_parsing": "Field '{field}' must be a valid number",
    "int_type": "Field '{field}' must be an integer",
    "int_parsing": "Field '{field}' must be a valid integer",
    "list_type": "Field '{field}' must be a list",
    "too_long": "Field '{field}' has too many items",
    "json_invalid": "Malformed JSON request body",
    "value_error": "Field '{field}' has an invalid value",
}


def get_validation_message(field: str, error_type: str) -> str:
    leaf = field.split(".")[-1] if field else field
    if leaf in FIELD_MESSAGES:
        for key in FIELD_MESSAGES[leaf]:
            if key in error_type:
                return FIELD_MESSAGES[leaf][key]
    for key, template in DEFAULT_MESSAGES.items():
        if key in error_type:
            return template.format(field=field)
    return f"Invalid value for field '{field}'"


class ErrorResponse(BaseModel):
    error_code: str
    message: str
    details: Optional[dict] = None
    timestamp: datetime


def _error_body(error_code: str, message: str, details: Optional[dict] = None) -> dict:
    return {
        "error_code": error_code,
        "message": message,
        "details": details,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }



#  Handlers


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body("VALIDATION_ERROR", "Request validation failed"),
        )
    err = errors[0]
    error_type = err.get("type", "")
    loc = err.get("loc", [])
    if "json_invalid" in error_type:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("INVALID_REQUEST", "Malformed JSON request body"),
        )
    field = ".".join(str(l) for l in loc if l not in ("body", "query", "path"))
    message = get_validation_message(field, error_type)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(
            "VALIDATION_ERROR",
            message,
            {"field": field, "type": error_type} if field else None,
        ),
    )


async def invalid_input_exception_handler(request: Request, exc: InvalidScoringInputException):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("INVALID_PARAMETER", exc.message, {"field": exc.field}),
    )


async def data_source_exception_handler(request: Request, exc: DataSourceException):
    logger.error("data_source_unavailable", path=request.url.path, operation=exc.operation, error=exc.message)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body("DATA_SOURCE_UNAVAILABLE", "Popup data source is unavailable", {"operation": exc.operation}),
    )
