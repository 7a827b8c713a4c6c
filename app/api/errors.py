"""
Request error handling shared by the API routers.
"""

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ParameterError(Exception):
    """A required request parameter is missing or invalid. Reported as HTTP 400."""

    def __init__(self, message: str, param: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.param = param


def require_param(value: Optional[str], name: str, message: Optional[str] = None) -> str:
    """Return ``value`` stripped, or raise ``ParameterError`` when it is missing or blank."""
    if value is None or not value.strip():
        raise ParameterError(message or f"{name} is required", param=name)
    return value.strip()


async def parameter_error_handler(request: Request, exc: ParameterError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.message})


def failure_body(error: str, exc: BaseException, **payload: Any) -> Dict[str, Any]:
    """Error response body: ``error``, ``message`` and the endpoint's empty payload."""
    return {"error": error, "message": str(exc) or exc.__class__.__name__, **payload}


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query parameters are reported like any other ``ParameterError``."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = first.get("loc") or ()
    param = str(loc[-1]) if loc else None
    message = f"Invalid {param or 'request'}: {first.get('msg', 'invalid value')}"
    return await parameter_error_handler(request, ParameterError(message, param=param))
