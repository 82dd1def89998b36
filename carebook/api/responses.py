"""JSON response helpers shared by the routers."""
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from carebook.exceptions import ServiceError, format_error_for_api, internal_error_body


def json_response(content: Any, status_code: int = 200) -> JSONResponse:
    """Encode dates and decimals and return a JSON response."""
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def error_response(error: ServiceError) -> JSONResponse:
    """Return a service error in the API error format."""
    return JSONResponse(status_code=error.status_code, content=format_error_for_api(error))


def internal_error_response() -> JSONResponse:
    """Return a generic 500 for unexpected failures."""
    return JSONResponse(status_code=500, content=internal_error_body())
