# app/routers/_responses.py — shared API response envelopes and error mapping

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.utils.exceptions import (
    DecodeError,
    FactorNotFoundError,
    IdentityError,
    ProviderError,
    TransportError,
    UserNotFoundError,
    ValidationError,
)


class DataEnvelope(BaseModel):
    data: Any


class ErrorEnvelope(BaseModel):
    error: str
    code: str | None = None


def error_response(message: str, status_code: int, code: str | None = None) -> JSONResponse:
    content: dict[str, Any] = {"error": message}
    if code:
        content["code"] = code
    return JSONResponse(status_code=status_code, content=content)


def identity_error_response(exc: IdentityError) -> JSONResponse:
    if isinstance(exc, ValidationError):
        return error_response(exc.message, 422)
    if isinstance(exc, UserNotFoundError):
        return error_response("No user matches the given email or phone", 404)
    if isinstance(exc, FactorNotFoundError):
        return error_response("No email or SMS factor is enrolled for this identifier", 404)
    if isinstance(exc, ProviderError):
        status_code = exc.status if 400 <= exc.status < 500 else 502
        return error_response(exc.summary or "Identity provider rejected the request", status_code, exc.code)
    if isinstance(exc, TransportError):
        status_code = 504 if exc.is_timeout else 503
        return error_response("Identity provider unavailable, try again", status_code)
    if isinstance(exc, DecodeError):
        return error_response("Unexpected response from identity provider", 502)
    return error_response("Identity request failed", 500)
