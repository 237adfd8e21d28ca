from __future__ import annotations

import json
import time
from typing import Any

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.utils.exceptions import DecodeError


def now_ms() -> int:
    return int(time.time() * 1000)


def parse_json_body(response: httpx.Response, *, operation: str) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(
            f"{operation}: response body is not valid JSON (status: {response.status_code})",
            status=response.status_code,
            operation=operation,
        ) from exc


def decode_model(response: httpx.Response, model: type[BaseModel], *, operation: str) -> Any:
    body = parse_json_body(response, operation=operation)
    try:
        return model.model_validate(body)
    except PydanticValidationError as exc:
        raise DecodeError(
            f"{operation}: failed to decode {model.__name__} (status: {response.status_code})",
            status=response.status_code,
            operation=operation,
        ) from exc
