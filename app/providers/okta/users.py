from __future__ import annotations

import logging
from urllib.parse import quote

from pydantic import ValidationError as PydanticValidationError

from app.contracts.identity import Identity, RegistrationRequest
from app.providers.common import decode_model, parse_json_body
from app.providers.okta._common import (
    Deadline,
    OktaRequestExecutor,
    is_success,
    raise_provider_error,
)
from app.utils.exceptions import DecodeError, UserNotFoundError, ValidationError

logger = logging.getLogger(__name__)


def user_path(identifier: str) -> str:
    return f"/users/{quote(identifier, safe='')}"


def prepare_registration(request: RegistrationRequest) -> RegistrationRequest:
    """Validate a registration and fill in the login when it is unset."""
    profile = request.profile
    if not profile.email and not profile.mobile_phone:
        raise ValidationError(
            "at least one of email or mobilePhone must be provided for registration",
            operation="register_user",
        )
    if profile.login:
        return request
    login = profile.email or profile.mobile_phone
    return request.model_copy(update={"profile": profile.model_copy(update={"login": login})})


async def register_user(
    executor: OktaRequestExecutor,
    request: RegistrationRequest,
    *,
    deadline: Deadline | None = None,
) -> str:
    prepared = prepare_registration(request)
    response = await executor.request(
        "POST",
        "/users",
        operation="register_user",
        params={"activate": "true" if prepared.activate else "false"},
        json=prepared.to_payload(),
        deadline=deadline,
    )
    if not is_success(response.status_code):
        raise_provider_error(response, operation="register_user", action="register user")

    identity = decode_model(response, Identity, operation="register_user")
    logger.info(
        "Okta user registered",
        extra={"identity_id": identity.id, "identity_status": identity.status},
    )
    # Okta's identity ID is not surfaced; callers receive the application client ID.
    return executor.config.client_id


async def get_user(
    executor: OktaRequestExecutor,
    identifier: str,
    *,
    deadline: Deadline | None = None,
) -> Identity:
    if not identifier:
        raise ValidationError("identifier must be provided", operation="get_user")

    response = await executor.request(
        "GET",
        user_path(identifier),
        operation="get_user",
        deadline=deadline,
    )
    if response.status_code != 200:
        raise_provider_error(response, operation="get_user", action="get user")
    return decode_model(response, Identity, operation="get_user")


def _quote_filter_value(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def profile_filter(email: str, mobile_phone: str) -> str:
    """Build Okta's ``filter`` expression, preferring email over phone."""
    if email:
        return f"profile.email eq {_quote_filter_value(email)}"
    if mobile_phone:
        return f"profile.mobilePhone eq {_quote_filter_value(mobile_phone)}"
    raise ValidationError("either email or phone number must be provided", operation="find_user")


async def find_user(
    executor: OktaRequestExecutor,
    *,
    email: str = "",
    mobile_phone: str = "",
    deadline: Deadline | None = None,
) -> Identity:
    search = profile_filter(email, mobile_phone)
    response = await executor.request(
        "GET",
        "/users",
        operation="find_user",
        params={"filter": search},
        deadline=deadline,
    )
    if response.status_code != 200:
        raise_provider_error(response, operation="find_user", action="find user")

    body = parse_json_body(response, operation="find_user")
    if not isinstance(body, list):
        raise DecodeError(
            "find_user: expected a JSON array of users",
            status=response.status_code,
            operation="find_user",
        )
    if not body:
        raise UserNotFoundError(operation="find_user")
    try:
        return Identity.model_validate(body[0])
    except PydanticValidationError as exc:
        raise DecodeError(
            "find_user: failed to decode Identity",
            status=response.status_code,
            operation="find_user",
        ) from exc
