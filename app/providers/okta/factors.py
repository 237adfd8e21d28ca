from __future__ import annotations

from typing import Any
from urllib.parse import quote

from app.contracts.identity import (
    EmailFactor,
    Factor,
    FactorMatch,
    SmsFactor,
    UnsupportedFactor,
    VerifyFactorRequest,
    VerifyFactorResponse,
)
from app.providers.common import decode_model, parse_json_body
from app.providers.okta._common import (
    Deadline,
    OktaRequestExecutor,
    is_success,
    raise_provider_error,
)
from app.providers.okta.users import user_path
from app.utils.exceptions import DecodeError


def _as_str(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    return value


def parse_factor(raw: Any) -> Factor:
    """Map one entry of Okta's factor list onto the known factor variants.

    Values are compared as Okta sent them; ``" OKTA "`` is not ``"OKTA"``.
    """
    if not isinstance(raw, dict):
        return UnsupportedFactor(raw=raw)

    factor_id = _as_str(raw.get("id"))
    provider = _as_str(raw.get("provider"))
    factor_type = _as_str(raw.get("factorType"))
    if factor_id and provider and factor_type == "email":
        return EmailFactor(id=factor_id, provider=provider, raw=raw)
    if factor_id and provider and factor_type == "sms":
        return SmsFactor(id=factor_id, provider=provider, raw=raw)
    return UnsupportedFactor(id=factor_id, provider=provider, factor_type=factor_type, raw=raw)


def factor_verify_path(identity_id: str, factor_id: str) -> str:
    return f"{user_path(identity_id)}/factors/{quote(factor_id, safe='')}/verify"


async def list_factors(
    executor: OktaRequestExecutor,
    identity_id: str,
    *,
    deadline: Deadline | None = None,
) -> list[Factor]:
    response = await executor.request(
        "GET",
        f"{user_path(identity_id)}/factors",
        operation="list_factors",
        deadline=deadline,
    )
    if response.status_code != 200:
        raise_provider_error(response, operation="list_factors", action="get user factors")

    body = parse_json_body(response, operation="list_factors")
    if not isinstance(body, list):
        raise DecodeError(
            "list_factors: expected a JSON array of factors",
            status=response.status_code,
            operation="list_factors",
        )
    return [parse_factor(item) for item in body]


async def issue_challenge(
    executor: OktaRequestExecutor,
    identity_id: str,
    match: FactorMatch,
    *,
    deadline: Deadline | None = None,
) -> VerifyFactorResponse:
    response = await executor.request(
        "POST",
        factor_verify_path(identity_id, match.factor_id),
        operation="issue_challenge",
        deadline=deadline,
    )
    if response.status_code not in (200, 202):
        raise_provider_error(
            response,
            operation="issue_challenge",
            action=f"trigger {match.factor_type} verification",
        )
    return decode_model(response, VerifyFactorResponse, operation="issue_challenge")


async def verify_passcode(
    executor: OktaRequestExecutor,
    identity_id: str,
    match: FactorMatch,
    passcode: str,
    *,
    state_token: str | None = None,
    deadline: Deadline | None = None,
) -> None:
    verify_request = VerifyFactorRequest(pass_code=passcode, state_token=state_token)
    response = await executor.request(
        "POST",
        factor_verify_path(identity_id, match.factor_id),
        operation="verify_passcode",
        json=verify_request.to_payload(),
        deadline=deadline,
    )
    if not is_success(response.status_code):
        raise_provider_error(
            response,
            operation="verify_passcode",
            action=f"verify {match.factor_type}",
        )
