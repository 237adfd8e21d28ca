from __future__ import annotations

import pytest

from app.contracts.identity import EmailFactor, FactorMatch, Identity, SmsFactor, UnsupportedFactor
from app.providers import okta
from app.providers.okta import parse_factor
from app.services.factor_matching import match_factor
from app.utils.exceptions import DecodeError, FactorNotFoundError, ProviderError


def _identity(email: str | None = None, mobile_phone: str | None = None) -> Identity:
    return Identity.model_validate(
        {"id": "u1", "status": "ACTIVE", "profile": {"email": email, "mobilePhone": mobile_phone}}
    )


def _factors(*raw: dict) -> list:
    return [parse_factor(item) for item in raw]


def test_email_factor_matches_email_identifier():
    identity = _identity(email="a@x.com")
    factors = _factors({"provider": "OKTA", "factorType": "email", "id": "f1"})

    match = match_factor(identity, factors, "a@x.com")

    assert (match.factor_id, match.factor_type) == ("f1", "email")


def test_sms_factor_matches_phone_identifier():
    identity = _identity(email="a@x.com", mobile_phone="+15551234567")
    factors = _factors(
        {"provider": "OKTA", "factorType": "email", "id": "f1"},
        {"provider": "OKTA", "factorType": "sms", "id": "f2"},
    )

    match = match_factor(identity, factors, "+15551234567")

    assert (match.factor_id, match.factor_type) == ("f2", "sms")


def test_identity_id_matches_first_qualifying_factor_in_list_order():
    identity = _identity(email="a@x.com", mobile_phone="+15551234567")
    email_factor = {"provider": "OKTA", "factorType": "email", "id": "f1"}
    sms_factor = {"provider": "OKTA", "factorType": "sms", "id": "f2"}

    first = match_factor(identity, _factors(email_factor, sms_factor), "u1")
    reordered = match_factor(identity, _factors(sms_factor, email_factor), "u1")
    restored = match_factor(identity, _factors(email_factor, sms_factor), "u1")

    assert first.factor_id == "f1"
    assert reordered.factor_id == "f2"
    assert restored == first


def test_matching_is_deterministic():
    identity = _identity(email="a@x.com", mobile_phone="+15551234567")
    factors = _factors(
        {"provider": "GOOGLE", "factorType": "token:software:totp", "id": "f0"},
        {"provider": "OKTA", "factorType": "sms", "id": "f2"},
        {"provider": "OKTA", "factorType": "email", "id": "f1"},
    )

    results = {match_factor(identity, factors, "u1").factor_id for _ in range(10)}

    assert results == {"f2"}


def test_empty_factor_list_raises_factor_not_found():
    with pytest.raises(FactorNotFoundError):
        match_factor(_identity(email="a@x.com"), [], "a@x.com")


def test_non_okta_providers_never_match():
    factors = _factors(
        {"provider": "GOOGLE", "factorType": "email", "id": "f1"},
        {"provider": "SYMANTEC", "factorType": "sms", "id": "f2"},
    )

    with pytest.raises(FactorNotFoundError):
        match_factor(_identity(email="a@x.com", mobile_phone="+15551234567"), factors, "u1")


def test_factor_without_matching_profile_field_is_skipped():
    identity = _identity(email="a@x.com")
    factors = _factors({"provider": "OKTA", "factorType": "sms", "id": "f2"})

    with pytest.raises(FactorNotFoundError):
        match_factor(identity, factors, "u1")


def test_identifier_for_other_contact_does_not_match():
    identity = _identity(email="a@x.com", mobile_phone="+15551234567")
    factors = _factors({"provider": "OKTA", "factorType": "email", "id": "f1"})

    with pytest.raises(FactorNotFoundError):
        match_factor(identity, factors, "+15551234567")


def test_padded_provider_name_is_not_okta():
    factors = _factors({"provider": " OKTA ", "factorType": "email", "id": "f1"})

    with pytest.raises(FactorNotFoundError):
        match_factor(_identity(email="a@x.com"), factors, "a@x.com")


def test_unsupported_factors_are_skipped():
    identity = _identity(email="a@x.com")
    factors = _factors(
        {"provider": "OKTA", "factorType": "push", "id": "f0"},
        {"provider": "OKTA", "factorType": "email"},
        {"provider": "OKTA", "factorType": "email", "id": "f1"},
    )

    assert match_factor(identity, factors, "a@x.com").factor_id == "f1"


@pytest.mark.parametrize(
    ("raw", "expected_type"),
    [
        ({"provider": "OKTA", "factorType": "email", "id": "f1"}, EmailFactor),
        ({"provider": "OKTA", "factorType": "sms", "id": "f2"}, SmsFactor),
        ({"provider": "OKTA", "factorType": "push", "id": "f3"}, UnsupportedFactor),
        ({"provider": "OKTA", "factorType": "sms"}, UnsupportedFactor),
        ({"factorType": "email", "id": "f4"}, UnsupportedFactor),
        ({"provider": "OKTA", "factorType": "email ", "id": "f5"}, UnsupportedFactor),
        ({"provider": "OKTA", "factorType": "SMS", "id": "f6"}, UnsupportedFactor),
        ("not-a-factor", UnsupportedFactor),
    ],
)
def test_parse_factor_variants(raw, expected_type):
    assert isinstance(parse_factor(raw), expected_type)


def test_parse_factor_keeps_raw_record():
    raw = {"provider": "OKTA", "factorType": "sms", "id": "f2", "profile": {"phoneNumber": "+15551234567"}}

    factor = parse_factor(raw)

    assert factor.raw == raw


@pytest.mark.asyncio
async def test_list_factors_decodes_list(executor, fake_okta):
    fake_okta.add(
        "GET",
        "/api/v1/users/u1/factors",
        200,
        [
            {"provider": "OKTA", "factorType": "email", "id": "f1"},
            {"provider": "OKTA", "factorType": "call", "id": "f9"},
        ],
    )

    factors = await okta.list_factors(executor, "u1")

    assert [type(factor) for factor in factors] == [EmailFactor, UnsupportedFactor]


@pytest.mark.asyncio
async def test_list_factors_rejects_non_list_body(executor, fake_okta):
    fake_okta.add("GET", "/api/v1/users/u1/factors", 200, {"factors": []})

    with pytest.raises(DecodeError):
        await okta.list_factors(executor, "u1")


@pytest.mark.asyncio
async def test_list_factors_provider_error(executor, fake_okta):
    fake_okta.add(
        "GET",
        "/api/v1/users/u1/factors",
        403,
        {"errorCode": "E0000006", "errorSummary": "You do not have permission to perform the requested action"},
    )

    with pytest.raises(ProviderError) as exc_info:
        await okta.list_factors(executor, "u1")

    assert exc_info.value.status == 403
    assert exc_info.value.operation == "list_factors"


@pytest.mark.asyncio
async def test_factor_id_is_escaped_in_verify_path(executor, fake_okta):
    fake_okta.add("POST", "/api/v1/users/u1/factors/f1/../../other/verify", 200, {"factorResult": "SUCCESS"})
    match = FactorMatch(factor_id="f1/../../other", factor_type="email")

    await okta.verify_passcode(executor, "u1", match, "123456")

    sent = fake_okta.requests[0]
    assert sent.url.raw_path == b"/api/v1/users/u1/factors/f1%2F..%2F..%2Fother/verify"
