# app/routers/identity.py — Okta registration, lookup and OTP verification endpoints

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.contracts.identity import RegistrationRequest, UserProfile
from app.providers.okta import Deadline
from app.routers._responses import DataEnvelope, ErrorEnvelope
from app.services.identity_verification import IdentityVerifier, get_identity_verifier

router = APIRouter()

_ERROR_RESPONSES = {
    404: {"model": ErrorEnvelope},
    422: {"model": ErrorEnvelope},
    502: {"model": ErrorEnvelope},
    503: {"model": ErrorEnvelope},
    504: {"model": ErrorEnvelope},
}


class RegisterUserRequest(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    mobile_phone: str = ""
    login: str = ""
    activate: bool = False
    send_email: bool = False
    send_sms: bool = False
    timeout_seconds: float | None = Field(default=None, gt=0)


class StartVerificationRequest(BaseModel):
    identifier: str
    timeout_seconds: float | None = Field(default=None, gt=0)


class CompleteVerificationRequest(BaseModel):
    identifier: str
    passcode: str
    state_token: str | None = None
    timeout_seconds: float | None = Field(default=None, gt=0)


def _deadline(timeout_seconds: float | None) -> Deadline | None:
    if timeout_seconds is None:
        return None
    return Deadline.after(timeout_seconds)


@router.post("/users", response_model=DataEnvelope, responses=_ERROR_RESPONSES)
async def register_user(
    payload: RegisterUserRequest,
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> DataEnvelope:
    """Register a user with Okta by email, phone, or both."""
    request = RegistrationRequest(
        profile=UserProfile(
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email.strip(),
            mobile_phone=payload.mobile_phone.strip(),
            login=payload.login.strip(),
        ),
        activate=payload.activate,
        send_email=payload.send_email,
        send_sms=payload.send_sms,
    )
    client_id = await verifier.register_user(request, deadline=_deadline(payload.timeout_seconds))
    return DataEnvelope(data={"client_id": client_id})


@router.get("/users", response_model=DataEnvelope, responses=_ERROR_RESPONSES)
async def find_user(
    email: str = "",
    mobile_phone: str = "",
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> DataEnvelope:
    """Search Okta users by email, or by mobile phone when no email is given."""
    identity = await verifier.find_user(email=email.strip(), mobile_phone=mobile_phone.strip())
    return DataEnvelope(data=identity.model_dump())


@router.get("/users/{identifier}", response_model=DataEnvelope, responses=_ERROR_RESPONSES)
async def get_user(
    identifier: str,
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> DataEnvelope:
    identity = await verifier.get_user(identifier)
    return DataEnvelope(data=identity.model_dump())


@router.post("/verifications", response_model=DataEnvelope, responses=_ERROR_RESPONSES)
async def start_verification(
    payload: StartVerificationRequest,
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> DataEnvelope:
    """Send a one-time passcode to the email or phone matching the identifier."""
    token = await verifier.start_verification(
        payload.identifier.strip(),
        deadline=_deadline(payload.timeout_seconds),
    )
    return DataEnvelope(data={"session_token": token})


@router.post("/verifications/complete", response_model=DataEnvelope, responses=_ERROR_RESPONSES)
async def complete_verification(
    payload: CompleteVerificationRequest,
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> DataEnvelope:
    client_id = await verifier.complete_verification(
        payload.identifier.strip(),
        payload.passcode.strip(),
        state_token=payload.state_token,
        deadline=_deadline(payload.timeout_seconds),
    )
    return DataEnvelope(data={"client_id": client_id})
