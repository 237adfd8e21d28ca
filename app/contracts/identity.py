from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _OktaModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class IdentityProfile(_OktaModel):
    email: str | None = None
    mobile_phone: str | None = Field(default=None, alias="mobilePhone")


class Identity(_OktaModel):
    id: str
    status: str | None = None
    profile: IdentityProfile = Field(default_factory=IdentityProfile)


class UserProfile(_OktaModel):
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: str = ""
    mobile_phone: str = Field(default="", alias="mobilePhone")
    login: str = ""


class RegistrationRequest(_OktaModel):
    profile: UserProfile
    activate: bool = False
    send_email: bool = Field(default=False, alias="sendEmail")
    send_sms: bool = Field(default=False, alias="sendSMS")

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(by_alias=True)
        profile = payload["profile"]
        for optional_key in ("email", "mobilePhone"):
            if not profile.get(optional_key):
                profile.pop(optional_key, None)
        return payload


class ErrorCause(_OktaModel):
    error_summary: str | None = Field(default=None, alias="errorSummary")


class ErrorResponse(_OktaModel):
    error_code: str | None = Field(default=None, alias="errorCode")
    error_summary: str | None = Field(default=None, alias="errorSummary")
    error_link: str | None = Field(default=None, alias="errorLink")
    error_id: str | None = Field(default=None, alias="errorId")
    error_causes: list[ErrorCause] = Field(default_factory=list, alias="errorCauses")


class EmailFactor(BaseModel):
    kind: Literal["email"] = "email"
    id: str
    provider: str
    raw: dict[str, Any] = Field(default_factory=dict)


class SmsFactor(BaseModel):
    kind: Literal["sms"] = "sms"
    id: str
    provider: str
    raw: dict[str, Any] = Field(default_factory=dict)


class UnsupportedFactor(BaseModel):
    kind: Literal["unsupported"] = "unsupported"
    id: str | None = None
    provider: str | None = None
    factor_type: str | None = None
    raw: Any = None


Factor = Union[EmailFactor, SmsFactor, UnsupportedFactor]


class FactorMatch(BaseModel):
    factor_id: str
    factor_type: Literal["email", "sms"]


class VerifyFactorRequest(_OktaModel):
    pass_code: str = Field(alias="passCode")
    state_token: str | None = Field(default=None, alias="stateToken")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class VerifyFactorResponse(_OktaModel):
    status: str | None = None
    factor_result: str | None = Field(default=None, alias="factorResult")
    session_token: str | None = Field(default=None, alias="sessionToken")
    state_token: str | None = Field(default=None, alias="stateToken")
