from __future__ import annotations

import logging

from app.config import get_settings
from app.contracts.identity import FactorMatch, Identity, RegistrationRequest
from app.providers import okta
from app.providers.okta import Deadline, OktaConfig, OktaRequestExecutor
from app.services.factor_matching import match_factor
from app.utils.exceptions import ProviderError, ValidationError

logger = logging.getLogger(__name__)


class IdentityVerifier:
    """Stateless orchestration of Okta registration, lookup and OTP verification.

    Both verification flows resolve the user, the enrolled factors and the
    matching factor from scratch on every call; nothing is carried between
    ``start_verification`` and ``complete_verification`` except the token the
    caller holds.
    """

    def __init__(self, executor: OktaRequestExecutor) -> None:
        self._executor = executor

    @property
    def client_id(self) -> str:
        return self._executor.config.client_id

    async def register_user(
        self,
        request: RegistrationRequest,
        *,
        deadline: Deadline | None = None,
    ) -> str:
        return await okta.register_user(self._executor, request, deadline=deadline)

    async def get_user(self, identifier: str, *, deadline: Deadline | None = None) -> Identity:
        return await okta.get_user(self._executor, identifier, deadline=deadline)

    async def find_user(
        self,
        *,
        email: str = "",
        mobile_phone: str = "",
        deadline: Deadline | None = None,
    ) -> Identity:
        return await okta.find_user(self._executor, email=email, mobile_phone=mobile_phone, deadline=deadline)

    async def _resolve_factor(
        self,
        identifier: str,
        *,
        deadline: Deadline | None,
    ) -> tuple[Identity, FactorMatch]:
        identity = await okta.get_user(self._executor, identifier, deadline=deadline)
        factors = await okta.list_factors(self._executor, identity.id, deadline=deadline)
        return identity, match_factor(identity, factors, identifier)

    async def start_verification(self, identifier: str, *, deadline: Deadline | None = None) -> str:
        identity, match = await self._resolve_factor(identifier, deadline=deadline)
        try:
            challenge = await okta.issue_challenge(self._executor, identity.id, match, deadline=deadline)
        except ProviderError as exc:
            logger.warning(
                "Okta rejected verification challenge",
                extra={"identity_id": identity.id, "factor_type": match.factor_type, "status": exc.status, "code": exc.code},
            )
            raise

        token = challenge.session_token or challenge.state_token
        if not token:
            logger.warning(
                "Okta challenge response carried no session or state token",
                extra={"identity_id": identity.id, "factor_result": challenge.factor_result},
            )
            return ""
        return token

    async def complete_verification(
        self,
        identifier: str,
        passcode: str,
        *,
        state_token: str | None = None,
        deadline: Deadline | None = None,
    ) -> str:
        if not passcode:
            raise ValidationError("passcode must be provided", operation="complete_verification")

        identity, match = await self._resolve_factor(identifier, deadline=deadline)
        try:
            await okta.verify_passcode(
                self._executor,
                identity.id,
                match,
                passcode,
                state_token=state_token,
                deadline=deadline,
            )
        except ProviderError as exc:
            logger.warning(
                "Okta rejected passcode",
                extra={"identity_id": identity.id, "factor_type": match.factor_type, "status": exc.status, "code": exc.code},
            )
            raise
        # Returns the application client ID, not the Okta identity ID.
        return self.client_id


def get_identity_verifier() -> IdentityVerifier:
    return IdentityVerifier(OktaRequestExecutor(OktaConfig.from_settings(get_settings())))
