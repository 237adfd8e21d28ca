from __future__ import annotations

import logging
from collections.abc import Sequence

from app.contracts.identity import EmailFactor, Factor, FactorMatch, Identity, SmsFactor, UnsupportedFactor
from app.utils.exceptions import FactorNotFoundError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDER = "OKTA"


def _contact_for(identity: Identity, factor: EmailFactor | SmsFactor) -> str | None:
    if isinstance(factor, EmailFactor):
        return identity.profile.email or None
    return identity.profile.mobile_phone or None


def match_factor(identity: Identity, factors: Sequence[Factor], identifier: str) -> FactorMatch:
    """Return the first Okta email/SMS factor that belongs to ``identifier``.

    List order decides between an email and an SMS factor when both qualify.
    """
    for factor in factors:
        if isinstance(factor, UnsupportedFactor):
            logger.debug(
                "Skipping unsupported factor",
                extra={"factor_id": factor.id, "factor_type": factor.factor_type, "provider": factor.provider},
            )
            continue
        if factor.provider != SUPPORTED_PROVIDER:
            continue
        contact = _contact_for(identity, factor)
        if not contact:
            continue
        if identifier in (contact, identity.id):
            return FactorMatch(factor_id=factor.id, factor_type=factor.kind)

    raise FactorNotFoundError(operation="match_factor")
