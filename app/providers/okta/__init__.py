from app.providers.okta._common import Deadline, OktaConfig, OktaRequestExecutor
from app.providers.okta.factors import issue_challenge, list_factors, parse_factor, verify_passcode
from app.providers.okta.users import find_user, get_user, register_user

__all__ = [
    "Deadline",
    "OktaConfig",
    "OktaRequestExecutor",
    "find_user",
    "get_user",
    "issue_challenge",
    "list_factors",
    "parse_factor",
    "register_user",
    "verify_passcode",
]
