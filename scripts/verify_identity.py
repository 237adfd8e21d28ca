#!/usr/bin/env python3
"""
Manual Okta registration and OTP verification tool.

This script is an operator tool intended to run against a live Okta org.
Required environment variables (or .env):
- OKTA_DOMAIN
- OKTA_API_TOKEN
- OKTA_CLIENT_ID

Examples:
    verify_identity.py register --email john.doe@example.com --first-name John --last-name Doe --activate
    verify_identity.py find --email john.doe@example.com
    verify_identity.py start john.doe@example.com
    verify_identity.py complete john.doe@example.com 123456
    verify_identity.py flow john.doe@example.com
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from app.contracts.identity import RegistrationRequest, UserProfile
from app.providers.okta import Deadline
from app.services.identity_verification import IdentityVerifier, get_identity_verifier
from app.utils.exceptions import IdentityError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Register Okta users and verify email/phone ownership.")
    parser.add_argument("--timeout", type=float, default=None, help="Overall deadline in seconds per command.")
    parser.add_argument("--verbose", action="store_true", help="Log every Okta request.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register = subparsers.add_parser("register", help="Register a new user.")
    register.add_argument("--email", default="")
    register.add_argument("--mobile-phone", default="")
    register.add_argument("--first-name", default="")
    register.add_argument("--last-name", default="")
    register.add_argument("--login", default="")
    register.add_argument("--activate", action="store_true")
    register.add_argument("--send-email", action="store_true")
    register.add_argument("--send-sms", action="store_true")

    find = subparsers.add_parser("find", help="Look up a user by email, or by phone when no email is given.")
    find.add_argument("--email", default="")
    find.add_argument("--mobile-phone", default="")

    start = subparsers.add_parser("start", help="Send a one-time passcode.")
    start.add_argument("identifier")

    complete = subparsers.add_parser("complete", help="Verify a one-time passcode.")
    complete.add_argument("identifier")
    complete.add_argument("passcode")
    complete.add_argument("--state-token", default=None)

    flow = subparsers.add_parser("flow", help="Send a passcode, then prompt for it and verify.")
    flow.add_argument("identifier")

    return parser.parse_args(argv)


def _deadline(args: argparse.Namespace) -> Deadline | None:
    return Deadline.after(args.timeout) if args.timeout else None


async def _start(args: argparse.Namespace, verifier: IdentityVerifier) -> int:
    token = await verifier.start_verification(args.identifier, deadline=_deadline(args))
    print(f"Verification challenge initiated. sessionToken: {token}")
    return 0


async def _complete(args: argparse.Namespace, verifier: IdentityVerifier, passcode: str) -> int:
    client_id = await verifier.complete_verification(
        args.identifier,
        passcode,
        state_token=getattr(args, "state_token", None),
        deadline=_deadline(args),
    )
    print(f"Email/phone verified successfully. Client ID: {client_id}")
    return 0


async def _register(args: argparse.Namespace, verifier: IdentityVerifier) -> int:
    request = RegistrationRequest(
        profile=UserProfile(
            first_name=args.first_name,
            last_name=args.last_name,
            email=args.email,
            mobile_phone=args.mobile_phone,
            login=args.login,
        ),
        activate=args.activate,
        send_email=args.send_email,
        send_sms=args.send_sms,
    )
    client_id = await verifier.register_user(request, deadline=_deadline(args))
    print(f"User registered successfully. Client ID: {client_id}")
    return 0


async def _find(args: argparse.Namespace, verifier: IdentityVerifier) -> int:
    identity = await verifier.find_user(email=args.email, mobile_phone=args.mobile_phone, deadline=_deadline(args))
    print(f"User found. ID: {identity.id} status: {identity.status}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    verifier = get_identity_verifier()
    try:
        if args.command == "register":
            return asyncio.run(_register(args, verifier))
        if args.command == "find":
            return asyncio.run(_find(args, verifier))
        if args.command == "start":
            return asyncio.run(_start(args, verifier))
        if args.command == "complete":
            return asyncio.run(_complete(args, verifier, args.passcode))

        # Each step gets its own deadline; the prompt runs outside the event loop.
        asyncio.run(_start(args, verifier))
        passcode = input("Enter passcode: ").strip()
        return asyncio.run(_complete(args, verifier, passcode))
    except IdentityError as exc:
        print(f"verify_identity failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
