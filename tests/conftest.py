from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from app.providers.okta import OktaConfig, OktaRequestExecutor
from app.services.identity_verification import IdentityVerifier

OKTA_DOMAIN = "https://shop.okta.example"
CLIENT_ID = "0oa-client-id"


class FakeOkta:
    """Routes ``(method, path)`` pairs to canned Okta responses and records calls."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status_code: int, payload: Any = None) -> None:
        self.routes[(method, path)] = (status_code, payload)

    def add_handler(self, method: str, path: str, handler: Callable[[httpx.Request], Any]) -> None:
        """Handlers may be coroutine functions; MockTransport awaits what they return."""
        self.routes[(method, path)] = handler

    def paths(self) -> list[tuple[str, str]]:
        return [(request.method, request.url.path) for request in self.requests]

    def body(self, index: int) -> Any:
        content = self.requests[index].content
        return json.loads(content) if content else None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(
                404,
                json={"errorCode": "E0000022", "errorSummary": f"Unrouted {request.method} {request.url.path}"},
            )
        if callable(route):
            return route(request)
        status_code, payload = route
        if isinstance(payload, (bytes, str)):
            return httpx.Response(status_code, content=payload)
        return httpx.Response(status_code, json=payload)


@pytest.fixture
def okta_config() -> OktaConfig:
    return OktaConfig(
        domain=OKTA_DOMAIN,
        api_token="test-okta-token",
        client_id=CLIENT_ID,
        client_secret="test-client-secret",
    )


@pytest.fixture
def fake_okta() -> FakeOkta:
    return FakeOkta()


@pytest.fixture
def executor(okta_config: OktaConfig, fake_okta: FakeOkta) -> OktaRequestExecutor:
    return OktaRequestExecutor(okta_config, transport=httpx.MockTransport(fake_okta))


@pytest.fixture
def verifier(executor: OktaRequestExecutor) -> IdentityVerifier:
    return IdentityVerifier(executor)
