"""Shared fixtures: a fake requests transport and a clean retry environment"""

from __future__ import annotations

import json
from typing import Callable, List

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from http_timeout_retry.infrastructure.config.config_manager import ENV_OVERRIDES
from http_timeout_retry.infrastructure.log_channels import default_registry


def make_response(
    request: requests.PreparedRequest,
    status_code: int = 200,
    payload: dict | None = None,
    reason: str = "OK",
) -> requests.Response:
    r = requests.Response()
    r.status_code = status_code
    r.reason = reason
    r.url = request.url
    r.request = request
    if payload is None:
        payload = {}
    r._content = json.dumps(payload).encode("utf-8")  # type: ignore[attr-defined]
    r.headers = CaseInsensitiveDict({"Content-Type": "application/json"})
    return r


class FakeTransport(BaseAdapter):
    """Adapter answering every request through ``handler``

    The handler gets the PreparedRequest and returns a Response or an
    exception instance to raise.
    """

    def __init__(self, handler: Callable[[requests.PreparedRequest], object]):
        super().__init__()
        self.handler = handler
        self.requests: List[requests.PreparedRequest] = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.requests.append(request)
        result = self.handler(request)
        if isinstance(result, BaseException):
            raise result
        return result

    def close(self):
        pass


@pytest.fixture
def fake_session():
    """Factory returning (session, transport) for a request handler"""

    def _make(handler):
        transport = FakeTransport(handler)
        session = requests.Session()
        session.trust_env = False
        session.mount("http://", transport)
        session.mount("https://", transport)
        return session, transport

    return _make


@pytest.fixture
def sleeps():
    """Recording replacement for time.sleep"""
    calls: List[float] = []
    return calls


@pytest.fixture(autouse=True)
def clean_retry_environment(monkeypatch):
    for env_name in ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)
    default_registry.clear()
    yield
    default_registry.clear()
