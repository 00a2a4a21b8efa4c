"""Shared fixtures."""

import json

import pytest
import requests
from requests.structures import CaseInsensitiveDict


def _make_response(status=200, json_body=None, text="", headers=None, reason=None):
    response = requests.Response()
    response.status_code = status
    response.reason = reason or ("OK" if status < 400 else "Error")
    response.headers = CaseInsensitiveDict(headers or {})
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers.setdefault("Content-Type", "application/json")
    else:
        response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    return response


@pytest.fixture
def make_response():
    """Factory for real requests.Response objects."""
    return _make_response


@pytest.fixture(autouse=True)
def no_keychain(monkeypatch):
    """Never touch the real OS keychain from tests."""
    monkeypatch.setattr("keychain.keyring.get_password", lambda service, account: None)
