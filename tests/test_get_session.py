from __future__ import annotations

import asyncio

import pytest

from get_session import authorize, login_method


class DummyClient:
    def __init__(self, authorized: bool = False) -> None:
        self._authorized = authorized
        self.start_kwargs: "dict | None" = None

    async def is_user_authorized(self) -> bool:
        return self._authorized

    async def start(self, **kwargs) -> "DummyClient":
        self.start_kwargs = kwargs
        return self


def test_login_method_defaults_to_phone(monkeypatch) -> None:
    monkeypatch.delenv("LOGIN_METHOD", raising=False)
    assert login_method() == "phone"
    monkeypatch.setenv("LOGIN_METHOD", " QR ")
    assert login_method() == "qr"


def test_unknown_login_method_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("LOGIN_METHOD", "sms")
    with pytest.raises(ValueError):
        login_method()


def test_authorized_session_is_left_alone(monkeypatch) -> None:
    monkeypatch.setenv("LOGIN_METHOD", "sms")
    client = DummyClient(authorized=True)
    asyncio.run(authorize(client))
    assert client.start_kwargs is None


def test_phone_login_uses_env_phone_and_password(monkeypatch) -> None:
    monkeypatch.setenv("LOGIN_METHOD", "phone")
    monkeypatch.setenv("PHONE", "+10000000000")
    monkeypatch.setenv("2FA", "secret")
    client = DummyClient()

    asyncio.run(authorize(client))

    assert client.start_kwargs["phone"]() == "+10000000000"
    assert client.start_kwargs["password"]() == "secret"
