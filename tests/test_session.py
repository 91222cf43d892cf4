from __future__ import annotations

import asyncio

import pytest
from telethon import errors

from spamguard import client as client_module
from spamguard import get_session
from spamguard.core.config import TelegramSettings
from spamguard.core.models import ActingIdentity


class DummyMe:
    def __init__(self) -> None:
        self.id = 4242
        self.first_name = "Mod"
        self.last_name = "Account"
        self.username = "modaccount"


class DummyQrLogin:
    def __init__(self, error: "Exception | None" = None) -> None:
        self.url = "tg://login?token=abc"
        self._error = error
        self.timeouts: list[int] = []

    async def wait(self, timeout=None):
        self.timeouts.append(timeout)
        if self._error is not None:
            raise self._error
        return DummyMe()


class DummyTelegramClient:
    def __init__(self, authorized: bool = False, qr: "DummyQrLogin | None" = None, needs_password: bool = False) -> None:
        self._authorized = authorized
        self._qr = qr or DummyQrLogin()
        self._needs_password = needs_password
        self.code_requests: list[str] = []
        self.sign_ins: list[dict] = []

    async def is_user_authorized(self) -> bool:
        return self._authorized

    async def get_me(self):
        return DummyMe()

    async def qr_login(self):
        return self._qr

    async def send_code_request(self, phone):
        self.code_requests.append(phone)

    async def sign_in(self, **kwargs):
        self.sign_ins.append(kwargs)
        if "code" in kwargs and self._needs_password:
            raise errors.SessionPasswordNeededError(request=None)


def test_authorized_session_returns_acting_identity(monkeypatch) -> None:
    def fail_prompt(*_args):
        raise AssertionError("no login prompt expected")

    monkeypatch.setattr("builtins.input", fail_prompt)
    client = DummyTelegramClient(authorized=True)

    identity = asyncio.run(get_session.authorize(client, TelegramSettings(api_id=1, api_hash="h")))

    assert identity == ActingIdentity(user_id=4242, display_name="Mod Account")
    assert client.sign_ins == []


def test_qr_login_uses_configured_timeout(monkeypatch) -> None:
    printed: list[str] = []
    monkeypatch.setattr(get_session, "_print_qr", printed.append)
    qr = DummyQrLogin()
    client = DummyTelegramClient(qr=qr)
    telegram = TelegramSettings(api_id=1, api_hash="h", login_method="qr", qr_timeout_seconds=30)

    identity = asyncio.run(get_session.authorize(client, telegram))

    assert printed == ["tg://login?token=abc"]
    assert qr.timeouts == [30]
    assert identity.user_id == 4242


def test_qr_login_timeout_is_reported(monkeypatch) -> None:
    monkeypatch.setattr(get_session, "_print_qr", lambda url: None)
    client = DummyTelegramClient(qr=DummyQrLogin(error=asyncio.TimeoutError()))
    telegram = TelegramSettings(api_id=1, api_hash="h", login_method="qr", qr_timeout_seconds=5)

    with pytest.raises(RuntimeError, match="5s"):
        asyncio.run(get_session.authorize(client, telegram))


def test_phone_login_falls_back_to_two_factor_password(monkeypatch) -> None:
    monkeypatch.setattr("builtins.input", lambda _prompt: "12345")
    client = DummyTelegramClient(needs_password=True)
    telegram = TelegramSettings(
        api_id=1,
        api_hash="h",
        login_method="phone",
        phone="+15550001111",
        two_factor_password="hunter2",
    )

    identity = asyncio.run(get_session.authorize(client, telegram))

    assert client.code_requests == ["+15550001111"]
    assert client.sign_ins == [{"phone": "+15550001111", "code": "12345"}, {"password": "hunter2"}]
    assert identity.display_name == "Mod Account"


def test_build_client_requires_credentials() -> None:
    with pytest.raises(RuntimeError, match="API_ID or API_HASH"):
        client_module.build_client(TelegramSettings())


def test_build_client_uses_session_settings(monkeypatch) -> None:
    created: list[tuple] = []

    class RecordingClient:
        def __init__(self, session, api_id, api_hash) -> None:
            created.append((session, api_id, api_hash))

    monkeypatch.setattr(client_module, "TelegramClient", RecordingClient)
    client_module.build_client(TelegramSettings(api_id=12345, api_hash="abc", session_name="moderator"))

    assert created == [("moderator", 12345, "abc")]
