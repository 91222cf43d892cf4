"""Account login for the moderator (QR code or phone code, with 2FA).

Whoever logs in here is the account whose admin rights are checked before
every deletion, so ``authorize`` returns that identity for the caller to
log and pass to the moderation adapter.
"""

from __future__ import annotations

import asyncio
from getpass import getpass
import logging

import qrcode
from telethon import TelegramClient, errors

from spamguard.adapters.telegram_mapper import display_name
from spamguard.core.config import TelegramSettings
from spamguard.core.models import ActingIdentity

LOGGER = logging.getLogger(__name__)


def _print_qr(url: str) -> None:
    qr = qrcode.QRCode(border=1)
    qr.add_data(url)
    qr.make(fit=True)
    qr.print_ascii(invert=True)


def _two_factor_password(telegram: TelegramSettings) -> str:
    return telegram.two_factor_password or getpass("2FA password: ")


async def _login_with_qr(client: TelegramClient, telegram: TelegramSettings) -> None:
    qr = await client.qr_login()
    print("\nScan this QR code with Telegram (Settings > Devices > Link Desktop Device):\n")
    _print_qr(qr.url)
    try:
        await qr.wait(timeout=telegram.qr_timeout_seconds)
    except asyncio.TimeoutError:
        raise RuntimeError(f"QR code was not scanned within {telegram.qr_timeout_seconds}s") from None


async def _login_with_phone(client: TelegramClient, telegram: TelegramSettings) -> None:
    phone = telegram.phone or input("Phone number (international format): ").strip()
    await client.send_code_request(phone)
    code = input("Login code: ").strip()
    await client.sign_in(phone=phone, code=code)


def _choose_login_method(telegram: TelegramSettings) -> str:
    if telegram.login_method:
        return telegram.login_method
    while True:
        print("")
        print("Login methods:")
        print("[1] QR code")
        print("[2] Phone code")
        print("[3] Exit")
        choice = input("spamguard > ").strip()
        if choice == "1":
            return "qr"
        if choice == "2":
            return "phone"
        if choice == "3":
            raise SystemExit(0)
        print("Invalid option. Please choose 1, 2, or 3.")


async def authorize(client: TelegramClient, telegram: TelegramSettings) -> ActingIdentity:
    """Log in unless the session is already authorized; return the acting account."""

    if not await client.is_user_authorized():
        login = _login_with_phone if _choose_login_method(telegram) == "phone" else _login_with_qr
        try:
            await login(client, telegram)
        except errors.SessionPasswordNeededError:
            await client.sign_in(password=_two_factor_password(telegram))

    me = await client.get_me()
    identity = ActingIdentity(user_id=me.id, display_name=display_name(me))
    LOGGER.info("Acting as %s (id %s); admin rights are checked for this account", identity.display_name, identity.user_id)
    return identity
