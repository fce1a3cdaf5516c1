"""Sign-in for the relaying account.

`telerelay login` signs in once and prints a StringSession to paste into
.env as STRING_SESSION, so the relay never prompts on later runs.
LOGIN_METHOD in .env picks "phone" (the default) or "qr".
"""

import logging
import os
from getpass import getpass

import qrcode
from telethon import TelegramClient, errors
from telethon.sessions import StringSession

from client import build_client

LOGGER = logging.getLogger(__name__)

LOGIN_METHODS = ("phone", "qr")
QR_TIMEOUT_SECONDS = 120


def login_method() -> str:
    method = (os.getenv("LOGIN_METHOD") or "phone").strip().lower()
    if method not in LOGIN_METHODS:
        raise ValueError(f"LOGIN_METHOD must be one of {', '.join(LOGIN_METHODS)}, got {method!r}")
    return method


def _phone() -> str:
    return os.getenv("PHONE") or input("Phone number: ").strip()


def _code() -> str:
    return input("Code from Telegram: ").strip()


def _password() -> str:
    return os.getenv("2FA") or getpass("2FA password (if enabled): ")


async def _sign_in_with_qr(client: TelegramClient) -> None:
    login = await client.qr_login()
    qr = qrcode.QRCode(border=1)
    qr.add_data(login.url)
    qr.print_ascii(invert=True)
    print(f"Scan within {QR_TIMEOUT_SECONDS}s: Settings > Devices > Link Desktop Device")
    try:
        await login.wait(timeout=QR_TIMEOUT_SECONDS)
    except errors.SessionPasswordNeededError:
        await client.sign_in(password=_password())


async def authorize(client: TelegramClient) -> None:
    """Sign the client in unless its session is already authorized."""

    if await client.is_user_authorized():
        return
    method = login_method()
    LOGGER.info("Signing in with %s login", method)
    if method == "qr":
        await _sign_in_with_qr(client)
    else:
        await client.start(phone=_phone, code_callback=_code, password=_password)


async def main() -> None:
    client = build_client()
    await client.connect()
    try:
        await authorize(client)
        me = await client.get_me()
        LOGGER.info("Logged in as %s", me.first_name)
        print("Session created. Put it in .env as STRING_SESSION:")
        print(f"STRING_SESSION={StringSession.save(client.session)}")
    finally:
        await client.disconnect()
