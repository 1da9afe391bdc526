"""Session authorization for telebind.

Bot accounts sign in with BOT_TOKEN. User accounts (a bot driven by a
personal session) log in interactively by QR code or phone code; the
resulting .session file is reused on later runs.
"""

from __future__ import annotations

import asyncio
import logging
import os
from getpass import getpass
from typing import Optional

import qrcode
from dotenv import load_dotenv
from telethon import TelegramClient, errors

from client import bot_token, build_client

LOGGER = logging.getLogger(__name__)

LOGIN_METHODS = {"1": "qr", "2": "phone"}


def _print_qr(url: str) -> None:
    qr = qrcode.QRCode(border=1)
    qr.add_data(url)
    qr.make(fit=True)
    qr.print_ascii(invert=True)


def _two_factor_password() -> str:
    return os.getenv("2FA") or getpass("2FA password: ")


async def _login_with_qr(client: TelegramClient) -> None:
    login = await client.qr_login()
    _print_qr(login.url)
    await login.wait(timeout=120)


async def _login_with_phone(client: TelegramClient) -> None:
    phone = os.getenv("PHONE") or input("Phone number (international format): ").strip()
    await client.send_code_request(phone)
    code = input("Login code: ").strip()
    await client.sign_in(phone=phone, code=code)


def _choose_login_method() -> str:
    method = (os.getenv("LOGIN_METHOD") or "").strip().lower()
    if method in LOGIN_METHODS.values():
        return method
    while True:
        print("")
        print("Login methods:")
        print("[1] QR code")
        print("[2] Phone code")
        print("[3] Exit")
        choice = input("telebind > ").strip()
        if choice in LOGIN_METHODS:
            return LOGIN_METHODS[choice]
        if choice == "3":
            raise SystemExit(0)
        print("Invalid option. Please choose 1, 2, or 3.")


async def authorize(client: TelegramClient, token: Optional[str] = None) -> None:
    """Make sure ``client`` is signed in, as a bot when ``token`` is given."""

    if await client.is_user_authorized():
        return

    if token:
        await client.sign_in(bot_token=token)
        return

    login = _login_with_phone if _choose_login_method() == "phone" else _login_with_qr
    try:
        await login(client)
    except errors.SessionPasswordNeededError:
        await client.sign_in(password=_two_factor_password())


async def main() -> None:
    load_dotenv()
    client = build_client()
    await client.connect()
    await authorize(client, bot_token())

    me = await client.get_me()
    LOGGER.info("Logged in as: %s", me.username or me.first_name)

    await client.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
