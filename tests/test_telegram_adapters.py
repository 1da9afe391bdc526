from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from telethon import functions

from adapters.telegram_messenger import TelethonMessenger
from adapters.telegram_moderation import TelethonModerator
from adapters.telegram_permissions import TelethonPermissionOracle
from core.config import MessagingConfig
from core.errors import BotNotAdminError

GROUP = -1001234567890
OTHER_GROUP = -1009876543210
BASIC_GROUP = -4242
PRIVATE_CHAT = 555


class DummyPermissions:
    def __init__(self, *, is_admin: bool = False, is_creator: bool = False, has_left: bool = False) -> None:
        self.is_admin = is_admin
        self.is_creator = is_creator
        self.has_left = has_left
        self.is_banned = False


class DummyUser:
    def __init__(self, user_id: int) -> None:
        self.id = user_id


class DummyClient:
    def __init__(self, permissions: "dict[tuple[int, int], DummyPermissions] | None" = None) -> None:
        self.sent: list[tuple[int, str]] = []
        self.edited: list[tuple[int, int, str]] = []
        self.deleted: list[tuple[int, list[int]]] = []
        self.permission_edits: list[tuple[int, int, object, dict]] = []
        self.pinned: list[tuple[int, int, bool]] = []
        self.unpinned: list[tuple[int, object]] = []
        self.requests: list[object] = []
        self.permissions = permissions or {}
        self.permission_lookups = 0
        self.send_delay = 0.0

    async def __call__(self, request):
        self.requests.append(request)

    async def send_message(self, chat_id, text, parse_mode=None):
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        self.sent.append((chat_id, text))
        return len(self.sent)

    async def edit_message(self, chat_id, message_id, text, parse_mode=None):
        self.edited.append((chat_id, message_id, text))

    async def delete_messages(self, chat_id, message_ids):
        self.deleted.append((chat_id, message_ids))

    async def edit_permissions(self, chat_id, user_id, until_date=None, **rights):
        self.permission_edits.append((chat_id, user_id, until_date, rights))

    async def pin_message(self, chat_id, message_id, notify=False):
        self.pinned.append((chat_id, message_id, notify))

    async def unpin_message(self, chat_id, message_id=None):
        self.unpinned.append((chat_id, message_id))

    async def get_me(self):
        return DummyUser(999)

    async def get_permissions(self, chat_id, user_id):
        self.permission_lookups += 1
        if chat_id > 0:
            raise ValueError("You must pass either a channel or a chat")
        return self.permissions.get((chat_id, user_id), DummyPermissions())


def test_messenger_sends_text_and_denial_notice() -> None:
    client = DummyClient()
    messenger = TelethonMessenger(client, MessagingConfig(denied_notice="Admins only."))

    async def _scenario() -> None:
        await messenger.send_text(GROUP, "pong")
        await messenger.send_denied_notice(GROUP)
        await messenger.edit_text(GROUP, 10, "edited")
        await messenger.delete_messages(GROUP, (10, 11))

    asyncio.run(_scenario())

    assert client.sent == [(GROUP, "pong"), (GROUP, "Admins only.")]
    assert client.edited == [(GROUP, 10, "edited")]
    assert client.deleted == [(GROUP, [10, 11])]


def test_messenger_calls_are_bounded_by_timeout() -> None:
    client = DummyClient()
    client.send_delay = 1.0
    messenger = TelethonMessenger(client, MessagingConfig(request_timeout_seconds=0.01))

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(messenger.send_text(GROUP, "never"))


def test_is_admin_accepts_admins_and_creators() -> None:
    client = DummyClient(
        {
            (GROUP, 10): DummyPermissions(is_admin=True),
            (GROUP, 11): DummyPermissions(is_creator=True),
        }
    )
    oracle = TelethonPermissionOracle(client, MessagingConfig())

    assert asyncio.run(oracle.is_admin(GROUP, 10)) is True
    assert asyncio.run(oracle.is_admin(GROUP, 11)) is True
    assert asyncio.run(oracle.is_admin(GROUP, 12)) is False


def test_private_chats_have_no_admins() -> None:
    client = DummyClient()
    oracle = TelethonPermissionOracle(client, MessagingConfig())

    assert asyncio.run(oracle.is_admin(PRIVATE_CHAT, PRIVATE_CHAT)) is False
    assert client.permission_lookups == 0


def test_chat_membership_requires_bot_admin() -> None:
    client = DummyClient(
        {
            (GROUP, 999): DummyPermissions(is_admin=True),
            (GROUP, 5): DummyPermissions(),
            (GROUP, 6): DummyPermissions(has_left=True),
        }
    )
    oracle = TelethonPermissionOracle(client, MessagingConfig())

    assert asyncio.run(oracle.is_bot_admin(GROUP)) is True
    assert asyncio.run(oracle.is_chat_member(GROUP, 5)) is True
    assert asyncio.run(oracle.is_chat_member(GROUP, 6)) is False
    assert asyncio.run(oracle.is_member_of_any([GROUP], 5)) is True

    with pytest.raises(BotNotAdminError):
        asyncio.run(oracle.is_chat_member(OTHER_GROUP, 5))


def test_bot_admin_everywhere_needs_every_chat() -> None:
    client = DummyClient(
        {
            (GROUP, 999): DummyPermissions(is_admin=True),
            (OTHER_GROUP, 999): DummyPermissions(is_creator=True),
        }
    )
    oracle = TelethonPermissionOracle(client, MessagingConfig())

    assert asyncio.run(oracle.is_bot_admin_everywhere([GROUP, OTHER_GROUP])) is True
    assert asyncio.run(oracle.is_bot_admin_everywhere([GROUP, BASIC_GROUP])) is False
    assert asyncio.run(oracle.is_bot_admin_everywhere([])) is True


def test_restrict_member_permanently_and_for_a_duration() -> None:
    client = DummyClient()
    moderator = TelethonModerator(client, MessagingConfig())

    before = datetime.now(timezone.utc)
    asyncio.run(moderator.restrict_member(GROUP, 5))
    asyncio.run(moderator.restrict_member(GROUP, 6, timedelta(minutes=10)))

    (chat_id, user_id, until, rights), (_, timed_user, timed_until, _) = client.permission_edits
    assert (chat_id, user_id, until) == (GROUP, 5, None)
    assert rights["send_messages"] is False
    assert not any(rights.values())
    assert "view_messages" not in rights
    assert timed_user == 6
    assert before + timedelta(minutes=10) <= timed_until <= datetime.now(timezone.utc) + timedelta(minutes=10)


def test_unrestrict_member_restores_every_right() -> None:
    client = DummyClient()
    moderator = TelethonModerator(client, MessagingConfig())

    asyncio.run(moderator.unrestrict_member(GROUP, 5))

    ((chat_id, user_id, until, rights),) = client.permission_edits
    assert (chat_id, user_id, until) == (GROUP, 5, None)
    assert rights and all(rights.values())


def test_pin_and_unpin_messages() -> None:
    client = DummyClient()
    moderator = TelethonModerator(client, MessagingConfig())

    async def _scenario() -> None:
        await moderator.pin_message(GROUP, 42)
        await moderator.pin_message(GROUP, 43, notify=True)
        await moderator.unpin_message(GROUP, 42)
        await moderator.unpin_message(GROUP)

    asyncio.run(_scenario())

    assert client.pinned == [(GROUP, 42, False), (GROUP, 43, True)]
    assert client.unpinned == [(GROUP, 42), (GROUP, None)]


def test_title_request_depends_on_chat_kind() -> None:
    client = DummyClient()
    moderator = TelethonModerator(client, MessagingConfig())

    asyncio.run(moderator.set_chat_title(GROUP, "Supergroup"))
    asyncio.run(moderator.set_chat_title(BASIC_GROUP, "Basic group"))
    asyncio.run(moderator.set_chat_description(GROUP, "About us"))

    channel_title, chat_title, about = client.requests
    assert isinstance(channel_title, functions.channels.EditTitleRequest)
    assert channel_title.title == "Supergroup"
    assert isinstance(chat_title, functions.messages.EditChatTitleRequest)
    assert chat_title.chat_id == 4242
    assert isinstance(about, functions.messages.EditChatAboutRequest)
    assert about.about == "About us"


def test_moderation_calls_are_bounded_by_timeout() -> None:
    class SlowClient(DummyClient):
        async def pin_message(self, chat_id, message_id, notify=False):
            await asyncio.sleep(1.0)

    moderator = TelethonModerator(SlowClient(), MessagingConfig(request_timeout_seconds=0.01))

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(moderator.pin_message(GROUP, 1))
