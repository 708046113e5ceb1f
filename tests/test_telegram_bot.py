"""Tests for the telebot-backed chat client."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from telebot.apihelper import ApiTelegramException

from botrouter.bot.telegram_bot import TelegramBot, chat_permissions_to_bits, to_inbound_message
from botrouter.bot_auth import permissions
from botrouter.bot_auth.access_control import member_has_permission
from botrouter.exceptions import ChatClientError, PermissionLookupError


def _api_error(method="getChatMember"):
    return ApiTelegramException(method, None, {"error_code": 400, "description": "Bad Request: user not found"})


def _telegram_message(text, user_id=42, chat_id=-100123):
    return SimpleNamespace(text=text, from_user=SimpleNamespace(id=user_id), chat=SimpleNamespace(id=chat_id))


@pytest.fixture
def telebot_mock():
    bot = MagicMock()
    bot.get_me.return_value = SimpleNamespace(id=999, username="router_bot")
    return bot


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def telegram(telebot_mock, clock):
    settings = SimpleNamespace(bot_token="token", num_threads=1, member_cache_ttl_seconds=60, cache_size_limit=3)
    return TelegramBot(settings=settings, bot=telebot_mock, clock=clock)


def test_identity_comes_from_get_me(telegram) -> None:
    assert telegram.user_id == "999"
    assert telegram.username == "router_bot"


def test_to_inbound_message() -> None:
    inbound = to_inbound_message(_telegram_message("!help"))
    assert inbound.author_id == "42"
    assert inbound.channel_id == inbound.group_id == "-100123"
    assert inbound.content == "!help"

    assert to_inbound_message(_telegram_message(None)).content == ""


def test_on_message_routes_to_router(telegram) -> None:
    telegram.router = MagicMock()

    telegram.on_message(_telegram_message("!ping"))

    client, inbound = telegram.router.handle_message.call_args.args
    assert client is telegram
    assert inbound.content == "!ping"


def test_on_message_reports_handler_errors(telegram, telebot_mock) -> None:
    telegram.router = MagicMock()
    telegram.router.handle_message.side_effect = RuntimeError("boom")

    telegram.on_message(_telegram_message("!ping"))

    telebot_mock.send_message.assert_called_once()
    assert "something went wrong" in telebot_mock.send_message.call_args.args[1]


def test_send_message_failure_raises(telegram, telebot_mock) -> None:
    telebot_mock.send_message.side_effect = _api_error("sendMessage")

    with pytest.raises(ChatClientError):
        telegram.send_message("-100123", "hi")


def test_fetch_member_caches_status_role(telegram, telebot_mock) -> None:
    telebot_mock.get_chat_member.return_value = SimpleNamespace(status="administrator")

    assert telegram.state_member("-1", "42") is None
    member = telegram.fetch_member("-1", "42")

    assert member.roles == ["administrator"]
    assert telegram.state_member("-1", "42") == member


def test_fetch_member_failure(telegram, telebot_mock) -> None:
    telebot_mock.get_chat_member.side_effect = _api_error()

    with pytest.raises(ChatClientError):
        telegram.fetch_member("-1", "42")


def test_status_roles(telegram, telebot_mock) -> None:
    assert telegram.fetch_role("-1", "creator").permissions == permissions.ALL_PERMISSIONS
    assert telegram.fetch_role("-1", "administrator").permissions == permissions.ADMINISTRATOR
    assert telegram.fetch_role("-1", "kicked").permissions == 0
    telebot_mock.get_chat.assert_not_called()
    assert telegram.state_role("-1", "creator").permissions == permissions.ALL_PERMISSIONS


def test_member_role_uses_chat_permissions(telegram, telebot_mock) -> None:
    telebot_mock.get_chat.return_value = SimpleNamespace(
        permissions=SimpleNamespace(can_send_messages=True, can_pin_messages=True, can_change_info=False)
    )

    role = telegram.fetch_role("-1", "member")

    assert role.permissions & permissions.SEND_MESSAGES
    assert role.permissions & permissions.MANAGE_MESSAGES
    assert not role.permissions & permissions.MANAGE_GUILD
    assert not role.permissions & permissions.ADMINISTRATOR


def test_member_role_fetch_failure(telegram, telebot_mock) -> None:
    telebot_mock.get_chat.side_effect = _api_error("getChat")

    with pytest.raises(ChatClientError):
        telegram.fetch_role("-1", "member")


def test_chat_permissions_default() -> None:
    assert chat_permissions_to_bits(None) == permissions.VIEW_CHANNEL | permissions.SEND_MESSAGES


def test_admin_check_through_telegram(telegram, telebot_mock) -> None:
    telebot_mock.get_chat_member.return_value = SimpleNamespace(status="creator")

    assert member_has_permission(telegram, "-1", "42", permissions.ADMINISTRATOR) is True
    assert member_has_permission(telegram, "-1", "42", permissions.ADMINISTRATOR) is True
    telebot_mock.get_chat_member.assert_called_once()


def test_admin_check_error_through_telegram(telegram, telebot_mock) -> None:
    telebot_mock.get_chat_member.side_effect = _api_error()

    with pytest.raises(PermissionLookupError):
        member_has_permission(telegram, "-1", "42", permissions.ADMINISTRATOR)


def test_member_update_invalidates_cache(telegram, telebot_mock) -> None:
    telebot_mock.get_chat_member.return_value = SimpleNamespace(status="member")
    telegram.fetch_member("-1", "42")

    update = SimpleNamespace(chat=SimpleNamespace(id=-1), new_chat_member=SimpleNamespace(user=SimpleNamespace(id=42)))
    telegram.on_member_update(update)

    assert telegram.state_member("-1", "42") is None


def test_attach_router_registers_handlers(telegram, telebot_mock) -> None:
    router = MagicMock()
    telegram.attach_router(router)

    assert telegram.router is router
    assert telebot_mock.message_handler.call_args.kwargs["content_types"] == ["text"]
    telebot_mock.chat_member_handler.assert_called_once_with()


def test_demotion_is_seen_after_cache_expiry(telegram, telebot_mock, clock) -> None:
    telebot_mock.get_chat_member.side_effect = [
        SimpleNamespace(status="administrator"),
        SimpleNamespace(status="member"),
    ]
    telebot_mock.get_chat.return_value = SimpleNamespace(permissions=SimpleNamespace(can_send_messages=True))

    assert member_has_permission(telegram, "-1", "42", permissions.ADMINISTRATOR) is True

    clock.now = 30
    assert member_has_permission(telegram, "-1", "42", permissions.ADMINISTRATOR) is True
    assert telebot_mock.get_chat_member.call_count == 1

    clock.now = 61
    assert member_has_permission(telegram, "-1", "42", permissions.ADMINISTRATOR) is False
    assert telebot_mock.get_chat_member.call_count == 2


def test_chat_default_permissions_refresh_after_expiry(telegram, telebot_mock, clock) -> None:
    telebot_mock.get_chat.side_effect = [
        SimpleNamespace(permissions=SimpleNamespace(can_pin_messages=True)),
        SimpleNamespace(permissions=SimpleNamespace(can_pin_messages=False)),
    ]

    assert telegram.fetch_role("-1", "member").permissions & permissions.MANAGE_MESSAGES
    assert telegram.state_role("-1", "member") is not None

    clock.now = 61
    assert telegram.state_role("-1", "member") is None
    assert not telegram.fetch_role("-1", "member").permissions & permissions.MANAGE_MESSAGES


def test_member_cache_is_bounded(telegram, telebot_mock) -> None:
    telebot_mock.get_chat_member.return_value = SimpleNamespace(status="member")

    for user_id in ("1", "2", "3", "4"):
        telegram.fetch_member("-1", user_id)

    assert len(telegram.members) == 3
    assert telegram.state_member("-1", "1") is None
    assert telegram.state_member("-1", "4") is not None
