import logging
import time

import telebot
from telebot.apihelper import ApiException

from botrouter.bot.chat_client import ChatClient, InboundMessage, Member, Role
from botrouter.bot_auth import permissions
from botrouter.config.config import get_settings
from botrouter.exceptions import ChatClientError
from botrouter.utils.cache import TTLCache

logger = logging.getLogger(__name__)

# Telegram has no role objects; a member's status acts as its single role.
STATUS_PERMISSIONS = {
    "creator": permissions.ALL_PERMISSIONS,
    "administrator": permissions.ADMINISTRATOR,
    "restricted": 0,
    "left": 0,
    "kicked": 0,
}

# Telegram chat permission flags mapped onto permission bits
CHAT_PERMISSION_BITS = {
    "can_send_messages": permissions.SEND_MESSAGES,
    "can_send_other_messages": permissions.ATTACH_FILES,
    "can_add_web_page_previews": permissions.EMBED_LINKS,
    "can_change_info": permissions.MANAGE_GUILD,
    "can_invite_users": permissions.CREATE_INSTANT_INVITE,
    "can_pin_messages": permissions.MANAGE_MESSAGES,
}


def chat_permissions_to_bits(chat_permissions) -> int:
    """Translate a telebot ChatPermissions object into permission bits."""
    if chat_permissions is None:
        return permissions.VIEW_CHANNEL | permissions.SEND_MESSAGES
    bits = permissions.VIEW_CHANNEL
    for flag, bit in CHAT_PERMISSION_BITS.items():
        if getattr(chat_permissions, flag, False):
            bits |= bit
    return bits


class TelegramBot(ChatClient):
    """Chat client backed by a telebot session, with member and role caches."""

    def __init__(self, settings=None, bot=None, clock=time.monotonic):
        self.settings = settings or get_settings()
        self.bot = bot or telebot.TeleBot(self.settings.bot_token, num_threads=self.settings.num_threads)
        me = self.bot.get_me()
        self.username = me.username
        self._user_id = str(me.id)

        # Statuses change without an update reaching non-admin bots, so entries expire.
        self.members = TTLCache(self.settings.cache_size_limit, self.settings.member_cache_ttl_seconds, clock)
        self.roles = TTLCache(self.settings.cache_size_limit, self.settings.member_cache_ttl_seconds, clock)
        self.router = None

        logger.info(f"Telegram Bot initialized as @{self.username}")

    @property
    def user_id(self) -> str:
        return self._user_id

    def attach_router(self, router):
        """Send every text message through `router`."""
        self.router = router
        self._register_basic_handlers()
        logger.info("✅ Message routing initialized")

    def _register_basic_handlers(self):
        @self.bot.message_handler(func=lambda _: True, content_types=['text'])
        def handle_all_messages(message):
            self.on_message(message)

        @self.bot.chat_member_handler()
        def handle_member_update(update):
            self.on_member_update(update)

    def on_message(self, message):
        """Entry point for telebot updates."""
        inbound = to_inbound_message(message)
        try:
            self.router.handle_message(self, inbound)
        except Exception as e:
            logger.error(f"Error handling message: {e}", exc_info=True)
            try:
                self.send_message(inbound.channel_id, "⚠️ Sorry, something went wrong processing that request.")
            except ChatClientError:
                logger.error("Failed to send error reply.")

    def on_member_update(self, update):
        """Invalidate the cached member when its status changes."""
        self.forget_member(str(update.chat.id), str(update.new_chat_member.user.id))

    # --- Messaging ---
    def send_message(self, channel_id, text):
        try:
            self.bot.send_message(channel_id, text)
        except ApiException as e:
            logger.warning(f"Send error: {e}")
            raise ChatClientError(f"Failed to send message to {channel_id}") from e

    # --- Members and roles ---
    def state_member(self, group_id, user_id):
        return self.members.get((group_id, user_id))

    def fetch_member(self, group_id, user_id):
        try:
            chat_member = self.bot.get_chat_member(group_id, user_id)
        except ApiException as e:
            raise ChatClientError(f"Failed to fetch member {user_id} in {group_id}") from e

        member = Member(user_id=user_id, roles=[chat_member.status])
        self.members.put((group_id, user_id), member)
        return member

    def state_role(self, group_id, role_id):
        return self.roles.get((group_id, role_id))

    def fetch_role(self, group_id, role_id):
        if role_id in STATUS_PERMISSIONS:
            role = Role(role_id=role_id, permissions=STATUS_PERMISSIONS[role_id])
        else:
            # Plain members get the chat's default permissions
            try:
                chat = self.bot.get_chat(group_id)
            except ApiException as e:
                raise ChatClientError(f"Failed to fetch permissions of {group_id}") from e
            role = Role(role_id=role_id, permissions=chat_permissions_to_bits(getattr(chat, "permissions", None)))

        self.roles.put((group_id, role_id), role)
        return role

    def forget_member(self, group_id, user_id):
        """Drop a cached member so the next lookup goes to Telegram."""
        self.members.pop((group_id, user_id))

    # --- Lifecycle ---
    def start_polling(self):
        logger.info("Starting polling...")
        self.bot.infinity_polling(allowed_updates=["message", "chat_member"])

    def stop(self):
        logger.info("Stopping...")
        self.bot.stop_polling()
        logger.info("Stopped.")


def to_inbound_message(message) -> InboundMessage:
    """Convert a telebot Message into an InboundMessage."""
    return InboundMessage(
        author_id=str(message.from_user.id),
        channel_id=str(message.chat.id),
        group_id=str(message.chat.id),
        content=message.text or "",
    )
