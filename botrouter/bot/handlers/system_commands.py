"""
Built-in command handlers.
"""
import logging

from botrouter.bot_auth.access_control import require_permission
from botrouter.bot_auth.permissions import ADMINISTRATOR
from botrouter.exceptions import SettingsStoreError

logger = logging.getLogger(__name__)


class SystemCommands:
    """Handlers for built-in commands."""

    def __init__(self, router):
        self.router = router

    def handle_help(self, client, message) -> None:
        """List every registered command with its help text."""
        help_message = "Here's a list of available commands:\n"
        for command, text in self.router.command_registry.get_help_text().items():
            help_message += f"* {command}: {text}\n"
        client.send_message(message.channel_id, help_message)

    @require_permission(ADMINISTRATOR)
    def handle_set_prefix(self, client, message) -> None:
        """
        Set the group's trigger prefix to the message arguments.
        Not registered by default; the application decides the command name.
        """
        try:
            old_prefix, settings = self.router.set_prefix(message.group_id, message.content)
        except SettingsStoreError as e:
            logger.error(f"Prefix change failed in group {message.group_id}: {e}")
            client.send_message(message.channel_id, "⚠️ Sorry, the new prefix could not be saved.")
            return

        if old_prefix != settings.prefix:
            client.send_message(message.channel_id, "Prefix Updated")
