"""
Prefix-based command routing.
"""
import logging
from typing import Callable, Tuple

from botrouter.bot.chat_client import ChatClient, InboundMessage
from botrouter.database.database_manager import DatabaseManager
from botrouter.database.settings_store import GroupSettings, SettingsStore

from .command_registry import CommandRegistry
from .system_commands import SystemCommands

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "!"


class CommandRouter:
    """
    Routes chat messages to registered command handlers.
    Each group may override the trigger prefix; others use `default_prefix`.
    """

    def __init__(self, settings_store: SettingsStore, default_prefix: str = DEFAULT_PREFIX):
        self.settings_store = settings_store
        self.default_prefix = default_prefix
        self.command_registry = CommandRegistry()
        self.system_commands = SystemCommands(self)

        self.register_command("help", "This help text", self.system_commands.handle_help)

    @classmethod
    def from_database(cls, db: DatabaseManager, default_prefix: str = DEFAULT_PREFIX) -> "CommandRouter":
        """Build a router whose settings cache is loaded from `db`."""
        store = SettingsStore(db)
        store.load()
        return cls(store, default_prefix)

    def register_command(self, command: str, help_text: str, handler_func: Callable) -> None:
        """
        Add a command, its help text and handler to the router. "help" is reserved.

        Raises:
            DuplicateCommandError: if the command is already registered
        """
        self.command_registry.register(command, help_text, handler_func)

    def prefix_for(self, group_id: str) -> str:
        """Effective trigger prefix for a group."""
        settings = self.settings_store.get(group_id)
        if settings is not None:
            return settings.prefix
        return self.default_prefix

    def set_prefix(self, group_id: str, new_prefix: str) -> Tuple[str, GroupSettings]:
        """
        Persist a new prefix for a group.

        Returns:
            (previous effective prefix, new settings)
        """
        previous, settings = self.settings_store.set_prefix(group_id, new_prefix)
        old_prefix = previous.prefix if previous is not None else self.default_prefix
        return old_prefix, settings

    def help(self, client: ChatClient, message: InboundMessage) -> None:
        self.system_commands.handle_help(client, message)

    def handle_message(self, client: ChatClient, message: InboundMessage) -> None:
        """Find and run the command a message invokes, if any."""
        # Ignore all messages created by the bot
        if message.author_id == client.user_id:
            return

        prefix = self.prefix_for(message.group_id)

        # An empty prefix matches every message.
        if len(message.content) < len(prefix) or not message.content.startswith(prefix):
            return

        message.content = message.content[len(prefix):]
        args = message.content.split(" ")

        handler = self.command_registry.get_handler(args[0])
        if handler is not None:
            # Remove command from content, trim spaces
            message.content = message.content[len(args[0]):].strip()
            logger.debug(f"Calling handler for command: {args[0]}")
            handler(client, message)
            return

        if not args[0] and not prefix:
            client.send_message(message.channel_id, "Sub command needed. ")
        elif args[0]:
            logger.debug(f"Command '{args[0]}' not found in registry. User: {message.author_id}")
            client.send_message(message.channel_id, "Command not recognized")
        self.help(client, message)
