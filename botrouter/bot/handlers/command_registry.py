"""
Command registration and lookup.
"""
import logging
from typing import Callable, Dict, Optional

from botrouter.exceptions import DuplicateCommandError

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Maps command names to their handlers and help text."""

    def __init__(self):
        self.commands: Dict[str, Callable] = {}
        self.help_text: Dict[str, str] = {}

    def register(self, command: str, help_text: str, handler_func: Callable):
        """
        Register a new command with its help text and handler.

        Args:
            command: Command name without prefix
            help_text: One-line description shown by the help command
            handler_func: Callback function(client, message) to handle the command

        Raises:
            DuplicateCommandError: if the command or its help text is already registered
        """
        if command in self.commands:
            raise DuplicateCommandError(command)
        if command in self.help_text:
            raise DuplicateCommandError(command, f"Help for command {command} is already registered")

        self.commands[command] = handler_func
        self.help_text[command] = help_text
        logger.debug(f"Registered command {command}")

    def get_handler(self, command: str) -> Optional[Callable]:
        """Get handler for a command."""
        return self.commands.get(command)

    def has_command(self, command: str) -> bool:
        """Check if command is registered."""
        return command in self.commands

    def get_help_text(self) -> Dict[str, str]:
        """Get help text for all registered commands, in registration order."""
        return self.help_text.copy()
