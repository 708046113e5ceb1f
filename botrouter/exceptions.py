"""
Custom exceptions for the command router.
"""


class BotRouterError(Exception):
    """Base exception for the command router."""
    pass


class DuplicateCommandError(BotRouterError):
    """Raised when a command (or its help text) is already registered."""

    def __init__(self, command: str, message: str = None):
        self.command = command
        super().__init__(message or f"Command {command} is already registered")


class StorageError(BotRouterError):
    """Raised when the key-value store cannot be read or written."""
    pass


class SettingsStoreError(BotRouterError):
    """Raised when group settings cannot be written to the store."""
    pass


class ChatClientError(BotRouterError):
    """Raised when a call to the chat platform fails."""
    pass


class PermissionLookupError(BotRouterError):
    """Raised when a member or role cannot be resolved for a permission check."""
    pass
