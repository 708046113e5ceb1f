"""
Command routing and built-in command handlers.
"""

from .command_registry import CommandRegistry
from .command_router import CommandRouter

__all__ = ['CommandRegistry', 'CommandRouter']
