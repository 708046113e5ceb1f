from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class InboundMessage:
    """A text message delivered by the chat platform. `content` is rewritten during dispatch."""

    author_id: str
    channel_id: str
    group_id: str
    content: str


@dataclass
class Member:
    user_id: str
    roles: List[str] = field(default_factory=list)


@dataclass
class Role:
    role_id: str
    permissions: int = 0


class ChatClient(ABC):
    """
    Abstract base class for the chat platform session handed to command handlers.
    Transport failures are raised as ChatClientError.
    """

    @property
    @abstractmethod
    def user_id(self) -> str:
        """ID of the bot's own account."""
        pass

    @abstractmethod
    def send_message(self, channel_id: str, text: str) -> None:
        pass

    @abstractmethod
    def state_member(self, group_id: str, user_id: str) -> Optional[Member]:
        """Return the locally cached member, or None on a cache miss."""
        pass

    @abstractmethod
    def fetch_member(self, group_id: str, user_id: str) -> Member:
        """Fetch a member from the platform."""
        pass

    @abstractmethod
    def state_role(self, group_id: str, role_id: str) -> Optional[Role]:
        """Return the locally cached role, or None on a cache miss."""
        pass

    @abstractmethod
    def fetch_role(self, group_id: str, role_id: str) -> Role:
        """Fetch a role from the platform."""
        pass
