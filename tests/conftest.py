import pytest

from botrouter.bot.chat_client import ChatClient, InboundMessage, Member, Role
from botrouter.bot.handlers import CommandRouter
from botrouter.database.database_manager import DatabaseManager
from botrouter.exceptions import ChatClientError

BOT_ID = "999"
GROUP_ID = "-100123"
CHANNEL_ID = "-100123"


class FakeChatClient(ChatClient):
    """In-memory chat client recording sent messages and counting lookups."""

    def __init__(self):
        self.sent = []
        self.cached_members = {}
        self.remote_members = {}
        self.cached_roles = {}
        self.remote_roles = {}
        self.member_fetches = 0
        self.role_fetches = 0

    @property
    def user_id(self):
        return BOT_ID

    def send_message(self, channel_id, text):
        self.sent.append((channel_id, text))

    def texts(self):
        return [text for _, text in self.sent]

    def state_member(self, group_id, user_id):
        return self.cached_members.get((group_id, user_id))

    def fetch_member(self, group_id, user_id):
        self.member_fetches += 1
        try:
            return self.remote_members[(group_id, user_id)]
        except KeyError:
            raise ChatClientError(f"Unknown member {user_id}")

    def state_role(self, group_id, role_id):
        return self.cached_roles.get((group_id, role_id))

    def fetch_role(self, group_id, role_id):
        self.role_fetches += 1
        try:
            return self.remote_roles[(group_id, role_id)]
        except KeyError:
            raise ChatClientError(f"Unknown role {role_id}")

    def add_member(self, user_id, roles, group_id=GROUP_ID, cached=True):
        target = self.cached_members if cached else self.remote_members
        target[(group_id, user_id)] = Member(user_id=user_id, roles=list(roles))

    def add_role(self, role_id, permissions, group_id=GROUP_ID, cached=True):
        target = self.cached_roles if cached else self.remote_roles
        target[(group_id, role_id)] = Role(role_id=role_id, permissions=permissions)


def make_message(content, author_id="42", group_id=GROUP_ID, channel_id=CHANNEL_ID):
    return InboundMessage(author_id=author_id, channel_id=channel_id, group_id=group_id, content=content)


@pytest.fixture
def client():
    return FakeChatClient()


@pytest.fixture
def db(tmp_path):
    return DatabaseManager(str(tmp_path / "settings" / "router.db"))


@pytest.fixture
def router(db):
    return CommandRouter.from_database(db)
