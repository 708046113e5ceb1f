"""
Permission bits, laid out like Discord's permission integer.
Combine with | to check several capabilities at once.
"""

CREATE_INSTANT_INVITE = 1 << 0
KICK_MEMBERS = 1 << 1
BAN_MEMBERS = 1 << 2
ADMINISTRATOR = 1 << 3
MANAGE_CHANNELS = 1 << 4
MANAGE_GUILD = 1 << 5
ADD_REACTIONS = 1 << 6
VIEW_CHANNEL = 1 << 10
SEND_MESSAGES = 1 << 11
MANAGE_MESSAGES = 1 << 13
EMBED_LINKS = 1 << 14
ATTACH_FILES = 1 << 15
MENTION_EVERYONE = 1 << 17

ALL_PERMISSIONS = (
    CREATE_INSTANT_INVITE | KICK_MEMBERS | BAN_MEMBERS | ADMINISTRATOR
    | MANAGE_CHANNELS | MANAGE_GUILD | ADD_REACTIONS | VIEW_CHANNEL
    | SEND_MESSAGES | MANAGE_MESSAGES | EMBED_LINKS | ATTACH_FILES
    | MENTION_EVERYONE
)

NAMES = {
    ADMINISTRATOR: "Administrator",
    MANAGE_GUILD: "Manage Group",
    MANAGE_MESSAGES: "Manage Messages",
    KICK_MEMBERS: "Kick Members",
    BAN_MEMBERS: "Ban Members",
}


def describe(permission: int) -> str:
    """Human-readable name for a permission bit set."""
    names = [name for bit, name in NAMES.items() if permission & bit]
    return " or ".join(names) if names else f"permission {permission}"
