import functools
import logging

from botrouter.bot.chat_client import ChatClient
from botrouter.bot_auth.permissions import describe
from botrouter.exceptions import ChatClientError, PermissionLookupError

logger = logging.getLogger(__name__)


def member_has_permission(client: ChatClient, group_id: str, user_id: str, permission: int) -> bool:
    """
    Check whether a member holds the given permission in a group.

    For example, to check for the administrator permission:
        member_has_permission(client, group_id, user_id, ADMINISTRATOR)
    To accept any of several permissions, pack the bits with |:
        member_has_permission(client, group_id, user_id, ADMINISTRATOR | MANAGE_GUILD)

    Members and roles are looked up in the client's cache first and fetched
    from the platform on a miss.

    Returns:
        True if any of the member's roles intersects `permission`, else False.

    Raises:
        PermissionLookupError: if the member or one of its roles can't be resolved.
    """
    member = client.state_member(group_id, user_id)
    if member is None:
        try:
            member = client.fetch_member(group_id, user_id)
        except ChatClientError as e:
            raise PermissionLookupError(f"Could not resolve member {user_id} in group {group_id}") from e

    for role_id in member.roles:
        role = client.state_role(group_id, role_id)
        if role is None:
            try:
                role = client.fetch_role(group_id, role_id)
            except ChatClientError as e:
                raise PermissionLookupError(f"Could not resolve role {role_id} in group {group_id}") from e
        if role.permissions & permission != 0:
            return True

    return False


def require_permission(permission: int):
    """Decorator to protect command handler methods by permission bit."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, client, message, *args, **kwargs):
            try:
                allowed = member_has_permission(client, message.group_id, message.author_id, permission)
            except PermissionLookupError as e:
                logger.error(f"Permission check failed for {message.author_id} in {message.group_id}: {e}")
                client.send_message(message.channel_id, "⚠️ Could not verify your permissions, please try again later.")
                return
            if not allowed:
                logger.warning(f"Access denied for {message.author_id}, needs {describe(permission)}")
                client.send_message(message.channel_id, f"🚫 You need the {describe(permission)} permission for this command.")
                return
            return func(self, client, message, *args, **kwargs)

        return wrapper

    return decorator
