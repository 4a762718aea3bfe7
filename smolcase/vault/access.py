"""Access control resolution and user authentication."""

from typing import Iterable, Mapping, Optional

from ..models import Group, PrivateConfig, SecretMeta, User
from ..utils.logging import get_logger
from .crypto import verify_password
from .exceptions import InvalidUserPasswordError

logger = get_logger(__name__)


def can_read(username: str, secret: SecretMeta, groups: Mapping[str, Group]) -> bool:
    """
    Decide whether a user may read a secret.

    An empty ACL is open to every authenticated user. A group name that does
    not exist grants nothing.

    Args:
        username: Authenticated user's name
        secret: Secret metadata holding the ACL
        groups: All groups by name

    Returns:
        True if access is allowed
    """
    permissions = secret.permissions
    if permissions.is_unrestricted:
        return True

    if username in permissions.users:
        return True

    for group_name in permissions.groups:
        group = groups.get(group_name)
        if group is not None and group.has_member(username):
            return True

    return False


def filter_readable(
    username: str,
    secrets: Iterable[SecretMeta],
    groups: Mapping[str, Group],
) -> list[SecretMeta]:
    """Secrets the user may read, sorted by key. Others are silently left out."""
    readable = [s for s in secrets if can_read(username, s, groups)]
    return sorted(readable, key=lambda s: s.key)


def authenticate_user(
    private: PrivateConfig,
    password: str,
    username: Optional[str] = None,
) -> User:
    """
    Resolve the user a password belongs to.

    The named user is tried first. If that fails, or no name is given, every
    user is tried in username order and the first match wins. Two users
    sharing a password therefore resolve to the alphabetically first one.

    Raises:
        InvalidUserPasswordError: If no user matches. The message does not
            reveal whether the username exists.
    """
    if username:
        user = private.get_user(username)
        if user is not None and verify_password(password, user.password_hash):
            logger.debug("Authenticated user %s", username)
            return user

    for name in sorted(private.users):
        if name == username:
            continue
        user = private.users[name]
        if verify_password(password, user.password_hash):
            logger.debug("Authenticated user %s by password match", name)
            return user

    raise InvalidUserPasswordError()


def verify_named_user(private: PrivateConfig, username: str, password: str) -> User:
    """
    Authenticate exactly one named user, without falling back to others.

    Raises:
        InvalidUserPasswordError: If the user is unknown or the password is wrong
    """
    user = private.get_user(username)
    if user is None or not verify_password(password, user.password_hash):
        raise InvalidUserPasswordError()
    return user
