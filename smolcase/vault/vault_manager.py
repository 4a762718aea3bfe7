"""Vault manager for high-level secret store operations.

Each method authenticates, decrypts what it needs, applies one change and
saves. Admin operations need the admin password and the master key; read
operations need the master key and a user password.
"""

from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from ..models import (
    Group,
    Permissions,
    PrivateConfig,
    PublicConfig,
    SecretMeta,
    SecretValue,
    User,
    utc_now,
)
from ..utils.logging import get_logger
from .access import authenticate_user, can_read, filter_readable, verify_named_user
from .context import ProjectContext
from .crypto import generate_password, hash_password
from .exceptions import (
    AccessDeniedError,
    GroupExistsError,
    GroupNotFoundError,
    ProjectExistsError,
    SecretNotFoundError,
    SecretValueNotFoundError,
    UserExistsError,
    UserNotFoundError,
)
from .store import ConfigStore

logger = get_logger(__name__)


class VaultManager:
    """
    Manages a smolcase project.

    Usage:
        vm = VaultManager(ctx)

        if not vm.is_initialized:
            vm.initialize("my-app", "alice", admin_password, master_key)

        vm.add_secret(admin_password, master_key, "API_KEY", "sk-123")
        value = vm.get_secret(master_key, user_password, "API_KEY")
    """

    def __init__(self, ctx: ProjectContext):
        """
        Initialize vault manager for a project.

        Args:
            ctx: Project context
        """
        self.ctx = ctx
        self.config = ctx.config
        self.store = ConfigStore(ctx)

    @property
    def is_initialized(self) -> bool:
        """Check if this directory holds a project."""
        return self.store.exists()

    def _check_password(self, password: str, label: str) -> None:
        if len(password) < self.config.min_password_length:
            raise ValueError(
                f"{label} must be at least {self.config.min_password_length} characters long"
            )

    def _open_as_admin(self, admin_password: str, master_key: str) -> tuple[PublicConfig, PrivateConfig]:
        public = self.store.load_public()
        self.store.verify_admin(public, admin_password)
        return self.store.load_full(master_key)

    def _open_as_user(
        self,
        master_key: str,
        user_password: str,
        username: Optional[str],
    ) -> tuple[PublicConfig, PrivateConfig, User]:
        public, private = self.store.load_full(master_key)
        user = authenticate_user(private, user_password, username)
        return public, private, user

    # ------------------------------------------------------------------
    # Project
    # ------------------------------------------------------------------

    def initialize(
        self,
        project_name: str,
        admin_username: str,
        admin_password: str,
        master_key: str,
        admin_email: Optional[str] = None,
    ) -> PublicConfig:
        """
        Create a new project with one admin user.

        The admin password is hashed twice with independent salts: once as
        admin_key_hash and once as the admin user's own password hash.

        Raises:
            ProjectExistsError: If the project already exists
            ValueError: If a password is too short or a name is empty
        """
        if self.is_initialized:
            raise ProjectExistsError()

        if not project_name.strip():
            raise ValueError("Project name must not be empty")
        if not admin_username.strip():
            raise ValueError("Admin username must not be empty")
        self._check_password(admin_password, "Admin password")
        self._check_password(master_key, "Master key")

        password_hash, salt = hash_password(admin_password, self.config)
        admin_key_hash, _ = hash_password(admin_password, self.config)
        master_key_hash, _ = hash_password(master_key, self.config)

        admin = User(
            username=admin_username,
            email=admin_email,
            password_hash=password_hash,
            salt=salt,
            is_admin=True,
        )
        public = PublicConfig(
            project_name=project_name,
            admin_key_hash=admin_key_hash,
            master_key_hash=master_key_hash,
        )
        private = PrivateConfig(users={admin_username: admin})

        self.ctx.ensure_config_dir()
        self.store.save(public, private, master_key)

        logger.info("Initialized project '%s' with admin '%s'", project_name, admin_username)
        return public

    def status(self, master_key: Optional[str] = None, recent: int = 5) -> dict[str, Any]:
        """
        Summarize the project.

        Without a master key only public metadata is returned.

        Raises:
            InvalidMasterKeyError, DecryptError: If a master key is given but wrong
        """
        public = self.store.load_public()
        info: dict[str, Any] = {
            "project_name": public.project_name,
            "version": public.version,
            "created_at": public.created_at,
            "unlocked": False,
        }
        if master_key is None:
            return info

        _, private = self.store.load_full(master_key)
        admins = len(private.admins)
        by_update = sorted(private.secrets.values(), key=lambda s: s.updated_at, reverse=True)
        info.update(
            unlocked=True,
            users=len(private.users),
            admins=admins,
            members=len(private.users) - admins,
            groups=len(private.groups),
            secrets=len(private.secrets),
            recent_secrets=by_update[:recent],
        )
        return info

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    def _upsert_secret(
        self,
        private: PrivateConfig,
        value: SecretValue,
        permissions: Permissions,
        created_by: str,
        file_path: Optional[str],
    ) -> SecretMeta:
        existing = private.secrets.get(value.key)
        now = utc_now()
        meta = SecretMeta(
            key=value.key,
            created_by=created_by,
            permissions=permissions,
            is_file=value.is_file,
            file_path=file_path,
            updated_at=now,
        )
        if existing is not None:
            meta.id = existing.id
            meta.created_at = existing.created_at
        else:
            meta.created_at = now

        private.secrets[value.key] = meta
        return meta

    def add_secret(
        self,
        admin_password: str,
        master_key: str,
        key: str,
        value: str,
        users: Optional[Iterable[str]] = None,
        groups: Optional[Iterable[str]] = None,
        created_by: str = "admin",
        is_file: bool = False,
        file_path: Optional[str] = None,
    ) -> SecretMeta:
        """
        Add a secret, or replace it if the key already exists.

        Replacing keeps the secret's id and created_at and overwrites its
        value, ACL and updated_at.

        Raises:
            InvalidAdminPasswordError, InvalidMasterKeyError: On bad credentials
            ValueError: If the key is empty
        """
        if not key.strip():
            raise ValueError("Secret key must not be empty")

        public, private = self._open_as_admin(admin_password, master_key)
        values = self.store.load_secret_values(private, master_key)

        secret_value = SecretValue(key=key, value=value, is_file=is_file)
        permissions = Permissions(users=list(users or []), groups=list(groups or []))

        replaced = values.upsert(secret_value)
        meta = self._upsert_secret(private, secret_value, permissions, created_by, file_path)

        self.store.store_secret_values(private, values, master_key)
        self.store.save(public, private, master_key)

        logger.info("%s secret '%s'", "Updated" if replaced else "Added", key)
        return meta

    def add_file(
        self,
        admin_password: str,
        master_key: str,
        path: Path,
        users: Optional[Iterable[str]] = None,
        groups: Optional[Iterable[str]] = None,
        created_by: str = "admin",
    ) -> SecretMeta:
        """
        Store a file's content as a secret keyed by the file name.

        Raises:
            OSError: If the file cannot be read
        """
        path = Path(path)
        encoded = SecretValue.from_file_bytes(path.name, path.read_bytes())
        return self.add_secret(
            admin_password,
            master_key,
            key=path.name,
            value=encoded.value,
            users=users,
            groups=groups,
            created_by=created_by,
            is_file=True,
            file_path=str(path),
        )

    def remove_secret(self, admin_password: str, master_key: str, key: str) -> None:
        """
        Remove a secret's metadata and value.

        Raises:
            SecretNotFoundError: If no such secret exists
        """
        public, private = self._open_as_admin(admin_password, master_key)
        if key not in private.secrets:
            raise SecretNotFoundError(key)

        values = self.store.load_secret_values(private, master_key)
        values.remove(key)
        del private.secrets[key]

        self.store.store_secret_values(private, values, master_key)
        self.store.save(public, private, master_key)
        logger.info("Removed secret '%s'", key)

    def get_secret(
        self,
        master_key: str,
        user_password: str,
        key: str,
        username: Optional[str] = None,
    ) -> SecretValue:
        """
        Read one secret value as an authenticated user.

        Raises:
            InvalidMasterKeyError: If the master key is wrong
            InvalidUserPasswordError: If no user matches the password
            SecretNotFoundError: If the key has no metadata
            AccessDeniedError: If the ACL does not allow the user
            SecretValueNotFoundError: If metadata exists but the value is missing
        """
        _, private, user = self._open_as_user(master_key, user_password, username)

        meta = private.secrets.get(key)
        if meta is None:
            raise SecretNotFoundError(key)
        if not can_read(user.username, meta, private.groups):
            raise AccessDeniedError(key)

        value = self.store.load_secret_values(private, master_key).get(key)
        if value is None:
            raise SecretValueNotFoundError(key)
        return value

    def list_secrets(
        self,
        master_key: str,
        user_password: str,
        username: Optional[str] = None,
    ) -> list[SecretMeta]:
        """Metadata of every secret the user may read, sorted by key."""
        _, private, user = self._open_as_user(master_key, user_password, username)
        return filter_readable(user.username, private.secrets.values(), private.groups)

    def export_secrets(
        self,
        master_key: str,
        user_password: str,
        username: Optional[str] = None,
    ) -> list[tuple[str, str]]:
        """
        (key, value) pairs for every readable text secret, sorted by key.

        File secrets are skipped. Metadata whose value is missing is logged
        and skipped.
        """
        _, private, user = self._open_as_user(master_key, user_password, username)
        readable = filter_readable(user.username, private.secrets.values(), private.groups)
        values = self.store.load_secret_values(private, master_key)

        pairs = []
        for meta in readable:
            if meta.is_file:
                continue
            value = values.get(meta.key)
            if value is None:
                logger.warning("Secret '%s' has metadata but no stored value", meta.key)
                continue
            pairs.append((meta.key, value.value))
        return pairs

    def import_secrets(
        self,
        admin_password: str,
        master_key: str,
        pairs: Mapping[str, str],
        created_by: str = "admin",
    ) -> int:
        """
        Upsert many unrestricted text secrets in a single save.

        Returns:
            Number of secrets written
        """
        public, private = self._open_as_admin(admin_password, master_key)
        values = self.store.load_secret_values(private, master_key)

        count = 0
        for key, value in pairs.items():
            if not key.strip():
                continue
            secret_value = SecretValue(key=key, value=str(value))
            values.upsert(secret_value)
            self._upsert_secret(private, secret_value, Permissions(), created_by, None)
            count += 1

        self.store.store_secret_values(private, values, master_key)
        self.store.save(public, private, master_key)
        logger.info("Imported %d secrets", count)
        return count

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def verify_user(self, master_key: str, username: str, password: str) -> User:
        """
        Authenticate one named user (no fallback to other users).

        Raises:
            InvalidUserPasswordError: If the user is unknown or the password is wrong
        """
        _, private = self.store.load_full(master_key)
        return verify_named_user(private, username, password)

    def add_user(
        self,
        admin_password: str,
        master_key: str,
        username: str,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> tuple[User, str]:
        """
        Add a regular user.

        Returns:
            (user, password). The password is generated when none is given.

        Raises:
            UserExistsError: If the name is taken
        """
        if not username.strip():
            raise ValueError("Username must not be empty")

        public, private = self._open_as_admin(admin_password, master_key)
        if username in private.users:
            raise UserExistsError(username)

        if password is None:
            password = generate_password(self.config.generated_password_length)
        else:
            self._check_password(password, "Password")

        password_hash, salt = hash_password(password, self.config)
        user = User(username=username, email=email, password_hash=password_hash, salt=salt)
        private.users[username] = user

        self.store.save(public, private, master_key)
        logger.info("Added user '%s'", username)
        return user, password

    def remove_user(self, admin_password: str, master_key: str, username: str) -> None:
        """
        Remove a user and drop them from every group.

        ACL entries naming the user are kept: removing the last name from an
        ACL would open the secret to everyone.

        Raises:
            UserNotFoundError: If the user does not exist
            ValueError: If the user is an admin
        """
        public, private = self._open_as_admin(admin_password, master_key)
        user = private.get_user(username)
        if user is None:
            raise UserNotFoundError(username)
        if user.is_admin:
            raise ValueError("Cannot remove admin user")

        del private.users[username]
        for group in private.groups.values():
            group.remove_member(username)

        self.store.save(public, private, master_key)
        logger.info("Removed user '%s'", username)

    def list_users(self, admin_password: str, master_key: str) -> list[User]:
        """All users, sorted by name."""
        _, private = self._open_as_admin(admin_password, master_key)
        return [private.users[name] for name in sorted(private.users)]

    def reset_user_password(
        self,
        admin_password: str,
        master_key: str,
        username: str,
        password: Optional[str] = None,
    ) -> str:
        """
        Give a user a new password (generated when none is given).

        Returns:
            The new password
        """
        public, private = self._open_as_admin(admin_password, master_key)
        user = private.get_user(username)
        if user is None:
            raise UserNotFoundError(username)

        if password is None:
            password = generate_password(self.config.generated_password_length)
        else:
            self._check_password(password, "Password")

        user.password_hash, user.salt = hash_password(password, self.config)
        self.store.save(public, private, master_key)
        logger.info("Reset password for user '%s'", username)
        return password

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def create_group(
        self,
        admin_password: str,
        master_key: str,
        name: str,
        description: Optional[str] = None,
    ) -> Group:
        """
        Create an empty group.

        Raises:
            GroupExistsError: If the name is taken
        """
        if not name.strip():
            raise ValueError("Group name must not be empty")

        public, private = self._open_as_admin(admin_password, master_key)
        if name in private.groups:
            raise GroupExistsError(name)

        group = Group(name=name, description=description)
        private.groups[name] = group
        self.store.save(public, private, master_key)
        logger.info("Created group '%s'", name)
        return group

    def delete_group(self, admin_password: str, master_key: str, name: str) -> None:
        """
        Delete a group. ACLs naming it then simply grant nothing through it.

        Raises:
            GroupNotFoundError: If the group does not exist
        """
        public, private = self._open_as_admin(admin_password, master_key)
        if name not in private.groups:
            raise GroupNotFoundError(name)

        del private.groups[name]
        self.store.save(public, private, master_key)
        logger.info("Deleted group '%s'", name)

    def list_groups(self, admin_password: str, master_key: str) -> list[Group]:
        """All groups, sorted by name."""
        _, private = self._open_as_admin(admin_password, master_key)
        return [private.groups[name] for name in sorted(private.groups)]

    def add_group_members(
        self,
        admin_password: str,
        master_key: str,
        name: str,
        usernames: Iterable[str],
    ) -> tuple[list[str], list[str]]:
        """
        Add users to a group.

        Returns:
            (added, skipped). Unknown users and existing members are skipped.
        """
        public, private = self._open_as_admin(admin_password, master_key)
        group = private.groups.get(name)
        if group is None:
            raise GroupNotFoundError(name)

        added, skipped = [], []
        for username in usernames:
            if username in private.users and group.add_member(username):
                added.append(username)
            else:
                skipped.append(username)

        if added:
            self.store.save(public, private, master_key)
            logger.info("Added %s to group '%s'", ", ".join(added), name)
        return added, skipped

    def remove_group_members(
        self,
        admin_password: str,
        master_key: str,
        name: str,
        usernames: Iterable[str],
    ) -> tuple[list[str], list[str]]:
        """
        Remove users from a group.

        Returns:
            (removed, skipped). Users not in the group are skipped.
        """
        public, private = self._open_as_admin(admin_password, master_key)
        group = private.groups.get(name)
        if group is None:
            raise GroupNotFoundError(name)

        removed, skipped = [], []
        for username in usernames:
            if group.remove_member(username):
                removed.append(username)
            else:
                skipped.append(username)

        if removed:
            self.store.save(public, private, master_key)
            logger.info("Removed %s from group '%s'", ", ".join(removed), name)
        return removed, skipped


def is_smolcase_project(ctx: ProjectContext) -> bool:
    """Check if a project root holds a .smolcase.yml."""
    return ctx.config_path.exists()


def get_vault_manager(ctx: ProjectContext) -> VaultManager:
    """Get a vault manager for a project."""
    return VaultManager(ctx)
