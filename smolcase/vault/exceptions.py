"""Exceptions for the smolcase secret store."""


class SmolcaseError(Exception):
    """Base exception for secret store operations."""

    pass


class NotAProjectError(SmolcaseError):
    """Raised when no .smolcase.yml exists in the project root."""

    def __init__(self, path: str = ""):
        message = "Not a smolcase project. Run 'smolcase init' first."
        if path:
            message = f"Not a smolcase project: {path}. Run 'smolcase init' first."
        super().__init__(message)


class ProjectExistsError(SmolcaseError):
    """Raised when initializing a directory that already holds a project."""

    def __init__(self, message: str = "Already a smolcase project."):
        super().__init__(message)


class CorruptConfigError(SmolcaseError):
    """Raised when the configuration file cannot be parsed."""

    def __init__(self, message: str = "Configuration file is corrupted."):
        super().__init__(message)


class InvalidAdminPasswordError(SmolcaseError):
    """Raised when the admin password does not match admin_key_hash."""

    def __init__(self, message: str = "Invalid admin password."):
        super().__init__(message)


class InvalidMasterKeyError(SmolcaseError):
    """Raised when the master key does not match master_key_hash."""

    def __init__(self, message: str = "Invalid master key."):
        super().__init__(message)


class InvalidUserPasswordError(SmolcaseError):
    """Raised when no user matches the supplied credentials.

    The message never says whether the username exists.
    """

    def __init__(self, message: str = "Invalid username or password."):
        super().__init__(message)


class DecryptError(SmolcaseError):
    """Raised when an envelope cannot be decrypted.

    Wrong keys, tampered data and malformed envelopes all produce the same message.
    """

    def __init__(self, message: str = "Decryption failed: wrong key or corrupted data."):
        super().__init__(message)


class SecretNotFoundError(SmolcaseError):
    """Raised when no secret metadata exists for a key."""

    def __init__(self, key: str = ""):
        message = f"Secret '{key}' not found." if key else "Secret not found."
        super().__init__(message)


class SecretValueNotFoundError(SmolcaseError):
    """Raised when secret metadata exists but its stored value is missing."""

    def __init__(self, key: str = ""):
        message = f"Value for secret '{key}' not found." if key else "Secret value not found."
        super().__init__(message)


class AccessDeniedError(SmolcaseError):
    """Raised when the access control list does not allow a read."""

    def __init__(self, key: str = ""):
        message = f"Access denied to secret '{key}'." if key else "Access denied."
        super().__init__(message)


class UnsupportedFormatError(SmolcaseError):
    """Raised for unknown import/export format names."""

    def __init__(self, fmt: str = ""):
        message = f"Unsupported format: {fmt}" if fmt else "Unsupported format."
        super().__init__(message)


class UserExistsError(SmolcaseError):
    """Raised when adding a user whose name is taken."""

    def __init__(self, username: str = ""):
        message = f"User '{username}' already exists." if username else "User already exists."
        super().__init__(message)


class UserNotFoundError(SmolcaseError):
    """Raised by admin operations on an unknown user."""

    def __init__(self, username: str = ""):
        message = f"User '{username}' not found." if username else "User not found."
        super().__init__(message)


class GroupExistsError(SmolcaseError):
    """Raised when creating a group whose name is taken."""

    def __init__(self, name: str = ""):
        message = f"Group '{name}' already exists." if name else "Group already exists."
        super().__init__(message)


class GroupNotFoundError(SmolcaseError):
    """Raised by admin operations on an unknown group."""

    def __init__(self, name: str = ""):
        message = f"Group '{name}' not found." if name else "Group not found."
        super().__init__(message)


class GitError(SmolcaseError):
    """Raised when a git command fails."""

    def __init__(self, message: str = "Git command failed."):
        super().__init__(message)
