"""Core cryptographic primitives for the secret store.

Uses:
- argon2-cffi for salted Argon2id password hashes (PHC strings) and for raw
  Argon2id key derivation
- the cryptography library's AES-256-GCM for authenticated encryption

Password hashes only authenticate. Encryption keys are always derived from
a fresh random salt stored next to the ciphertext, so the same password never
produces the same key twice.
"""

import base64
import binascii
import os
import secrets
import string

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from argon2.low_level import Type, hash_secret_raw
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..models import EncryptedEnvelope
from .config import VaultConfig, get_vault_config
from .exceptions import DecryptError

MIN_SALT_SIZE = 16
TAG_SIZE = 16  # 128-bit authentication tag


def _hasher(config: VaultConfig) -> PasswordHasher:
    return PasswordHasher(
        time_cost=config.argon2_time_cost,
        memory_cost=config.argon2_memory_cost,
        parallelism=config.argon2_parallelism,
        hash_len=config.key_size,
        salt_len=config.salt_size,
    )


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _b64decode(text: str) -> bytes:
    return base64.b64decode(text.encode("ascii"), validate=True)


def hash_password(password: str, config: VaultConfig | None = None) -> tuple[str, str]:
    """
    Hash a password for authentication.

    A fresh random salt is generated on every call. The salt is embedded in the
    returned PHC string; it is also returned separately for the user record.

    Args:
        password: Password to hash
        config: Vault configuration (uses global if not provided)

    Returns:
        (hash, salt) where salt is Base64 text
    """
    config = config or get_vault_config()
    salt = os.urandom(config.salt_size)
    password_hash = _hasher(config).hash(password, salt=salt)
    return password_hash, _b64encode(salt)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a password against a hash produced by hash_password().

    Cost parameters and salt are read from the hash string itself, and the
    comparison is delegated to argon2-cffi.

    Returns:
        True if the password matches. A malformed hash never matches.
    """
    if not password_hash:
        return False
    try:
        return PasswordHasher().verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def derive_key(password: str, salt: bytes, config: VaultConfig | None = None) -> bytes:
    """
    Derive an encryption key from a password and an explicit salt.

    Deterministic for a given (password, salt) pair. The key is never stored.

    Args:
        password: Master password or other secret
        salt: Random salt of at least 16 bytes
        config: Vault configuration (uses global if not provided)

    Returns:
        key_size-byte key (32 by default)
    """
    if len(salt) < MIN_SALT_SIZE:
        raise ValueError(f"Salt must be at least {MIN_SALT_SIZE} bytes, got {len(salt)}")

    config = config or get_vault_config()
    return hash_secret_raw(
        secret=password.encode("utf-8"),
        salt=salt,
        time_cost=config.argon2_time_cost,
        memory_cost=config.argon2_memory_cost,
        parallelism=config.argon2_parallelism,
        hash_len=config.key_size,
        type=Type.ID,
    )


def encrypt(plaintext: bytes, password: str, config: VaultConfig | None = None) -> EncryptedEnvelope:
    """
    Encrypt bytes under a password.

    Every call draws a new salt (so a new key) and a new nonce.

    Args:
        plaintext: Data to encrypt
        password: Password the key is derived from
        config: Vault configuration (uses global if not provided)

    Returns:
        EncryptedEnvelope with Base64 salt and Base64 nonce+ciphertext+tag
    """
    config = config or get_vault_config()
    salt = os.urandom(config.salt_size)
    key = derive_key(password, salt, config)

    nonce = os.urandom(config.nonce_size)
    ciphertext = AESGCM(key).encrypt(nonce, plaintext, None)

    return EncryptedEnvelope(salt=_b64encode(salt), data=_b64encode(nonce + ciphertext))


def decrypt(envelope: EncryptedEnvelope, password: str, config: VaultConfig | None = None) -> bytes:
    """
    Decrypt an envelope produced by encrypt().

    Raises:
        DecryptError: For malformed envelopes, wrong passwords and tampered
            data alike. The caller cannot tell these apart.
    """
    config = config or get_vault_config()

    try:
        salt = _b64decode(envelope.salt)
        blob = _b64decode(envelope.data)
    except (binascii.Error, ValueError):
        raise DecryptError()

    if len(salt) < MIN_SALT_SIZE or len(blob) < config.nonce_size + TAG_SIZE:
        raise DecryptError()

    nonce, ciphertext = blob[: config.nonce_size], blob[config.nonce_size :]
    key = derive_key(password, salt, config)

    try:
        return AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag:
        raise DecryptError()


def generate_password(length: int = 16) -> str:
    """Generate a random alphanumeric password for new users."""
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
