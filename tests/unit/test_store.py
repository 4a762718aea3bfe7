"""Unit tests for the two-tier config store."""

import pytest
import yaml

ADMIN_PASSWORD = "admin-pass-123"
MASTER_KEY = "supersecret123"


def _write_config(ctx, data) -> None:
    ctx.config_path.write_text(yaml.safe_dump(data), encoding="utf-8")


def _bootstrap(ctx):
    """A project file with valid hashes and an empty envelope."""
    from smolcase.models import PublicConfig
    from smolcase.vault.crypto import hash_password
    from smolcase.vault.store import ConfigStore

    admin_hash, _ = hash_password(ADMIN_PASSWORD)
    master_hash, _ = hash_password(MASTER_KEY)
    public = PublicConfig(project_name="demo", admin_key_hash=admin_hash, master_key_hash=master_hash)
    _write_config(ctx, public.to_dict())
    return ConfigStore(ctx)


class TestLoadPublic:
    """Tests for reading the plaintext header."""

    def test_missing_file(self, ctx):
        """No .smolcase.yml means not a project."""
        from smolcase.vault.exceptions import NotAProjectError
        from smolcase.vault.store import ConfigStore

        with pytest.raises(NotAProjectError):
            ConfigStore(ctx).load_public()

    @pytest.mark.parametrize(
        "content",
        [
            "project_name: [unclosed",
            "- just\n- a\n- list\n",
            "project_name: demo\n",
            "project_name: demo\nadmin_key_hash: a\nmaster_key_hash: b\nencrypted_data: nope\n",
            "project_name: demo\nadmin_key_hash: a\nmaster_key_hash: 12345\n",
            "project_name: demo\nadmin_key_hash: [a, b]\nmaster_key_hash: b\n",
        ],
    )
    def test_corrupt_file(self, ctx, content):
        """Unparsable or incomplete files are reported as corrupt."""
        from smolcase.vault.exceptions import CorruptConfigError
        from smolcase.vault.store import ConfigStore

        ctx.config_path.write_text(content, encoding="utf-8")

        with pytest.raises(CorruptConfigError):
            ConfigStore(ctx).load_public()

    def test_not_utf8(self, ctx):
        """A file that is not UTF-8 text is reported as corrupt."""
        from smolcase.vault.exceptions import CorruptConfigError
        from smolcase.vault.store import ConfigStore

        ctx.config_path.write_bytes(b"project_name: \xff\xfe\n")

        with pytest.raises(CorruptConfigError):
            ConfigStore(ctx).load_public()

    def test_non_string_hash_on_full_load(self, ctx):
        """A numeric hash fails as corruption before any password check."""
        from smolcase.vault.exceptions import CorruptConfigError

        store = _bootstrap(ctx)
        data = yaml.safe_load(ctx.config_path.read_text(encoding="utf-8"))
        data["master_key_hash"] = 12345
        _write_config(ctx, data)

        with pytest.raises(CorruptConfigError, match="master_key_hash"):
            store.load_full(MASTER_KEY)

    def test_half_populated_envelope(self, ctx):
        """An envelope with a salt but no data is corruption, not bootstrap."""
        from smolcase.vault.exceptions import CorruptConfigError
        from smolcase.vault.store import ConfigStore

        _write_config(ctx, {
            "project_name": "demo",
            "admin_key_hash": "a",
            "master_key_hash": "b",
            "encrypted_data": {"salt": "c2FsdA==", "data": ""},
        })

        with pytest.raises(CorruptConfigError):
            ConfigStore(ctx).load_public()

    def test_reads_metadata(self, ctx):
        """Header fields load without any key."""
        store = _bootstrap(ctx)

        public = store.load_public()

        assert public.project_name == "demo"
        assert public.version == "1.0.0"
        assert public.encrypted_data.is_empty


class TestVerification:
    """Tests for the admin and master key checks."""

    def test_verify_admin(self, ctx):
        """Only the admin password passes."""
        from smolcase.vault.exceptions import InvalidAdminPasswordError

        store = _bootstrap(ctx)
        public = store.load_public()

        store.verify_admin(public, ADMIN_PASSWORD)
        with pytest.raises(InvalidAdminPasswordError):
            store.verify_admin(public, "not-the-admin")

    def test_verify_master(self, ctx):
        """Only the master key passes."""
        from smolcase.vault.exceptions import InvalidMasterKeyError

        store = _bootstrap(ctx)
        public = store.load_public()

        store.verify_master(public, MASTER_KEY)
        with pytest.raises(InvalidMasterKeyError):
            store.verify_master(public, ADMIN_PASSWORD)


class TestLoadAndSave:
    """Tests for the encrypted private config."""

    def test_bootstrap_is_empty(self, ctx):
        """An empty envelope yields an empty private config."""
        store = _bootstrap(ctx)

        _, private = store.load_full(MASTER_KEY)

        assert private.users == {}
        assert private.secrets == {}
        assert private.encrypted_secrets.is_empty

    def test_wrong_master_key(self, ctx):
        """load_full checks the master key hash before decrypting."""
        from smolcase.vault.exceptions import InvalidMasterKeyError

        store = _bootstrap(ctx)

        with pytest.raises(InvalidMasterKeyError):
            store.load_full("wrong-master-key")

    def test_save_and_reload(self, ctx):
        """Saved users and groups come back after reload."""
        from smolcase.models import Group, User

        store = _bootstrap(ctx)
        public, private = store.load_full(MASTER_KEY)
        private.users["bob"] = User(username="bob", password_hash="h", salt="s")
        private.groups["ops"] = Group(name="ops", members=["bob"])

        store.save(public, private, MASTER_KEY)
        _, reloaded = store.load_full(MASTER_KEY)

        assert set(reloaded.users) == {"bob"}
        assert reloaded.groups["ops"].members == ["bob"]

    def test_plaintext_does_not_leak(self, ctx):
        """Usernames and secret values never appear in the file."""
        from smolcase.models import SecretValue, SecretValues, User

        store = _bootstrap(ctx)
        public, private = store.load_full(MASTER_KEY)
        private.users["carol-unique-name"] = User(username="carol-unique-name", password_hash="h", salt="s")
        values = SecretValues(secrets=[SecretValue(key="K", value="very-secret-value")])
        store.store_secret_values(private, values, MASTER_KEY)

        store.save(public, private, MASTER_KEY)
        content = ctx.config_path.read_text(encoding="utf-8")

        assert "carol-unique-name" not in content
        assert "very-secret-value" not in content

    def test_fresh_envelope_per_save(self, ctx):
        """Saving identical content twice produces different salt and data."""
        store = _bootstrap(ctx)
        public, private = store.load_full(MASTER_KEY)

        store.save(public, private, MASTER_KEY)
        first = public.encrypted_data
        store.save(public, private, MASTER_KEY)
        second = public.encrypted_data

        assert first.salt != second.salt
        assert first.data != second.data

    def test_tampered_file(self, ctx):
        """Editing the ciphertext on disk fails to decrypt."""
        from smolcase.vault.exceptions import DecryptError

        store = _bootstrap(ctx)
        public, private = store.load_full(MASTER_KEY)
        store.save(public, private, MASTER_KEY)

        data = yaml.safe_load(ctx.config_path.read_text(encoding="utf-8"))
        payload = data["encrypted_data"]["data"]
        data["encrypted_data"]["data"] = ("B" if payload[0] == "A" else "A") + payload[1:]
        _write_config(ctx, data)

        with pytest.raises(DecryptError):
            store.load_full(MASTER_KEY)

    def test_secret_values_roundtrip(self, ctx):
        """The inner envelope stores values under the master key."""
        from smolcase.models import SecretValue, SecretValues

        store = _bootstrap(ctx)
        public, private = store.load_full(MASTER_KEY)
        assert len(store.load_secret_values(private, MASTER_KEY)) == 0

        values = SecretValues(secrets=[SecretValue(key="API_KEY", value="sk-123")])
        store.store_secret_values(private, values, MASTER_KEY)
        store.save(public, private, MASTER_KEY)

        _, reloaded = store.load_full(MASTER_KEY)
        assert store.load_secret_values(reloaded, MASTER_KEY).get("API_KEY").value == "sk-123"

    def test_no_temp_files_left(self, ctx):
        """Atomic writes leave only the config file behind."""
        store = _bootstrap(ctx)
        public, private = store.load_full(MASTER_KEY)

        store.save(public, private, MASTER_KEY)

        assert sorted(p.name for p in ctx.project_root.iterdir()) == [".smolcase.yml"]
