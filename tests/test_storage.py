from __future__ import annotations

import json
import stat

import keyring
import pytest
from keyring.errors import PasswordSetError

from hkrestore.config import VaultConfig
from hkrestore.errors import StorageError
from hkrestore.storage import (
    ACCESSORIES_KEY,
    Database,
    FileBlobStore,
    KeyringBlobStore,
    Preferences,
)


def test_file_blob_store(tmp_path):
    store = FileBlobStore(tmp_path / "vault.json")
    assert store.read() is None

    store.write("[]")

    assert store.read() == "[]"
    assert stat.S_IMODE((tmp_path / "vault.json").stat().st_mode) == 0o600


def test_preferences_keep_other_keys(tmp_path):
    prefs = Preferences(tmp_path / "preferences.json")
    assert prefs.get("missing") is None

    prefs.set("a", "1")
    prefs.blob("b").write("2")

    assert prefs.get("a") == "1"
    assert prefs.blob("b").read() == "2"
    assert json.loads((tmp_path / "preferences.json").read_text()) == {"a": "1", "b": "2"}


def test_corrupt_preferences_raise(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text("{oops")

    with pytest.raises(StorageError):
        Preferences(path).get("a")

    path.write_text("[1, 2]")
    with pytest.raises(StorageError):
        Preferences(path).get("a")


def test_keyring_blob_store(monkeypatch):
    saved: dict[tuple[str, str], str] = {}
    monkeypatch.setattr(keyring, "get_password", lambda s, a: saved.get((s, a)))
    monkeypatch.setattr(keyring, "set_password", lambda s, a, v: saved.__setitem__((s, a), v))

    store = KeyringBlobStore("com.hkrestore.codes", "stored_codes")
    assert store.read() is None

    store.write('[{"code": "123-45-678"}]')

    assert saved == {("com.hkrestore.codes", "stored_codes"): '[{"code": "123-45-678"}]'}
    assert store.read() == '[{"code": "123-45-678"}]'


def test_keyring_errors_become_storage_errors(monkeypatch):
    def refuse(service, account, value):
        raise PasswordSetError("locked")

    monkeypatch.setattr(keyring, "set_password", refuse)

    with pytest.raises(StorageError, match="locked"):
        KeyringBlobStore("svc", "acct").write("[]")


def test_database_init(tmp_path):
    db = Database(tmp_path / "data")

    assert db.init()
    assert db.photos_dir.is_dir()
    assert db.preferences().get(ACCESSORIES_KEY) == "[]"

    db.accessories_store().write('[{"name": "Lamp"}]')
    assert not db.init()
    assert db.accessories_store().read() == '[{"name": "Lamp"}]'


def test_database_vault_backend(tmp_path):
    db = Database(tmp_path)

    file_store = db.vault_store(VaultConfig(backend="file"))
    keyring_store = db.vault_store(VaultConfig(service="svc", account="acct"))

    assert isinstance(file_store, FileBlobStore)
    assert file_store.path == tmp_path / "vault.json"
    assert isinstance(keyring_store, KeyringBlobStore)
    assert (keyring_store.service, keyring_store.account) == ("svc", "acct")
