import json
import os
import tempfile

import pytest

from hifood import identity
from hifood.store import JsonStore
from migration.migrate_plaintext_passwords import migrate


def create_legacy_data(path: str):
    os.makedirs(path, exist_ok=True)
    users = [
        {"id": "u1", "name": "Alice", "email": "alice@example.com", "phone": "0901", "password": "alicepw"},
        {"id": "u2", "name": "Google", "email": "g@example.com", "phone": "", "password": ""},
        {"id": "u3", "name": "Boss", "email": "boss@example.com", "phone": "", "password": "bosspw",
         "role": "admin", "createdAt": 1700000000000},
    ]
    with open(os.path.join(path, "users.json"), "w", encoding="utf-8") as f:
        json.dump(users, f)


def test_migration_hashes_passwords_and_backfills():
    with tempfile.TemporaryDirectory() as tmp:
        create_legacy_data(tmp)

        assert migrate(tmp) == 3

        users = {u["id"]: u for u in JsonStore(tmp).load("users")}
        assert all("password" not in u for u in users.values())
        assert users["u1"]["passwordHash"].startswith("$pbkdf2-sha256$")
        assert users["u1"]["role"] == "user"
        assert users["u1"]["createdAt"]
        assert users["u2"]["passwordHash"] == ""
        assert users["u3"]["role"] == "admin"
        assert users["u3"]["createdAt"] == 1700000000000

        # migrated passwords still log in
        store = JsonStore(tmp)
        assert identity.authenticate_password(store, "alicepw", email="alice@example.com")["id"] == "u1"

        # second run is a no-op
        assert migrate(tmp) == 0


def test_migration_requires_users_file():
    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(FileNotFoundError):
            migrate(tmp)
