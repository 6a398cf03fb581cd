"""
Migration: plaintext users.json -> hashed passwords
- Replaces each plaintext 'password' with a 'passwordHash' (pbkdf2_sha256)
- Federated users (empty password) get an empty 'passwordHash'
- Backfills 'role' as 'user' and 'createdAt' when missing

Usage:
  python -m migration.migrate_plaintext_passwords --data-dir path/to/data
"""
import argparse
import os

from hifood.security import hash_password
from hifood.store import JsonStore, USERS
from hifood.utils import now_ms


def migrate_user(user: dict, migrated_at: int) -> dict:
    user = dict(user)
    if "password" in user:
        plain = user.pop("password") or ""
        if not user.get("passwordHash"):
            user["passwordHash"] = hash_password(plain) if plain else ""
    user.setdefault("passwordHash", "")
    if not user.get("role"):
        user["role"] = "user"
    if not user.get("createdAt"):
        user["createdAt"] = migrated_at
    return user


def migrate(data_dir: str) -> int:
    """Rewrite users.json in place and return how many records changed."""
    store = JsonStore(data_dir)
    if not os.path.exists(store.path(USERS)):
        raise FileNotFoundError(store.path(USERS))

    migrated_at = now_ms()
    with store.lock(USERS):
        users = store.load(USERS)
        migrated = [migrate_user(u, migrated_at) for u in users]
        changed = sum(1 for old, new in zip(users, migrated) if old != new)
        if changed:
            store.save(USERS, migrated)
    return changed


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--data-dir", required=True, help="Directory holding users.json")
    args = parser.parse_args()
    changed = migrate(args.data_dir)
    print(f"migrated {changed} user record(s)")


if __name__ == "__main__":
    main()
