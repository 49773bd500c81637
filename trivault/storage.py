"""
SQLite-based key-value storage for trivault.

Stores JSON values under namespaced keys with an optional expiry, so that
small pieces of per-user state (such as viewed achievements) survive
across sessions.
"""

import json
import logging
import os
import sqlite3
import time
from pathlib import Path
from typing import Any

from trivault.config import STORAGE_PREFIX

logger = logging.getLogger(__name__)

# Predefined storage keys
STORAGE_KEYS = {
    "VIEWED_ACHIEVEMENTS": "viewed_achievements",
}


class StorageError(Exception):
    """Raised when a value cannot be written to storage."""


def _get_default_db_path() -> Path:
    """Get the default database path."""
    env_path = os.environ.get("TRIVAULT_DB_PATH")
    if env_path:
        return Path(env_path)
    return Path.home() / ".trivault" / "storage.db"


def _now_ms() -> int:
    return int(time.time() * 1000)


class KeyValueStorage:
    """SQLite-based storage for namespaced JSON values."""

    def __init__(self, db_path: str | Path | None = None, prefix: str = STORAGE_PREFIX):
        """
        Initialize the key-value storage.

        Args:
            db_path: Path to the SQLite database file.
                     Defaults to ~/.trivault/storage.db
            prefix: Namespace prepended to every key
        """
        if db_path is None:
            db_path = _get_default_db_path()
        self.db_path = Path(db_path)
        self.prefix = prefix
        self._init_db()

    def _init_db(self) -> None:
        """
        Create the table if it doesn't exist.

        An unusable location is logged, not raised; reads then return
        defaults and writes raise StorageError.
        """
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            with sqlite3.connect(self.db_path) as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                conn.commit()
        except (OSError, sqlite3.Error) as e:
            logger.error("Storage unavailable at %s: %s", self.db_path, e)

    def _prefixed(self, key: str) -> str:
        return self.prefix + key

    def _write(self, prefixed_key: str, payload: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (prefixed_key, payload),
            )
            conn.commit()

    def _delete(self, prefixed_keys: list[str]) -> None:
        if not prefixed_keys:
            return
        with sqlite3.connect(self.db_path) as conn:
            conn.executemany(
                "DELETE FROM kv_store WHERE key = ?",
                [(k,) for k in prefixed_keys],
            )
            conn.commit()

    def _prefixed_rows(self) -> list[tuple[str, str]]:
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                "SELECT key, value FROM kv_store WHERE substr(key, 1, ?) = ?",
                (len(self.prefix), self.prefix),
            ).fetchall()
        return [(row[0], row[1]) for row in rows]

    def set_item(self, key: str, value: Any, expires_in: int | None = None) -> None:
        """
        Store a JSON-serializable value (upserts).

        If the first write fails, expired items are cleared and the write
        is retried once.

        Args:
            key: The storage key, without prefix
            value: JSON-serializable value
            expires_in: Optional lifetime in milliseconds

        Raises:
            StorageError: If the value cannot be serialized or written
        """
        now = _now_ms()
        envelope = {
            "value": value,
            "timestamp": now,
            "expiresAt": now + expires_in if expires_in else None,
        }
        try:
            payload = json.dumps(envelope)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key!r} is not JSON-serializable: {e}") from e

        prefixed_key = self._prefixed(key)
        try:
            self._write(prefixed_key, payload)
        except sqlite3.Error as e:
            logger.error("Failed to set storage item %s: %s", key, e)
            try:
                self.clear_expired()
                self._write(prefixed_key, payload)
            except sqlite3.Error as retry_error:
                raise StorageError(
                    f"Failed to write {key!r} after cleanup: {retry_error}"
                ) from retry_error

    def get_item(self, key: str, default: Any = None) -> Any:
        """
        Get a stored value by key.

        Missing, expired, unreadable or malformed entries all return the
        default. Expired entries are removed.

        Args:
            key: The storage key, without prefix
            default: Value returned when nothing usable is stored

        Returns:
            The stored value or default
        """
        prefixed_key = self._prefixed(key)
        try:
            with sqlite3.connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?",
                    (prefixed_key,),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error("Failed to get storage item %s: %s", key, e)
            return default

        if row is None:
            return default

        try:
            envelope = json.loads(row[0])
        except (TypeError, ValueError) as e:
            logger.warning("Malformed storage item %s: %s", key, e)
            return default

        if not isinstance(envelope, dict) or "value" not in envelope:
            logger.warning("Malformed storage item %s: missing value", key)
            return default

        expires_at = envelope.get("expiresAt")
        if isinstance(expires_at, (int, float)) and _now_ms() > expires_at:
            self._delete([prefixed_key])
            return default

        return envelope["value"]

    def has_item(self, key: str) -> bool:
        return self.get_item(key) is not None

    def remove_item(self, key: str) -> None:
        """Remove a stored value if present."""
        self._delete([self._prefixed(key)])

    def clear(self) -> None:
        """Delete every item under this storage's prefix."""
        self._delete([k for k, _ in self._prefixed_rows()])

    def clear_expired(self) -> int:
        """
        Delete expired and malformed items under this storage's prefix.

        Returns:
            Number of items removed
        """
        now = _now_ms()
        to_remove = []
        for key, raw in self._prefixed_rows():
            try:
                envelope = json.loads(raw)
            except ValueError:
                # Invalid JSON, remove it
                to_remove.append(key)
                continue
            expires_at = envelope.get("expiresAt") if isinstance(envelope, dict) else None
            if isinstance(expires_at, (int, float)) and now > expires_at:
                to_remove.append(key)

        self._delete(to_remove)
        return len(to_remove)

    def get_all_keys(self) -> list[str]:
        """
        List stored keys under this storage's prefix.

        Returns:
            Keys with the prefix stripped, sorted
        """
        return sorted(k[len(self.prefix):] for k, _ in self._prefixed_rows())
