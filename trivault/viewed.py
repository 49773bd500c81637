"""
Tracks which achievements the user has already been shown.

The viewed set only ever grows. It is loaded once from storage and every
change is written straight back. Storage problems never reach the caller;
the in-memory set stays authoritative for the session.
"""

import logging
from typing import Iterable

from trivault.achievements import Achievement
from trivault.storage import STORAGE_KEYS, KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

VIEWED_ACHIEVEMENTS_KEY = STORAGE_KEYS["VIEWED_ACHIEVEMENTS"]


class ViewedAchievements:
    """Persistent set of acknowledged achievement ids."""

    def __init__(self, storage: KeyValueStorage, key: str = VIEWED_ACHIEVEMENTS_KEY):
        """
        Initialize the tracker and load the stored set.

        Args:
            storage: Key-value storage holding the viewed id list
            key: Storage key for the list
        """
        self.storage = storage
        self.key = key
        self._viewed: set[str] = set()
        self._pending_write = False
        self.load()

    @property
    def viewed_ids(self) -> frozenset[str]:
        return frozenset(self._viewed)

    @property
    def pending_write(self) -> bool:
        """True when the last write to storage did not complete."""
        return self._pending_write

    def load(self) -> frozenset[str]:
        """
        Read the viewed set from storage.

        Unavailable storage or malformed data yields an empty set. While
        a write is pending the stored ids are merged into the in-memory
        set and the write is retried.

        Returns:
            The loaded set of ids
        """
        try:
            stored = self.storage.get_item(self.key)
        except Exception as e:  # load never raises
            logger.warning("Could not read viewed achievements: %s", e)
            stored = None

        if stored is None:
            loaded = set()
        elif isinstance(stored, list) and all(isinstance(i, str) for i in stored):
            loaded = set(stored)
        else:
            logger.warning("Ignoring malformed viewed achievements: %r", stored)
            loaded = set()

        if self._pending_write:
            self._viewed = loaded | self._viewed
            self.flush()
        else:
            self._viewed = loaded

        return self.viewed_ids

    def mark_as_viewed(self, achievement_ids: Iterable[str]) -> frozenset[str]:
        """
        Merge ids into the viewed set and persist it.

        Args:
            achievement_ids: Ids to acknowledge; a single id string is
                treated as one id

        Returns:
            The updated viewed set
        """
        if isinstance(achievement_ids, str):
            achievement_ids = [achievement_ids]
        updated = self._viewed | set(achievement_ids)
        if updated != self._viewed or self._pending_write:
            self._viewed = updated
            self.flush()
        return self.viewed_ids

    def flush(self) -> bool:
        """
        Write the full in-memory set to storage.

        Returns:
            True if the write completed
        """
        try:
            self.storage.set_item(self.key, sorted(self._viewed))
        except StorageError as e:
            logger.warning("Could not persist viewed achievements: %s", e)
            self._pending_write = True
            return False
        self._pending_write = False
        return True

    def new_achievements(self, unlocked: Iterable[Achievement]) -> list[Achievement]:
        """Unlocked achievements the user has not acknowledged yet."""
        return [a for a in unlocked if a.id not in self._viewed]
