"""
Achievement tracking for a single user session.

Combines the achievement catalog, snapshot evaluation and the viewed set
behind one object that presentation code can hold for the whole session.
"""

import logging
from dataclasses import replace
from typing import Iterable, Sequence

from trivault.achievements import (
    ACHIEVEMENTS,
    Achievement,
    AchievementData,
    EvaluationResult,
    diff_unlocked,
    evaluate,
    next_achievement,
    progress_percent,
)
from trivault.config import TOTAL_SEALS
from trivault.storage import KeyValueStorage
from trivault.viewed import ViewedAchievements

logger = logging.getLogger(__name__)


class AchievementTracker:
    """Manages achievement state for one user session."""

    def __init__(
        self,
        storage: KeyValueStorage | None = None,
        snapshot: AchievementData | None = None,
        total_seals: int = TOTAL_SEALS,
        catalog: Sequence[Achievement] = ACHIEVEMENTS,
    ):
        """
        Initialize the tracker.

        Args:
            storage: KeyValueStorage instance. Creates default if not provided.
            snapshot: Initial progress. Defaults to an empty snapshot.
            total_seals: Seal count that counts as "all seals" when a
                snapshot is derived from a bare count
            catalog: Ordered achievement definitions
        """
        self.storage = storage or KeyValueStorage()
        self.viewed = ViewedAchievements(self.storage)
        self.total_seals = total_seals
        self.catalog = tuple(catalog)
        self._snapshot = snapshot or AchievementData()
        self._previous: AchievementData | None = None
        self._result = evaluate(self._snapshot, self.catalog)

    @property
    def achievements(self) -> tuple[Achievement, ...]:
        return self.catalog

    @property
    def snapshot(self) -> AchievementData:
        return self._snapshot

    @property
    def previous_snapshot(self) -> AchievementData | None:
        return self._previous

    @property
    def seal_count(self) -> int:
        return self._snapshot.seals_collected

    @property
    def evaluation(self) -> EvaluationResult:
        return self._result

    @property
    def unlocked_achievements(self) -> list[Achievement]:
        return list(self._result.unlocked)

    @property
    def locked_achievements(self) -> list[Achievement]:
        return list(self._result.locked)

    @property
    def new_achievements(self) -> list[Achievement]:
        """Unlocked achievements the user has not marked as viewed."""
        return self.viewed.new_achievements(self._result.unlocked)

    @property
    def next_achievement(self) -> Achievement | None:
        return next_achievement(self._result.locked)

    @property
    def progress(self) -> int:
        return progress_percent(self._result.unlocked, self.catalog)

    def snapshot_for_count(self, seal_count: int) -> AchievementData:
        """
        Derive a snapshot from the current one with a different seal count.

        Args:
            seal_count: New number of seals collected

        Returns:
            Snapshot with seals_collected and has_all_seals replaced
        """
        return replace(
            self._snapshot,
            seals_collected=seal_count,
            has_all_seals=seal_count >= self.total_seals,
        )

    def update(self, snapshot: AchievementData) -> list[Achievement]:
        """
        Apply a new progress snapshot.

        Args:
            snapshot: The latest progress

        Returns:
            Achievements gained since the previous snapshot
        """
        gained = diff_unlocked(self._snapshot, snapshot, self.catalog)
        self._previous = self._snapshot
        self._snapshot = snapshot
        self._result = evaluate(snapshot, self.catalog)
        if gained:
            logger.info("Unlocked achievements: %s", ", ".join(a.id for a in gained))
        return gained

    def set_seal_count(self, seal_count: int) -> list[Achievement]:
        """Apply a new seal count, keeping the other snapshot fields."""
        return self.update(self.snapshot_for_count(seal_count))

    def check_achievements(self, new_seal_count: int) -> list[Achievement]:
        """
        Preview achievements a new seal count would unlock.

        Neither the current snapshot nor the viewed set is changed.

        Args:
            new_seal_count: Seal count to compare against the current one

        Returns:
            Achievements unlocked by the new count, in catalog order
        """
        return diff_unlocked(
            self._snapshot, self.snapshot_for_count(new_seal_count), self.catalog
        )

    def mark_as_viewed(self, achievement_ids: Iterable[str]) -> frozenset[str]:
        """Acknowledge achievements so they are no longer reported as new."""
        return self.viewed.mark_as_viewed(achievement_ids)
