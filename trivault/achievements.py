"""
Achievement system for trivault.

Defines the achievement catalog and the pure functions that evaluate a
progress snapshot against it: unlocked/locked split, progress percentage,
the next achievement to aim for, and the diff between two snapshots.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, NamedTuple, Sequence


RARITIES = ("common", "uncommon", "rare", "epic", "legendary")

RARITY_LABELS = {
    "common": "Common",
    "uncommon": "Uncommon",
    "rare": "Rare",
    "epic": "Epic",
    "legendary": "Legendary",
}


@dataclass(frozen=True)
class AchievementData:
    """
    Point-in-time snapshot of a user's collection progress.

    has_all_seals is supplied by the caller and is not derived from
    seals_collected. Values are not validated.
    """

    seals_collected: int = 0
    has_all_seals: bool = False
    total_interactions: int = 0
    is_early_adopter: bool = False
    referral_count: int = 0


ProgressSnapshot = AchievementData


@dataclass(frozen=True)
class Achievement:
    """Represents an achievement that can be unlocked."""

    id: str
    name: str
    description: str
    icon: str
    rarity: str  # one of RARITIES
    requirement: Callable[[AchievementData], bool]

    def is_unlocked(self, data: AchievementData) -> bool:
        return bool(self.requirement(data))


class EvaluationResult(NamedTuple):
    unlocked: list[Achievement]
    locked: list[Achievement]


ACHIEVEMENTS = (
    Achievement(
        id="first-seal",
        name="First Steps",
        description="Collect your first seal",
        icon="🌟",
        rarity="common",
        requirement=lambda data: data.seals_collected >= 1,
    ),
    Achievement(
        id="half-way",
        name="Halfway There",
        description="Collect 2 seals",
        icon="⭐",
        rarity="uncommon",
        requirement=lambda data: data.seals_collected >= 2,
    ),
    Achievement(
        id="champion",
        name="TriVault Champion",
        description="Collect all 3 seals",
        icon="🏆",
        rarity="rare",
        requirement=lambda data: data.has_all_seals,
    ),
    Achievement(
        id="stability-master",
        name="Stability Master",
        description="Collect the Stability Seal",
        icon="💵",
        rarity="common",
        requirement=lambda data: data.seals_collected >= 1,
    ),
    Achievement(
        id="diamond-hands",
        name="Diamond Hands",
        description="Collect the Diamond Seal",
        icon="💎",
        rarity="uncommon",
        requirement=lambda data: data.seals_collected >= 2,
    ),
    Achievement(
        id="bridge-builder",
        name="Bridge Builder",
        description="Collect the Bridge Seal",
        icon="🌉",
        rarity="uncommon",
        requirement=lambda data: data.seals_collected >= 3,
    ),
    Achievement(
        id="early-adopter",
        name="Early Adopter",
        description="One of the first 100 users to collect a seal",
        icon="🚀",
        rarity="epic",
        requirement=lambda data: data.is_early_adopter,
    ),
    Achievement(
        id="influencer",
        name="Influencer",
        description="Refer 5 friends who collect seals",
        icon="📢",
        rarity="rare",
        requirement=lambda data: data.referral_count >= 5,
    ),
    Achievement(
        id="mega-influencer",
        name="Mega Influencer",
        description="Refer 25 friends who collect seals",
        icon="🎤",
        rarity="epic",
        requirement=lambda data: data.referral_count >= 25,
    ),
    Achievement(
        id="og",
        name="OG Collector",
        description="Collect all seals within the first week",
        icon="👑",
        rarity="legendary",
        requirement=lambda data: data.has_all_seals and data.is_early_adopter,
    ),
)


def get_achievement(
    achievement_id: str, catalog: Sequence[Achievement] = ACHIEVEMENTS
) -> Achievement | None:
    """Look up an achievement definition by id."""
    for achievement in catalog:
        if achievement.id == achievement_id:
            return achievement
    return None


def evaluate(
    data: AchievementData, catalog: Sequence[Achievement] = ACHIEVEMENTS
) -> EvaluationResult:
    """
    Split the catalog into unlocked and locked achievements.

    Args:
        data: Progress snapshot to evaluate
        catalog: Ordered achievement definitions

    Returns:
        EvaluationResult with both lists in catalog order
    """
    unlocked = []
    locked = []

    for achievement in catalog:
        if achievement.is_unlocked(data):
            unlocked.append(achievement)
        else:
            locked.append(achievement)

    return EvaluationResult(unlocked=unlocked, locked=locked)


def get_unlocked_achievements(
    data: AchievementData, catalog: Sequence[Achievement] = ACHIEVEMENTS
) -> list[Achievement]:
    return evaluate(data, catalog).unlocked


def get_locked_achievements(
    data: AchievementData, catalog: Sequence[Achievement] = ACHIEVEMENTS
) -> list[Achievement]:
    return evaluate(data, catalog).locked


def progress_percent(unlocked: Sequence | int, total: Sequence | int) -> int:
    """
    Percentage of achievements unlocked, rounded half away from zero.

    Args:
        unlocked: Unlocked achievements, or their count
        total: All achievements, or their count

    Returns:
        Integer percentage; 0 when total is empty
    """
    unlocked_count = unlocked if isinstance(unlocked, int) else len(unlocked)
    total_count = total if isinstance(total, int) else len(total)

    if total_count <= 0:
        return 0

    # floor(100 * u / t + 0.5) in integer arithmetic
    return (200 * unlocked_count + total_count) // (2 * total_count)


def next_achievement(locked: Iterable[Achievement]) -> Achievement | None:
    """Return the first locked achievement in catalog order, or None."""
    for achievement in locked:
        return achievement
    return None


def diff_unlocked(
    previous: AchievementData,
    current: AchievementData,
    catalog: Sequence[Achievement] = ACHIEVEMENTS,
) -> list[Achievement]:
    """
    Find achievements unlocked by moving from one snapshot to another.

    Only gains are reported. An achievement unlocked in previous but not
    in current is ignored.

    Args:
        previous: Earlier progress snapshot
        current: Later progress snapshot
        catalog: Ordered achievement definitions

    Returns:
        Newly unlocked achievements in catalog order
    """
    previous_ids = {a.id for a in evaluate(previous, catalog).unlocked}
    return [a for a in evaluate(current, catalog).unlocked if a.id not in previous_ids]


def achievement_to_dict(achievement: Achievement) -> dict:
    return {
        "id": achievement.id,
        "name": achievement.name,
        "description": achievement.description,
        "icon": achievement.icon,
        "rarity": achievement.rarity,
        "rarity_label": RARITY_LABELS.get(achievement.rarity, achievement.rarity),
    }


def get_all_achievements_status(
    data: AchievementData,
    viewed_ids: Iterable[str] = (),
    catalog: Sequence[Achievement] = ACHIEVEMENTS,
) -> list[dict]:
    """
    Get all achievements with their unlock status.

    Args:
        data: Progress snapshot to evaluate
        viewed_ids: Ids the user has already acknowledged
        catalog: Ordered achievement definitions

    Returns:
        List of achievement dicts in catalog order, each with
        unlocked and new flags
    """
    viewed = set(viewed_ids)

    result = []
    for achievement in catalog:
        unlocked = achievement.is_unlocked(data)
        record = achievement_to_dict(achievement)
        record["unlocked"] = unlocked
        record["new"] = unlocked and achievement.id not in viewed
        result.append(record)

    return result
