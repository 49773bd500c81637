"""
trivault: achievement tracking for TriVault seal collectors

Entry point for the application.
"""

import argparse

from trivault.achievements import AchievementData, get_all_achievements_status
from trivault.cli import display_achievements, display_new, display_next
from trivault.config import TOTAL_SEALS, configure_logging, validate_config
from trivault.storage import KeyValueStorage
from trivault.tracker import AchievementTracker


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Show TriVault achievement progress.")
    parser.add_argument("--seals", type=int, default=0, help="Seals collected")
    parser.add_argument("--interactions", type=int, default=0, help="Total interactions")
    parser.add_argument("--referrals", type=int, default=0, help="Referred collectors")
    parser.add_argument("--early-adopter", action="store_true", help="Early adopter flag")
    parser.add_argument(
        "--mark-viewed", action="store_true", help="Acknowledge new achievements"
    )
    return parser


def main(argv: list[str] | None = None, storage: KeyValueStorage | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        validate_config()
    except ValueError as e:
        print(f"\nConfiguration Error:\n{e}")
        return 1

    configure_logging()

    data = AchievementData(
        seals_collected=args.seals,
        has_all_seals=args.seals >= TOTAL_SEALS,
        total_interactions=args.interactions,
        is_early_adopter=args.early_adopter,
        referral_count=args.referrals,
    )
    tracker = AchievementTracker(storage, snapshot=data)

    print("trivault - Collect seals, unlock achievements!")
    print("-" * 50)

    statuses = get_all_achievements_status(data, tracker.viewed.viewed_ids, tracker.catalog)
    display_achievements(statuses, tracker.progress)
    display_next(tracker.next_achievement)

    new = tracker.new_achievements
    display_new(new)
    if args.mark_viewed and new:
        tracker.mark_as_viewed(a.id for a in new)

    return 0


if __name__ == "__main__":
    exit(main())
