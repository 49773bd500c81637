"""
CLI display functions for trivault.
"""

from trivault.achievements import RARITY_LABELS, Achievement


def format_progress_bar(percent: int, width: int = 20) -> str:
    """
    Build a text progress bar.

    Args:
        percent: Progress from 0 to 100
        width: Number of cells in the bar

    Returns:
        Bar string such as "[#####-----] 50%"
    """
    clamped = max(0, min(100, percent))
    filled = clamped * width // 100
    return f"[{'#' * filled}{'-' * (width - filled)}] {percent}%"


def format_achievement(achievement: dict) -> str:
    """
    Format one achievement status record for display.

    Args:
        achievement: Dictionary from get_all_achievements_status()

    Returns:
        Formatted string for display
    """
    marker = "[x]" if achievement["unlocked"] else "[ ]"
    label = RARITY_LABELS.get(achievement["rarity"], achievement["rarity"])
    new_tag = " NEW!" if achievement.get("new") else ""
    return (
        f"  {marker} {achievement['icon']} {achievement['name']:<20} "
        f"{label:<10} {achievement['description']}{new_tag}"
    )


def display_achievements(achievements: list[dict], progress: int) -> None:
    """
    Display the achievement board to the console.

    Args:
        achievements: List from get_all_achievements_status()
        progress: Percentage of achievements unlocked
    """
    unlocked = sum(1 for a in achievements if a["unlocked"])

    print(f"🏅 Achievements: {unlocked}/{len(achievements)}")
    print(f"   {format_progress_bar(progress)}")
    print()
    for achievement in achievements:
        print(format_achievement(achievement))
    print()


def display_next(achievement: Achievement | None) -> None:
    if achievement is None:
        print("🎉 Every achievement unlocked!")
    else:
        print(f"➡️  Next up: {achievement.icon} {achievement.name} - {achievement.description}")
    print()


def display_new(achievements: list[Achievement]) -> None:
    if not achievements:
        return
    print("✨ New achievements:")
    for achievement in achievements:
        print(f"   {achievement.icon} {achievement.name}")
    print()
