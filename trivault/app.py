"""
FastAPI web application for trivault.

Provides REST API endpoints for achievement status, unlock checks and
acknowledging viewed achievements.
"""

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from trivault.achievements import (
    AchievementData,
    achievement_to_dict,
    diff_unlocked,
    get_all_achievements_status,
)
from trivault.config import validate_config
from trivault.storage import KeyValueStorage
from trivault.tracker import AchievementTracker

app = FastAPI(
    title="trivault",
    description="Achievement tracking for TriVault seal collectors",
    version="0.1.0",
)


class Snapshot(BaseModel):
    """Request model for a progress snapshot."""

    seals_collected: int = Field(0, ge=0, description="Seals collected")
    has_all_seals: bool = Field(False, description="Whether every seal is collected")
    total_interactions: int = Field(0, ge=0, description="Total vault interactions")
    is_early_adopter: bool = Field(False, description="Early adopter flag")
    referral_count: int = Field(0, ge=0, description="Referred collectors")

    def to_data(self) -> AchievementData:
        return AchievementData(
            seals_collected=self.seals_collected,
            has_all_seals=self.has_all_seals,
            total_interactions=self.total_interactions,
            is_early_adopter=self.is_early_adopter,
            referral_count=self.referral_count,
        )


class CheckRequest(BaseModel):
    """Request model for checking newly unlocked achievements."""

    previous: Snapshot
    current: Snapshot


class ViewedUpdate(BaseModel):
    """Request model for marking achievements as viewed."""

    ids: list[str] = Field(..., description="Achievement ids to acknowledge")


def _get_tracker(data: AchievementData | None = None) -> AchievementTracker:
    """
    Build a tracker backed by the configured storage.

    Raises:
        HTTPException: on configuration errors
    """
    try:
        validate_config()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=f"Configuration error: {e}")

    return AchievementTracker(KeyValueStorage(), snapshot=data)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/api/achievements")
def get_achievements(
    seals: int = Query(0, ge=0),
    has_all_seals: bool = Query(False),
    interactions: int = Query(0, ge=0),
    early_adopter: bool = Query(False),
    referrals: int = Query(0, ge=0),
):
    """
    Get all achievements with unlock status for a snapshot.

    Returns:
        JSON with achievements list, summary, next achievement and new ids
    """
    data = AchievementData(
        seals_collected=seals,
        has_all_seals=has_all_seals,
        total_interactions=interactions,
        is_early_adopter=early_adopter,
        referral_count=referrals,
    )
    tracker = _get_tracker(data)
    achievements = get_all_achievements_status(
        data, tracker.viewed.viewed_ids, tracker.catalog
    )
    next_up = tracker.next_achievement

    return {
        "achievements": achievements,
        "summary": {
            "total": len(achievements),
            "unlocked": len(tracker.unlocked_achievements),
            "progress": tracker.progress,
        },
        "next": achievement_to_dict(next_up) if next_up else None,
        "new": [a.id for a in tracker.new_achievements],
    }


@app.post("/api/achievements/check")
def check_achievements(request: CheckRequest):
    """
    Get achievements unlocked between two snapshots.

    Args:
        request: CheckRequest with previous and current snapshots

    Returns:
        JSON with the ids of newly unlocked achievements
    """
    gained = diff_unlocked(request.previous.to_data(), request.current.to_data())
    return {"unlocked": [a.id for a in gained]}


@app.post("/api/achievements/viewed")
def mark_viewed(update: ViewedUpdate):
    """
    Mark achievements as viewed.

    Args:
        update: ViewedUpdate with achievement ids

    Returns:
        JSON with the full viewed set
    """
    tracker = _get_tracker()
    viewed = tracker.mark_as_viewed(update.ids)
    return {"viewed": sorted(viewed)}
