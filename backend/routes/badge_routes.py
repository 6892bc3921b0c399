import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from auth import get_current_user
from services.badge_service import BadgeService
from services.streak_service import resolve_timezone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/badges", tags=["Badges"])


def _check_tz(tz: Optional[str]) -> Optional[str]:
    try:
        resolve_timezone(tz)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return tz


@router.get("")
async def list_badges(user_id: str = Depends(get_current_user)):
    """Full catalog with the user's earned status per badge."""
    try:
        return await BadgeService.list_with_status(user_id)
    except Exception as e:
        logger.error(f"Error fetching badges for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load badges")


@router.get("/stats")
async def badge_stats(tz: Optional[str] = None, user_id: str = Depends(get_current_user)):
    tz = _check_tz(tz)
    try:
        return await BadgeService.user_stats(user_id, tz)
    except Exception as e:
        logger.error(f"Error computing streak for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to compute logging streak")


@router.post("/evaluate")
async def evaluate_badges(tz: Optional[str] = None, user_id: str = Depends(get_current_user)):
    """Grant newly earned badges. Always succeeds; an aborted pass simply earns nothing."""
    tz = _check_tz(tz)
    notifications = await BadgeService.evaluate(user_id, tz)
    return {"status": "success", "new_badges": notifications}
