import logging

from fastapi import APIRouter, Depends, HTTPException

from auth import get_current_user
from config import HISTORY_LIMIT
from services.health_score_service import HealthScoreService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get("/score")
async def health_score(user_id: str = Depends(get_current_user)):
    """Score the last 30 days of symptom logs and append the result to the history."""
    try:
        snapshot = await HealthScoreService.calculate(user_id)
        return snapshot.model_dump(mode="json", by_alias=True)
    except Exception as e:
        logger.error(f"Error calculating health score for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to calculate health score")


@router.get("/score/history")
async def health_score_history(limit: int = HISTORY_LIMIT, user_id: str = Depends(get_current_user)):
    try:
        return await HealthScoreService.history(user_id, limit=max(1, min(limit, 365)))
    except Exception as e:
        logger.error(f"Error loading health score history for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load health score history")
