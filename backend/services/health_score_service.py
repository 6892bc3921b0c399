"""
health_score_service.py — Health Score
Turns the last 30 days of symptom severities into a 0..100 wellness score
with a trend label and recovery rate, and appends every result to the
health_scores history.
"""

import logging
import math
from datetime import datetime, timezone, timedelta

from config import HISTORY_LIMIT, SCORE_WINDOW_DAYS, SCORE_SNAPSHOT_MODE
from models.health_score import HealthScoreFactors, HealthScoreSnapshot
from models.symptom import SymptomLogEntry
from services.streak_service import parse_timestamp
from supabase_rest import sb_select, sb_insert

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 85
TREND_DEADBAND = 1.0
SEVERITY_PENALTY = 5
IMPROVING_BONUS = 10
WORSENING_PENALTY = 15


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _mean_severity(logs: list[dict]) -> float:
    return sum((log.get("severity") or 0) for log in logs) / len(logs)


def classify_trend(logs: list[dict]) -> str:
    """Compare the mean severity of the later half of the window with the earlier half."""
    if len(logs) < 2:
        return "stable"
    midpoint = len(logs) // 2
    first_half = _mean_severity(logs[:midpoint])
    second_half = _mean_severity(logs[midpoint:])
    if second_half < first_half - TREND_DEADBAND:
        return "improving"
    if second_half > first_half + TREND_DEADBAND:
        return "worsening"
    return "stable"


class HealthScoreService:
    @staticmethod
    def compute_snapshot(logs: list[dict]) -> HealthScoreSnapshot:
        """Score a window of logs sorted ascending by created_at."""
        now = datetime.now(timezone.utc)
        if not logs:
            return HealthScoreSnapshot(
                score=DEFAULT_SCORE,
                factors=HealthScoreFactors(recent_severity=0, trend="stable", recovery_rate=100),
                created_at=now,
            )

        avg_severity = _mean_severity(logs)
        trend = classify_trend(logs)

        recovery_rate = int(_round_half_up(max(0.0, 100 - avg_severity * 10)))

        score = 100 - avg_severity * SEVERITY_PENALTY
        if trend == "improving":
            score += IMPROVING_BONUS
        elif trend == "worsening":
            score -= WORSENING_PENALTY
        score = max(0, min(100, int(_round_half_up(score))))

        return HealthScoreSnapshot(
            score=score,
            factors=HealthScoreFactors(
                recent_severity=_round_half_up(avg_severity, 1),
                trend=trend,
                recovery_rate=recovery_rate,
            ),
            created_at=now,
        )

    @staticmethod
    async def fetch_window(user_id: str, days: int = SCORE_WINDOW_DAYS) -> list[dict]:
        since = datetime.now(timezone.utc) - timedelta(days=days)
        return await sb_select(
            SymptomLogEntry.__tablename__,
            filters={"user_id": user_id},
            columns="severity,created_at",
            gte={"created_at": since.isoformat()},
            order="created_at.asc",
        )

    @staticmethod
    async def _should_persist(user_id: str, logs: list[dict]) -> bool:
        if SCORE_SNAPSHOT_MODE != "on_new_data":
            return True
        if not logs:
            return False
        latest = await sb_select(
            HealthScoreSnapshot.__tablename__,
            filters={"user_id": user_id},
            columns="created_at",
            order="created_at.desc",
            limit=1,
        )
        if not latest:
            return True
        return parse_timestamp(logs[-1]["created_at"]) > parse_timestamp(latest[0]["created_at"])

    @staticmethod
    async def persist(user_id: str, snapshot: HealthScoreSnapshot, logs: list[dict]) -> dict | None:
        """Append the snapshot. Failures are logged and never reach the caller."""
        try:
            if not await HealthScoreService._should_persist(user_id, logs):
                return None
            return await sb_insert(HealthScoreSnapshot.__tablename__, snapshot.to_row(user_id))
        except Exception as e:
            logger.error(f"Failed to save health score for {user_id}: {e}")
            return None

    @staticmethod
    async def calculate(user_id: str) -> HealthScoreSnapshot:
        """Fetch the trailing window, score it and append the result to the history."""
        logs = await HealthScoreService.fetch_window(user_id)
        snapshot = HealthScoreService.compute_snapshot(logs)
        await HealthScoreService.persist(user_id, snapshot, logs)
        return snapshot

    @staticmethod
    async def history(user_id: str, limit: int = HISTORY_LIMIT) -> list[dict]:
        return await sb_select(
            HealthScoreSnapshot.__tablename__,
            filters={"user_id": user_id},
            order="created_at.desc",
            limit=limit,
        )
