"""
badge_service.py — Achievements
Checks the badge catalog against a user's total log count and current
logging streak, and grants each newly satisfied badge exactly once.
"""

import asyncio
import logging

from models.badge import BadgeDefinition, EarnedBadge, LOGS_COUNT, STREAK_DAYS
from models.symptom import SymptomLogEntry
from services.streak_service import calculate_streak, resolve_timezone, today_in
from supabase_rest import sb_select, sb_insert

logger = logging.getLogger(__name__)


def requirement_met(badge: BadgeDefinition, logs_count: int, streak: int) -> bool:
    if badge.requirement_type == LOGS_COUNT:
        return logs_count >= badge.requirement_value
    if badge.requirement_type == STREAK_DAYS:
        return streak >= badge.requirement_value
    return False


def find_new_badges(
    catalog: list[BadgeDefinition],
    earned_ids: set[str],
    logs_count: int,
    streak: int,
) -> list[BadgeDefinition]:
    """Badges from the catalog that are satisfied now and not yet earned.

    ``earned_ids`` is copied and extended as badges qualify, so a single pass
    never returns the same badge id twice.
    """
    seen = set(earned_ids)
    newly_earned = []
    for badge in catalog:
        if badge.id in seen:
            continue
        if requirement_met(badge, logs_count, streak):
            newly_earned.append(badge)
            seen.add(badge.id)
    return newly_earned


def badge_notification(badge: BadgeDefinition) -> dict:
    return {
        "title": "🎉 New Badge Earned!",
        "description": f'You\'ve earned the "{badge.name}" badge!',
        "badge_id": badge.id,
    }


class BadgeService:
    @staticmethod
    async def fetch_catalog_and_earned(user_id: str) -> tuple[list[BadgeDefinition], list[EarnedBadge]]:
        """Catalog (ordered by requirement_value) and the user's grants, fetched concurrently."""
        catalog_rows, earned_rows = await asyncio.gather(
            sb_select(BadgeDefinition.__tablename__, order="requirement_value.asc"),
            sb_select(EarnedBadge.__tablename__, filters={"user_id": user_id}),
        )
        catalog = [BadgeDefinition.model_validate(r) for r in catalog_rows or []]
        earned = [EarnedBadge.model_validate(r) for r in earned_rows or []]
        return catalog, earned

    @staticmethod
    async def list_with_status(user_id: str) -> list[dict]:
        catalog, earned = await BadgeService.fetch_catalog_and_earned(user_id)
        earned_at = {e.badge_id: e.earned_at for e in earned}
        return [
            {
                **badge.model_dump(),
                "earned": badge.id in earned_at,
                "earned_at": earned_at.get(badge.id),
            }
            for badge in catalog
        ]

    @staticmethod
    async def user_stats(user_id: str, tz_name: str | None = None) -> dict:
        """Total log count and current streak for a user."""
        tz = resolve_timezone(tz_name)
        logs = await sb_select(
            SymptomLogEntry.__tablename__,
            filters={"user_id": user_id},
            columns="created_at",
            order="created_at.asc",
        )
        timestamps = [log["created_at"] for log in logs or []]
        return {
            "logs_count": len(timestamps),
            "current_streak": calculate_streak(timestamps, today_in(tz), tz),
        }

    @staticmethod
    async def evaluate(user_id: str, tz_name: str | None = None) -> list[dict]:
        """Grant every newly satisfied badge and return one notification per grant.

        Never raises: if the stats, the catalog or the earned set cannot be
        read, the pass is abandoned and retried on the next evaluation.
        """
        try:
            stats = await BadgeService.user_stats(user_id, tz_name)
            catalog, earned = await BadgeService.fetch_catalog_and_earned(user_id)
        except Exception as e:
            logger.error(f"Error checking badges for {user_id}: {e}")
            return []

        earned_ids = {e.badge_id for e in earned}
        notifications = []
        for badge in find_new_badges(catalog, earned_ids, stats["logs_count"], stats["current_streak"]):
            try:
                await sb_insert(EarnedBadge.__tablename__, {"user_id": user_id, "badge_id": badge.id})
            except Exception as e:
                logger.error(f"Failed to award badge {badge.id} to {user_id}: {e}")
                continue
            logger.info(f"Awarded badge '{badge.name}' to {user_id}")
            notifications.append(badge_notification(badge))
        return notifications
