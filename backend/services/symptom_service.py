"""
symptom_service.py — Symptom logging & history
Writes append-only symptom logs, reads back recent history with symptom
names resolved, and phrases a log as a question for the health assistant.
"""

import asyncio
import logging

from config import HISTORY_LIMIT
from models.symptom import Symptom, SymptomLogCreate, SymptomLogEntry
from supabase_rest import sb_select, sb_insert

logger = logging.getLogger(__name__)

UNKNOWN_SYMPTOM = "Unknown"


def symptom_names(log: dict, names: dict[str, str]) -> list[str]:
    return [names.get(sid, UNKNOWN_SYMPTOM) for sid in log.get("symptom_ids") or []]


def build_chat_prompt(log: dict, names: dict[str, str]) -> str:
    """Question the history view hands over to the chatbot for one log."""
    listed = ", ".join(symptom_names(log, names))
    notes = f"Additional notes: {log['notes']}. " if log.get("notes") else ""
    return (
        f"I have these symptoms: {listed}. Severity: {log.get('severity')}/10. {notes}"
        "What possible diseases could this indicate? What medications would you suggest? "
        "Any home remedies?"
    )


class SymptomService:
    @staticmethod
    async def list_symptoms() -> list[dict]:
        return await sb_select(Symptom.__tablename__, order="name.asc")

    @staticmethod
    async def name_lookup() -> dict[str, str]:
        rows = await sb_select(Symptom.__tablename__, columns="id,name")
        return {r["id"]: r["name"] for r in rows or []}

    @staticmethod
    async def create_log(user_id: str, data: SymptomLogCreate) -> dict:
        row = {"user_id": user_id, **data.model_dump()}
        created = await sb_insert(SymptomLogEntry.__tablename__, row)
        logger.info(f"Logged {len(data.symptom_ids)} symptom(s) for {user_id}")
        return SymptomLogEntry.model_validate(created).model_dump(mode="json")

    @staticmethod
    async def recent_history(user_id: str, limit: int = HISTORY_LIMIT) -> list[dict]:
        """Most recent logs first, each with ``symptom_names`` resolved."""
        logs, names = await asyncio.gather(
            sb_select(
                SymptomLogEntry.__tablename__,
                filters={"user_id": user_id},
                order="created_at.desc",
                limit=limit,
            ),
            SymptomService.name_lookup(),
        )
        entries = [SymptomLogEntry.model_validate(r).model_dump(mode="json") for r in logs or []]
        return [{**log, "symptom_names": symptom_names(log, names)} for log in entries]

    @staticmethod
    async def get_log(user_id: str, log_id: str) -> dict | None:
        rows = await sb_select(SymptomLogEntry.__tablename__, filters={"id": log_id, "user_id": user_id})
        return SymptomLogEntry.model_validate(rows[0]).model_dump(mode="json") if rows else None

    @staticmethod
    async def chat_prompt_for(user_id: str, log_id: str) -> str | None:
        log = await SymptomService.get_log(user_id, log_id)
        if log is None:
            return None
        names = await SymptomService.name_lookup()
        return build_chat_prompt(log, names)
