# Row and request schemas for the Supabase tables the backend reads and writes.

from models.symptom import Symptom, SymptomLogEntry, SymptomLogCreate
from models.health_score import HealthScoreFactors, HealthScoreSnapshot
from models.badge import BadgeDefinition, EarnedBadge
from models.chat_message import ChatMessage, ChatRequest

__all__ = [
    "Symptom",
    "SymptomLogEntry",
    "SymptomLogCreate",
    "HealthScoreFactors",
    "HealthScoreSnapshot",
    "BadgeDefinition",
    "EarnedBadge",
    "ChatMessage",
    "ChatRequest",
]
