from datetime import datetime
from typing import ClassVar, Optional

from pydantic import BaseModel

LOGS_COUNT = "logs_count"
STREAK_DAYS = "streak_days"


class BadgeDefinition(BaseModel):
    __tablename__: ClassVar[str] = "badges"

    id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    requirement_type: str  # logs_count | streak_days
    requirement_value: int


class EarnedBadge(BaseModel):
    __tablename__: ClassVar[str] = "user_badges"

    badge_id: str
    user_id: str
    earned_at: Optional[datetime] = None
