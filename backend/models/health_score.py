from datetime import datetime
from typing import ClassVar, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Trend = Literal["improving", "worsening", "stable"]


class HealthScoreFactors(BaseModel):
    # stored camelCase inside the factors JSON column
    model_config = ConfigDict(populate_by_name=True)

    recent_severity: float = Field(alias="recentSeverity")
    trend: Trend = "stable"
    recovery_rate: int = Field(alias="recoveryRate", ge=0, le=100)


class HealthScoreSnapshot(BaseModel):
    __tablename__: ClassVar[str] = "health_scores"

    score: int = Field(ge=0, le=100)
    factors: HealthScoreFactors
    created_at: Optional[datetime] = None

    def to_row(self, user_id: str) -> dict:
        """Insert payload for the append-only health_scores table."""
        return {
            "user_id": user_id,
            "score": self.score,
            "factors": self.factors.model_dump(by_alias=True),
        }
