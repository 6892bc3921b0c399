from datetime import datetime
from typing import ClassVar, Optional

from pydantic import BaseModel, Field, field_validator


class Symptom(BaseModel):
    __tablename__: ClassVar[str] = "symptoms"

    id: str
    name: str
    description: Optional[str] = None
    category_id: Optional[str] = None


class SymptomLogEntry(BaseModel):
    """One submission from the symptom logger. Rows are immutable once written."""

    __tablename__: ClassVar[str] = "user_symptoms"

    id: Optional[str] = None
    user_id: str
    symptom_ids: list[str]
    severity: Optional[int] = None  # 1-10
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class SymptomLogCreate(BaseModel):
    symptom_ids: list[str]
    severity: int = Field(5, ge=1, le=10)
    notes: Optional[str] = None

    @field_validator("symptom_ids")
    @classmethod
    def _at_least_one(cls, v: list[str]) -> list[str]:
        ids = list(dict.fromkeys(i for i in v if i))
        if not ids:
            raise ValueError("Please select at least one symptom")
        return ids

    @field_validator("notes")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None
