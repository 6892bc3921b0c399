from datetime import datetime
from typing import ClassVar, Literal, Optional

from pydantic import BaseModel, field_validator


class ChatMessage(BaseModel):
    __tablename__: ClassVar[str] = "chat_messages"

    role: Literal["user", "assistant"]
    content: str
    created_at: Optional[datetime] = None


class ChatRequest(BaseModel):
    message: str

    @field_validator("message")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message must not be empty")
        return v
