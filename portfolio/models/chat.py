"""
Chat log and analytics models.
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import Field, field_validator

from portfolio.models.base import CamelModel


class PageContext(CamelModel):
    """Where on the site a chat was started."""
    page: str
    category: Optional[str] = None
    video_id: Optional[str] = None


class ChatLog(CamelModel):
    """A single question/answer exchange with the site assistant."""
    id: str
    session_id: str
    user_message: str
    assistant_response: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    page_context: Optional[PageContext] = None
    relevant_docs: Optional[int] = None
    response_time: Optional[float] = None  # milliseconds
    needs_human_reply: bool = False

    @field_validator("timestamp", mode="after")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class TopQuestion(CamelModel):
    question: str
    count: int


class ChatStats(CamelModel):
    """Aggregated chat analytics for the admin dashboard."""
    total_chats: int = 0
    chats_today: int = 0
    chats_this_week: int = 0
    chats_this_month: int = 0
    top_questions: List[TopQuestion] = Field(default_factory=list)
    needs_reply: int = 0
