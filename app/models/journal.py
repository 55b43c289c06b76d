# journal models — entry creation, response and reprocessing schemas

from typing import Optional
from pydantic import BaseModel, Field

from app.config import settings


class JournalEntryCreate(BaseModel):
    """payload for a new journal entry — analyzed before it is stored"""
    content: str = Field(..., min_length=1, max_length=settings.JOURNAL_MAX_LENGTH, description="journal entry text")
    tags: list[str] = Field(default_factory=list, description="free-form tags")


class JournalEntryResponse(BaseModel):
    id: str
    user_id: str = Field(..., alias="userId")
    content: str
    created_at: str = Field(..., alias="createdAt")
    mood: Optional[str] = None
    sentiment: Optional[str] = None
    sentiment_score: Optional[float] = Field(None, alias="sentimentScore")
    emotions: list[str] = Field(default_factory=list)
    insight: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    is_processed: bool = Field(False, alias="isProcessed")

    model_config = {"populate_by_name": True}


class ReprocessRequest(BaseModel):
    entry_ids: list[str] = Field(..., alias="entryIds", max_length=100)

    model_config = {"populate_by_name": True}


class ReprocessResult(BaseModel):
    id: str
    success: bool
    error: Optional[str] = None


class ReprocessResponse(BaseModel):
    results: list[ReprocessResult] = Field(default_factory=list)
