# notification models — push payloads, settings updates and scan reports

from typing import Optional
from pydantic import BaseModel, Field


class NotificationPayload(BaseModel):
    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    data: Optional[dict[str, str]] = None
    icon: Optional[str] = None


class NotificationSettingsUpdate(BaseModel):
    """user-settable push token / enabled flag"""
    push_token: Optional[str] = Field(None, alias="pushToken")
    notifications_enabled: Optional[bool] = Field(None, alias="notificationsEnabled")

    model_config = {"populate_by_name": True}


class NotificationSettingsResponse(BaseModel):
    user_id: str = Field(..., alias="userId")
    notifications_enabled: bool = Field(False, alias="notificationsEnabled")
    has_push_token: bool = Field(False, alias="hasPushToken")

    model_config = {"populate_by_name": True}


class DispatchOutcomeResponse(BaseModel):
    user_id: str = Field(..., alias="userId")
    success: bool
    message_id: Optional[str] = Field(None, alias="messageId")
    error_kind: Optional[str] = Field(None, alias="errorKind")
    error: Optional[str] = None

    model_config = {"populate_by_name": True}


class CandidateResponse(BaseModel):
    """a reminder candidate. daysSinceLastEntry is null when the user never wrote."""
    user_id: str = Field(..., alias="userId")
    last_entry_date: Optional[str] = Field(None, alias="lastEntryDate")
    days_since_last_entry: Optional[float] = Field(None, alias="daysSinceLastEntry")

    model_config = {"populate_by_name": True}


class ScanReportResponse(BaseModel):
    candidates: list[CandidateResponse] = Field(default_factory=list)
    dispatched: int = 0
    succeeded: int = 0
    outcomes: list[DispatchOutcomeResponse] = Field(default_factory=list)
