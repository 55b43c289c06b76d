# notifications router — cron-triggered inactivity scan, push settings and test sends

import logging
import math

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import get_current_user, get_dispatcher, get_scanner, verify_cron_secret
from app.models.notification import (
    CandidateResponse,
    DispatchOutcomeResponse,
    NotificationPayload,
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
    ScanReportResponse,
)
from app.services.db import EntryStore, get_entry_store
from app.services.inactivity import (
    DispatchOutcome,
    InactivityScanner,
    ScanAbortedError,
    ScanReport,
    dispatch_outcome,
)
from app.services.notifications import NotificationConfigError, NotificationDispatcher

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/notifications", tags=["notifications"])


def _outcome_to_response(o: DispatchOutcome) -> DispatchOutcomeResponse:
    return DispatchOutcomeResponse(
        userId=o.user_id,
        success=o.success,
        messageId=o.message_id,
        errorKind=o.error_kind,
        error=o.error,
    )


def _report_to_response(report: ScanReport) -> ScanReportResponse:
    return ScanReportResponse(
        candidates=[
            CandidateResponse(
                userId=c.user_id,
                lastEntryDate=c.last_entry_date.date().isoformat() if c.last_entry_date else None,
                # infinity (never wrote) is not representable in json
                daysSinceLastEntry=None if math.isinf(c.days_since_last_entry) else round(c.days_since_last_entry, 2),
            )
            for c in report.candidates
        ],
        dispatched=report.dispatched,
        succeeded=report.succeeded,
        outcomes=[_outcome_to_response(o) for o in report.outcomes],
    )


@router.post("/daily-check", response_model=ScanReportResponse, dependencies=[Depends(verify_cron_secret)])
async def daily_check(scanner: InactivityScanner = Depends(get_scanner)):
    """scan for inactive users and send reminders. 200 even when some sends fail."""
    try:
        report = await scanner.scan()
    except ScanAbortedError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    return _report_to_response(report)


@router.put("/settings", response_model=NotificationSettingsResponse)
async def update_settings(
    body: NotificationSettingsUpdate,
    current_user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
):
    """store the caller's push token and/or enabled flag"""
    profile = await store.update_notification_settings(
        current_user["id"],
        push_token=body.push_token,
        notifications_enabled=body.notifications_enabled,
    )
    return NotificationSettingsResponse(
        userId=current_user["id"],
        notificationsEnabled=bool(profile.get("notifications_enabled")),
        hasPushToken=bool(profile.get("push_token")),
    )


@router.post("/test", response_model=DispatchOutcomeResponse)
async def send_test_notification(
    current_user: dict = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """send a test notification to the caller's stored token"""
    user_id = current_user["id"]
    try:
        outcome = await dispatcher.send(
            NotificationPayload(
                title="MindDump",
                body="Notifications are working.",
                data={"type": "test"},
            ),
            user_id=user_id,
        )
    except NotificationConfigError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return _outcome_to_response(dispatch_outcome(user_id, outcome))
