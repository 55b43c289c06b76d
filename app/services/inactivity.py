# inactivity scanner — the scheduled reminder job
#
# stages, strictly sequential within one scan:
#   enumerate active users -> filter (enabled + token) -> resolve last entry
#   -> classify (days since last entry >= threshold) -> dispatch -> report
#
# nothing is persisted as an "already notified" marker; every scan re-derives
# candidates from last entry dates, so a crashed scan is simply a skipped cycle.

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from app.config import settings
from app.models.notification import NotificationPayload
from app.services.outcomes import Delivered, InvalidToken, TransientFailure

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


class ScanAbortedError(RuntimeError):
    """the user population could not be enumerated"""


@dataclass
class NotificationCandidate:
    user_id: str
    push_token: str
    last_entry_date: Optional[datetime]
    days_since_last_entry: float


@dataclass
class DispatchOutcome:
    user_id: str
    success: bool
    message_id: Optional[str] = None
    error_kind: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ScanReport:
    candidates: list[NotificationCandidate] = field(default_factory=list)
    outcomes: list[DispatchOutcome] = field(default_factory=list)

    @property
    def dispatched(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)


def days_since(last_entry: Optional[datetime], now: datetime) -> float:
    if last_entry is None:
        return math.inf
    return (now - last_entry).total_seconds() / SECONDS_PER_DAY


def dispatch_outcome(user_id: str, outcome) -> DispatchOutcome:
    """flatten a delivery variant into the per-candidate record"""
    if isinstance(outcome, Delivered):
        return DispatchOutcome(user_id=user_id, success=True, message_id=outcome.message_id)
    if isinstance(outcome, InvalidToken):
        return DispatchOutcome(user_id=user_id, success=False, error_kind=outcome.kind, error=outcome.code)
    if isinstance(outcome, TransientFailure):
        return DispatchOutcome(user_id=user_id, success=False, error_kind=outcome.kind, error=outcome.reason)
    return DispatchOutcome(user_id=user_id, success=False, error_kind="unknown", error=repr(outcome))


def reminder_payload() -> NotificationPayload:
    return NotificationPayload(
        title=settings.REMINDER_TITLE,
        body=settings.REMINDER_BODY,
        data={"type": "reminder"},
    )


class InactivityScanner:

    def __init__(
        self,
        store,
        dispatcher,
        threshold_days: float = settings.INACTIVITY_THRESHOLD_DAYS,
        concurrency: int = settings.NOTIFICATION_CONCURRENCY,
        clear_invalid_tokens: bool = settings.CLEAR_INVALID_PUSH_TOKENS,
        payload: Optional[NotificationPayload] = None,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.threshold_days = threshold_days
        self.concurrency = max(1, concurrency)
        self.clear_invalid_tokens = clear_invalid_tokens
        self.payload = payload or reminder_payload()

    @staticmethod
    def is_eligible(user: dict) -> bool:
        """notifications switched on and a push token present"""
        return user.get("notifications_enabled") is True and bool(user.get("push_token"))

    async def enumerate_users(self) -> list[dict]:
        try:
            users = await self.store.query_active_users()
        except Exception as e:
            logger.error(f"Failed to enumerate active users, aborting scan: {e}")
            raise ScanAbortedError("Failed to fetch users") from e

        # each user appears at most once
        seen: dict[str, dict] = {}
        for user in users:
            user_id = user.get("user_id")
            if user_id and user_id not in seen and self.is_eligible(user):
                seen[user_id] = user
        return list(seen.values())

    async def _resolve_candidate(self, user: dict, now: datetime) -> Optional[NotificationCandidate]:
        user_id = user["user_id"]
        try:
            last_entry = await self.store.last_entry_date(user_id)
        except Exception as e:
            logger.error(f"Error fetching last entry for user {user_id}, skipping: {e}")
            return None

        days = days_since(last_entry, now)
        if days < self.threshold_days:
            return None
        return NotificationCandidate(
            user_id=user_id,
            push_token=user["push_token"],
            last_entry_date=last_entry,
            days_since_last_entry=days,
        )

    async def find_candidates(self, users: list[dict], now: datetime) -> list[NotificationCandidate]:
        resolved = await asyncio.gather(*(self._resolve_candidate(u, now) for u in users))
        return [c for c in resolved if c is not None]

    async def _dispatch_one(self, candidate: NotificationCandidate, semaphore: asyncio.Semaphore) -> DispatchOutcome:
        async with semaphore:
            try:
                outcome = await self.dispatcher.send(
                    self.payload,
                    push_token=candidate.push_token,
                    user_id=candidate.user_id,
                )
            except Exception as e:
                logger.warning(f"Dispatch to user {candidate.user_id} raised: {e}")
                return DispatchOutcome(
                    user_id=candidate.user_id,
                    success=False,
                    error_kind="exception",
                    error=f"{type(e).__name__}: {e}",
                )

        return dispatch_outcome(candidate.user_id, outcome)

    async def dispatch_all(self, candidates: list[NotificationCandidate]) -> list[DispatchOutcome]:
        semaphore = asyncio.Semaphore(self.concurrency)
        return list(await asyncio.gather(*(self._dispatch_one(c, semaphore) for c in candidates)))

    async def _clear_invalid_tokens(self, outcomes: list[DispatchOutcome]) -> None:
        for outcome in outcomes:
            if outcome.error_kind != InvalidToken.kind:
                continue
            try:
                await self.store.clear_push_token(outcome.user_id)
                logger.info(f"Cleared invalid push token for user {outcome.user_id}")
            except Exception as e:
                logger.warning(f"Could not clear push token for user {outcome.user_id}: {e}")

    async def scan(self, now: Optional[datetime] = None) -> ScanReport:
        now = now or datetime.now(timezone.utc)
        logger.info(f"Inactivity scan started (threshold: {self.threshold_days} days)")

        users = await self.enumerate_users()
        candidates = await self.find_candidates(users, now)
        outcomes = await self.dispatch_all(candidates)

        if self.clear_invalid_tokens:
            await self._clear_invalid_tokens(outcomes)

        report = ScanReport(candidates=candidates, outcomes=outcomes)
        logger.info(
            f"Inactivity scan complete: {len(users)} eligible users, {len(candidates)} candidates, "
            f"{report.succeeded}/{report.dispatched} notifications delivered"
        )
        return report
