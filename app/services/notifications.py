# notification dispatcher — resolves a push token and sends one notification
# classifies provider errors into InvalidToken (terminal) and TransientFailure;
# delivery failures come back as values, only a missing token/user raises

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from app.models.notification import NotificationPayload
from app.services.outcomes import Delivered, DeliveryOutcome, InvalidToken, TransientFailure
from app.services.push import INVALID_REGISTRATION_TOKEN, TOKEN_NOT_REGISTERED, PushProviderError

logger = logging.getLogger(__name__)

TERMINAL_TOKEN_CODES = {INVALID_REGISTRATION_TOKEN, TOKEN_NOT_REGISTERED}


class NotificationConfigError(ValueError):
    """no push token given and none resolvable for the user"""


def classify_provider_error(code: str) -> DeliveryOutcome:
    normalized = code if code.startswith("messaging/") else f"messaging/{code}"
    if normalized in TERMINAL_TOKEN_CODES:
        return InvalidToken(code=normalized)
    return TransientFailure(reason=normalized)


class NotificationDispatcher:
    """push delivery for one user/token at a time"""

    def __init__(self, push, store):
        self.push = push
        self.store = store

    async def resolve_token(self, push_token: Optional[str] = None, user_id: Optional[str] = None) -> str:
        if push_token:
            return push_token
        if user_id:
            token = await self.store.get_push_token(user_id)
            if token:
                return token
            raise NotificationConfigError(f"No push token stored for user {user_id}")
        raise NotificationConfigError("A push token or a user id is required")

    async def deliver(self, token: str, payload: NotificationPayload) -> DeliveryOutcome:
        """send to a known token. never raises."""
        if not self.push.configured:
            logger.warning("Push messaging not configured, notification not sent")
            return TransientFailure(reason="push messaging not configured")

        try:
            message_id = await self.push.send_to_token(token, payload)
        except PushProviderError as e:
            return classify_provider_error(e.code)
        except Exception as e:
            # timeouts and transport errors from the sdk
            return TransientFailure(reason=f"{type(e).__name__}: {e}")
        return Delivered(message_id=message_id)

    async def send(
        self,
        payload: NotificationPayload,
        push_token: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> DeliveryOutcome:
        token = await self.resolve_token(push_token=push_token, user_id=user_id)
        outcome = await self.deliver(token, payload)
        if not isinstance(outcome, Delivered):
            logger.warning(f"Push to user {user_id or '<token>'} failed: {outcome.kind}")
        return outcome

    async def send_to_users(self, user_ids: list[str], payload: NotificationPayload) -> dict[str, Optional[DeliveryOutcome]]:
        """send the same payload to several users. users without a token map to None."""

        async def one(user_id: str) -> Optional[DeliveryOutcome]:
            try:
                return await self.send(payload, user_id=user_id)
            except NotificationConfigError:
                logger.info(f"Skipping user {user_id}: no push token")
                return None
            except Exception as e:
                logger.error(f"Token lookup failed for user {user_id}: {e}")
                return TransientFailure(reason=f"{type(e).__name__}: {e}")

        unique_ids = list(dict.fromkeys(user_ids))
        results = await asyncio.gather(*(one(uid) for uid in unique_ids))
        return dict(zip(unique_ids, results))

    async def send_weekly_insights(self, user_id: str, insights: list[str]) -> DeliveryOutcome:
        return await self.send(
            NotificationPayload(
                title="Your Weekly Journal Insights",
                body="\n".join(insights),
                icon="/icons/insights-icon.png",
                data={
                    "type": "weekly-insights",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                },
            ),
            user_id=user_id,
        )
