# push service — firebase cloud messaging via firebase-admin
# the push-messaging capability: send_to_token(token, payload) -> message id,
# raising PushProviderError(code) with the provider's error code on failure

import asyncio
import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

from app.config import settings
from app.models.notification import NotificationPayload

logger = logging.getLogger(__name__)

INVALID_REGISTRATION_TOKEN = "messaging/invalid-registration-token"
TOKEN_NOT_REGISTERED = "messaging/registration-token-not-registered"


class PushProviderError(Exception):
    """provider-reported send failure carrying a machine-readable code"""

    def __init__(self, code: str, message: str = ""):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}" if message else code)


def _provider_code(error: exceptions.FirebaseError) -> str:
    """map a firebase-admin exception to a messaging/* error code"""
    if isinstance(error, messaging.UnregisteredError):
        return TOKEN_NOT_REGISTERED
    if isinstance(error, exceptions.InvalidArgumentError) and "registration token" in str(error).lower():
        return INVALID_REGISTRATION_TOKEN
    return "messaging/" + str(error.code).lower().replace("_", "-")


class FirebasePushClient:
    """sends one notification per call to a single registration token"""

    def __init__(self, credentials_path: str):
        self.credentials_path = credentials_path
        self._app: Optional[firebase_admin.App] = None

    @property
    def configured(self) -> bool:
        return bool(self.credentials_path)

    def _get_app(self) -> firebase_admin.App:
        if self._app is None:
            try:
                self._app = firebase_admin.get_app()
            except ValueError:
                logger.info("Initializing Firebase Admin app")
                self._app = firebase_admin.initialize_app(credentials.Certificate(self.credentials_path))
        return self._app

    async def send_to_token(self, token: str, payload: NotificationPayload) -> str:
        message = messaging.Message(
            token=token,
            notification=messaging.Notification(
                title=payload.title,
                body=payload.body,
                image=payload.icon,
            ),
            data=payload.data,
        )
        try:
            # firebase-admin is blocking; keep the event loop free
            return await asyncio.to_thread(messaging.send, message, app=self._get_app())
        except exceptions.FirebaseError as e:
            raise PushProviderError(_provider_code(e), str(e)) from e


_push_client: Optional[FirebasePushClient] = None


def get_push_client() -> FirebasePushClient:
    """dependency injection for the push-messaging capability"""
    global _push_client
    if _push_client is None:
        _push_client = FirebasePushClient(settings.FIREBASE_CREDENTIALS_PATH)
    return _push_client
