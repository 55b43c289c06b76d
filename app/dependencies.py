# fastapi dependency injection
# provides get_current_user, role checks, the cron secret guard and the
# insight / notification components wired to their capabilities

import hmac
import logging
from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.config import settings
from app.services.auth_service import decode_token
from app.services.db import EntryStore, get_entry_store
from app.services.inactivity import InactivityScanner
from app.services.llm import get_text_client
from app.services.notifications import NotificationDispatcher
from app.services.push import get_push_client
from app.services.text_analyzer import TextAnalyzer

logger = logging.getLogger(__name__)

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    store: EntryStore = Depends(get_entry_store),
) -> dict:
    """extract and validate the current user from the jwt bearer token"""
    token = credentials.credentials
    payload = decode_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing subject",
        )

    profile = await store.get_profile(user_id)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User profile not found",
        )

    profile["id"] = user_id
    return profile


def require_role(role: str):
    """factory for role-based access control dependency"""

    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        if current_user.get("role") != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {role}",
            )
        return current_user

    return role_checker


async def verify_cron_secret(x_cron_secret: Optional[str] = Header(None)) -> None:
    """guard for the scheduler-triggered endpoints"""
    if not x_cron_secret:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing cron secret",
        )
    if not settings.CRON_SECRET or not hmac.compare_digest(x_cron_secret.encode(), settings.CRON_SECRET.encode()):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )


# components

async def get_text_analyzer(client=Depends(get_text_client)) -> TextAnalyzer:
    return TextAnalyzer(client)


async def get_dispatcher(
    push=Depends(get_push_client),
    store: EntryStore = Depends(get_entry_store),
) -> NotificationDispatcher:
    return NotificationDispatcher(push=push, store=store)


async def get_scanner(
    store: EntryStore = Depends(get_entry_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> InactivityScanner:
    return InactivityScanner(store=store, dispatcher=dispatcher)
