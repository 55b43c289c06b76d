# insights router — premium multi-entry insight synthesis and history

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from app.config import settings
from app.dependencies import get_current_user, get_dispatcher, get_text_analyzer, require_role
from app.models.insight import GenerateInsightsResponse, StoredInsight
from app.services import aggregation
from app.services.db import EntryStore, get_entry_store
from app.services.notifications import NotificationConfigError, NotificationDispatcher
from app.services.outcomes import Delivered
from app.services.prompt_builder import multi_entry_insights_prompt
from app.services.text_analyzer import TextAnalyzer

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/insights", tags=["insights"])


@router.post("/generate", response_model=GenerateInsightsResponse)
async def generate_insights(
    notify: bool = Query(False, description="push the summary to the user's device"),
    current_user: dict = Depends(require_role("premium")),
    store: EntryStore = Depends(get_entry_store),
    analyzer: TextAnalyzer = Depends(get_text_analyzer),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """synthesize insights from the last WEEKLY_WINDOW_DAYS days of entries"""
    user_id = current_user["id"]
    today = datetime.now(timezone.utc).date()
    start, end = aggregation.window_for(today, settings.WEEKLY_WINDOW_DAYS)
    entries = await store.query_entries(user_id, *aggregation.window_datetimes(start, end))

    if not entries:
        return GenerateInsightsResponse(insight=StoredInsight(date=today.isoformat()))

    synthesis = await analyzer.synthesize(multi_entry_insights_prompt(entries))
    insight = StoredInsight(
        date=today.isoformat(),
        entriesAnalyzed=len(entries),
        **synthesis.model_dump(),
    )
    await store.save_insight(user_id, insight.model_dump())
    logger.info(f"Insights generated for user {user_id} from {len(entries)} entries")

    notified = False
    if notify:
        try:
            outcome = await dispatcher.send_weekly_insights(user_id, [insight.summary])
            notified = isinstance(outcome, Delivered)
        except NotificationConfigError as e:
            logger.info(f"Weekly insights not pushed: {e}")

    return GenerateInsightsResponse(insight=insight, stored=True, notified=notified)


@router.get("/recent", response_model=list[StoredInsight])
async def get_recent_insights(
    current_user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
):
    """the five most recent stored insights, newest first"""
    docs = await store.recent_insights(current_user["id"], limit=5)
    return [StoredInsight(**d) for d in docs]
