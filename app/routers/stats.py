# stats router — weekly emotion stats, mood history/trends, keywords and weekly summary
# all stats are recomputed per request from the caller's entries, nothing is persisted

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.config import settings
from app.dependencies import get_current_user, get_text_analyzer, require_role
from app.models.analysis import KeywordAnalysis
from app.models.stats import (
    MoodHistoryPoint,
    MoodTrendsResponse,
    WeeklyStats,
    WeeklySummaryResponse,
)
from app.services import aggregation
from app.services.db import EntryStore, get_entry_store
from app.services.prompt_builder import keywords_prompt
from app.services.text_analyzer import TextAnalyzer

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/stats", tags=["stats"])

PERIOD_DAYS = {"week": 7, "month": 30, "year": 365}


async def _fetch_entries(store: EntryStore, user_id: str, start: datetime, end: datetime, limit: int | None = None) -> list[dict]:
    try:
        return await store.query_entries(user_id, start, end, limit=limit)
    except Exception as e:
        logger.error(f"Failed to fetch entries for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch entries",
        )


@router.get("/weekly", response_model=WeeklyStats)
async def get_weekly_stats(
    trend_mode: str = Query("period", alias="trendMode", pattern="^(period|entry)$"),
    current_user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
):
    """emotion statistics for the last WEEKLY_WINDOW_DAYS calendar days (today included)"""
    days = settings.WEEKLY_WINDOW_DAYS
    today = datetime.now(timezone.utc).date()
    start, end = aggregation.window_for(today, days)
    entries = await _fetch_entries(store, current_user["id"], *aggregation.window_datetimes(start, end))

    stats = aggregation.aggregate_weekly(entries, start, end)

    if trend_mode == "entry":
        stats.trends = aggregation.entry_to_entry_trends(entries)
    else:
        prev_start, prev_end = aggregation.window_for(start - timedelta(days=1), days)
        previous = await _fetch_entries(store, current_user["id"], *aggregation.window_datetimes(prev_start, prev_end))
        stats.trends = aggregation.period_over_period_trends(entries, previous)

    return stats


@router.get("/mood-history", response_model=list[MoodHistoryPoint])
async def get_mood_history(
    current_user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
):
    """mood per entry over the last MOOD_HISTORY_DAYS days, oldest first"""
    now = datetime.now(timezone.utc)
    since = now - timedelta(days=settings.MOOD_HISTORY_DAYS)
    entries = await _fetch_entries(store, current_user["id"], since, now)
    return aggregation.mood_history(entries)


@router.get("/mood-trends", response_model=MoodTrendsResponse)
async def get_mood_trends(
    period: str = Query("week"),
    current_user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
):
    """mood distribution over the last week, month or year"""
    if period not in PERIOD_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid period",
        )

    now = datetime.now(timezone.utc)
    entries = await _fetch_entries(store, current_user["id"], now - timedelta(days=PERIOD_DAYS[period]), now)
    return MoodTrendsResponse(
        totalEntries=len(entries),
        moodDistribution=aggregation.mood_distribution(entries),
    )


@router.get("/keywords", response_model=KeywordAnalysis)
async def get_keywords(
    current_user: dict = Depends(require_role("premium")),
    store: EntryStore = Depends(get_entry_store),
    analyzer: TextAnalyzer = Depends(get_text_analyzer),
):
    """top keywords and themes over recent entries (premium)"""
    now = datetime.now(timezone.utc)
    since = now - timedelta(days=settings.KEYWORDS_WINDOW_DAYS)
    entries = await _fetch_entries(store, current_user["id"], since, now, limit=settings.KEYWORDS_MAX_ENTRIES)

    if not entries:
        return KeywordAnalysis()

    return await analyzer.extract_keywords(keywords_prompt(entries))


@router.get("/summary/weekly", response_model=WeeklySummaryResponse)
async def get_weekly_summary(
    current_user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
    analyzer: TextAnalyzer = Depends(get_text_analyzer),
):
    """three insights and three suggestions for the last 7 days"""
    now = datetime.now(timezone.utc)
    entries = await _fetch_entries(store, current_user["id"], now - timedelta(days=7), now)

    if not entries:
        return WeeklySummaryResponse(entriesCount=0)

    summary = await analyzer.weekly_summary(entries)
    return WeeklySummaryResponse(
        entriesCount=len(entries),
        insights=summary.insights,
        suggestions=summary.suggestions,
    )
