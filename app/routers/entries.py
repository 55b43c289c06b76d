# entries router — submit, list, analyze and reprocess journal entries
# every entry is analyzed before it is stored; analysis failures degrade to the default analysis

import asyncio
import hashlib
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import get_current_user, get_text_analyzer
from app.models.analysis import AnalysisResult, AnalyzeRequest
from app.models.journal import (
    JournalEntryCreate,
    JournalEntryResponse,
    ReprocessRequest,
    ReprocessResponse,
    ReprocessResult,
)
from app.services.db import EntryStore, get_entry_store
from app.services.text_analyzer import TextAnalyzer

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/entries", tags=["entries"])


def _clamp_score(score: float) -> float:
    return max(-1.0, min(1.0, score))


def _analysis_fields(analysis: AnalysisResult, now: datetime) -> dict:
    """entry fields written from an analysis result; the score is clamped here"""
    return {
        "mood": analysis.mood,
        "sentiment": analysis.sentiment,
        "sentiment_score": _clamp_score(analysis.sentiment_score),
        "emotions": analysis.emotions,
        "insight": analysis.insight,
        "is_processed": True,
        "updated_at": now.isoformat(),
    }


def _doc_to_entry(doc: dict) -> JournalEntryResponse:
    return JournalEntryResponse(
        id=doc.get("entry_id", ""),
        userId=doc.get("user_id", ""),
        content=doc.get("content", ""),
        createdAt=str(doc.get("created_at", "")),
        mood=doc.get("mood"),
        sentiment=doc.get("sentiment"),
        sentimentScore=doc.get("sentiment_score"),
        emotions=doc.get("emotions") or [],
        insight=doc.get("insight"),
        tags=doc.get("tags") or [],
        isProcessed=doc.get("is_processed", False),
    )


@router.post("", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    body: JournalEntryCreate,
    current_user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
    analyzer: TextAnalyzer = Depends(get_text_analyzer),
):
    """submit a new journal entry"""
    now = datetime.now(timezone.utc)

    # entry_id is an md5 hash of user_id + content + timestamp
    raw = f"{current_user['id']}:{body.content}:{now.isoformat()}"
    entry_id = hashlib.md5(raw.encode()).hexdigest()[:12]

    analysis = await analyzer.analyze(body.content)

    doc = {
        "entry_id": entry_id,
        "user_id": current_user["id"],
        "content": body.content,
        "tags": sorted(set(body.tags)),
        "created_at": now.isoformat(),
        **_analysis_fields(analysis, now),
    }
    await store.insert_entry(doc)

    logger.info(f"Entry created: {entry_id} by user {current_user['id']} (mood: {analysis.mood})")
    return _doc_to_entry(doc)


@router.get("", response_model=list[JournalEntryResponse])
async def list_entries(
    limit: int = Query(50, ge=1, le=200),
    skip: int = Query(0, ge=0),
    current_user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
):
    """list the caller's entries, newest first"""
    docs = await store.list_entries(current_user["id"], limit=limit, skip=skip)
    return [_doc_to_entry(d) for d in docs]


@router.post("/analyze", response_model=AnalysisResult)
async def analyze_text(
    body: AnalyzeRequest,
    current_user: dict = Depends(get_current_user),
    analyzer: TextAnalyzer = Depends(get_text_analyzer),
):
    """analyze free text without storing it"""
    return await analyzer.analyze(body.text)


@router.post("/reprocess", response_model=ReprocessResponse)
async def reprocess_entries(
    body: ReprocessRequest,
    current_user: dict = Depends(get_current_user),
    store: EntryStore = Depends(get_entry_store),
    analyzer: TextAnalyzer = Depends(get_text_analyzer),
):
    """re-analyze entries concurrently; each entry succeeds or fails on its own"""
    requested = list(dict.fromkeys(body.entry_ids))
    docs = await store.get_entries_by_ids(current_user["id"], requested)
    by_id = {d["entry_id"]: d for d in docs}

    async def reprocess_one(entry_id: str) -> ReprocessResult:
        doc = by_id.get(entry_id)
        if doc is None:
            return ReprocessResult(id=entry_id, success=False, error="Entry not found")
        try:
            analysis = await analyzer.analyze(doc.get("content", ""))
            await store.update_entry_analysis(entry_id, _analysis_fields(analysis, datetime.now(timezone.utc)))
            return ReprocessResult(id=entry_id, success=True)
        except Exception as e:
            logger.error(f"Error reprocessing entry {entry_id}: {e}")
            return ReprocessResult(id=entry_id, success=False, error=str(e))

    results = await asyncio.gather(*(reprocess_one(eid) for eid in requested))
    logger.info(f"Reprocessed {sum(r.success for r in results)}/{len(results)} entries for user {current_user['id']}")
    return ReprocessResponse(results=list(results))
