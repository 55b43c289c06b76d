# aggregation engine — windowed emotion / mood statistics over journal entries
#
# ties (dominant mood, top emotions, mood distribution) resolve to the
# first-encountered value in input order: dicts keep insertion order and
# sorted() is stable.

import logging
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional

from app.models.stats import (
    DailyEmotions,
    EmotionCount,
    MoodDistributionItem,
    MoodHistoryPoint,
    WeeklyStats,
)
from app.services.db import parse_timestamp

logger = logging.getLogger(__name__)

TOP_EMOTIONS_LIMIT = 5
DEFAULT_MOOD = "neutral"


def window_for(end: date, days: int) -> tuple[date, date]:
    """inclusive calendar-day window of `days` days ending on `end`"""
    return end - timedelta(days=days - 1), end


def window_datetimes(start: date, end: date) -> tuple[datetime, datetime]:
    """utc datetime range covering the whole of [start, end]"""
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end, time.max, tzinfo=timezone.utc),
    )


def entry_date(entry: dict) -> Optional[date]:
    try:
        created = parse_timestamp(entry.get("created_at"))
    except ValueError:
        logger.warning(f"Unparseable created_at on entry {entry.get('entry_id')}: {entry.get('created_at')!r}")
        return None
    return created.date() if created else None


def _entry_emotions(entry: dict) -> list[str]:
    return [e for e in (entry.get("emotions") or []) if isinstance(e, str) and e]


def _first_max(tally: dict[str, int]) -> Optional[str]:
    best, best_count = None, 0
    for key, count in tally.items():
        if count > best_count:
            best, best_count = key, count
    return best


def _sorted_desc(tally: dict[str, int]) -> list[tuple[str, int]]:
    return sorted(tally.items(), key=lambda kv: kv[1], reverse=True)


def emotion_counts(entries: Iterable[dict]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for entry in entries:
        for emotion in _entry_emotions(entry):
            counts[emotion] = counts.get(emotion, 0) + 1
    return counts


def aggregate_weekly(entries: list[dict], start: date, end: date) -> WeeklyStats:
    """aggregate entries over the inclusive calendar window [start, end].

    every day in the window gets a bucket (empty map when nothing was written),
    entries outside the window are ignored. duplicate emotions within one
    entry are counted as given.
    """
    buckets: dict[date, dict[str, int]] = {}
    day = start
    while day <= end:
        buckets[day] = {}
        day += timedelta(days=1)

    totals: dict[str, int] = {}
    moods: dict[str, int] = {}
    total_entries = 0

    for entry in entries:
        day = entry_date(entry)
        if day is None or day not in buckets:
            continue
        total_entries += 1

        mood = entry.get("mood")
        if mood:
            moods[mood] = moods.get(mood, 0) + 1

        for emotion in _entry_emotions(entry):
            totals[emotion] = totals.get(emotion, 0) + 1
            buckets[day][emotion] = buckets[day].get(emotion, 0) + 1

    ranked = _sorted_desc(totals)

    return WeeklyStats(
        totalEntries=total_entries,
        emotionCounts=dict(ranked),
        dailyEmotions=[
            DailyEmotions(date=d.isoformat(), emotionCounts=counts)
            for d, counts in buckets.items()
        ],
        dominantMood=_first_max(moods) or DEFAULT_MOOD,
        topEmotions=[
            EmotionCount(emotion=emotion, count=count)
            for emotion, count in ranked[:TOP_EMOTIONS_LIMIT]
        ],
    )


# trends

def trend_labels(current: dict[str, int], previous: dict[str, int]) -> list[str]:
    """'More X' / 'Less X' for every emotion whose count changed"""
    labels = []
    for emotion, count in current.items():
        before = previous.get(emotion, 0)
        if count > before:
            labels.append(f"More {emotion}")
        elif count < before:
            labels.append(f"Less {emotion}")
    for emotion, before in previous.items():
        if emotion not in current and before > 0:
            labels.append(f"Less {emotion}")
    return labels


def entry_to_entry_trends(entries: list[dict]) -> list[str]:
    """local delta: window totals against the counts each entry's predecessor
    contributed (i.e. every entry but the last)"""
    current = dict(_sorted_desc(emotion_counts(entries)))
    previous = emotion_counts(entries[:-1])
    return trend_labels(current, previous)


def period_over_period_trends(current_entries: list[dict], previous_entries: list[dict]) -> list[str]:
    """window totals against the totals of the preceding window of equal length"""
    current = dict(_sorted_desc(emotion_counts(current_entries)))
    return trend_labels(current, emotion_counts(previous_entries))


# mood distribution / history

def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def mood_distribution(entries: list[dict]) -> list[MoodDistributionItem]:
    """mood counts sorted by count desc; percentage is of all entries, mood or not"""
    total = len(entries)
    tally: dict[str, int] = {}
    for entry in entries:
        mood = entry.get("mood")
        if mood:
            tally[mood] = tally.get(mood, 0) + 1

    return [
        MoodDistributionItem(mood=mood, count=count, percentage=_round_half_up(count / total * 100))
        for mood, count in _sorted_desc(tally)
    ]


def mood_history(entries: list[dict]) -> list[MoodHistoryPoint]:
    return [
        MoodHistoryPoint(date=str(entry.get("created_at", "")), mood=entry.get("mood") or DEFAULT_MOOD)
        for entry in entries
    ]
