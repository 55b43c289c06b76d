# tests for aggregation engine — windowed emotion / mood statistics

from datetime import date

from app.services.aggregation import (
    aggregate_weekly,
    entry_to_entry_trends,
    mood_distribution,
    mood_history,
    period_over_period_trends,
    trend_labels,
    window_datetimes,
    window_for,
)

DAY1 = date(2025, 6, 9)
DAY2 = date(2025, 6, 10)
DAY3 = date(2025, 6, 11)


def _entry(day, emotions=(), mood=None, hour=12):
    return {
        "created_at": f"{day.isoformat()}T{hour:02d}:00:00+00:00",
        "emotions": list(emotions),
        "mood": mood,
    }


class TestWindows:
    """inclusive day windows ending today"""

    def test_window_is_inclusive(self):
        start, end = window_for(DAY3, 7)
        assert end == DAY3
        assert (end - start).days == 6

    def test_window_datetimes_cover_whole_days(self):
        start, end = window_datetimes(DAY1, DAY1)
        assert start.isoformat() == "2025-06-09T00:00:00+00:00"
        assert end.isoformat().startswith("2025-06-09T23:59:59")


class TestAggregateWeekly:
    """daily buckets, dominant mood and top emotions"""

    def test_three_day_scenario(self):
        entries = [
            _entry(DAY1, ["joy"]),
            _entry(DAY1, ["joy", "stress"]),
            _entry(DAY3, ["calm"]),
        ]
        stats = aggregate_weekly(entries, DAY1, DAY3)

        assert stats.total_entries == 3
        assert stats.emotion_counts == {"joy": 2, "stress": 1, "calm": 1}
        assert [d.date for d in stats.daily_emotions] == ["2025-06-09", "2025-06-10", "2025-06-11"]
        assert stats.daily_emotions[0].emotion_counts == {"joy": 2, "stress": 1}
        assert stats.daily_emotions[1].emotion_counts == {}
        assert stats.daily_emotions[2].emotion_counts == {"calm": 1}
        assert [(e.emotion, e.count) for e in stats.top_emotions] == [("joy", 2), ("stress", 1), ("calm", 1)]

    def test_daily_buckets_reconcile_with_totals(self):
        entries = [
            _entry(DAY1, ["joy", "fear"]),
            _entry(DAY2, ["fear"]),
            _entry(DAY2, ["hope", "joy", "joy"]),
            _entry(DAY3, ["calm"]),
        ]
        stats = aggregate_weekly(entries, DAY1, DAY3)
        for emotion, total in stats.emotion_counts.items():
            assert sum(d.emotion_counts.get(emotion, 0) for d in stats.daily_emotions) == total

    def test_empty_window_still_has_every_bucket(self):
        stats = aggregate_weekly([], DAY1, date(2025, 6, 15))
        assert stats.total_entries == 0
        assert len(stats.daily_emotions) == 7
        assert all(d.emotion_counts == {} for d in stats.daily_emotions)
        assert stats.dominant_mood == "neutral"
        assert stats.top_emotions == []

    def test_entries_outside_window_ignored(self):
        entries = [_entry(date(2025, 6, 1), ["anger"]), _entry(DAY2, ["joy"])]
        stats = aggregate_weekly(entries, DAY1, DAY3)
        assert stats.total_entries == 1
        assert "anger" not in stats.emotion_counts

    def test_unparseable_timestamp_skipped(self):
        entries = [{"created_at": "yesterday", "emotions": ["joy"]}, _entry(DAY1, ["calm"])]
        stats = aggregate_weekly(entries, DAY1, DAY3)
        assert stats.emotion_counts == {"calm": 1}

    def test_dominant_mood_tie_goes_to_first_encountered(self):
        entries = [
            _entry(DAY1, mood="sad"),
            _entry(DAY1, mood="happy"),
            _entry(DAY2, mood="happy"),
            _entry(DAY3, mood="sad"),
        ]
        assert aggregate_weekly(entries, DAY1, DAY3).dominant_mood == "sad"

    def test_dominant_mood_uses_mood_not_emotions(self):
        entries = [_entry(DAY1, ["joy", "joy"], mood="anxious")]
        assert aggregate_weekly(entries, DAY1, DAY1).dominant_mood == "anxious"

    def test_top_emotions_capped_at_five(self):
        entries = [_entry(DAY1, ["a", "b", "c", "d", "e", "f"])]
        stats = aggregate_weekly(entries, DAY1, DAY1)
        assert [e.emotion for e in stats.top_emotions] == ["a", "b", "c", "d", "e"]
        assert len(stats.emotion_counts) == 6


class TestTrends:
    """period and entry trend labels"""

    def test_trend_labels(self):
        labels = trend_labels({"joy": 3, "fear": 1, "calm": 2}, {"joy": 1, "fear": 2, "calm": 2, "anger": 1})
        assert labels == ["More joy", "Less fear", "Less anger"]

    def test_entry_to_entry_compares_against_all_but_last(self):
        entries = [_entry(DAY1, ["joy"]), _entry(DAY2, ["joy", "stress"])]
        # totals {joy:2, stress:1} vs {joy:1}
        assert entry_to_entry_trends(entries) == ["More joy", "More stress"]

    def test_entry_to_entry_single_entry(self):
        assert entry_to_entry_trends([_entry(DAY1, ["joy"])]) == ["More joy"]

    def test_period_over_period(self):
        current = [_entry(DAY2, ["calm"])]
        previous = [_entry(DAY1, ["stress"]), _entry(DAY1, ["calm"])]
        assert period_over_period_trends(current, previous) == ["Less stress"]


class TestMoodDistribution:
    """mood counts and mood history"""

    def test_percentages_of_all_entries(self):
        entries = [
            {"mood": "happy"},
            {"mood": "sad"},
            {"mood": "happy"},
            {"mood": None},
        ]
        dist = mood_distribution(entries)
        assert [(m.mood, m.count, m.percentage) for m in dist] == [("happy", 2, 50), ("sad", 1, 25)]

    def test_rounds_half_up(self):
        # 1/8 = 12.5% -> 13
        entries = [{"mood": "calm"}] + [{"mood": "happy"}] * 7
        dist = {m.mood: m.percentage for m in mood_distribution(entries)}
        assert dist["calm"] == 13
        assert dist["happy"] == 88

    def test_empty(self):
        assert mood_distribution([]) == []

    def test_history_defaults_missing_mood(self):
        history = mood_history([{"created_at": "2025-06-09T12:00:00+00:00"}])
        assert history[0].mood == "neutral"
        assert history[0].date == "2025-06-09T12:00:00+00:00"
