# tests for insights router — premium synthesis, storage and optional push

import json

from app.services.push import PushProviderError
from tests.conftest import FREE_USER_ID, PREMIUM_USER_ID, make_entry

SYNTHESIS_JSON = json.dumps({
    "summary": "A steadier week with more rest.",
    "mood_trend": "improving",
    "emotional_anchors": ["morning walks"],
    "behavioral_patterns": ["writing before bed"],
    "warning_signs": [],
    "insightful_advice": "Keep the evening routine.",
    "ai_suggestions": ["Try a gratitude list"],
})


class TestGenerateInsights:
    """premium insight synthesis over a window"""

    async def test_free_user_forbidden(self, user_client):
        resp = await user_client.post("/insights/generate")
        assert resp.status_code == 403

    async def test_no_entries_returns_default_without_storing(self, premium_client, text_client, mock_db):
        resp = await premium_client.post("/insights/generate")
        assert resp.status_code == 200
        data = resp.json()
        assert data["stored"] is False
        assert data["insight"]["summary"] == "AI analysis could not be completed at this time."
        assert mock_db.insights.inserted == []
        text_client.complete.assert_not_called()

    async def test_generate_and_store(self, premium_client, text_client, push_client, mock_db):
        mock_db.journal_entries._data.extend([
            make_entry(PREMIUM_USER_ID, days_ago=2, content="Walked in the park."),
            make_entry(PREMIUM_USER_ID, days_ago=1, content="Slept well."),
        ])
        text_client.complete.return_value = SYNTHESIS_JSON

        resp = await premium_client.post("/insights/generate")
        data = resp.json()
        assert data["stored"] is True
        assert data["notified"] is False
        assert data["insight"]["mood_trend"] == "improving"
        assert data["insight"]["entriesAnalyzed"] == 2

        stored = mock_db.insights.inserted[0]
        assert stored["user_id"] == PREMIUM_USER_ID
        assert stored["summary"] == "A steadier week with more rest."
        push_client.send_to_token.assert_not_called()

        prompt = text_client.complete.await_args.args[0]
        assert prompt.index("Walked in the park.") < prompt.index("Slept well.")

    async def test_generate_with_notify(self, premium_client, text_client, push_client, mock_db):
        mock_db.journal_entries._data.append(make_entry(PREMIUM_USER_ID, days_ago=1))
        text_client.complete.return_value = SYNTHESIS_JSON

        resp = await premium_client.post("/insights/generate?notify=true")
        assert resp.json()["notified"] is True
        token, payload = push_client.send_to_token.await_args.args
        assert token == "token-premium"
        assert payload.body == "A steadier week with more rest."

    async def test_push_failure_does_not_fail_request(self, premium_client, text_client, push_client, mock_db):
        mock_db.journal_entries._data.append(make_entry(PREMIUM_USER_ID, days_ago=1))
        text_client.complete.return_value = SYNTHESIS_JSON
        push_client.send_to_token.side_effect = PushProviderError("messaging/registration-token-not-registered")

        resp = await premium_client.post("/insights/generate?notify=true")
        assert resp.status_code == 200
        assert resp.json()["stored"] is True
        assert resp.json()["notified"] is False


class TestRecentInsights:
    """stored insights, newest first"""

    async def test_recent_newest_first(self, user_client, mock_db):
        for day in ["2025-06-01", "2025-06-15", "2025-06-08"]:
            mock_db.insights._data.append({"user_id": FREE_USER_ID, "date": day, "summary": f"week of {day}"})
        mock_db.insights._data.append({"user_id": PREMIUM_USER_ID, "date": "2025-06-20", "summary": "not mine"})

        resp = await user_client.get("/insights/recent")
        assert resp.status_code == 200
        assert [i["date"] for i in resp.json()] == ["2025-06-15", "2025-06-08", "2025-06-01"]
