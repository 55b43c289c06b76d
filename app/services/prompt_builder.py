# prompt builder — renders journal entries into gemini prompts
# pure functions: no network, no randomness, same input renders the same prompt

import json

from app.services.db import parse_timestamp

MOODS = ["happy", "sad", "anxious", "angry", "neutral", "excited", "confused", "mixed"]
SENTIMENTS = ["positive", "negative", "neutral"]

ENTRY_DELIMITER = "\n---\n"

# per-entry character caps
KEYWORD_ENTRY_CHARS = 1000
SUMMARY_ENTRY_CHARS = 300


def _escape_quotes(text: str) -> str:
    return text.replace('"', '\\"')


def single_entry_prompt(text: str) -> str:
    """prompt for single-entry mood analysis (5-field json shape)"""
    return (
        "Analyze the following journal entry and provide:\n"
        f"1. The primary mood (choose from: {', '.join(MOODS)})\n"
        f"2. Overall sentiment ({', '.join(SENTIMENTS[:-1])}, or {SENTIMENTS[-1]})\n"
        "3. Sentiment score (-1 to +1, where -1 is most negative, +1 is most positive)\n"
        "4. Top 3 emotions expressed (single lowercase words like joy, fear, gratitude, stress)\n"
        "5. A short, thoughtful insight or suggestion (1-2 sentences) that might help the person\n"
        "\n"
        "Format your response as a JSON object with the following keys: "
        "mood, sentiment, sentimentScore, emotions (array), insight.\n"
        "Respond only with the JSON object.\n"
        "\n"
        f'Journal entry: "{_escape_quotes(text)}"'
    )


def multi_entry_insights_prompt(entries: list[dict]) -> str:
    """prompt for multi-entry insight synthesis (weekly / premium insights)"""
    joined = ENTRY_DELIMITER.join(str(e.get("content", "")) for e in entries)
    return (
        "Analyze the following journal entries and provide insights. The user is on a premium plan.\n"
        "Entries:\n"
        f"{joined}\n"
        "---\n"
        "Generate a JSON object with the following structure:\n"
        "{\n"
        '  "summary": "A brief summary of the user\'s week.",\n'
        '  "mood_trend": "improving/declining/stable/mixed",\n'
        '  "emotional_anchors": ["people, places or activities that steady the user"],\n'
        '  "behavioral_patterns": ["recurring behaviors or habits"],\n'
        '  "warning_signs": ["signals worth paying attention to, empty if none"],\n'
        '  "insightful_advice": "One paragraph of advice based on the entries.",\n'
        '  "ai_suggestions": ["Suggestion 1", "Suggestion 2"]\n'
        "}\n"
        "Respond only with the JSON object."
    )


def keywords_prompt(entries: list[dict]) -> str:
    """prompt for top-10 keyword extraction plus theme grouping"""
    joined = ENTRY_DELIMITER.join(
        str(e.get("content", ""))[:KEYWORD_ENTRY_CHARS] for e in entries
    )
    return (
        "Analyze the following user journal entries. Extract the top 10 most frequent keywords "
        '(words or phrases) and, if possible, group them into themes like "work," "family," "health." '
        'Return a JSON object with two fields: "keywords" (an array of objects {word, count}) and '
        '"themes" (an array of objects {theme, keywords: [word, ...]}).\n'
        "\n"
        "Entries:\n"
        f"{joined}\n"
        "\n"
        "Respond only in JSON format."
    )


def weekly_summary_prompt(entries: list[dict]) -> str:
    """prompt for the three-insights / three-suggestions weekly summary"""
    condensed = []
    for e in entries:
        content = str(e.get("content", ""))
        created = parse_timestamp(e.get("created_at"))
        condensed.append({
            "date": created.date().isoformat() if created else None,
            "content": content[:SUMMARY_ENTRY_CHARS] + ("..." if len(content) > SUMMARY_ENTRY_CHARS else ""),
            "mood": e.get("mood"),
            "sentiment": e.get("sentiment"),
        })
    return (
        "Analyze these journal entries from the past week and provide:\n"
        "1. Three meaningful insights about patterns, emotions, or behaviors\n"
        "2. Three helpful suggestions for the user based on their journaling\n"
        "\n"
        "Format your response as a JSON object with these keys: "
        "insights (array of 3 strings), suggestions (array of 3 strings).\n"
        "\n"
        f"Journal entries: {json.dumps(condensed, ensure_ascii=False)}"
    )
