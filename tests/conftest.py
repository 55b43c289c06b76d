# shared fixtures for backend api tests
# provides mock db, test profiles, fake gemini / fcm clients and httpx test clients

import json
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient, ASGITransport

from app.config import settings
from app.main import app
from app.services.db import EntryStore, get_db, get_entry_store
from app.services.llm import get_text_client
from app.services.push import get_push_client
from app.dependencies import get_current_user


# test ids
FREE_USER_ID = "user_free_001"
PREMIUM_USER_ID = "user_premium_001"
CRON_SECRET = "test-cron-secret"


# test profile documents (as they'd appear from mongodb)

FREE_PROFILE = {
    "user_id": FREE_USER_ID,
    "role": "free",
    "is_active": True,
    "notifications_enabled": True,
    "push_token": "token-free",
    "created_at": "2025-06-01T00:00:00+00:00",
}

PREMIUM_PROFILE = {
    "user_id": PREMIUM_USER_ID,
    "role": "premium",
    "is_active": True,
    "notifications_enabled": True,
    "push_token": "token-premium",
    "created_at": "2025-05-15T00:00:00+00:00",
}


# sample data

ANALYSIS_JSON = json.dumps({
    "mood": "happy",
    "sentiment": "positive",
    "sentimentScore": 0.8,
    "emotions": ["joy", "gratitude", "calm"],
    "insight": "Keep noticing the small wins.",
})


def make_entry(user_id, days_ago=0, mood="neutral", emotions=None, content="Today was a day.", now=None, entry_id=None):
    """journal entry document created `days_ago` days before now"""
    now = now or datetime.now(timezone.utc)
    created = now - timedelta(days=days_ago)
    return {
        "entry_id": entry_id or uuid.uuid4().hex[:12],
        "user_id": user_id,
        "content": content,
        "created_at": created.isoformat(),
        "mood": mood,
        "sentiment": "neutral",
        "sentiment_score": 0.0,
        "emotions": list(emotions or []),
        "insight": "No insight available.",
        "tags": [],
        "is_processed": True,
    }


# async cursor mock

class AsyncCursorMock:
    """mock for motor's async cursor — supports async for and chained methods"""

    def __init__(self, data=None):
        self._data = data or []
        self._index = 0

    def sort(self, key, direction=1):
        self._data = sorted(
            self._data,
            key=lambda d: (d.get(key) is None, d.get(key) or ""),
            reverse=direction == -1,
        )
        return self

    def skip(self, n):
        self._data = self._data[n:]
        return self

    def limit(self, n):
        self._data = self._data[:n]
        return self

    def __aiter__(self):
        self._index = 0
        return self

    async def __anext__(self):
        if self._index >= len(self._data):
            raise StopAsyncIteration
        item = self._data[self._index]
        self._index += 1
        return item

    async def to_list(self, length=None):
        if length is not None:
            return self._data[:length]
        return self._data


def _project(doc, projection):
    """apply a mongodb inclusion / exclusion projection to a copy of doc"""
    if not projection:
        return dict(doc)
    included = [k for k, v in projection.items() if v and k != "_id"]
    if included:
        out = {k: doc[k] for k in included if k in doc}
        if projection.get("_id", 1) and "_id" in doc:
            out["_id"] = doc["_id"]
        return out
    return {k: v for k, v in doc.items() if projection.get(k, 1)}


class MockCollection:
    """mock for a motor collection with async methods"""

    def __init__(self, data=None):
        self._data = data or []
        self.inserted = []
        self.indexes = []

    def find(self, query=None, projection=None):
        results = self._data
        if query:
            results = [d for d in results if self._matches(d, query)]
        return AsyncCursorMock([_project(d, projection) for d in results])

    async def find_one(self, query=None, projection=None):
        for doc in self._data:
            if not query or self._matches(doc, query):
                return _project(doc, projection)
        return None

    async def insert_one(self, doc):
        oid = doc.get("_id", ObjectId())
        doc["_id"] = oid
        self._data.append(doc)
        self.inserted.append(doc)
        result = MagicMock()
        result.inserted_id = oid
        return result

    async def update_one(self, query, update, upsert=False):
        result = MagicMock()
        result.modified_count = 0
        result.upserted_id = None
        for doc in self._data:
            if self._matches(doc, query):
                if "$set" in update:
                    doc.update(update["$set"])
                result.modified_count = 1
                return result
        if upsert:
            doc = {k: v for k, v in query.items() if not isinstance(v, dict)}
            doc.update(update.get("$set", {}))
            await self.insert_one(doc)
            result.upserted_id = doc["_id"]
        return result

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))
        return "mock_index"

    def _matches(self, doc, query):
        """basic mongodb query matching for tests"""
        for key, value in query.items():
            doc_val = doc.get(key)
            if isinstance(value, dict):
                if "$in" in value and doc_val not in value["$in"]:
                    return False
                if "$gte" in value and (doc_val is None or doc_val < value["$gte"]):
                    return False
                if "$lte" in value and (doc_val is None or doc_val > value["$lte"]):
                    return False
            elif doc_val != value:
                return False
        return True


class MockDatabase:
    """mock database that mimics the Database class"""

    def __init__(self):
        self.profiles = MockCollection([FREE_PROFILE.copy(), PREMIUM_PROFILE.copy()])
        self.journal_entries = MockCollection([])
        self.insights = MockCollection([])
        self.connected = False

    async def connect(self):
        self.connected = True

    async def close(self):
        self.connected = False


@pytest.fixture
def mock_db():
    """create a fresh mock database for each test"""
    return MockDatabase()


@pytest.fixture
def store(mock_db):
    return EntryStore(mock_db)


@pytest.fixture
def text_client():
    """configured gemini client that answers with a full analysis object"""
    client = MagicMock()
    client.configured = True
    client.complete = AsyncMock(return_value=ANALYSIS_JSON)
    return client


@pytest.fixture
def push_client():
    """configured fcm client that accepts every send"""
    client = MagicMock()
    client.configured = True
    client.send_to_token = AsyncMock(return_value="projects/minddump/messages/1")
    return client


@pytest.fixture
def cron_secret(monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", CRON_SECRET)
    return CRON_SECRET


def _profile_dict(profile):
    """profile dict as get_current_user would return it"""
    doc = profile.copy()
    doc["id"] = doc["user_id"]
    return doc


def _override_capabilities(mock_db, text_client, push_client):
    store = EntryStore(mock_db)
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_entry_store] = lambda: store
    app.dependency_overrides[get_text_client] = lambda: text_client
    app.dependency_overrides[get_push_client] = lambda: push_client


@pytest_asyncio.fixture
async def client(mock_db, text_client, push_client, cron_secret):
    """httpx async test client with mocked capabilities, no auth override"""
    _override_capabilities(mock_db, text_client, push_client)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def user_client(mock_db, text_client, push_client, cron_secret):
    """client authenticated as a free-plan user"""
    _override_capabilities(mock_db, text_client, push_client)
    app.dependency_overrides[get_current_user] = lambda: _profile_dict(FREE_PROFILE)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def premium_client(mock_db, text_client, push_client, cron_secret):
    """client authenticated as a premium user"""
    _override_capabilities(mock_db, text_client, push_client)
    app.dependency_overrides[get_current_user] = lambda: _profile_dict(PREMIUM_PROFILE)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
