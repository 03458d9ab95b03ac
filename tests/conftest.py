import copy
from types import SimpleNamespace

import httpx
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from jose import jwt
from pymongo.errors import PyMongoError

from studysphere.ai.support_router import get_gemini_transport
from studysphere.config import Settings, get_settings
from studysphere.db import get_db
from studysphere.main import app

JWT_SECRET = "test-secret"


# ==================== IN-MEMORY MONGO ====================

def _matches(doc: dict, query: dict) -> bool:
    for key, expected in (query or {}).items():
        value = doc.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if value not in expected["$in"]:
                return False
        elif value != expected:
            return False
    return True


class FakeCursor:
    def __init__(self, docs):
        self._docs = list(docs)

    def sort(self, key, direction=1):
        self._docs.sort(key=lambda d: d.get(key), reverse=direction == -1)
        return self

    def limit(self, count):
        self._docs = self._docs[:count]
        return self

    async def to_list(self, length=None):
        docs = [copy.deepcopy(d) for d in self._docs]
        return docs if length is None else docs[:length]


class FakeCollection:
    def __init__(self):
        self.docs = []
        self.fail_when = None

    async def insert_one(self, doc):
        outcome = self.fail_when(doc) if self.fail_when is not None else None
        if isinstance(outcome, Exception):
            raise outcome
        if outcome:
            raise PyMongoError("duplicate key")
        doc.setdefault("_id", ObjectId())
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, query=None, sort=None):
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query=None):
        return FakeCursor(d for d in self.docs if _matches(d, query))

    async def delete_one(self, query):
        for index, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def count_documents(self, query):
        return sum(1 for d in self.docs if _matches(d, query))

    async def create_index(self, *args, **kwargs):
        return None

    def aggregate(self, pipeline):
        # Only {"$group": {"_id": "$field", "count": {"$sum": 1}}}
        field = pipeline[0]["$group"]["_id"].lstrip("$")
        counts = {}
        for doc in self.docs:
            counts[doc.get(field)] = counts.get(doc.get(field), 0) + 1
        return FakeCursor({"_id": key, "count": count} for key, count in counts.items())


class FakeDatabase:
    def __init__(self):
        self._collections = {}
        self.ping_error = None

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return self._collections.setdefault(name, FakeCollection())

    def __getitem__(self, name):
        return getattr(self, name)

    async def command(self, name):
        if self.ping_error is not None:
            raise self.ping_error
        return {"ok": 1}


# ==================== HELPERS ====================

def make_token(user_id: str, role: str = "student", name: str = "Test User") -> str:
    return jwt.encode({"sub": user_id, "role": role, "name": name}, JWT_SECRET, algorithm="HS256")


def auth_header(user_id: str, role: str = "student", name: str = "Test User") -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, role, name)}"}


def gemini_payload(text: str, finish_reason: str = "STOP") -> dict:
    candidate = {"content": {"parts": [{"text": text}], "role": "model"}}
    if finish_reason is not None:
        candidate["finishReason"] = finish_reason
    return {"candidates": [candidate]}


class GeminiStub:
    """Scripted Gemini endpoint: each call pops the next response (dict, status int or exception)"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, int):
            return httpx.Response(response, json={"error": {"message": "vendor failure"}})
        return httpx.Response(200, json=response)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


# ==================== FIXTURES ====================

@pytest.fixture
def settings():
    return Settings(gemini_api_key="test-key", jwt_secret_key=JWT_SECRET, app_env="development")


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def gemini():
    return GeminiStub()


@pytest.fixture
def client(settings, fake_db, gemini):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_gemini_transport] = lambda: gemini.transport
    yield TestClient(app)
    app.dependency_overrides.clear()
