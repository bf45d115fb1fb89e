import copy
import json
import os
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient
from dotenv import load_dotenv

# Load the test environment before any brandflow import: settings are read at import time.
load_dotenv(dotenv_path=os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env.test"), override=True)

from brandflow.flows.errors import PersistenceError  # noqa: E402
from brandflow.main import app  # noqa: E402
from brandflow.utils.rate_limiter import limiter  # noqa: E402


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta):
        self.now = self.now + delta


class InMemoryDocumentStore:
    """Dict-backed stand-in for MongoDocumentStore. Timestamps come from the shared clock."""

    def __init__(self, clock):
        self.clock = clock
        self.collections = {}
        self.failing = set()
        self.calls = []

    def _check(self, operation):
        self.calls.append(operation)
        if operation in self.failing:
            raise PersistenceError(f"{operation} failed: store unavailable")

    async def get(self, collection, key):
        self._check("get")
        document = self.collections.get(collection, {}).get(key)
        return copy.deepcopy(document)

    async def set(self, collection, key, document, timestamp_field="updatedAt"):
        self._check("set")
        stored = copy.deepcopy(document)
        stored["_id"] = key
        stored[timestamp_field] = self.clock()
        self.collections.setdefault(collection, {})[key] = stored

    async def append(self, collection, document, timestamp_field="timestamp"):
        self._check("append")
        records = self.collections.setdefault(collection, {})
        doc_id = f"{len(records) + 1:024d}"
        stored = copy.deepcopy(document)
        stored["_id"] = doc_id
        stored[timestamp_field] = self.clock()
        records[doc_id] = stored
        return doc_id

    async def find_recent(self, collection, limit=20, sort_field="timestamp"):
        self._check("find_recent")
        records = list(self.collections.get(collection, {}).values())
        records.sort(key=lambda doc: (doc[sort_field], doc["_id"]), reverse=True)
        return copy.deepcopy(records[:limit])

    async def ping(self):
        self._check("ping")

    async def create_indexes(self):
        return None

    def close(self):
        return None

    def records(self, collection="flows"):
        return list(self.collections.get(collection, {}).values())


class FakeTextGenerator:
    """Replays queued outcomes; an Exception outcome is raised instead of returned."""

    def __init__(self, default="{}"):
        self.outcomes = []
        self.default = default
        self.calls = []

    def queue(self, *outcomes):
        self.outcomes.extend(outcomes)

    async def generate(self, prompt, params):
        self.calls.append((prompt, params))
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class LeadFunctionStub:
    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.payload = {"result": {"success": True, "leadId": "lead_123"}}
        self.error = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.error is not None:
            raise self.error
        self.requests.append({"url": str(request.url), "body": json.loads(request.content)})
        return httpx.Response(self.status_code, json=self.payload)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock):
    return InMemoryDocumentStore(clock)


@pytest.fixture
def generator():
    return FakeTextGenerator()


@pytest.fixture
def lead_function():
    return LeadFunctionStub()


@pytest.fixture
def brand_json():
    return json.dumps({
        "positioningStatement": "For growing teams who need clarity, Acme Corp is the platform that aligns work.",
        "valueProposition": "Acme Corp turns plans into shipped work.",
        "brandPillars": [{"pillar": "Clarity", "description": "Plain answers", "proofPoints": ["A", "B"]}],
        "targetPersonas": [{"name": "Ops Lead", "description": "Runs operations", "painPoints": ["Chaos"], "motivations": ["Control"]}],
        "competitiveDifferentiators": ["Speed", "Focus"],
        "messagingFramework": {"headline": "Ship it", "subheadline": "Faster", "keyMessages": ["One"], "callToAction": "Start"},
        "toneOfVoice": {"attributes": ["Direct"], "doExamples": ["Be brief"], "dontExamples": ["Ramble"]},
    })


@pytest.fixture(scope="function")
def test_client(mocker, clock, store, generator, lead_function):
    """
    TestClient whose lifespan wires in the in-memory store, the fake generator
    and a mocked lead function instead of MongoDB, Gemini and the network.
    """
    # Flows built by the app read the wall clock; keep the store on the same timeline.
    clock.now = datetime.now(timezone.utc)
    mocker.patch("brandflow.utils.lifecycle.build_document_store", return_value=store)
    mocker.patch("brandflow.utils.lifecycle.build_text_generator", return_value=generator)
    mocker.patch(
        "brandflow.utils.lifecycle.build_http_client",
        return_value=httpx.AsyncClient(transport=httpx.MockTransport(lead_function)),
    )
    limiter.reset()

    with TestClient(app) as client:
        yield client
