import os
import tempfile

# Keep test runs from writing into the working tree
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "study_assistant_tests", "app.log"))

import json
import pytest
from fastapi.testclient import TestClient

from api_server.main import create_app
from utils.rate_limiter import MinIntervalRateLimiter
from tests.helpers import FakeClock, StubModelClient, make_questions


@pytest.fixture
def stub_client():
    return StubModelClient(replies=[json.dumps({"questions": make_questions()})])


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def client(stub_client, fake_clock):
    app = create_app(
        model_client=stub_client,
        summarizer_limiter=MinIntervalRateLimiter(min_interval_ms=1000, clock=fake_clock)
    )
    with TestClient(app) as test_client:
        yield test_client
