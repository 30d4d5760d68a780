"""
Pytest configuration and fixtures
"""
import os
import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

# Keep test runs off the network and the real log directory
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("OLLAMA_URL", "http://ollama.invalid")

from budget_app.core.config import get_settings
from budget_app.core.database import get_session_local, init_db, reset_engine
from budget_app.core.inference_client import (InferenceError,
                                              InferenceResponse,
                                              get_inference_client)
from budget_app.services.budget_store import (get_store_registry,
                                              reset_store_registry)


class FakeInferenceClient:
    """Stands in for the Ollama client; records every prompt it receives"""

    def __init__(self, reply: Optional[str] = "Your balance looks healthy.", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[dict] = []

    async def chat(self, prompt, system_prompt=None, history=None, **kwargs):
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt})
        if self.error is not None:
            raise self.error
        return InferenceResponse(model="fake-model", response=self.reply, done=True)


@pytest.fixture(autouse=True)
def db(tmp_path, monkeypatch):
    """Point the service at a fresh SQLite file for each test"""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'budget.db'}")
    get_settings.cache_clear()
    reset_engine()
    reset_store_registry()
    init_db()

    yield get_session_local()

    reset_store_registry()
    reset_engine()
    get_settings.cache_clear()


@pytest.fixture
def store():
    """The budget store of the configured organizational unit"""
    return get_store_registry().get(get_settings().store_name)


@pytest.fixture
def fake_llm():
    return FakeInferenceClient()


@pytest.fixture
def client(fake_llm):
    """Test client with the inference dependency replaced by `fake_llm`"""
    from fastapi.testclient import TestClient

    from budget_app.main import app

    app.dependency_overrides[get_inference_client] = lambda: fake_llm
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def failing_llm():
    return FakeInferenceClient(error=InferenceError("connection refused"))
