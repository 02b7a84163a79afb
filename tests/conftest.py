"""
Shared pytest fixtures for test suite.

This module provides common fixtures used across multiple test files:
an app backed by a temporary SQLite store, a fake Firebase token verifier,
authenticated request headers and a mock LLM provider.
"""

import pytest
from unittest.mock import patch, MagicMock

from app import create_app
from src.inkwell.utils.errors import AuthorizationError
from src.inkwell.utils.llm import BaseLLMClient
from tests.test_constants import ALICE_UID, BOB_UID, ALICE_TOKEN, BOB_TOKEN


class FakeTokenVerifier:
    """Stands in for FirebaseTokenVerifier; knows a fixed set of tokens."""

    def __init__(self, tokens=None):
        self.tokens = tokens or {ALICE_TOKEN: ALICE_UID, BOB_TOKEN: BOB_UID}

    def verify(self, token):
        if token not in self.tokens:
            raise AuthorizationError("Not authorized")
        uid = self.tokens[token]
        return {"uid": uid, "email": f"{uid}@example.com"}


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def app_config(tmp_path):
    """Configuration overrides for a test app."""
    return {
        "TESTING": True,
        "USE_MONGO_STORAGE": False,
        "SQLITE_PATH": str(tmp_path / "inkwell-test.db"),
        "RATELIMIT_ENABLED": False,
        "RATELIMIT_STORAGE_URI": "memory://",
        "TOKEN_VERIFIER": FakeTokenVerifier(),
        "AI_REWRITE_PROVIDER": "gemini",
        "AI_ANALYSIS_PROVIDER": "openai",
    }


@pytest.fixture
def app(app_config):
    """Create a Flask app with isolated storage."""
    flask_app = create_app(config=app_config)
    yield flask_app
    flask_app.extensions["inkwell"]["database"].close()


@pytest.fixture
def client(app):
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def services(app):
    """Service instances of the test app."""
    return app.extensions["inkwell"]["services"]


@pytest.fixture
def alice_headers():
    return auth_header(ALICE_TOKEN)


@pytest.fixture
def bob_headers():
    return auth_header(BOB_TOKEN)


@pytest.fixture
def alice_document(client, alice_headers):
    """A private document owned by Alice."""
    response = client.post('/api/documents', json={
        "title": "The Lighthouse",
        "content": "<p>Mara kept the <strong>voices</strong> in jars.</p>",
    }, headers=alice_headers)
    assert response.status_code == 201
    return response.get_json()


@pytest.fixture
def public_document(client, alice_headers):
    """A public document owned by Alice."""
    response = client.post('/api/documents', json={
        "title": "Open Sea",
        "content": "<p>Everyone may read this one.</p>",
        "visibility": "public",
    }, headers=alice_headers)
    assert response.status_code == 201
    return response.get_json()


@pytest.fixture
def make_character(client, alice_headers):
    """Factory creating characters in a document owned by Alice."""
    def _make(document_id, name, **fields):
        payload = {"name": name, "document": document_id}
        payload.update(fields)
        response = client.post('/api/characters', json=payload, headers=alice_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _make


# ============================================================================
# LLM mocking
# ============================================================================

@pytest.fixture
def mock_llm_provider():
    """
    Mock LLM provider returned for every provider name.

    Patches the provider factory lookup used by AIService, so no network
    or API key is needed. Set ``generate.return_value`` or ``side_effect``
    to script responses.
    """
    provider = MagicMock(spec=BaseLLMClient)
    provider.provider_name = "mock"
    provider.model_name = "mock-model"
    provider.generate.return_value = "Rewritten text"
    with patch('src.inkwell.providers.factory.get_provider', return_value=provider) as mock_get:
        provider._mock_get_provider = mock_get
        yield provider
