"""Shared fixtures: test settings, stubbed persona loader / model gateway, and an API client."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from src.core.orchestrator import ChatOrchestrator
from src.core.security import resolve_identity
from src.main import app

from factories import PERSONA, make_settings


@pytest.fixture()
def settings():
    return make_settings()


@pytest.fixture()
def persona_loader():
    loader = AsyncMock()
    loader.load_persona.return_value = PERSONA
    return loader


@pytest.fixture()
def model_gateway():
    gateway = AsyncMock()
    gateway.generate.return_value = "Document as dysmenorrhea."
    return gateway


@pytest.fixture()
def identity():
    """The user id the auth gate resolves; set to None to simulate a signed-out request."""
    return {"user_id": "user_123"}


@pytest.fixture()
def client(settings, persona_loader, model_gateway, identity):
    saved_settings = app.state.settings
    saved_orchestrator = app.state.orchestrator

    app.state.settings = settings
    app.state.orchestrator = ChatOrchestrator(settings, persona_loader, model_gateway)
    app.dependency_overrides[resolve_identity] = lambda: identity["user_id"]

    yield TestClient(app)

    app.dependency_overrides.clear()
    app.state.settings = saved_settings
    app.state.orchestrator = saved_orchestrator
