from __future__ import annotations

from datetime import timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from formsync.app import create_app
from formsync.auth import AuthSession, StaticIdentityProvider
from formsync.cache import ReadCache
from formsync.client import FormsClient
from formsync.config import Settings
from formsync.notify import ToastNotifier
from formsync.screens import AuthoringSession, Router
from formsync.store import SidebarPreference


@pytest.fixture(params=["sqlite", "json"])
def settings(request, tmp_path, monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", request.param)
    monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "app.db"))
    monkeypatch.setenv("JSON_PATH", str(tmp_path / "jsonstore.json"))
    monkeypatch.setenv("PREFS_PATH", str(tmp_path / "prefs.json"))
    monkeypatch.setenv("PUBLIC_HOST", "forms.example.com")
    return Settings()


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def api(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def connect(app):
    def _connect() -> FormsClient:
        return FormsClient("http://testserver", transport=httpx.ASGITransport(app=app))

    return _connect


@pytest.fixture()
def make_session(settings):
    def _make(client: FormsClient, subject_id: str | None = "alice", **kwargs) -> AuthoringSession:
        return AuthoringSession(
            client=client,
            cache=kwargs.pop("cache", ReadCache()),
            auth=AuthSession(StaticIdentityProvider(subject_id)),
            notifier=kwargs.pop("notifier", ToastNotifier()),
            navigator=kwargs.pop("navigator", Router()),
            sidebar=SidebarPreference(settings.prefs_path),
            public_host=settings.public_host,
            tz=timezone.utc,
            **kwargs,
        )

    return _make


def create_form(api: TestClient, **overrides) -> str:
    payload = {
        "title": "Feedback",
        "workspace": "alice",
        "header": {"icon": None, "cover": None},
        "style": {"font": "sans"},
        "options": {"publicResponses": True, "lockedResponses": False},
        "blocks": [{"id": "b1", "type": "text", "label": "Name"}],
    }
    payload.update(overrides)
    res = api.post("/api/forms", json=payload)
    res.raise_for_status()
    return res.json()["id"]
