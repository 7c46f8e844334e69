"""Shared fixtures: a fresh database per test and helpers to drive the API."""

from __future__ import annotations

import itertools
from contextlib import asynccontextmanager
from typing import Any, Callable, Iterator

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from lovii.app import create_app
from lovii.client.sync import SyncClient
from lovii.config import ClientSettings


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "lovii.db")


@pytest.fixture
def app(db_path: str) -> FastAPI:
    return create_app(database_path=db_path)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_profile(client: TestClient) -> Callable[..., dict[str, Any]]:
    def _make(name: str = "User") -> dict[str, Any]:
        resp = client.post("/profile", json={"name": name})
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def codes(monkeypatch):
    """Queue partner codes the next profile creations will receive."""
    queued: list[str] = []

    from lovii.services import profile as profile_service

    real_generate = profile_service.generate_partner_code

    def _next(length: int = 6) -> str:
        return queued.pop(0) if queued else real_generate(length)

    monkeypatch.setattr(profile_service, "generate_partner_code", _next)
    return queued


@pytest.fixture
def device(app: FastAPI, tmp_path) -> Callable[..., Any]:
    """
    Build SyncClients talking to ``app`` in-process, one cache file each.

    Callers run the app's lifespan themselves (``app.router.lifespan_context``).
    """
    counter = itertools.count()

    @asynccontextmanager
    async def _device(**overrides: Any):
        settings = ClientSettings(
            API_URL="http://testserver",
            CACHE_PATH=str(tmp_path / f"device-{next(counter)}.db"),
            OUTBOX_RETRY_BASE_SECONDS=0.0,
            **overrides,
        )
        sync = await SyncClient.create(
            settings,
            transport=httpx.ASGITransport(app=app),
            start_worker=False,
        )
        try:
            yield sync
        finally:
            await sync.aclose()

    return _device


@pytest.fixture
def asgi_client(app: FastAPI) -> Callable[..., Any]:
    """Async HTTP client bound to ``app`` for driving concurrent requests."""

    def _client() -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")

    return _client
