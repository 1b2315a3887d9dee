"""Shared fixtures: the FastAPI client, Supabase doubles for the health probe
and a fixed evaluation instant."""

from collections.abc import Iterator
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def now() -> datetime:
    """Monday 2026-02-16, noon UTC."""
    return datetime(2026, 2, 16, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture()
def mock_supabase_module() -> Iterator[MagicMock]:
    """Supabase client whose ``babies`` probe succeeds."""
    client = MagicMock()
    probe = client.table.return_value.select.return_value.limit.return_value
    probe.execute.return_value = MagicMock(data=[{"id": "baby-1"}])

    with patch("app.routers.health.get_supabase", return_value=client):
        yield client


@pytest.fixture()
def mock_supabase_disconnected() -> Iterator[MagicMock]:
    """``get_supabase`` raising as if the database were unreachable."""
    with patch(
        "app.routers.health.get_supabase",
        side_effect=ConnectionError("Connection refused"),
    ) as failing:
        yield failing


@pytest.fixture()
def test_client() -> Iterator[TestClient]:
    """TestClient with the lifespan (logging + scheduler) running."""
    from app.main import app

    with TestClient(app) as client:
        yield client
