"""Unit tests for the today coordinator and the per-baby endpoints."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.models.alert import Alert, AlertsResponse, SmartAlertSettings
from app.models.enums import AlertLevel, SuggestionSource, TemperatureUnit
from app.models.logs import FeedEvent, TemperatureLog
from app.models.suggestion import AiInsightsResponse, Suggestion, SuggestionsResponse
from app.models.today import TodayResponse
from app.services.logs import to_iso
from app.services.today import (
    build_alerts,
    build_glance,
    build_suggestions,
    build_today_summary,
)

SERVICE = "app.services.today"


def _patch_log_loaders(now: datetime, **overrides):
    """Patch every log loader used by the coordinator with quiet defaults."""
    defaults = {
        "get_latest_feed": FeedEvent(timestamp=to_iso(now - timedelta(hours=1))),
        "get_latest_temperature": None,
        "get_latest_diaper": None,
        "count_feeds_in_trailing_24h": 8,
        "count_feeds_since": 3,
        "list_recent_medications": [],
        "list_feeds": [],
        "list_diapers": [],
        "list_temperatures": [],
    }
    defaults.update(overrides)
    return [patch(f"{SERVICE}.{name}", return_value=value) for name, value in defaults.items()]


class _Patched:
    """Enter a list of patchers as one context manager."""

    def __init__(self, patchers):
        self.patchers = patchers

    def __enter__(self):
        return [p.start() for p in self.patchers]

    def __exit__(self, *exc):
        for p in reversed(self.patchers):
            p.stop()
        return False


# ---------------------------------------------------------------------------
# build_alerts
# ---------------------------------------------------------------------------


class TestBuildAlerts:
    """Loading inputs and thresholds for evaluate_alerts."""

    @patch(f"{SERVICE}.get_temperature_unit", return_value=TemperatureUnit.f)
    @patch(f"{SERVICE}.get_smart_alert_settings", return_value=SmartAlertSettings())
    def test_feed_gap_from_stored_logs(
        self, _settings: MagicMock, _unit: MagicMock, now: datetime
    ) -> None:
        loaders = _patch_log_loaders(
            now, get_latest_feed=FeedEvent(timestamp=to_iso(now - timedelta(hours=5)))
        )
        with _Patched(loaders):
            response = build_alerts("baby-1", now=now)

        assert len(response.alerts) == 1
        assert response.alerts[0].level is AlertLevel.warning
        assert response.evaluated_at == now

    @patch(f"{SERVICE}.get_temperature_unit", return_value=TemperatureUnit.f)
    @patch(f"{SERVICE}.get_smart_alert_settings", return_value=SmartAlertSettings())
    def test_stored_unit_used_for_fever_message(
        self, _settings: MagicMock, _unit: MagicMock, now: datetime
    ) -> None:
        loaders = _patch_log_loaders(
            now,
            get_latest_temperature=TemperatureLog(timestamp=to_iso(now), temperature_c=38.5),
        )
        with _Patched(loaders):
            response = build_alerts("baby-1", now=now)

        assert "101.3 F" in response.alerts[0].message

    @patch(f"{SERVICE}.get_temperature_unit", return_value=TemperatureUnit.f)
    @patch(
        f"{SERVICE}.get_smart_alert_settings",
        return_value=SmartAlertSettings(enabled=False),
    )
    def test_disabled_skips_log_loading(
        self, _settings: MagicMock, _unit: MagicMock, now: datetime
    ) -> None:
        with _Patched(_patch_log_loaders(now)) as mocks:
            response = build_alerts("baby-1", now=now)

        assert response.alerts == []
        assert all(not m.called for m in mocks)

    @patch(f"{SERVICE}.get_temperature_unit", return_value=TemperatureUnit.c)
    @patch(f"{SERVICE}.get_smart_alert_settings", return_value=SmartAlertSettings())
    def test_load_failure_raises_runtime_error(
        self, _settings: MagicMock, _unit: MagicMock, now: datetime
    ) -> None:
        with patch(f"{SERVICE}.get_latest_feed", side_effect=RuntimeError("db down")):
            with pytest.raises(RuntimeError, match="db down"):
                build_alerts("baby-1", now=now)

    @patch(f"{SERVICE}.get_temperature_unit", return_value=TemperatureUnit.c)
    @patch(f"{SERVICE}.get_smart_alert_settings", return_value=SmartAlertSettings())
    def test_naive_now_treated_as_utc(
        self, _settings: MagicMock, _unit: MagicMock, now: datetime
    ) -> None:
        with _Patched(_patch_log_loaders(now)):
            response = build_alerts("baby-1", now=now.replace(tzinfo=None))

        assert response.evaluated_at == now


# ---------------------------------------------------------------------------
# build_suggestions
# ---------------------------------------------------------------------------


class TestBuildSuggestions:
    """Rule suggestions merged with the best-effort AI batch."""

    @pytest.mark.asyncio
    @patch(f"{SERVICE}.get_daily_insights", new_callable=AsyncMock, return_value=None)
    async def test_rules_only_when_ai_unavailable(
        self, _insights: AsyncMock, now: datetime
    ) -> None:
        with _Patched(_patch_log_loaders(now)):
            response = await build_suggestions("baby-1", now=now)

        assert [s.id for s in response.suggestions] == ["start-data"]
        assert response.ai_available is False
        assert response.date == now.date()

    @pytest.mark.asyncio
    async def test_ai_first_when_available(self, now: datetime) -> None:
        ai = AiInsightsResponse(
            date=now.date(),
            suggestions=[
                Suggestion(
                    id="ai-1",
                    title="Tummy time",
                    detail="Short sessions after naps.",
                    source=SuggestionSource.ai,
                )
            ],
        )
        with _Patched(_patch_log_loaders(now)), \
                patch(f"{SERVICE}.get_daily_insights", new=AsyncMock(return_value=ai)):
            response = await build_suggestions("baby-1", now=now)

        assert [s.id for s in response.suggestions] == ["ai-1", "start-data"]
        assert response.ai_available is True

    @pytest.mark.asyncio
    async def test_max_count_applied(self, now: datetime) -> None:
        ai = AiInsightsResponse(
            date=now.date(),
            suggestions=[
                Suggestion(id="ai-1", title="Tummy time", detail="Short sessions.")
            ],
        )
        with _Patched(_patch_log_loaders(now)), \
                patch(f"{SERVICE}.get_daily_insights", new=AsyncMock(return_value=ai)):
            response = await build_suggestions("baby-1", now=now, max_count=1)

        assert [s.id for s in response.suggestions] == ["ai-1"]

    @pytest.mark.asyncio
    async def test_load_failure_raises_runtime_error(self, now: datetime) -> None:
        with patch(f"{SERVICE}.list_feeds", side_effect=RuntimeError("db down")):
            with pytest.raises(RuntimeError):
                await build_suggestions("baby-1", now=now)


# ---------------------------------------------------------------------------
# build_today_summary
# ---------------------------------------------------------------------------


class TestBuildTodaySummary:
    @pytest.mark.asyncio
    @patch(f"{SERVICE}.get_daily_insights", new_callable=AsyncMock, return_value=None)
    @patch(f"{SERVICE}.get_temperature_unit", return_value=TemperatureUnit.c)
    @patch(f"{SERVICE}.get_smart_alert_settings", return_value=SmartAlertSettings())
    async def test_combines_glance_suggestions_and_alerts(
        self,
        _settings: MagicMock,
        _unit: MagicMock,
        _insights: AsyncMock,
        now: datetime,
    ) -> None:
        loaders = _patch_log_loaders(
            now,
            get_latest_temperature=TemperatureLog(timestamp=to_iso(now), temperature_c=38.6),
            list_diapers=[],
            count_feeds_since=4,
        )
        with _Patched(loaders):
            summary = await build_today_summary("baby-1", now=now)

        assert summary.baby_id == "baby-1"
        assert summary.glance.feeds_today == 4
        assert summary.glance.latest_temperature == "38.6 C"
        assert summary.glance.temperature_unit is TemperatureUnit.c
        assert [s.id for s in summary.suggestions] == ["start-data"]
        assert [a.level for a in summary.alerts] == [AlertLevel.critical]

    @patch(f"{SERVICE}.get_latest_temperature", return_value=None)
    @patch(f"{SERVICE}.list_diapers", return_value=[])
    @patch(f"{SERVICE}.count_feeds_since", return_value=2)
    def test_glance_counts_from_local_midnight(
        self, mock_count: MagicMock, mock_diapers: MagicMock, _temp: MagicMock
    ) -> None:
        """08:00 at UTC-5 is already 13:00 UTC, but the day started at local midnight."""
        eastern = timezone(timedelta(hours=-5))
        local_now = datetime(2026, 2, 16, 8, 0, tzinfo=eastern)

        glance = build_glance("baby-1", local_now, TemperatureUnit.f)

        local_midnight = datetime(2026, 2, 16, 0, 0, tzinfo=eastern)
        mock_count.assert_called_once_with("baby-1", local_midnight)
        mock_diapers.assert_called_once_with("baby-1", since=local_midnight)
        assert mock_count.call_args.args[1].utcoffset() == timedelta(hours=-5)
        assert glance.feeds_today == 2
        assert glance.latest_temperature is None

    @patch(f"{SERVICE}.get_latest_temperature", return_value=None)
    @patch(f"{SERVICE}.list_diapers", return_value=[])
    @patch(f"{SERVICE}.count_feeds_since", return_value=0)
    def test_glance_utc_now_uses_utc_day(
        self, mock_count: MagicMock, _diapers: MagicMock, _temp: MagicMock, now: datetime
    ) -> None:
        build_glance("baby-1", now, TemperatureUnit.c)

        assert mock_count.call_args.args[1] == datetime(2026, 2, 16, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


class TestBabyEndpoints:
    """HTTP wrappers around the coordinator."""

    @patch("app.routers.alerts.build_alerts")
    def test_baby_alerts_endpoint(
        self, mock_build: MagicMock, test_client: TestClient, now: datetime
    ) -> None:
        mock_build.return_value = AlertsResponse(
            alerts=[Alert(level=AlertLevel.warning, message="No diaper log for 9.0h (threshold 8h).")],
            evaluated_at=now,
        )

        response = test_client.get(
            "/api/v1/babies/baby-1/alerts",
            params={"now": "2026-02-16T12:00:00Z", "temperature_unit": "c"},
        )

        assert response.status_code == 200
        assert response.json()["alerts"][0]["level"] == "warning"
        kwargs = mock_build.call_args.kwargs
        assert kwargs["now"] == now
        assert kwargs["temperature_unit"] is TemperatureUnit.c

    @patch("app.routers.alerts.build_alerts", side_effect=RuntimeError("db down"))
    def test_baby_alerts_storage_failure_returns_503(
        self, _build: MagicMock, test_client: TestClient
    ) -> None:
        response = test_client.get("/api/v1/babies/baby-1/alerts")

        assert response.status_code == 503

    @patch("app.routers.suggestions.build_suggestions", new_callable=AsyncMock)
    def test_baby_suggestions_endpoint(
        self, mock_build: AsyncMock, test_client: TestClient, now: datetime
    ) -> None:
        mock_build.return_value = SuggestionsResponse(
            suggestions=[Suggestion(id="start-data", title="Build your baseline", detail="Log")],
            ai_available=False,
            date=now.date(),
        )

        response = test_client.get("/api/v1/babies/baby-1/suggestions?max_count=2")

        assert response.status_code == 200
        assert response.json()["suggestions"][0]["source"] == "rule"
        mock_build.assert_awaited_once_with("baby-1", max_count=2)

    def test_baby_suggestions_rejects_zero_max_count(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/babies/baby-1/suggestions?max_count=0")

        assert response.status_code == 422

    @patch("app.routers.suggestions.build_suggestions", new_callable=AsyncMock)
    def test_baby_suggestions_storage_failure_returns_503(
        self, mock_build: AsyncMock, test_client: TestClient
    ) -> None:
        mock_build.side_effect = RuntimeError("db down")

        response = test_client.get("/api/v1/babies/baby-1/suggestions")

        assert response.status_code == 503

    @patch("app.routers.today.build_today_summary", new_callable=AsyncMock)
    def test_today_storage_failure_returns_503(
        self, mock_build: AsyncMock, test_client: TestClient
    ) -> None:
        mock_build.side_effect = RuntimeError("db down")

        response = test_client.get("/api/v1/babies/baby-1/today")

        assert response.status_code == 503
        assert "db down" in response.json()["detail"]

    @patch("app.routers.today.build_today_summary", new_callable=AsyncMock)
    def test_today_keeps_client_offset(
        self, mock_build: AsyncMock, test_client: TestClient, now: datetime
    ) -> None:
        mock_build.return_value = TodayResponse(baby_id="baby-1", generated_at=now)

        response = test_client.get(
            "/api/v1/babies/baby-1/today",
            params={"now": "2026-02-16T08:00:00-05:00"},
        )

        assert response.status_code == 200

        passed = mock_build.call_args.kwargs["now"]
        assert passed.utcoffset() == timedelta(hours=-5)
        assert passed.hour == 8
