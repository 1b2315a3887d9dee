"""Unit tests for the rule-based routine suggestions."""

from datetime import datetime, timedelta, timezone

from app.models.logs import DiaperLog, FeedEvent, MedicationLog, TemperatureLog
from app.services.logs import to_iso
from app.services.routine_suggestions import build_routine_suggestions


def _feeds_at(now: datetime, hours_ago: list[float]) -> list[FeedEvent]:
    return [FeedEvent(timestamp=to_iso(now - timedelta(hours=h))) for h in hours_ago]


def _diapers(now: datetime, count: int) -> list[DiaperLog]:
    return [
        DiaperLog(timestamp=to_iso(now - timedelta(hours=2 * i + 1)), had_pee=True)
        for i in range(count)
    ]


def _build(now: datetime, feeds=(), diapers=(), temperatures=(), medications=()):
    return build_routine_suggestions(
        feeds=list(feeds),
        diapers=list(diapers),
        temperatures=list(temperatures),
        medications=list(medications),
        now=now,
    )


class TestRoutineSuggestions:
    """Priority order, thresholds and the baseline fallback."""

    def test_no_data_gives_baseline(self, now: datetime) -> None:
        suggestions = _build(now)

        assert [s.id for s in suggestions] == ["start-data"]

    def test_feed_window_needs_five_recent_feeds(self, now: datetime) -> None:
        assert _build(now, feeds=_feeds_at(now, [3, 27, 51, 75]))[0].id == "start-data"

        suggestions = _build(now, feeds=_feeds_at(now, [3, 27, 51, 75, 99]))
        assert suggestions[0].id == "feed-window"
        assert "09:00" in suggestions[0].detail

    def test_feed_window_ignores_old_feeds(self, now: datetime) -> None:
        feeds = _feeds_at(now, [3, 27, 200, 300, 400])

        assert [s.id for s in _build(now, feeds=feeds)] == ["start-data"]

    def test_feed_window_uses_local_hours(self, now: datetime) -> None:
        local_now = now.astimezone(timezone(timedelta(hours=-5)))
        feeds = _feeds_at(now, [3, 27, 51, 75, 99])

        suggestions = _build(local_now, feeds=feeds)

        assert "04:00" in suggestions[0].detail

    def test_diaper_rate_over_three_days(self, now: datetime) -> None:
        suggestions = _build(now, diapers=_diapers(now, 15))

        assert suggestions[0].id == "diaper-rate"
        assert suggestions[0].detail == "Average 5.0 diaper logs/day over last 3 days."

    def test_temperature_trend_needs_two_high_readings(self, now: datetime) -> None:
        one_high = [
            TemperatureLog(timestamp=to_iso(now - timedelta(hours=1)), temperature_c=38.4),
            TemperatureLog(timestamp=to_iso(now - timedelta(hours=5)), temperature_c=37.0),
        ]
        assert _build(now, temperatures=one_high)[0].id == "start-data"

        two_high = one_high + [
            TemperatureLog(timestamp=to_iso(now - timedelta(hours=9)), temperature_c=38.0),
        ]
        suggestions = _build(now, temperatures=two_high)
        assert suggestions[0].id == "temp-trend"
        assert suggestions[0].detail.startswith("2 high-temperature entries")

    def test_medication_window_uses_latest_with_interval(self, now: datetime) -> None:
        meds = [
            MedicationLog(
                timestamp=to_iso(now - timedelta(hours=1)),
                medication_name="Vitamin D",
            ),
            MedicationLog(
                timestamp=to_iso(now - timedelta(hours=2, minutes=30)),
                medication_name="Tylenol",
                min_interval_hours=4,
            ),
        ]

        suggestions = _build(now, medications=meds)

        assert suggestions[0].id == "med-next-window"
        assert suggestions[0].detail == (
            "Tylenol next safe window starts around 1:30 PM."
        )

    def test_all_rules_in_priority_order(self, now: datetime) -> None:
        suggestions = _build(
            now,
            feeds=_feeds_at(now, [3, 27, 51, 75, 99]),
            diapers=_diapers(now, 6),
            temperatures=[
                TemperatureLog(timestamp=to_iso(now - timedelta(hours=h)), temperature_c=38.5)
                for h in (1, 4)
            ],
            medications=[
                MedicationLog(
                    timestamp=to_iso(now - timedelta(hours=1)),
                    medication_name="Tylenol",
                    min_interval_hours=4,
                )
            ],
        )

        assert [s.id for s in suggestions] == [
            "feed-window",
            "diaper-rate",
            "temp-trend",
            "med-next-window",
        ]
