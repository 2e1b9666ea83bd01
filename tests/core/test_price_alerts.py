"""Tests for price alert evaluation."""

import sqlite3
from unittest.mock import MagicMock

import pytest

from solcerer.core import AlertEvaluator, group_by_mint, should_fire
from solcerer.models import MarketSnapshot, PriceAlert


MINT = "So11111111111111111111111111111111111111112"


class TestShouldFire:
    """Threshold boundaries are inclusive in both directions."""

    @pytest.mark.parametrize("direction,value,threshold,expected", [
        ("above", 1_000_000, 1_000_000, True),
        ("above", 1_500_000, 1_000_000, True),
        ("above", 999_999.99, 1_000_000, False),
        ("below", 1_000_000, 1_000_000, True),
        ("below", 400_000, 1_000_000, True),
        ("below", 1_000_000.01, 1_000_000, False),
        ("sideways", 1, 1, False),
    ])
    def test_boundaries(self, direction, value, threshold, expected):
        assert should_fire(direction, value, threshold) is expected


class TestGroupByMint:
    def test_one_group_per_mint_in_order(self):
        alerts = [
            PriceAlert(1, "u1", "B", "above", 10),
            PriceAlert(2, "u2", "A", "below", 5),
            PriceAlert(3, "u3", "B", "below", 1),
        ]

        grouped = group_by_mint(alerts)

        assert list(grouped) == ["B", "A"]
        assert [a.alert_id for a in grouped["B"]] == [1, 3]


class TestAlertEvaluator:
    """Tests for AlertEvaluator.evaluate."""

    def test_fires_and_trips(self, db):
        alert_id = db.add_price_alert("u1", MINT, "above", 1_000_000)
        evaluator = AlertEvaluator(db)
        snapshot = MarketSnapshot(MINT, price=0.001, market_cap=1_000_000)

        fired = evaluator.evaluate(db.get_active_price_alerts(), snapshot)

        assert [a.alert_id for a in fired] == [alert_id]
        assert db.is_tripped(alert_id)
        assert db.get_active_price_alerts() == []

    def test_not_reached(self, db):
        alert_id = db.add_price_alert("u1", MINT, "above", 1_000_000)
        snapshot = MarketSnapshot(MINT, market_cap=900_000)

        assert AlertEvaluator(db).evaluate(db.get_active_price_alerts(), snapshot) == []
        assert not db.is_tripped(alert_id)

    def test_tripped_alert_never_refires(self, db):
        db.add_price_alert("u1", MINT, "below", 500_000)
        evaluator = AlertEvaluator(db)
        stale = db.get_active_price_alerts()
        low = MarketSnapshot(MINT, market_cap=400_000)

        assert len(evaluator.evaluate(stale, low)) == 1
        # Same objects again, price recovered then dropped
        assert evaluator.evaluate(stale, MarketSnapshot(MINT, market_cap=900_000)) == []
        assert evaluator.evaluate(stale, low) == []

    def test_tripped_by_another_writer(self, db):
        alert_id = db.add_price_alert("u1", MINT, "above", 100)
        alerts = db.get_active_price_alerts()
        db.trip(alert_id)

        assert AlertEvaluator(db).evaluate(alerts, MarketSnapshot(MINT, market_cap=200)) == []

    def test_alerts_on_one_mint_are_independent(self, db):
        db.add_price_alert("u1", MINT, "above", 1_000_000)
        db.add_price_alert("u2", MINT, "below", 2_000_000)
        db.add_price_alert("u3", MINT, "above", 5_000_000)
        snapshot = MarketSnapshot(MINT, market_cap=1_500_000)

        fired = AlertEvaluator(db).evaluate(db.get_active_price_alerts(), snapshot)

        assert sorted(a.subscriber_id for a in fired) == ["u1", "u2"]

    def test_price_metric(self, db):
        db.add_price_alert("u1", MINT, "below", 0.5, metric="price")
        snapshot = MarketSnapshot(MINT, price=0.4, market_cap=10_000_000)

        fired = AlertEvaluator(db).evaluate(db.get_active_price_alerts(), snapshot)

        assert len(fired) == 1

    def test_trip_write_failure_still_fires(self):
        store = MagicMock()
        store.trip.side_effect = sqlite3.OperationalError("database is locked")
        alert = PriceAlert(7, "u1", MINT, "above", 100)

        fired = AlertEvaluator(store).evaluate([alert], MarketSnapshot(MINT, market_cap=150))

        assert fired == [alert]
