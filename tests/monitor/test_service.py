"""Tests for MonitorService wiring and lifecycle."""

import asyncio

import pytest

from solcerer.monitor import MonitorService, parse_only


class TestParseOnly:
    def test_default_is_all(self):
        assert parse_only(None) == ("social", "price", "whale")

    def test_selection(self):
        assert parse_only(" Whale,social,whale ") == ("whale", "social")

    def test_unknown_loop(self):
        with pytest.raises(ValueError, match="bogus"):
            parse_only("price,bogus")


class TestMonitorService:
    def test_builds_selected_loops(self, db):
        service = MonitorService(dry_run=True, only=("price", "whale"), db=db, webhook_urls={})

        assert list(service.loops) == ["price", "whale"]
        assert service.loops["price"].interval == 60
        assert service.loops["whale"].interval == 120
        assert service.loops["whale"].startup_delay == 20

    async def test_run_until_stopped(self, db):
        service = MonitorService(dry_run=True, only=("price",), db=db, webhook_urls={})

        task = asyncio.create_task(service.run())
        await asyncio.sleep(0)
        assert service.running
        assert service.loops["price"].running

        service.stop()
        await asyncio.wait_for(task, timeout=5)

        assert not service.running
        assert not service.loops["price"].running
