"""Tests for the settlement worker entry point."""

import pytest

import escrow_worker
from infrastructure.service_container import ServiceContainer


@pytest.fixture
def built(monkeypatch, service_config, clock):
    """Route the worker to the test database and record the container it builds."""
    holder = {}

    def factory():
        holder["container"] = ServiceContainer(service_config, clock=clock)
        return holder["container"]

    monkeypatch.setattr(escrow_worker, "ServiceContainer", factory)
    return holder


def test_disabled_sweep_returns_without_scheduling(monkeypatch, built):
    monkeypatch.setattr(escrow_worker.config, "SETTLEMENT_SWEEP_ENABLED", False)
    escrow_worker.main()

    container = built["container"]
    assert container.is_initialized
    assert not container.settlement_scheduler.running


def test_runs_until_interrupted(monkeypatch, built):
    monkeypatch.setattr(escrow_worker.config, "SETTLEMENT_SWEEP_ENABLED", True)
    seen = {}

    def interrupt(_seconds):
        seen["running"] = built["container"].settlement_scheduler.running
        raise KeyboardInterrupt

    monkeypatch.setattr(escrow_worker.time, "sleep", interrupt)
    escrow_worker.main()

    assert seen["running"] is True
    assert not built["container"].settlement_scheduler.running
