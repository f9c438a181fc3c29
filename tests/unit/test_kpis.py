"""Tests for the server KPI counter."""

from __future__ import annotations

from push2tweet.server.kpis import ServerKPIs


def test_starts_at_zero() -> None:
    assert ServerKPIs().attended_requests == 0


def test_increment_and_reset() -> None:
    kpis = ServerKPIs()
    for _ in range(3):
        kpis.increment()
    assert kpis.snapshot() == {"attendedRequests": 3}
    assert kpis.reset() == 3
    assert kpis.attended_requests == 0


def test_reset_never_goes_negative() -> None:
    kpis = ServerKPIs()
    assert kpis.reset() == 0
    assert kpis.reset() == 0
    assert kpis.attended_requests == 0


def test_instances_are_independent() -> None:
    first, second = ServerKPIs(), ServerKPIs()
    first.increment()
    assert second.attended_requests == 0
