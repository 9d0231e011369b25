# tests/conftest.py
from __future__ import annotations

"""
Pytest configuration for the orbitmoments suite.

- Registers Hypothesis profiles for local dev and CI.
- Forces the headless matplotlib backend before any renderer is imported.
- Provides a synthetic one-year orbit and a navigator pinned to a fixed "today".
"""

import math
import os
from datetime import date, timedelta

os.environ.setdefault("MPLBACKEND", "Agg")

import pytest
from hypothesis import HealthCheck, settings

from orbitmoments.animation import AnimationScheduler
from orbitmoments.models import EphemerisPoint
from orbitmoments.navigation import Navigator
from orbitmoments.store import SAMPLE_POIS

# ──────────────────────────────────────────────────────────────────────────────
# Hypothesis profiles
# ──────────────────────────────────────────────────────────────────────────────
settings.register_profile(
    "dev",
    settings(
        deadline=None,
        max_examples=60,
        suppress_health_check=[HealthCheck.too_slow],
    ),
)
settings.register_profile(
    "ci",
    settings(
        deadline=None,
        max_examples=200,
        suppress_health_check=[HealthCheck.too_slow],
    ),
)

_profile = (
    "ci"
    if (os.getenv("CI") or os.getenv("GITHUB_ACTIONS"))
    else os.getenv("HYPOTHESIS_PROFILE", "dev")
)
settings.load_profile(_profile)


def pytest_report_header(config: pytest.Config) -> str:
    return f"Hypothesis profile: '{_profile}'"


# ──────────────────────────────────────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────────────────────────────────────
AU_KM = 149_597_870.7


def circular_orbit(start: date = date(2024, 1, 1), days: int = 366) -> list[EphemerisPoint]:
    """A circle of radius 1 AU sampled daily (km)."""
    pts = []
    for i in range(days):
        a = 2 * math.pi * i / days
        pts.append(
            EphemerisPoint(
                date=start + timedelta(days=i),
                x=AU_KM * math.cos(a),
                y=AU_KM * math.sin(a),
            )
        )
    return pts


@pytest.fixture
def orbit_points() -> list[EphemerisPoint]:
    return circular_orbit()


@pytest.fixture
def scheduler() -> AnimationScheduler:
    return AnimationScheduler()


@pytest.fixture
def today() -> date:
    return date(2025, 6, 1)


@pytest.fixture
def nav(today: date, scheduler: AnimationScheduler) -> Navigator:
    """Navigator with the sample moments loaded; today is 2025-06-01."""
    n = Navigator(today=today, scheduler=scheduler, today_fn=lambda: today)
    assert n.receive_pois(SAMPLE_POIS)
    return n


@pytest.fixture
def nav_with_orbit(nav: Navigator, orbit_points: list[EphemerisPoint]) -> Navigator:
    assert nav.receive_orbit(orbit_points)
    return nav
