"""
conftest.py — Shared pytest fixtures for the cutting-list test suite.

No database or external service fixtures are defined here.  All tests in this
suite are pure unit tests that exercise computation functions in isolation,
plus route tests through FastAPI's TestClient.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``cutlist.*`` imports resolve correctly regardless of where pytest is invoked.
"""

import sys
import os
import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any cutlist imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# 27mm Domal deductions (mm) — mirrored from the seeded catalogue
# ---------------------------------------------------------------------------
DOMAL_DEDUCTIONS = {
    "shutter_width_deduction": 3.175,
    "height_deduction": 66.675,
    "three_track_width_addition": 63.5,
    "glass_width_deduction": 104.775,
    "glass_height_deduction": 104.775,
}


@pytest.fixture(scope="session")
def make_config():
    """
    Factory for SectionConfiguration with 27mm Domal deductions.

    Usage: make_config("3-track", "glass-mosquito", separate_mosquito_net=True)
    """
    from cutlist.models.window_schema import SectionConfiguration

    def _make(track_type="2-track", configuration="all-glass", **overrides):
        values = {**DOMAL_DEDUCTIONS, **overrides}
        return SectionConfiguration(
            section_type_id=values.pop("section_type_id", "27mm-domal"),
            track_type=track_type,
            configuration=configuration,
            **values,
        )

    return _make


@pytest.fixture(scope="session")
def make_geometry(make_config):
    """Factory returning a SectionGeometry for a track/configuration pair."""
    from cutlist.services.section_config import get_section_config

    def _make(track_type="2-track", configuration="all-glass", **overrides):
        return get_section_config(make_config(track_type, configuration, **overrides))

    return _make


@pytest.fixture(scope="session")
def default_stock():
    """Default catalogue: 16ft=4877, 15ft=4572, 12ft=3658 (largest first)."""
    from cutlist.services.stock_optimization import STOCK_OPTIONS
    return list(STOCK_OPTIONS)


@pytest.fixture
def make_dimension():
    from cutlist.models.window_schema import WindowDimension

    counter = {"n": 0}

    def _make(width=1000.0, height=1000.0, quantity=1, id=None):
        counter["n"] += 1
        return WindowDimension(
            id=id or f"dim-{counter['n']}", width=width, height=height, quantity=quantity
        )

    return _make


@pytest.fixture
def two_track_section():
    """One 2-track all-glass section, single 1000 × 1000 window."""
    from cutlist.models.window_schema import WindowSection, WindowDimension
    return WindowSection(
        id="sec-1",
        name="Bedroom",
        track_type="2-track",
        configuration="all-glass",
        dimensions=[WindowDimension(id="d1", width=1000, height=1000, quantity=1)],
    )


@pytest.fixture
def three_track_section():
    """One 3-track glass-mosquito section, two 1500 × 1500 windows."""
    from cutlist.models.window_schema import WindowSection, WindowDimension
    return WindowSection(
        id="sec-2",
        name="Living",
        track_type="3-track",
        configuration="glass-mosquito",
        dimensions=[WindowDimension(id="d2", width=1500, height=1500, quantity=2)],
    )
