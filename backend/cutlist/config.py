"""
Cutting-list configuration — single source of truth for dimension limits,
default stock catalogue, section-type correction constants and env-driven
runtime settings.

Import from here in all services rather than hardcoding values.
"""
from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


# ── Runtime settings (env) ────────────────────────────────────────────────────

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON: bool = os.getenv("LOG_FORMAT", "json").lower() != "text"
CORS_ORIGINS: list[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
]


# ── Units ─────────────────────────────────────────────────────────────────────

MM_PER_FOOT: float = 304.8


# ── Dimension validation bounds (always mm, independent of display unit) ─────

DIMENSION_CONSTRAINTS: dict[str, dict[str, float]] = {
    "height":   {"min": 300, "max": 3000},
    "width":    {"min": 300, "max": 5000},
    "quantity": {"min": 1,   "max": 100},
}


# ── Stock catalogue ───────────────────────────────────────────────────────────
# Ordered largest first. The first entry is the degenerate-packing bar.
DEFAULT_STOCK_OPTIONS: list[dict[str, object]] = [
    {"length": 4877.0, "name": "16ft", "length_feet": 16},
    {"length": 4572.0, "name": "15ft", "length_feet": 15},
    {"length": 3658.0, "name": "12ft", "length_feet": 12},
]


# ── Section types ─────────────────────────────────────────────────────────────

TRACK_TYPES: tuple[str, ...] = ("2-track", "3-track")
CONFIGURATIONS: tuple[str, ...] = ("all-glass", "glass-mosquito")

DEFAULT_SECTION_TYPE_ID: str = "27mm-domal"
DEFAULT_SECTION_TYPE_NAME: str = "27mm Domal"

# 27mm Domal deductions (mm). Same values for every track/configuration combo.
DOMAL_27MM_CORRECTIONS: dict[str, float] = {
    "shutter_width_deduction": 3.175,
    "height_deduction": 66.675,
    "three_track_width_addition": 63.5,
    "glass_width_deduction": 104.775,
    "glass_height_deduction": 104.775,
    "track_rail_deduction": 0.0,
    "frame_multiplier_w": 2,
    "frame_multiplier_h": 2,
}
