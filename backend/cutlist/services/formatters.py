"""Unit conversion and display formatting helpers."""
from cutlist.config import MM_PER_FOOT


def mm_to_feet(mm: float) -> str:
    return f"{mm / MM_PER_FOOT:.2f}"


def feet_to_mm(feet: float) -> float:
    return feet * MM_PER_FOOT


def format_mm(mm: float) -> str:
    return f"{mm:.3f}"
