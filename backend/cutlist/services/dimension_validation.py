"""Window dimension validation — per-field errors and the valid-row filter."""
from typing import Dict, List

from cutlist.config import DIMENSION_CONSTRAINTS
from cutlist.models.window_schema import WindowDimension

_FEET_MESSAGES = {
    "height": "Height must be between 1ft and 10ft (approx.)",
    "width": "Width must be between 1ft and 16ft (approx.)",
}


def is_blank(dimension: WindowDimension) -> bool:
    return dimension.height is None and dimension.width is None and dimension.quantity is None


def _range_message(field: str, unit_mode: str) -> str:
    limits = DIMENSION_CONSTRAINTS[field]
    if field == "quantity":
        return f"Quantity must be between {limits['min']} and {limits['max']}"
    if unit_mode == "ft":
        return _FEET_MESSAGES[field]
    return f"{field.capitalize()} must be between {limits['min']}mm and {limits['max']}mm"


def validate_dimension(dimension: WindowDimension, unit_mode: str = "mm") -> Dict[str, str]:
    """
    Return {field: message} for every failing field; empty when valid.

    A blank row is valid. A partially filled row reports each missing field
    as required. Bounds are always checked in mm regardless of unit_mode,
    which only changes the wording.
    """
    if is_blank(dimension):
        return {}

    errors: Dict[str, str] = {}
    for field in ("height", "width", "quantity"):
        value = getattr(dimension, field)
        if value is None:
            errors[field] = f"{field.capitalize()} is required"
            continue
        limits = DIMENSION_CONSTRAINTS[field]
        # Written as a range test so NaN fails it
        if not (limits["min"] <= value <= limits["max"]):
            errors[field] = _range_message(field, unit_mode)
    return errors


def validate_section_dimensions(
    dimensions: List[WindowDimension], unit_mode: str = "mm"
) -> Dict[str, object]:
    errors: Dict[str, Dict[str, str]] = {}
    for dim in dimensions:
        dim_errors = validate_dimension(dim, unit_mode)
        if dim_errors:
            errors[dim.id] = dim_errors
    return {"is_valid": not errors, "errors": errors}


def is_valid_dimension(dimension: WindowDimension) -> bool:
    if is_blank(dimension):
        return False
    return not validate_dimension(dimension)


def filter_valid_dimensions(dimensions: List[WindowDimension]) -> List[WindowDimension]:
    return [d for d in dimensions if is_valid_dimension(d)]
