"""Summary rollups — section totals and the project-level combined summary."""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Sequence

from cutlist.models.window_schema import ComponentGroup
from cutlist.services.material_calculation import MaterialRequirement

Histogram = Dict[str, int]

_GROUP_FIELDS = {
    ComponentGroup.FRAME: "frame",
    ComponentGroup.SHUTTER: "shutter",
    ComponentGroup.INTERLOCK: "interlock",
    ComponentGroup.TRACK_RAIL: "track_rail",
}


@dataclass
class MaterialSummary:
    total_material: float = 0.0
    total_stock_used: float = 0.0
    total_wastage: float = 0.0
    wastage_percent: float = 0.0
    total_glass_area: float = 0.0
    total_mosquito_area: float = 0.0
    stock_summary: Histogram = field(default_factory=dict)
    frame_stock_summary: Histogram = field(default_factory=dict)
    shutter_stock_summary: Histogram = field(default_factory=dict)
    interlock_stock_summary: Histogram = field(default_factory=dict)
    track_rail_stock_summary: Histogram = field(default_factory=dict)
    wastage_pieces_summary: Histogram = field(default_factory=dict)
    frame_wastage_pieces_summary: Histogram = field(default_factory=dict)
    shutter_wastage_pieces_summary: Histogram = field(default_factory=dict)
    interlock_wastage_pieces_summary: Histogram = field(default_factory=dict)
    track_rail_wastage_pieces_summary: Histogram = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_HISTOGRAM_FIELDS = [
    name for name in MaterialSummary.__dataclass_fields__ if name.endswith("_summary")
]


def _wastage_percent(total_wastage: float, total_stock_used: float) -> float:
    return total_wastage / total_stock_used * 100 if total_stock_used > 0 else 0.0


def _add(histogram: Histogram, key: str, count: int) -> None:
    histogram[key] = histogram.get(key, 0) + count


def _bar_counts(material: MaterialRequirement) -> Histogram:
    breakdown = material.stock_breakdown
    if breakdown.all_stock_counts is not None:
        return dict(breakdown.all_stock_counts)
    return {breakdown.stock_name: breakdown.stocks_needed} if breakdown.stocks_needed else {}


def _bars_with_offcut(material: MaterialRequirement) -> Histogram:
    counts: Histogram = {}
    for plan in material.stock_breakdown.cutting_plans:
        if plan.wastage > 0:
            _add(counts, plan.stock_name or material.stock_breakdown.stock_name, 1)
    return counts


def calculate_section_summary(materials: Sequence[MaterialRequirement]) -> MaterialSummary:
    """
    Totals and stock-size histograms for one section. Glass areas are filled
    in by the caller from the section's glass info.
    """
    summary = MaterialSummary(
        total_material=sum(m.total_required for m in materials),
        total_stock_used=sum(m.stock_breakdown.total_stock_length for m in materials),
        total_wastage=sum(m.stock_breakdown.total_wastage for m in materials),
    )
    summary.wastage_percent = _wastage_percent(summary.total_wastage, summary.total_stock_used)

    for material in materials:
        prefix = _GROUP_FIELDS[material.group]
        group_stock = getattr(summary, f"{prefix}_stock_summary")
        group_offcut = getattr(summary, f"{prefix}_wastage_pieces_summary")

        for name, count in _bar_counts(material).items():
            _add(summary.stock_summary, name, count)
            _add(group_stock, name, count)

        for name, count in _bars_with_offcut(material).items():
            _add(summary.wastage_pieces_summary, name, count)
            _add(group_offcut, name, count)

    return summary


def combine_summaries(summaries: List[MaterialSummary]) -> MaterialSummary:
    """Field-wise sum; the wastage percent is recomputed, never averaged."""
    combined = MaterialSummary()
    for s in summaries:
        combined.total_material += s.total_material
        combined.total_stock_used += s.total_stock_used
        combined.total_wastage += s.total_wastage
        combined.total_glass_area += s.total_glass_area
        combined.total_mosquito_area += s.total_mosquito_area
        for name in _HISTOGRAM_FIELDS:
            target = getattr(combined, name)
            for key, count in getattr(s, name).items():
                _add(target, key, count)

    combined.wastage_percent = _wastage_percent(combined.total_wastage, combined.total_stock_used)
    return combined
