"""
Calculation orchestrator — runs every window section through piece
derivation, stock optimization and summary rollup, and assembles the
serializable result that the worksheet layer stores as JSON.
"""
import json
import logging
import time
import uuid
from typing import Any, Dict, List, Sequence, Tuple, Union

from cutlist.models.window_schema import SectionConfiguration, WindowInput, WindowSection
from cutlist.services.material_calculation import calculate_section_materials
from cutlist.services.perf_monitor import timed, tracker
from cutlist.services.section_catalogue import SectionTypeCatalogue, build_default_catalogue
from cutlist.services.summary_calculation import (
    MaterialSummary,
    calculate_section_summary,
    combine_summaries,
)

logger = logging.getLogger("cutlist-calculations")

ConfigSource = Union[SectionTypeCatalogue, Sequence[SectionConfiguration], None]


def _as_catalogue(section_configs: ConfigSource) -> SectionTypeCatalogue:
    if section_configs is None:
        return build_default_catalogue()
    if isinstance(section_configs, SectionTypeCatalogue):
        return section_configs
    return SectionTypeCatalogue(section_configs)


def calculate_section_result(
    section: WindowSection, config: SectionConfiguration
) -> Dict[str, Any]:
    materials_result = calculate_section_materials(section.dimensions, config, section.stock_map)

    summary = calculate_section_summary(materials_result.materials)
    summary.total_glass_area = sum(g.glass_area for g in materials_result.glass_info)
    summary.total_mosquito_area = sum(g.mosquito_area for g in materials_result.glass_info)

    return {
        "section_id": section.id,
        "section_name": section.name,
        "section_type_id": section.section_type_id,
        "track_type": section.track_type,
        "configuration": section.configuration,
        "materials": [m.to_dict() for m in materials_result.materials],
        "accessories": materials_result.accessories.to_dict(),
        "glass_info": [g.to_dict() for g in materials_result.glass_info],
        "summary": summary,
    }


@timed
def calculate_materials(
    window_input: WindowInput, section_configs: ConfigSource = None
) -> Dict[str, Any]:
    """
    Calculate cutting plans for every section of `window_input`.

    Sections whose (section type, track type, configuration) has no entry in
    `section_configs` are skipped with a warning; so are sections whose
    derived pieces the optimizer rejects. The rest are still calculated.

    Returns a plain dict:
        input             : the input, echoed back
        section_results   : per-section materials, accessories, glass info, summary
        combined_summary  : project-level rollup of all section summaries
        skipped_sections  : [{section_id, reason}]
    """
    start = time.perf_counter()
    catalogue = _as_catalogue(section_configs)

    section_results: List[Dict[str, Any]] = []
    skipped: List[Dict[str, str]] = []

    for section in window_input.sections:
        config = catalogue.find(section.section_type_id, section.track_type, section.configuration)
        if config is None:
            logger.warning(
                f"No configuration for section type '{section.section_type_id}' "
                f"({section.track_type}, {section.configuration}); section skipped",
                extra={"section_id": section.id},
            )
            skipped.append({"section_id": section.id, "reason": "missing_configuration"})
            continue

        try:
            section_results.append(calculate_section_result(section, config))
        except ValueError as e:
            logger.error(f"Section calculation failed: {e}", extra={"section_id": section.id})
            skipped.append({"section_id": section.id, "reason": str(e)})

    summaries: List[MaterialSummary] = [r["summary"] for r in section_results]
    combined = combine_summaries(summaries)
    for result in section_results:
        result["summary"] = result["summary"].to_dict()

    duration_ms = round((time.perf_counter() - start) * 1000, 2)
    tracker.record_calculation(
        duration_ms=duration_ms,
        sections_processed=len(section_results),
        sections_skipped=len(skipped),
        bars_planned=sum(combined.stock_summary.values()),
    )
    logger.info(
        f"Calculated {len(section_results)} section(s), skipped {len(skipped)}",
        extra={"duration_ms": duration_ms},
    )

    return {
        # JSON round trip writes non-finite floats as null
        "input": json.loads(window_input.model_dump_json()),
        "section_results": section_results,
        "combined_summary": combined.to_dict(),
        "skipped_sections": skipped,
    }


def merge_window_inputs(worksheets: Sequence[Tuple[str, WindowInput]]) -> WindowInput:
    """
    Concatenate the sections of several saved worksheets into one input.
    Each section gets a fresh id and its worksheet name appended.
    """
    merged: List[WindowSection] = []
    for worksheet_name, window_input in worksheets:
        for section in window_input.sections:
            merged.append(section.model_copy(update={
                "id": str(uuid.uuid4()),
                "name": f"{section.name} ({worksheet_name})",
            }))
    return WindowInput(sections=merged)


def combine_worksheets(
    worksheets: Sequence[Tuple[str, WindowInput]],
    section_configs: ConfigSource = None,
) -> Dict[str, Any]:
    if not worksheets:
        raise ValueError("No worksheets to combine")
    merged = merge_window_inputs(worksheets)
    if not merged.sections:
        raise ValueError("No sections to combine")
    return calculate_materials(merged, section_configs)
