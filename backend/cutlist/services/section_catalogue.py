"""
Section-type catalogue — resolves the deduction constants for a section's
(section type, track type, configuration).

The catalogue normally lives in the admin database; this in-memory version is
seeded with the 27mm Domal section so the calculator works without one.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from cutlist.config import (
    CONFIGURATIONS,
    DEFAULT_SECTION_TYPE_ID,
    DEFAULT_SECTION_TYPE_NAME,
    DOMAL_27MM_CORRECTIONS,
    TRACK_TYPES,
)
from cutlist.models.window_schema import SectionConfiguration, SectionType
from cutlist.services.stock_optimization import STOCK_OPTIONS

logger = logging.getLogger("cutlist-catalogue")

_Key = Tuple[str, str, str]


class SectionTypeCatalogue:

    def __init__(self, configurations: Iterable[SectionConfiguration] = ()):
        self._configs: Dict[_Key, SectionConfiguration] = {}
        for config in configurations:
            key = (config.section_type_id, config.track_type, config.configuration)
            if key in self._configs:
                logger.warning(f"Duplicate section configuration {key}; keeping the first")
                continue
            self._configs[key] = config

    def __len__(self) -> int:
        return len(self._configs)

    def configurations(self) -> List[SectionConfiguration]:
        return list(self._configs.values())

    def find(
        self, section_type_id: str, track_type: str, configuration: str
    ) -> Optional[SectionConfiguration]:
        return self._configs.get((section_type_id, track_type, configuration))


def default_section_types() -> List[SectionType]:
    configurations = [
        SectionConfiguration(
            section_type_id=DEFAULT_SECTION_TYPE_ID,
            track_type=track,
            configuration=config,
            **DOMAL_27MM_CORRECTIONS,
        )
        for track in TRACK_TYPES
        for config in CONFIGURATIONS
    ]
    return [
        SectionType(
            id=DEFAULT_SECTION_TYPE_ID,
            name=DEFAULT_SECTION_TYPE_NAME,
            track_types=list(TRACK_TYPES),
            configs=list(CONFIGURATIONS),
            configurations=configurations,
            stock_lengths=list(STOCK_OPTIONS),
        )
    ]


def build_default_catalogue() -> SectionTypeCatalogue:
    return SectionTypeCatalogue(
        config for section_type in default_section_types() for config in section_type.configurations
    )
