"""
Input schemas for the cutting-list calculation.

Window openings, sections, stock options and section-type correction
constants arrive as JSON from the calculator UI or a saved worksheet; these
models give them one validated shape before they reach the engines.
"""
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from cutlist.config import DEFAULT_SECTION_TYPE_ID

TrackType = Literal["2-track", "3-track"]
Configuration = Literal["all-glass", "glass-mosquito"]


class MaterialCategory(str, Enum):
    """Stock pools a section can assign its own bar lengths to."""
    FRAME_WIDTH = "frameWidth"
    FRAME_HEIGHT = "frameHeight"
    SHUTTER_GLASS = "shutterGlass"
    SHUTTER_MOSQUITO = "shutterMosquito"
    INTERLOCK = "interlock"
    TRACK_RAIL = "trackRail"


class ComponentGroup(str, Enum):
    """Reporting bucket for summary histograms."""
    FRAME = "frame"
    SHUTTER = "shutter"
    INTERLOCK = "interlock"
    TRACK_RAIL = "track_rail"


class StockOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    length: float = Field(..., gt=0, allow_inf_nan=False, description="Bar length in mm")
    name: str = Field(..., description="e.g., 16ft")
    length_feet: float = Field(0, description="Nominal length in feet")


class WindowDimension(BaseModel):
    """One opening row. All-None is a blank placeholder row."""
    id: str = ""
    height: Optional[float] = None
    width: Optional[float] = None
    quantity: Optional[int] = None


class WindowSection(BaseModel):
    id: str
    name: str = ""
    section_type_id: str = DEFAULT_SECTION_TYPE_ID
    track_type: TrackType = "2-track"
    configuration: Configuration = "all-glass"
    dimensions: List[WindowDimension] = Field(default_factory=list)
    stock_map: Dict[MaterialCategory, List[StockOption]] = Field(default_factory=dict)
    mosquito_mesh_grade: Optional[str] = None


class WindowInput(BaseModel):
    sections: List[WindowSection] = Field(default_factory=list)


class SectionConfiguration(BaseModel):
    """
    Deduction constants for one (section type, track type, configuration).
    Frozen: a calculation never mutates the catalogue it was given.
    """
    model_config = ConfigDict(frozen=True)

    section_type_id: str
    track_type: TrackType
    configuration: Configuration
    shutter_width_deduction: float = 0.0
    height_deduction: float = 0.0
    three_track_width_addition: float = 0.0
    glass_width_deduction: float = 0.0
    glass_height_deduction: float = 0.0
    track_rail_deduction: float = 0.0
    frame_multiplier_w: int = 2
    frame_multiplier_h: int = 2
    separate_mosquito_net: bool = False
    different_frame_materials: bool = False


class SectionType(BaseModel):
    id: str
    name: str
    is_active: bool = True
    track_types: List[TrackType] = Field(default_factory=list)
    configs: List[Configuration] = Field(default_factory=list)
    configurations: List[SectionConfiguration] = Field(default_factory=list)
    stock_lengths: List[StockOption] = Field(default_factory=list)
