"""
Section geometry engine — converts a window opening plus a section type's
deduction constants into final shutter, glass, interlock and track-rail sizes.

Pure arithmetic; no validation. Callers filter dimensions to valid ranges
first, and any negative result flows through unchanged.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict

from cutlist.models.window_schema import SectionConfiguration


@dataclass(frozen=True)
class FinalDimensions:
    shutter_width: float    # mm, after width correction
    height: float           # mm, after height correction


@dataclass(frozen=True)
class GlassSize:
    final_shutter_width: float
    final_height: float
    width: float            # glass width after glass_width_deduction
    height: float           # glass height after glass_height_deduction
    area: float             # mm² per glass
    total_area: float       # mm², area × shutters × quantity (all shutters glass)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TrackRailPiece:
    length: float
    count: int


@dataclass(frozen=True)
class Accessories:
    mosquito_c_channel: int = 0
    track_cap: int = 0

    def __add__(self, other: "Accessories") -> "Accessories":
        return Accessories(
            mosquito_c_channel=self.mosquito_c_channel + other.mosquito_c_channel,
            track_cap=self.track_cap + other.track_cap,
        )

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class SectionGeometry:
    """Correction formulas for one (section type, track type, configuration)."""

    def __init__(self, config: SectionConfiguration):
        self.config = config
        self.track_type = config.track_type
        self.configuration = config.configuration
        self.number_of_shutters = 3 if config.track_type == "3-track" else 2

    @property
    def is_three_glass(self) -> bool:
        return self.track_type == "3-track" and self.configuration == "all-glass"

    @property
    def has_mosquito(self) -> bool:
        return self.configuration == "glass-mosquito"

    def calculate_final_dimensions(self, section_width: float, section_height: float) -> FinalDimensions:
        """
        3-track all-glass: (W + z) / 3 per shutter.
        Everything else (2-track, 3-track glass-mosquito): W / 2 - x.
        Height is always H - y.
        """
        if self.is_three_glass:
            shutter_width = (section_width + self.config.three_track_width_addition) / 3
        else:
            shutter_width = section_width / 2 - self.config.shutter_width_deduction

        height = section_height - self.config.height_deduction
        return FinalDimensions(shutter_width=shutter_width, height=height)

    def raw_width_from_shutter_width(self, shutter_width: float) -> float:
        """Reverse of the width correction in calculate_final_dimensions."""
        if self.is_three_glass:
            return shutter_width * 3 - self.config.three_track_width_addition
        return 2 * (shutter_width + self.config.shutter_width_deduction)

    def calculate_glass_size(self, section_width: float, section_height: float, quantity: int) -> GlassSize:
        final = self.calculate_final_dimensions(section_width, section_height)
        glass_width = final.shutter_width - self.config.glass_width_deduction
        glass_height = final.height - self.config.glass_height_deduction
        area = glass_width * glass_height

        return GlassSize(
            final_shutter_width=final.shutter_width,
            final_height=final.height,
            width=glass_width,
            height=glass_height,
            area=area,
            total_area=area * self.number_of_shutters * quantity,
        )

    def calculate_interlock_length(self, section_height: float) -> float:
        return self.calculate_final_dimensions(0, section_height).height

    def calculate_interlock_count(self, quantity: int) -> int:
        # Only glass-bearing shutter joints take an interlock
        glass_shutters = self.number_of_shutters - (1 if self.has_mosquito else 0)
        return glass_shutters * quantity

    def calculate_track_rail_piece(self, section_width: float, quantity: int) -> TrackRailPiece:
        rails = 3 if self.track_type == "3-track" else 2
        return TrackRailPiece(
            length=section_width - self.config.track_rail_deduction,
            count=rails * quantity,
        )

    def calculate_accessories(self, quantity: int) -> Accessories:
        c_channel = quantity if (self.has_mosquito and self.track_type == "3-track") else 0
        return Accessories(mosquito_c_channel=c_channel, track_cap=quantity)

    def get_shutter_label(self) -> str:
        if self.track_type == "3-track":
            if self.configuration == "all-glass":
                return "Glass shutters (3)"
            return "Glass + Mosquito shutters (3)"
        return "Glass shutters (2)"


def get_section_config(config: SectionConfiguration) -> SectionGeometry:
    return SectionGeometry(config)
