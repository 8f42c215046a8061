"""
Material calculation — turns one window section's openings into piece
requirements per structural component and runs them through the stock
optimizer.

Components per section:
  Frame      — raw opening width/height, combined or split by
               different_frame_materials
  Shutter    — corrected shutter width/height, combined or split into glass
               and mosquito shutters by separate_mosquito_net
  Interlock  — corrected height, one clip per glass-bearing shutter joint
  Track Rail — opening width less track_rail_deduction, one per rail line

Accessories (C-channel, track caps) are counted, not optimized.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from cutlist.models.window_schema import (
    ComponentGroup,
    MaterialCategory,
    SectionConfiguration,
    StockOption,
    WindowDimension,
)
from cutlist.services.dimension_validation import filter_valid_dimensions
from cutlist.services.formatters import mm_to_feet
from cutlist.services.section_config import Accessories, GlassSize, SectionGeometry, get_section_config
from cutlist.services.stock_optimization import (
    STOCK_OPTIONS,
    PieceRequirement,
    StockBreakdown,
    optimize_combined_stock_usage,
    optimize_stock_usage,
)

logger = logging.getLogger("cutlist-materials")

StockMap = Dict[MaterialCategory, List[StockOption]]


@dataclass
class MaterialRequirement:
    component: str
    group: ComponentGroup
    category: MaterialCategory
    total_required: float
    stock_breakdown: StockBreakdown
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.component,
            "group": self.group.value,
            "category": self.category.value,
            "total_required": self.total_required,
            "stock_breakdown": self.stock_breakdown.to_dict(),
            "description": self.description,
        }


@dataclass
class DimensionGlassInfo:
    dimension_id: str
    glass_size: GlassSize
    quantity: int
    glass_shutters: int
    mosquito_shutters: int = 0

    @property
    def glass_area(self) -> float:
        return self.glass_size.area * self.glass_shutters * self.quantity

    @property
    def mosquito_area(self) -> float:
        return self.glass_size.area * self.mosquito_shutters * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimension_id": self.dimension_id,
            "glass_size": self.glass_size.to_dict(),
            "quantity": self.quantity,
            "glass_shutters": self.glass_shutters,
            "mosquito_shutters": self.mosquito_shutters,
            "glass_area": self.glass_area,
            "mosquito_area": self.mosquito_area,
        }


@dataclass
class SectionMaterialsResult:
    materials: List[MaterialRequirement] = field(default_factory=list)
    accessories: Accessories = field(default_factory=Accessories)
    glass_info: List[DimensionGlassInfo] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _stock_pool(stock_map: Optional[StockMap], category: MaterialCategory) -> List[StockOption]:
    """Section-specific stock lengths for a category, else the default catalogue."""
    options = (stock_map or {}).get(category)
    return list(options) if options else list(STOCK_OPTIONS)


def _total_length(pieces: Sequence[PieceRequirement]) -> float:
    return sum(p.length * p.count for p in pieces)


def _describe(pieces: Sequence[PieceRequirement]) -> str:
    return " + ".join(f"{p.count}×{mm_to_feet(p.length)}ft" for p in pieces)


def _is_split_shutter(geometry: SectionGeometry) -> bool:
    return geometry.config.separate_mosquito_net and geometry.configuration == "glass-mosquito"


# ---------------------------------------------------------------------------
# Frame
# ---------------------------------------------------------------------------

def calculate_frame_pieces(
    dimensions: Sequence[WindowDimension], config: SectionConfiguration
) -> Dict[str, List[PieceRequirement]]:
    """Frame is cut to the literal opening size: no corrections."""
    width_pieces = [
        PieceRequirement.of("width", d.width, config.frame_multiplier_w * d.quantity)
        for d in dimensions
    ]
    height_pieces = [
        PieceRequirement.of("height", d.height, config.frame_multiplier_h * d.quantity)
        for d in dimensions
    ]
    return {"width": width_pieces, "height": height_pieces}


def create_frame_material(
    dimensions: Sequence[WindowDimension],
    config: SectionConfiguration,
    stock_map: Optional[StockMap] = None,
) -> List[MaterialRequirement]:
    pieces = calculate_frame_pieces(dimensions, config)
    width_pieces, height_pieces = pieces["width"], pieces["height"]

    if config.different_frame_materials:
        return [
            MaterialRequirement(
                component="Frame (Width)",
                group=ComponentGroup.FRAME,
                category=MaterialCategory.FRAME_WIDTH,
                total_required=_total_length(width_pieces),
                stock_breakdown=optimize_combined_stock_usage(
                    width_pieces, _stock_pool(stock_map, MaterialCategory.FRAME_WIDTH)
                ),
                description=f"Frame Widths: {_describe(width_pieces)}",
            ),
            MaterialRequirement(
                component="Frame (Height)",
                group=ComponentGroup.FRAME,
                category=MaterialCategory.FRAME_HEIGHT,
                total_required=_total_length(height_pieces),
                stock_breakdown=optimize_combined_stock_usage(
                    height_pieces, _stock_pool(stock_map, MaterialCategory.FRAME_HEIGHT)
                ),
                description=f"Frame Heights: {_describe(height_pieces)}",
            ),
        ]

    combined = width_pieces + height_pieces
    return [
        MaterialRequirement(
            component="Frame (Combined)",
            group=ComponentGroup.FRAME,
            category=MaterialCategory.FRAME_WIDTH,
            total_required=_total_length(combined),
            stock_breakdown=optimize_combined_stock_usage(
                combined, _stock_pool(stock_map, MaterialCategory.FRAME_WIDTH)
            ),
            description=f"Frame: {_describe(width_pieces)} width + {_describe(height_pieces)} height",
        )
    ]


# ---------------------------------------------------------------------------
# Shutter
# ---------------------------------------------------------------------------

def calculate_shutter_pieces(
    dimensions: Sequence[WindowDimension], geometry: SectionGeometry
) -> Dict[str, List[PieceRequirement]]:
    """Every shutter is 2 stiles + 2 rails at the corrected size."""
    height_pieces: List[PieceRequirement] = []
    width_pieces: List[PieceRequirement] = []
    for d in dimensions:
        final = geometry.calculate_final_dimensions(d.width, d.height)
        count = 2 * geometry.number_of_shutters * d.quantity
        height_pieces.append(PieceRequirement.of("height", final.height, count))
        width_pieces.append(PieceRequirement.of("width", final.shutter_width, count))
    return {"height": height_pieces, "width": width_pieces}


def calculate_split_shutter_pieces(
    dimensions: Sequence[WindowDimension], geometry: SectionGeometry
) -> Dict[str, List[PieceRequirement]]:
    """
    One mosquito shutter per window whatever the track count; the other
    number_of_shutters - 1 shutters are glass.
    """
    glass_shutters = geometry.number_of_shutters - 1
    result: Dict[str, List[PieceRequirement]] = {
        "glass_height": [], "glass_width": [], "mosquito_height": [], "mosquito_width": [],
    }
    for d in dimensions:
        final = geometry.calculate_final_dimensions(d.width, d.height)
        result["mosquito_height"].append(PieceRequirement.of("m-height", final.height, 2 * d.quantity))
        result["mosquito_width"].append(PieceRequirement.of("m-width", final.shutter_width, 2 * d.quantity))
        glass_count = 2 * glass_shutters * d.quantity
        result["glass_height"].append(PieceRequirement.of("g-height", final.height, glass_count))
        result["glass_width"].append(PieceRequirement.of("g-width", final.shutter_width, glass_count))
    return result


def create_shutter_material(
    dimensions: Sequence[WindowDimension],
    geometry: SectionGeometry,
    stock_map: Optional[StockMap] = None,
) -> List[MaterialRequirement]:
    if _is_split_shutter(geometry):
        pieces = calculate_split_shutter_pieces(dimensions, geometry)
        glass = pieces["glass_height"] + pieces["glass_width"]
        mosquito = pieces["mosquito_height"] + pieces["mosquito_width"]
        return [
            MaterialRequirement(
                component="Shutter - Glass",
                group=ComponentGroup.SHUTTER,
                category=MaterialCategory.SHUTTER_GLASS,
                total_required=_total_length(glass),
                stock_breakdown=optimize_combined_stock_usage(
                    glass, _stock_pool(stock_map, MaterialCategory.SHUTTER_GLASS)
                ),
                description=(
                    f"Shutter Glass: {_describe(pieces['glass_height'])} H + "
                    f"{_describe(pieces['glass_width'])} W"
                ),
            ),
            MaterialRequirement(
                component="Shutter - Mosquito",
                group=ComponentGroup.SHUTTER,
                category=MaterialCategory.SHUTTER_MOSQUITO,
                total_required=_total_length(mosquito),
                stock_breakdown=optimize_combined_stock_usage(
                    mosquito, _stock_pool(stock_map, MaterialCategory.SHUTTER_MOSQUITO)
                ),
                description=(
                    f"Shutter Mosquito: {_describe(pieces['mosquito_height'])} H + "
                    f"{_describe(pieces['mosquito_width'])} W"
                ),
            ),
        ]

    pieces = calculate_shutter_pieces(dimensions, geometry)
    combined = pieces["height"] + pieces["width"]
    return [
        MaterialRequirement(
            component=f"Shutter (Combined) - {geometry.get_shutter_label()}",
            group=ComponentGroup.SHUTTER,
            category=MaterialCategory.SHUTTER_GLASS,
            total_required=_total_length(combined),
            stock_breakdown=optimize_combined_stock_usage(
                combined, _stock_pool(stock_map, MaterialCategory.SHUTTER_GLASS)
            ),
            description=f"Shutter: {_describe(pieces['height'])} H + {_describe(pieces['width'])} W",
        )
    ]


# ---------------------------------------------------------------------------
# Interlock
# ---------------------------------------------------------------------------

def calculate_interlock_pieces(
    dimensions: Sequence[WindowDimension], geometry: SectionGeometry
) -> List[PieceRequirement]:
    return [
        PieceRequirement.of(
            "interlock",
            geometry.calculate_interlock_length(d.height),
            geometry.calculate_interlock_count(d.quantity),
        )
        for d in dimensions
    ]


def create_interlock_material(
    interlock_pieces: Sequence[PieceRequirement],
    stock_options: Optional[Sequence[StockOption]] = None,
) -> MaterialRequirement:
    options = list(stock_options) if stock_options else list(STOCK_OPTIONS)
    lengths = {p.length for p in interlock_pieces}

    if len(lengths) == 1:
        breakdown = optimize_stock_usage(
            interlock_pieces[0].length,
            sum(p.count for p in interlock_pieces),
            options,
            subtype=interlock_pieces[0].tag.subtype,
        )
    else:
        breakdown = optimize_combined_stock_usage(interlock_pieces, options)

    return MaterialRequirement(
        component="Interlock",
        group=ComponentGroup.INTERLOCK,
        category=MaterialCategory.INTERLOCK,
        total_required=_total_length(interlock_pieces),
        stock_breakdown=breakdown,
        description=f"Interlock clips: {_describe(interlock_pieces)}",
    )


# ---------------------------------------------------------------------------
# Track rail
# ---------------------------------------------------------------------------

def create_track_rail_material(
    dimensions: Sequence[WindowDimension],
    geometry: SectionGeometry,
    stock_options: Optional[Sequence[StockOption]] = None,
) -> Optional[MaterialRequirement]:
    """None when no dimension yields a positive rail length."""
    pieces: List[PieceRequirement] = []
    for d in dimensions:
        rail = geometry.calculate_track_rail_piece(d.width, d.quantity)
        if rail.length <= 0:
            logger.debug(f"Track rail suppressed for dimension '{d.id}': length {rail.length}mm")
            continue
        pieces.append(PieceRequirement.of("track", rail.length, rail.count))

    if not pieces:
        return None

    options = list(stock_options) if stock_options else list(STOCK_OPTIONS)
    return MaterialRequirement(
        component="Track Rail",
        group=ComponentGroup.TRACK_RAIL,
        category=MaterialCategory.TRACK_RAIL,
        total_required=_total_length(pieces),
        stock_breakdown=optimize_combined_stock_usage(pieces, options),
        description=f"Track Rails: {_describe(pieces)}",
    )


# ---------------------------------------------------------------------------
# Section
# ---------------------------------------------------------------------------

def calculate_glass_info(
    dimensions: Sequence[WindowDimension], geometry: SectionGeometry
) -> List[DimensionGlassInfo]:
    split = _is_split_shutter(geometry)
    glass_shutters = geometry.number_of_shutters - 1 if split else geometry.number_of_shutters
    return [
        DimensionGlassInfo(
            dimension_id=d.id,
            glass_size=geometry.calculate_glass_size(d.width, d.height, d.quantity),
            quantity=d.quantity,
            glass_shutters=glass_shutters,
            mosquito_shutters=1 if split else 0,
        )
        for d in dimensions
    ]


def calculate_accessories(
    dimensions: Sequence[WindowDimension], geometry: SectionGeometry
) -> Accessories:
    total = Accessories()
    for d in dimensions:
        total = total + geometry.calculate_accessories(d.quantity)
    return total


def calculate_section_materials(
    dimensions: Sequence[WindowDimension],
    config: SectionConfiguration,
    stock_map: Optional[StockMap] = None,
) -> SectionMaterialsResult:
    """
    Build every material requirement for one section.

    Blank and invalid rows are dropped first; a section left with no valid
    rows returns no materials and zero accessories.
    """
    valid = filter_valid_dimensions(list(dimensions))
    if not valid:
        return SectionMaterialsResult()

    geometry = get_section_config(config)

    materials: List[MaterialRequirement] = []
    materials.extend(create_frame_material(valid, config, stock_map))
    materials.extend(create_shutter_material(valid, geometry, stock_map))
    materials.append(create_interlock_material(
        calculate_interlock_pieces(valid, geometry),
        _stock_pool(stock_map, MaterialCategory.INTERLOCK),
    ))
    track_rail = create_track_rail_material(
        valid, geometry, _stock_pool(stock_map, MaterialCategory.TRACK_RAIL)
    )
    if track_rail is not None:
        materials.append(track_rail)

    return SectionMaterialsResult(
        materials=materials,
        accessories=calculate_accessories(valid, geometry),
        glass_info=calculate_glass_info(valid, geometry),
    )
