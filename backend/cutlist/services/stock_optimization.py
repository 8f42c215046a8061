"""
Stock optimization engine — assigns required piece lengths to fixed-length
stock bars.

Two entry points:
  optimize_stock_usage           — one piece length, pick the stock size with
                                   the lowest wastage percent.
  optimize_combined_stock_usage  — mixed piece lengths, greedy per-bar packing:
                                   every bar is the stock size that leaves the
                                   least offcut for the pieces still remaining.

Neither is an exact bin-packing solver. Downstream figures are pinned to this
greedy behaviour, so swapping in a different packing strategy changes results.

All lengths are mm floats; nothing is rounded while packing.
"""
import logging
import math
from dataclasses import dataclass, field, asdict, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from cutlist.config import DEFAULT_STOCK_OPTIONS
from cutlist.models.window_schema import StockOption

logger = logging.getLogger("cutlist-optimizer")

STOCK_OPTIONS: List[StockOption] = [StockOption(**s) for s in DEFAULT_STOCK_OPTIONS]

STRATEGY_SINGLE = "single-length"
STRATEGY_COMBINED = "combined"
STRATEGY_ONE_BAR_PER_PIECE = "one-bar-per-piece"


class EmptyStockCatalogueError(ValueError):
    """Raised when the optimizer is handed a catalogue with no stock sizes."""


# ---------------------------------------------------------------------------
# Piece and plan records
# ---------------------------------------------------------------------------

def _format_length(length: float) -> str:
    return str(int(length)) if float(length).is_integer() else repr(float(length))


@dataclass(frozen=True)
class PieceTag:
    """
    Where a piece came from, e.g. subtype "g-height" at 1366.65 mm.
    Reporting only; packing looks at length alone.
    """
    subtype: str
    length: float

    @property
    def label(self) -> str:
        return f"{self.subtype}-{_format_length(self.length)}"


@dataclass(frozen=True)
class PieceRequirement:
    tag: PieceTag
    count: int

    @classmethod
    def of(cls, subtype: str, length: float, count: int) -> "PieceRequirement":
        return cls(tag=PieceTag(subtype=subtype, length=length), count=count)

    @property
    def length(self) -> float:
        return self.tag.length

    @property
    def type(self) -> str:
        return self.tag.label


@dataclass
class CuttingPlan:
    stock_index: int
    stock_name: str
    stock_length: float
    pieces: List[float] = field(default_factory=list)
    piece_types: List[str] = field(default_factory=list)
    wastage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StockBreakdown:
    stock_length: float
    stock_name: str
    stocks_needed: int
    pieces_per_stock: float
    total_wastage: float
    wastage_percent: float
    total_stock_length: float
    total_pieces: int
    strategy: str
    cutting_plans: List[CuttingPlan] = field(default_factory=list)
    required_length: Optional[float] = None
    piece_breakdown: Optional[Dict[str, int]] = None
    all_stock_counts: Optional[Dict[str, int]] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BarPacking:
    """Outcome of trial-packing one bar; `taken` aligns with the input pool."""
    stock: StockOption
    pieces: Tuple[PieceTag, ...]
    taken: Tuple[int, ...]
    wastage: float
    remaining: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _resolve_catalogue(stock_options: Optional[Sequence[StockOption]]) -> List[StockOption]:
    if stock_options is None:
        return list(STOCK_OPTIONS)
    if len(stock_options) == 0:
        raise EmptyStockCatalogueError("No valid stock options provided")

    seen = set()
    for stock in stock_options:
        if not (math.isfinite(stock.length) and stock.length > 0):
            raise ValueError(
                f"Stock length must be a positive number; received {stock.length} for '{stock.name}'"
            )
        # Bar counts and histograms are keyed by name
        if stock.name in seen:
            raise ValueError(f"Duplicate stock name '{stock.name}' in catalogue")
        seen.add(stock.name)
    return list(stock_options)


def _wastage_percent(wastage: float, stock_length_used: float) -> float:
    if stock_length_used <= 0:
        return 0.0
    return wastage / stock_length_used * 100


def _check_lengths(requirements: Sequence[PieceRequirement]) -> None:
    for req in requirements:
        if not (math.isfinite(req.length) and req.length > 0):
            raise ValueError(
                f"Piece length must be positive; received {req.length} for '{req.type}'"
            )


# ---------------------------------------------------------------------------
# Single piece length
# ---------------------------------------------------------------------------

def optimize_stock_usage(
    required_length: float,
    total_pieces: int,
    stock_options: Optional[Sequence[StockOption]] = None,
    subtype: str = "piece",
) -> StockBreakdown:
    """
    Cut `total_pieces` pieces of `required_length` from a single stock size.

    For each size: pieces_per_stock = floor(L / r), stocks = ceil(n / pps),
    wastage = stocks·L − n·r. The size with the lowest wastage *percent* wins;
    the first in catalogue order wins ties. If no size holds even one piece,
    every piece gets its own bar of the first catalogue entry.

    `subtype` only labels the pieces in piece_types / piece_breakdown.
    """
    options = _resolve_catalogue(stock_options)
    tag = PieceTag(subtype=subtype, length=required_length)
    _check_lengths([PieceRequirement(tag=tag, count=total_pieces)])

    best: Optional[StockBreakdown] = None
    min_wastage_percent = math.inf

    for stock in options:
        pieces_per_stock = math.floor(stock.length / required_length)
        if pieces_per_stock == 0:
            continue

        stocks_needed = math.ceil(total_pieces / pieces_per_stock)
        total_length = stocks_needed * stock.length
        wastage = total_length - total_pieces * required_length
        wastage_percent = _wastage_percent(wastage, total_length)

        if wastage_percent < min_wastage_percent:
            min_wastage_percent = wastage_percent
            best = StockBreakdown(
                stock_length=stock.length,
                stock_name=stock.name,
                stocks_needed=stocks_needed,
                pieces_per_stock=pieces_per_stock,
                total_wastage=wastage,
                wastage_percent=wastage_percent,
                total_stock_length=total_length,
                total_pieces=total_pieces,
                strategy=STRATEGY_SINGLE,
                cutting_plans=_uniform_plans(stock, tag, total_pieces, pieces_per_stock),
                required_length=required_length,
                piece_breakdown={tag.label: total_pieces} if total_pieces else {},
                all_stock_counts={stock.name: stocks_needed} if stocks_needed else {},
            )

    if best is not None:
        return best

    logger.warning(
        f"Piece {required_length}mm exceeds every stock size; "
        f"one bar per piece on {options[0].name}"
    )
    fallback = pack_one_bar_per_piece([PieceRequirement(tag=tag, count=total_pieces)], options[0])
    fallback.required_length = required_length
    return fallback


def _uniform_plans(
    stock: StockOption, tag: PieceTag, total_pieces: int, pieces_per_stock: int
) -> List[CuttingPlan]:
    plans: List[CuttingPlan] = []
    remaining = total_pieces
    index = 1
    while remaining > 0:
        n = min(pieces_per_stock, remaining)
        plans.append(CuttingPlan(
            stock_index=index,
            stock_name=stock.name,
            stock_length=stock.length,
            pieces=[tag.length] * n,
            piece_types=[tag.label] * n,
            wastage=stock.length - n * tag.length,
        ))
        remaining -= n
        index += 1
    return plans


# ---------------------------------------------------------------------------
# Mixed piece lengths
# ---------------------------------------------------------------------------

def pack_stock(stock: StockOption, remaining: Sequence[PieceRequirement]) -> BarPacking:
    """
    Trial-pack one bar of `stock` from the remaining pool, largest pieces
    first, taking each length while it still fits. Works on a scratch copy of
    the counts; the pool itself is never touched.
    """
    counts = [req.count for req in remaining]
    order = sorted(range(len(remaining)), key=lambda i: -remaining[i].length)

    placed: List[PieceTag] = []
    used = 0.0
    for i in order:
        req = remaining[i]
        while counts[i] > 0 and used + req.length <= stock.length:
            placed.append(req.tag)
            used += req.length
            counts[i] -= 1

    return BarPacking(
        stock=stock,
        pieces=tuple(placed),
        taken=tuple(req.count - c for req, c in zip(remaining, counts)),
        wastage=stock.length - used,
        remaining=sum(counts),
    )


def pack_one_bar_per_piece(
    requirements: Sequence[PieceRequirement],
    stock: StockOption,
    start_index: int = 1,
) -> StockBreakdown:
    """
    Degenerate strategy for pieces no stock size can hold: one dedicated bar
    of `stock` per piece, wastage = bar − piece (negative when the piece
    overflows the bar). Every piece is still accounted for.
    """
    plans: List[CuttingPlan] = []
    piece_breakdown: Dict[str, int] = {}
    index = start_index
    for req in requirements:
        for _ in range(req.count):
            plans.append(CuttingPlan(
                stock_index=index,
                stock_name=stock.name,
                stock_length=stock.length,
                pieces=[req.length],
                piece_types=[req.type],
                wastage=stock.length - req.length,
            ))
            piece_breakdown[req.type] = piece_breakdown.get(req.type, 0) + 1
            index += 1

    bars = len(plans)
    total_stock_length = bars * stock.length
    total_wastage = sum(p.wastage for p in plans)
    return StockBreakdown(
        stock_length=stock.length,
        stock_name=stock.name,
        stocks_needed=bars,
        pieces_per_stock=1 if bars else 0,
        total_wastage=total_wastage,
        wastage_percent=_wastage_percent(total_wastage, total_stock_length),
        total_stock_length=total_stock_length,
        total_pieces=bars,
        strategy=STRATEGY_ONE_BAR_PER_PIECE,
        cutting_plans=plans,
        piece_breakdown=piece_breakdown,
        all_stock_counts={stock.name: bars} if bars else {},
    )


def _best_bar(options: Sequence[StockOption], remaining: Sequence[PieceRequirement]) -> Optional[BarPacking]:
    best: Optional[BarPacking] = None
    for stock in options:
        trial = pack_stock(stock, remaining)
        if trial.pieces and (best is None or trial.wastage < best.wastage):
            best = trial
    return best


def optimize_combined_stock_usage(
    piece_requirements: Sequence[PieceRequirement],
    stock_options: Optional[Sequence[StockOption]] = None,
) -> StockBreakdown:
    """
    Greedy bin packing across several piece lengths and stock sizes.

    Each iteration trial-packs the current pool into one bar of every stock
    size, commits the bar with the smallest absolute wastage, and drops piece
    types whose count reached zero. Pieces that fit no stock size fall through
    to pack_one_bar_per_piece on the first catalogue entry.
    """
    options = _resolve_catalogue(stock_options)
    _check_lengths(piece_requirements)

    remaining = [req for req in piece_requirements if req.count > 0]
    total_pieces = sum(req.count for req in remaining)

    stock_counts: Dict[str, int] = {}
    piece_breakdown: Dict[str, int] = {}
    plans: List[CuttingPlan] = []
    total_stock_length = 0.0
    total_wastage = 0.0

    while remaining:
        bar = _best_bar(options, remaining)
        if bar is None:
            break

        stock_counts[bar.stock.name] = stock_counts.get(bar.stock.name, 0) + 1
        total_stock_length += bar.stock.length
        total_wastage += bar.wastage
        for tag in bar.pieces:
            piece_breakdown[tag.label] = piece_breakdown.get(tag.label, 0) + 1

        plans.append(CuttingPlan(
            stock_index=len(plans) + 1,
            stock_name=bar.stock.name,
            stock_length=bar.stock.length,
            pieces=[tag.length for tag in bar.pieces],
            piece_types=[tag.label for tag in bar.pieces],
            wastage=bar.wastage,
        ))

        remaining = [
            replace(req, count=req.count - taken)
            for req, taken in zip(remaining, bar.taken)
            if req.count - taken > 0
        ]

    if remaining:
        logger.warning(
            f"{sum(r.count for r in remaining)} piece(s) longer than every stock size; "
            f"one bar per piece on {options[0].name}"
        )
        fallback = pack_one_bar_per_piece(remaining, options[0], start_index=len(plans) + 1)
        plans.extend(fallback.cutting_plans)
        total_stock_length += fallback.total_stock_length
        total_wastage += fallback.total_wastage
        for name, count in fallback.all_stock_counts.items():
            stock_counts[name] = stock_counts.get(name, 0) + count
        for label, count in fallback.piece_breakdown.items():
            piece_breakdown[label] = piece_breakdown.get(label, 0) + count

    total_stocks = sum(stock_counts.values())
    if stock_counts:
        primary_name = max(stock_counts.items(), key=lambda kv: kv[1])[0]
    else:
        primary_name = options[0].name
    primary = next((s for s in options if s.name == primary_name), options[0])

    return StockBreakdown(
        stock_length=primary.length,
        stock_name=primary_name,
        stocks_needed=total_stocks,
        pieces_per_stock=round(total_pieces / total_stocks, 2) if total_stocks else 0,
        total_wastage=total_wastage,
        wastage_percent=_wastage_percent(total_wastage, total_stock_length),
        total_stock_length=total_stock_length,
        total_pieces=total_pieces,
        strategy=STRATEGY_COMBINED,
        cutting_plans=plans,
        piece_breakdown=piece_breakdown,
        all_stock_counts=stock_counts,
    )
