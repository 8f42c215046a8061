"""Cutting-list routes — dimension validation, material calculation, worksheet merge."""
import logging
from typing import List, Literal, Optional
from fastapi import APIRouter
from pydantic import BaseModel, Field

from cutlist.models.window_schema import (
    SectionConfiguration,
    SectionType,
    WindowDimension,
    WindowInput,
)
from cutlist.services.calculations import calculate_materials, combine_worksheets
from cutlist.services.dimension_validation import validate_section_dimensions
from cutlist.services.section_catalogue import default_section_types

router = APIRouter(prefix="/api/cutting", tags=["Cutting List"])
logger = logging.getLogger("cutlist-api")


# ─── Pydantic schemas ────────────────────────────────────────────────────────

class CalculateRequest(BaseModel):
    input: WindowInput
    section_configs: Optional[List[SectionConfiguration]] = Field(
        None, description="Overrides the built-in section catalogue when given"
    )


class ValidateRequest(BaseModel):
    dimensions: List[WindowDimension] = Field(default_factory=list)
    unit_mode: Literal["mm", "ft"] = "mm"


class WorksheetInput(BaseModel):
    name: str
    input: WindowInput


class CombineRequest(BaseModel):
    worksheets: List[WorksheetInput] = Field(default_factory=list)
    section_configs: Optional[List[SectionConfiguration]] = None


# ─── Routes ──────────────────────────────────────────────────────────────────

@router.get("/section-types", response_model=List[SectionType])
def list_section_types():
    return default_section_types()


@router.post("/validate")
def validate_dimensions(req: ValidateRequest):
    return validate_section_dimensions(req.dimensions, req.unit_mode)


@router.post("/calculate")
def calculate(req: CalculateRequest):
    """Synchronous and CPU-bound; FastAPI runs it in the threadpool."""
    logger.info(f"Calculating {len(req.input.sections)} section(s)")
    return calculate_materials(req.input, req.section_configs)


@router.post("/combine")
def combine(req: CombineRequest):
    """Same shape as /calculate; `input` is the merged worksheet input."""
    worksheets = [(w.name, w.input) for w in req.worksheets]
    return combine_worksheets(worksheets, req.section_configs)
