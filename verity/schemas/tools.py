from pydantic import BaseModel, Field
from typing import Dict, List
from enum import Enum


class Industry(str, Enum):
    """Industries with a kill-fee adjustment."""
    SOFTWARE = "software"
    GRAPHIC_DESIGN = "graphic_design"
    CONTENT_WRITING = "content_writing"
    PHOTOGRAPHY_VIDEO = "photography_video"
    UIUX_DESIGN = "uiux_design"
    CONSULTING = "consulting"


class CompletionStage(str, Enum):
    """How far the project got before cancellation."""
    NOT_STARTED = "not_started"
    QUARTER = "quarter"
    HALF = "half"
    THREE_QUARTER = "three_quarter"
    NEAR_COMPLETE = "near_complete"


class KillFeeRequest(BaseModel):
    """Request body for the kill-fee calculator."""
    project_value: float = Field(gt=0)
    industry: Industry
    completion_stage: CompletionStage


class KillFeeBreakdown(BaseModel):
    work_completed_value: int
    opportunity_cost: int
    industry_adjustment: int


class KillFeeResult(BaseModel):
    """Fair kill fee with a ready-to-use clause."""
    kill_fee: int
    percentage: float
    breakdown: KillFeeBreakdown
    generated_clause: str
    legal_basis: str


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


class RateUnit(str, Enum):
    PER_HOUR = "per_hour"
    PER_WORD = "per_word"
    PER_PROJECT = "per_project"
    PER_POST = "per_post"
    PER_PAGE = "per_page"


class RateRange(BaseModel):
    """Market rate band in INR."""
    min: float
    max: float
    unit: RateUnit


class MarketRate(BaseModel):
    """Market rates for one kind of freelance work."""
    id: str
    category: str
    label: str
    rates: Dict[ExperienceLevel, RateRange]
    data_source: str


class RateVerdict(str, Enum):
    BELOW = "below"
    FAIR = "fair"
    ABOVE = "above"


class RateComparisonRequest(BaseModel):
    """Request body for comparing a contract rate with the market."""
    contract_rate: float = Field(gt=0)
    rate_id: str
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE


class RateComparison(BaseModel):
    """Where a contract rate sits against its market band."""
    rate_id: str
    label: str
    verdict: RateVerdict
    percent_diff: float
    market_range: RateRange


class MarketRateCatalogue(BaseModel):
    rates: List[MarketRate]
    categories: Dict[str, str]
    experience_levels: Dict[str, str]
