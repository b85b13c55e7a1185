from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Union
from enum import Enum


class ViolationCategory(str, Enum):
    """Legal class of a violation rule."""
    LEGAL = "legal"
    UNFAIR = "unfair"


class ViolationSource(str, Enum):
    """Where a violation record came from."""
    RULE = "rule"
    MODEL = "model"


class Recommendation(str, Enum):
    """Recommendation tiers for a contract."""
    SIGN = "sign"
    NEGOTIATE = "negotiate"
    REJECT = "reject"


class DeviationLevel(str, Enum):
    """How far a term strays from its fair standard."""
    FAIR = "fair"
    WARNING = "warning"
    CRITICAL = "critical"


class CacheState(str, Enum):
    """States of the single-slot result cache."""
    EMPTY = "empty"
    FRESH = "fresh"
    EXPIRED = "expired"


class RedactionResult(BaseModel):
    """Result of stripping personal data from contract text."""
    redacted_text: str
    redacted_count: int = 0
    redacted_types: List[str] = []


class Violation(BaseModel):
    """A clause matching a known problematic legal pattern."""
    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    label: str
    category: ViolationCategory
    clause_text: str
    context: Optional[str] = None
    offset: int = 0
    severity: int = Field(ge=1, le=100)
    section: Optional[str] = None
    citation: Optional[str] = None
    explanation: str = ""
    fair_alternative: str = ""
    source: ViolationSource = ViolationSource.RULE


class Deviation(BaseModel):
    """Gap between a contract term and its fair-standard counterpart."""
    model_config = ConfigDict(frozen=True)

    type: str
    type_label: str
    found_value: Union[float, str]
    fair_value: Union[float, str]
    unit: str = "text"
    severity: int = Field(ge=0, le=100)
    level: DeviationLevel = DeviationLevel.WARNING
    explanation: str = ""
    recommendation: str = ""
    offset: Optional[int] = None


class RiskAssessment(BaseModel):
    """Aggregated risk of a single document."""
    risk_score: int = Field(ge=0, le=100)
    recommendation: Recommendation
    critical_issues: List[str] = []
    legal_violations: int = 0
    unfair_terms: int = 0
    risk_level: str = "low"
    risk_label: str = "Low Risk"
    risk_summary: str = ""


class DocumentInfo(BaseModel):
    """Metadata supplied by the upstream text extractor."""
    pages: int = 0
    word_count: int = 0
    filename: str = "contract.txt"
    parse_method: str = "text"


class ModelViolation(BaseModel):
    """Per-violation elaboration produced by the language model."""
    type: str
    clause_text: str
    severity: int = Field(ge=0, le=100)
    section: Optional[str] = None
    case_law: Optional[str] = None
    explanation: str = ""
    fair_alternative: str = ""


class ModelAnalysis(BaseModel):
    """Optional richer analysis produced by the language model."""
    violations: List[ModelViolation] = []
    overall_score: int = Field(default=0, ge=0, le=100)
    recommendation: Recommendation = Recommendation.NEGOTIATE
    summary: str = ""
    critical_issues: List[str] = []


class RedactionSummary(BaseModel):
    """What the redactor removed before analysis."""
    redacted_count: int = 0
    redacted_types: List[str] = []


class AnalysisResult(BaseModel):
    """Complete analysis of one submitted contract."""
    violations: List[Violation] = []
    deviations: List[Deviation] = []
    risk_score: int = Field(default=0, ge=0, le=100)
    recommendation: Recommendation = Recommendation.SIGN
    critical_issues: List[str] = []
    legal_violations: int = 0
    unfair_terms: int = 0
    risk_level: str = "low"
    risk_label: str = "Low Risk"
    risk_summary: str = ""
    analysis_time_ms: int = 0
    document_info: DocumentInfo = Field(default_factory=DocumentInfo)
    redaction: RedactionSummary = Field(default_factory=RedactionSummary)
    model_analysis: Optional[ModelAnalysis] = None
    model_available: bool = False
    timestamp: Optional[float] = None


class AnalysisRequest(BaseModel):
    """Request body for submitting a contract for analysis."""
    text: str
    filename: str = "contract.txt"
    pages: int = Field(default=1, ge=0)
    word_count: Optional[int] = Field(default=None, ge=0)
    parse_method: str = "text"
    template: Optional[str] = None
    enrich: bool = False


class RuleSummary(BaseModel):
    """Public view of a rule in the catalogue."""
    type: str
    label: str
    category: ViolationCategory
    severity: int
    section: Optional[str] = None
    act_name: Optional[str] = None
    case_law: Optional[str] = None


class CacheStatus(BaseModel):
    """State of the caller's result cache."""
    session_id: str
    state: CacheState
    timestamp: Optional[float] = None


class PIICheckResponse(BaseModel):
    """Response model for the PII pre-check endpoint."""
    contains_pii: bool
    types: List[str] = []


class TextPayload(BaseModel):
    """Plain text request body."""
    text: str


class ErrorResponse(BaseModel):
    """Standard error response model."""
    status: str = "error"
    message: str
    detail: Optional[str] = None
