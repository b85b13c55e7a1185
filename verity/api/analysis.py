from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import PlainTextResponse
from typing import List, Optional
import logging

from verity.schemas.analysis import (
    AnalysisRequest,
    AnalysisResult,
    CacheStatus,
    DocumentInfo,
    ErrorResponse,
    RuleSummary,
)
from verity.schemas.drafting import FixRequest
from verity.agents.analysis_pipeline import AnalysisPipeline
from verity.agents.drafting_agent import DraftingAgent
from verity.agents.redaction_agent import RedactionAgent
from verity.agents.enrichment_agent import EnrichmentAgent
from verity.core.llm import llm_available
from verity.database.result_cache import ResultCacheRegistry
from verity.api.negotiation import get_drafting_agent
from verity.rules.library import get_rule_library

router = APIRouter()
logger = logging.getLogger(__name__)

# Initialize pipeline and result caches
analysis_pipeline = AnalysisPipeline(
    enrichment_agent=EnrichmentAgent() if llm_available() else None
)
cache_registry = ResultCacheRegistry()


def get_pipeline() -> AnalysisPipeline:
    return analysis_pipeline


def get_cache_registry() -> ResultCacheRegistry:
    return cache_registry


@router.post("/", response_model=AnalysisResult, responses={500: {"model": ErrorResponse}})
def analyze_contract(
    request: AnalysisRequest,
    x_session_id: Optional[str] = Header(None),
    pipeline: AnalysisPipeline = Depends(get_pipeline),
    registry: ResultCacheRegistry = Depends(get_cache_registry),
):
    """Analyze contract text and make the result the session's active one."""
    try:
        document_info = DocumentInfo(
            pages=request.pages,
            word_count=request.word_count if request.word_count is not None else len(request.text.split()),
            filename=request.filename,
            parse_method=request.parse_method,
        )

        result = pipeline.run(
            request.text,
            document_info=document_info,
            template=request.template,
            enrich=request.enrich,
        )

        return registry.for_session(x_session_id).set_result(result)

    except Exception as e:
        logger.error(f"Error analyzing contract: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error analyzing contract: {str(e)}")


@router.get(
    "/result",
    response_model=AnalysisResult,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def get_analysis_result(
    x_session_id: Optional[str] = Header(None),
    registry: ResultCacheRegistry = Depends(get_cache_registry),
):
    """Get the session's active analysis result."""
    try:
        result = registry.for_session(x_session_id).get_result()
        if result is None:
            raise HTTPException(status_code=404, detail="No active analysis result")
        return result

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error retrieving analysis result: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error retrieving analysis result: {str(e)}")


@router.delete("/result", responses={500: {"model": ErrorResponse}})
def clear_analysis_result(
    x_session_id: Optional[str] = Header(None),
    registry: ResultCacheRegistry = Depends(get_cache_registry),
):
    """Discard the session's active analysis result."""
    try:
        registry.for_session(x_session_id).clear_result()
        return {"status": "success", "message": "Analysis result cleared"}

    except Exception as e:
        logger.error(f"Error clearing analysis result: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error clearing analysis result: {str(e)}")


@router.get("/status", response_model=CacheStatus)
def get_analysis_status(
    x_session_id: Optional[str] = Header(None),
    registry: ResultCacheRegistry = Depends(get_cache_registry),
):
    """Report whether the session holds a fresh, expired or no result."""
    cache = registry.for_session(x_session_id)
    state = cache.state()
    result = cache.get_result()
    return CacheStatus(
        session_id=registry.normalize_session_id(x_session_id),
        state=state,
        timestamp=result.timestamp if result else None,
    )


@router.get("/rules", response_model=List[RuleSummary])
async def list_rules():
    """List the violation rules the detector applies."""
    return [
        RuleSummary(
            type=rule.type,
            label=rule.label,
            category=rule.category,
            severity=rule.severity,
            section=rule.section,
            act_name=rule.act_name,
            case_law=rule.case_law,
        )
        for rule in get_rule_library().rules
    ]


@router.post(
    "/fix",
    response_class=PlainTextResponse,
    responses={
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
def fix_contract(
    request: FixRequest,
    agent: Optional[DraftingAgent] = Depends(get_drafting_agent),
):
    """Rewrite a contract into fair terms, returned as a text download."""
    if agent is None:
        raise HTTPException(status_code=503, detail="Contract rewriting requires GROQ_API_KEY")
    try:
        # Personal data never leaves the service
        redactor = RedactionAgent()
        text = redactor.redact(request.contract_text).redacted_text
        violations = [
            v.model_copy(update={"clause_text": redactor.redact(v.clause_text).redacted_text})
            for v in request.violations
        ]
        fixed = agent.fix_contract(text, violations)
        return PlainTextResponse(
            fixed,
            headers={"Content-Disposition": 'attachment; filename="fixed_contract.txt"'},
        )

    except ValueError as e:
        logger.warning(f"Unusable contract rewrite: {str(e)}")
        raise HTTPException(status_code=502, detail=f"Model returned no contract: {str(e)}")
    except Exception as e:
        logger.error(f"Error fixing contract: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error fixing contract: {str(e)}")
