from fastapi import APIRouter, Depends, HTTPException
from typing import Optional
import logging

from verity.schemas.analysis import ErrorResponse
from verity.schemas.tools import (
    KillFeeRequest,
    KillFeeResult,
    MarketRateCatalogue,
    RateComparison,
    RateComparisonRequest,
)
from verity.agents.kill_fee_agent import KillFeeAgent
from verity.agents.rate_comparison_agent import RateComparisonAgent
from verity.rules.market_rates import CATEGORY_LABELS, EXPERIENCE_LABELS

router = APIRouter()
logger = logging.getLogger(__name__)

kill_fee_agent = KillFeeAgent()
rate_comparison_agent = RateComparisonAgent()


def get_kill_fee_agent() -> KillFeeAgent:
    return kill_fee_agent


def get_rate_comparison_agent() -> RateComparisonAgent:
    return rate_comparison_agent


@router.post("/kill-fee", response_model=KillFeeResult, responses={500: {"model": ErrorResponse}})
async def calculate_kill_fee(
    request: KillFeeRequest,
    agent: KillFeeAgent = Depends(get_kill_fee_agent),
):
    """Calculate a fair kill fee and a clause that secures it."""
    try:
        return agent.calculate(request)

    except Exception as e:
        logger.error(f"Error calculating kill fee: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error calculating kill fee: {str(e)}")


@router.get("/market-rates", response_model=MarketRateCatalogue)
async def list_market_rates(
    category: Optional[str] = None,
    agent: RateComparisonAgent = Depends(get_rate_comparison_agent),
):
    """List Indian freelance market rates, optionally for one category."""
    return MarketRateCatalogue(
        rates=agent.list_rates(category),
        categories=CATEGORY_LABELS,
        experience_levels=EXPERIENCE_LABELS,
    )


@router.post(
    "/market-rates/compare",
    response_model=RateComparison,
    responses={404: {"model": ErrorResponse}},
)
async def compare_rate(
    request: RateComparisonRequest,
    agent: RateComparisonAgent = Depends(get_rate_comparison_agent),
):
    """Compare a contract rate with the market band for its work type."""
    comparison = agent.compare(request.contract_rate, request.rate_id, request.experience_level)
    if comparison is None:
        raise HTTPException(status_code=404, detail=f"Unknown market rate: {request.rate_id}")
    return comparison
