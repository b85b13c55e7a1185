import logging
from typing import List, Optional

from verity.rules.market_rates import MARKET_RATES
from verity.schemas.tools import (
    ExperienceLevel,
    MarketRate,
    RateComparison,
    RateRange,
    RateVerdict,
)

logger = logging.getLogger(__name__)

# A rate this far outside the band is called below or above market
BELOW_FACTOR = 0.8
ABOVE_FACTOR = 1.2


class RateComparisonAgent:
    """Agent for comparing a contract's rate with market rates."""

    def __init__(self, rates: Optional[List[MarketRate]] = None):
        self.rates = {rate.id: rate for rate in (rates or MARKET_RATES)}

    def list_rates(self, category: Optional[str] = None) -> List[MarketRate]:
        return [rate for rate in self.rates.values() if category is None or rate.category == category]

    def get_rate(self, rate_id: str, level: ExperienceLevel) -> Optional[RateRange]:
        rate = self.rates.get(rate_id)
        return rate.rates[level] if rate else None

    def compare(self, contract_rate: float, rate_id: str, level: ExperienceLevel) -> Optional[RateComparison]:
        """Compare a contract rate with the market band for its work type.

        Args:
            contract_rate: Rate offered in the contract, in INR
            rate_id: Market rate identifier
            level: Freelancer experience level

        Returns:
            Verdict and percentage difference from the band midpoint, or
            None for an unknown rate id
        """
        market = self.get_rate(rate_id, level)
        if market is None:
            logger.warning(f"Unknown market rate: {rate_id}")
            return None

        midpoint = (market.min + market.max) / 2
        percent_diff = (contract_rate - midpoint) / midpoint * 100

        if contract_rate < market.min * BELOW_FACTOR:
            verdict = RateVerdict.BELOW
        elif contract_rate > market.max * ABOVE_FACTOR:
            verdict = RateVerdict.ABOVE
        else:
            verdict = RateVerdict.FAIR

        return RateComparison(
            rate_id=rate_id,
            label=self.rates[rate_id].label,
            verdict=verdict,
            percent_diff=round(percent_diff, 1),
            market_range=market,
        )
