from verity.agents.rate_comparison_agent import RateComparisonAgent
from verity.rules.market_rates import CATEGORY_LABELS, MARKET_RATES
from verity.schemas.tools import ExperienceLevel, RateVerdict

agent = RateComparisonAgent()


def test_catalogue_entries_are_well_formed():
    ids = [rate.id for rate in MARKET_RATES]

    assert len(ids) == len(set(ids))
    for rate in MARKET_RATES:
        assert rate.category in CATEGORY_LABELS
        assert set(rate.rates) == set(ExperienceLevel)
        for band in rate.rates.values():
            assert 0 < band.min <= band.max


def test_list_rates_by_category():
    design = agent.list_rates("graphic_design")

    assert design
    assert all(rate.category == "graphic_design" for rate in design)
    assert len(agent.list_rates()) == len(MARKET_RATES)
    assert agent.list_rates("knitting") == []


def test_rate_inside_the_band_is_fair():
    comparison = agent.compare(2250, "dev_frontend", ExperienceLevel.INTERMEDIATE)

    assert comparison.verdict == RateVerdict.FAIR
    assert comparison.percent_diff == 0.0
    assert comparison.market_range.min == 1500
    assert comparison.market_range.max == 3000


def test_rate_far_below_the_band():
    comparison = agent.compare(1000, "dev_frontend", ExperienceLevel.INTERMEDIATE)

    assert comparison.verdict == RateVerdict.BELOW
    assert comparison.percent_diff < 0


def test_rate_just_under_the_band_is_still_fair():
    assert agent.compare(1300, "dev_frontend", ExperienceLevel.INTERMEDIATE).verdict == RateVerdict.FAIR


def test_rate_far_above_the_band():
    comparison = agent.compare(4000, "dev_frontend", ExperienceLevel.INTERMEDIATE)

    assert comparison.verdict == RateVerdict.ABOVE
    assert comparison.label == agent.rates["dev_frontend"].label


def test_unknown_rate_id():
    assert agent.compare(1000, "astrology", ExperienceLevel.EXPERT) is None
    assert agent.get_rate("astrology", ExperienceLevel.EXPERT) is None
