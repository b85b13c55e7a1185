import re

import pytest

from verity.agents.violation_detection_agent import ViolationDetectionAgent
from verity.core.config import Settings
from verity.rules.library import build_rule_library, get_rule_library
from verity.schemas.analysis import ViolationCategory

CONTRACT = """
1. Services. The Consultant shall provide design services to the Company.
2. Payment. Payment shall be made within 90 days of receipt of invoice.
3. Termination. The Company may terminate this agreement at its sole discretion without notice.
4. Non-Compete. The Consultant shall not work for any competitor of the Company for two years.
5. Liability. The Consultant shall indemnify the Company against all claims arising from the services.
6. Governing Law. This agreement is subject to the governing law of the State of California.
"""

agent = ViolationDetectionAgent()


def test_termination_at_sole_discretion_is_flagged():
    text = "the Company may terminate this agreement at its sole discretion without notice"
    violations = agent.detect(text)

    termination = [v for v in violations if v.type == "termination"]
    assert len(termination) == 1
    assert termination[0].severity >= 70
    assert termination[0].severity > get_rule_library().get_rule("termination").severity
    assert termination[0].clause_text.startswith("terminate")


def test_violations_are_ordered_by_severity_then_offset():
    violations = agent.detect(CONTRACT)

    assert len(violations) >= 5
    for first, second in zip(violations, violations[1:]):
        assert first.severity >= second.severity
        if first.severity == second.severity:
            assert first.offset <= second.offset


def test_detects_each_clause_type():
    types = {v.type for v in agent.detect(CONTRACT)}

    assert {"section27", "paymentTerms", "termination", "unlimitedLiability", "jurisdiction"} <= types


def test_violation_records_carry_rule_data():
    violations = agent.detect(CONTRACT)
    non_compete = next(v for v in violations if v.type == "section27")

    assert non_compete.category == ViolationCategory.LEGAL
    assert non_compete.label == "Restraint of Trade"
    assert non_compete.section == "Section 27, Indian Contract Act, 1872"
    assert "Zaheer Khan" in non_compete.citation
    assert non_compete.fair_alternative
    assert CONTRACT[non_compete.offset:].startswith(non_compete.clause_text)
    assert [v.id for v in violations] == [f"rule-{i + 1}" for i in range(len(violations))]


def test_matching_is_case_insensitive():
    violations = agent.detect("THE CONSULTANT AGREES TO A NON-COMPETE COVENANT.")

    assert [v.type for v in violations] == ["section27"]


def test_empty_or_whitespace_input_yields_nothing():
    assert agent.detect("") == []
    assert agent.detect("   \n\t ") == []
    assert agent.detect(None) == []


def test_matches_of_one_rule_do_not_overlap():
    violations = agent.detect("The Client may terminate at will and may terminate immediately.")
    spans = sorted((v.offset, v.offset + len(v.clause_text)) for v in violations if v.type == "termination")

    assert len(spans) == 2
    assert spans[0][1] <= spans[1][0]


def test_severity_is_clamped_to_bounds():
    library = build_rule_library([
        {
            "type": "loud",
            "label": "Loud",
            "category": ViolationCategory.UNFAIR,
            "patterns": (re.compile(r"forever", re.IGNORECASE),),
            "severity": 99,
            "explanation": "",
            "fair_alternative": "",
        },
        {
            "type": "quiet",
            "label": "Quiet",
            "category": ViolationCategory.UNFAIR,
            "patterns": (re.compile(r"softly", re.IGNORECASE),),
            "severity": 0,
            "explanation": "",
            "fair_alternative": "",
        },
    ])
    custom = ViolationDetectionAgent(library, Settings())

    loud = custom.detect("It binds you forever, perpetual, unlimited and irrevocable, at any time.")
    quiet = custom.detect("It binds you softly.")

    assert loud[0].severity == 100
    assert quiet[0].severity == 1


def test_keyword_bonus_is_configurable():
    settings = Settings(SEVERITY_KEYWORD_BONUS=0)
    plain = ViolationDetectionAgent(get_rule_library(), settings)
    text = "the Company may terminate this agreement at its sole discretion without notice"

    assert plain.detect(text)[0].severity == 75


def test_duplicate_rule_types_are_rejected():
    definition = {
        "type": "dup",
        "label": "Dup",
        "category": ViolationCategory.LEGAL,
        "patterns": (re.compile("x"),),
        "severity": 50,
        "explanation": "",
        "fair_alternative": "",
    }
    with pytest.raises(ValueError):
        build_rule_library([definition, dict(definition)])


def test_adversarial_input_finishes():
    text = "terminate " + "a" * 50000 + " indemnify " + "b, " * 20000
    assert isinstance(agent.detect(text), list)
