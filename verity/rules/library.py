"""Static catalogue of violation rules and fair-standard templates.

The catalogue is built once per process by :func:`get_rule_library` and
passed into the detection, comparison and negotiation agents. Nothing in
it is mutated after construction.

Patterns only use bounded gaps (``[^.;]{0,N}?``) between anchors so that
matching stays linear on adversarial input.
"""
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Optional, Tuple, Union

from verity.schemas.analysis import ViolationCategory

# Bounded "anything within the same sentence" gap
GAP = r"[^.;]{0,200}?"

UNLIMITED = "unlimited"

Threshold = Union[float, str]


@dataclass(frozen=True)
class ViolationRule:
    """Definition of one problematic clause type."""
    type: str
    label: str
    category: ViolationCategory
    patterns: Tuple[re.Pattern, ...]
    severity: int
    explanation: str
    fair_alternative: str
    section: Optional[str] = None
    act_name: Optional[str] = None
    case_law: Optional[str] = None

    @property
    def reference(self) -> Optional[str]:
        """Statutory reference shown next to a violation."""
        if self.section and self.act_name:
            return f"{self.section}, {self.act_name}"
        return self.section or self.act_name


@dataclass(frozen=True)
class TermStandard:
    """Fair, warning and critical thresholds for one contract term."""
    fair: Threshold
    warning: Threshold
    critical: Threshold


@dataclass(frozen=True)
class TermDefinition:
    """Display data shared by all templates for one term."""
    key: str
    label: str
    unit: str


@dataclass(frozen=True)
class QualitativeStandard:
    """Fair reference wording for violation types without a numeric term."""
    type: str
    label: str
    fair_value: str
    recommendation: str


def _compile(*patterns: str) -> Tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


RULE_DEFINITIONS: List[dict] = [
    {
        "type": "section27",
        "label": "Restraint of Trade",
        "category": ViolationCategory.LEGAL,
        "patterns": _compile(
            r"shall\s+not\s+(?:compete|work\s+for|engage\s+with|provide\s+services?\s+to)",
            r"non[-\s]?compete",
            r"restraint\s+of\s+trade",
            rf"exclusivity{GAP}after{GAP}termination",
            r"covenant\s+not\s+to\s+compete",
            r"prohibited\s+from\s+(?:working|engaging|competing)",
            r"cannot\s+(?:work\s+for|join|compete)",
            rf"shall\s+not{GAP}competitor",
            r"not\s+engage\s+in\s+any\s+(?:similar|competing)\s+business",
            r"refrain\s+from\s+(?:competing|working)",
        ),
        "severity": 95,
        "section": "Section 27",
        "act_name": "Indian Contract Act, 1872",
        "case_law": "Percept D'Mark (India) Pvt Ltd v. Zaheer Khan (2006) 4 SCC 227",
        "explanation": (
            "This clause tries to stop you from working in your field after the engagement ends. "
            "Under Section 27 every such restraint is void, whatever its duration or geography."
        ),
        "fair_alternative": (
            "Non-solicitation clause: \"For 6 months after termination, the Consultant shall not "
            "directly solicit clients the Consultant personally serviced during the engagement.\""
        ),
    },
    {
        "type": "section23",
        "label": "Unlawful Object",
        "category": ViolationCategory.LEGAL,
        "patterns": _compile(
            r"against\s+public\s+policy",
            r"defeat\s+the\s+provisions\s+of\s+any\s+law",
            r"fraudulent\s+purpose",
            r"immoral\s+or\s+opposed\s+to\s+public\s+policy",
        ),
        "severity": 90,
        "section": "Section 23",
        "act_name": "Indian Contract Act, 1872",
        "explanation": (
            "This clause has an unlawful object or purpose. Agreements with an unlawful object "
            "are void and cannot be enforced against you."
        ),
        "fair_alternative": "Remove the clause entirely as it serves an unlawful purpose.",
    },
    {
        "type": "unlimitedLiability",
        "label": "Unlimited Liability",
        "category": ViolationCategory.LEGAL,
        "patterns": _compile(
            rf"indemnif(?:y|ies|ication){GAP}without\s+limit",
            r"unlimited\s+liability",
            rf"indemnify{GAP}all\s+(?:claims|losses|damages|liabilities)",
            rf"hold\s+harmless{GAP}against\s+all",
            r"liable\s+for\s+any\s+and\s+all\s+(?:damages|losses|claims)",
            r"shall\s+bear\s+all\s+(?:costs|expenses|damages)",
            rf"indemnify{GAP}regardless\s+of\s+(?:fault|cause)",
            r"full\s+indemnification",
            rf"indemnify{GAP}consequential\s+damages",
        ),
        "severity": 85,
        "section": "Sections 73-74",
        "act_name": "Indian Contract Act, 1872",
        "case_law": "ONGC v. Saw Pipes (2003) 5 SCC 705",
        "explanation": (
            "If anyone sues the client over anything related to your work, even when it is not "
            "your fault, you could be made to pay every legal bill and every loss."
        ),
        "fair_alternative": (
            "Liability capped at contract value: \"The Consultant's aggregate liability shall not "
            "exceed the total fees paid under this agreement.\""
        ),
    },
    {
        "type": "penaltyClause",
        "label": "Excessive Penalty",
        "category": ViolationCategory.LEGAL,
        "patterns": _compile(
            r"(?:shall|will)\s+pay\s+(?:a\s+)?penalty",
            r"penalty\s+of\s+(?:rs\.?|inr|usd|\$)?\s*[\d,]{1,15}",
            rf"forfeit{GAP}(?:all|entire|any)\s+(?:fees|payments?|amounts?)",
            rf"liquidated\s+damages{GAP}(?:\d{{2,3}}|double|twice)\s*(?:%|percent|times)?",
        ),
        "severity": 85,
        "section": "Section 74",
        "act_name": "Indian Contract Act, 1872",
        "case_law": "ONGC v. Saw Pipes (2003) 5 SCC 705",
        "explanation": (
            "This clause imposes a penalty far above any real loss. Courts only allow reasonable "
            "compensation, so an inflated penalty can be cut down."
        ),
        "fair_alternative": (
            "Genuine pre-estimate of loss: \"Damages for delay shall not exceed 10% of the fees "
            "for the affected milestone.\""
        ),
    },
    {
        "type": "moralRightsWaiver",
        "label": "Moral Rights Waiver",
        "category": ViolationCategory.LEGAL,
        "patterns": _compile(
            rf"waive{GAP}moral\s+rights",
            rf"moral\s+rights{GAP}(?:waived|relinquished|surrendered)",
            rf"(?:no|without)\s+(?:right\s+to\s+)?(?:attribution|credit){GAP}(?:work|deliverables)",
        ),
        "severity": 82,
        "section": "Section 57",
        "act_name": "Copyright Act, 1957",
        "case_law": "Amar Nath Sehgal v. Union of India (2005) 30 PTC 253",
        "explanation": (
            "Your right to be credited for your work and to object to its distortion cannot be "
            "waived by contract. Any such waiver is void."
        ),
        "fair_alternative": (
            "\"The Consultant retains the right to be identified as the author of the "
            "deliverables and may display them in a portfolio.\""
        ),
    },
    {
        "type": "ipOverreach",
        "label": "IP Overreach",
        "category": ViolationCategory.LEGAL,
        "patterns": _compile(
            rf"all\s+intellectual\s+property{GAP}belongs\s+to",
            rf"assign{GAP}future\s+inventions",
            rf"work{GAP}outside{GAP}hours{GAP}belongs",
            rf"relinquish{GAP}all{GAP}rights",
            rf"transfer\s+all{GAP}rights{GAP}title{GAP}interest",
            rf"perpetual{GAP}irrevocable{GAP}licen[cs]e",
            rf"work\s+product{GAP}including{GAP}ideas",
            rf"inventions{GAP}prior{GAP}after{GAP}(?:employment|engagement)",
        ),
        "severity": 80,
        "section": "Section 18",
        "act_name": "Copyright Act, 1957",
        "case_law": "Amar Nath Sehgal v. Union of India (2005) 30 PTC 253",
        "explanation": (
            "They claim ownership of everything you create, including ideas from your personal "
            "time and work you have not been paid for yet."
        ),
        "fair_alternative": (
            "IP transfers upon full payment: \"IP rights in the deliverables transfer to the Client "
            "upon receipt of final payment. The Consultant retains portfolio usage rights.\""
        ),
    },
    {
        "type": "termination",
        "label": "Unfair Termination",
        "category": ViolationCategory.UNFAIR,
        "patterns": _compile(
            r"may\s+terminate\s+immediately",
            rf"terminate{GAP}at\s+will",
            rf"terminate{GAP}without\s+(?:cause|reason|notice)",
            rf"terminate{GAP}sole\s+discretion",
            rf"terminate{GAP}any\s+time{GAP}without",
            rf"terminat(?:e|ion){GAP}no\s+(?:compensation|payment)",
        ),
        "severity": 75,
        "case_law": "Central Inland Water Transport Corp v. Brojo Nath Ganguly (1986) 3 SCC 156",
        "explanation": (
            "They can end the contract instantly without notice or payment for work already done. "
            "That is extremely one-sided."
        ),
        "fair_alternative": (
            "Mutual termination rights: \"Either party may terminate with 30 days written notice. "
            "The Consultant shall be paid for all work completed to date.\""
        ),
    },
    {
        "type": "jurisdiction",
        "label": "Jurisdiction Issue",
        "category": ViolationCategory.UNFAIR,
        "patterns": _compile(
            rf"governing\s+law{GAP}(?:california|new\s+york|delaware|texas|florida|uk|england|singapore|uae|dubai)",
            rf"exclusive\s+jurisdiction{GAP}(?:usa|united\s+states|london|singapore|dubai)",
            rf"arbitration{GAP}(?:singapore|london|new\s+york|hong\s+kong|dubai)",
            rf"courts\s+of{GAP}(?:california|new\s+york|delaware|london|singapore)",
            rf"pursuant\s+to\s+the\s+laws\s+of{GAP}(?:california|new\s+york|uk|singapore)",
        ),
        "severity": 70,
        "explanation": (
            "Disputes go to foreign law and foreign courts. You would have to travel abroad and "
            "hire foreign lawyers to enforce your rights."
        ),
        "fair_alternative": (
            "Indian jurisdiction: \"This agreement shall be governed by Indian law. Disputes shall "
            "be referred to arbitration in [City], India under the Arbitration and Conciliation "
            "Act, 1996.\""
        ),
    },
    {
        "type": "paymentTerms",
        "label": "Unfair Payment",
        "category": ViolationCategory.UNFAIR,
        "patterns": _compile(
            rf"payment{GAP}within\s+(?:60|90|120)\s+days",
            r"net\s*[-\s]?(?:60|90|120)\b",
            r"upon\s+client\s+satisfaction",
            r"payment\s+at\s+(?:the\s+)?(?:sole\s+)?discretion",
            rf"no\s+payment{GAP}incomplete",
            rf"payment{GAP}subject\s+to\s+approval",
        ),
        "severity": 65,
        "explanation": (
            "Payment terms are much longer or vaguer than the industry standard of 30 days. You "
            "could wait months to be paid for work already delivered."
        ),
        "fair_alternative": (
            "Standard payment terms: \"Payment is due within 30 days of invoice. Late payments "
            "accrue interest at 1.5% per month.\""
        ),
    },
]


# term key -> (label, unit)
TERM_DEFINITIONS: Dict[str, TermDefinition] = {
    "payment_days": TermDefinition("payment_days", "Payment Terms", "days"),
    "revision_rounds": TermDefinition("revision_rounds", "Revision Rounds", "rounds"),
    "late_fee_monthly": TermDefinition("late_fee_monthly", "Late Fee", "percent"),
    "client_notice_days": TermDefinition("client_notice_days", "Client Notice Period", "days"),
    "freelancer_notice_days": TermDefinition("freelancer_notice_days", "Freelancer Notice Period", "days"),
    "liability_cap": TermDefinition("liability_cap", "Liability Cap", "multiple"),
    "kill_fee_percent": TermDefinition("kill_fee_percent", "Kill Fee", "percent"),
}


def _template(payment, revisions, late_fee, client_notice, freelancer_notice, liability, kill_fee):
    return {
        "payment_days": TermStandard(*payment),
        "revision_rounds": TermStandard(*revisions),
        "late_fee_monthly": TermStandard(*late_fee),
        "client_notice_days": TermStandard(*client_notice),
        "freelancer_notice_days": TermStandard(*freelancer_notice),
        "liability_cap": TermStandard(*liability),
        "kill_fee_percent": TermStandard(*kill_fee),
    }


# Liability caps are expressed as multiples of the contract value
FAIR_TEMPLATES: Dict[str, Dict[str, TermStandard]] = {
    "freelance_general": _template(
        (30, 45, 60), (3, 5, UNLIMITED), (2, 5, 10), (15, 7, 0), (15, 30, 60), (1, 2, UNLIMITED), (50, 25, 0),
    ),
    "freelance_design": _template(
        (15, 30, 45), (2, 4, UNLIMITED), (2, 5, 10), (14, 7, 0), (14, 21, 30), (1, 2, UNLIMITED), (50, 25, 0),
    ),
    "freelance_development": _template(
        (30, 45, 60), (3, 5, UNLIMITED), (2, 5, 10), (30, 14, 0), (30, 45, 60), (1, 3, UNLIMITED), (50, 25, 0),
    ),
    # Revisions and late fees do not apply to employment
    "employment_contract": _template(
        (7, 15, 30), (0, 0, 0), (0, 0, 0), (30, 15, 0), (30, 60, 90), (0, 1, UNLIMITED), (100, 50, 0),
    ),
    "content_writing": _template(
        (30, 45, 60), (2, 3, UNLIMITED), (2, 5, 10), (7, 3, 0), (7, 14, 30), (1, 2, UNLIMITED), (50, 25, 0),
    ),
    "photography": _template(
        (15, 30, 45), (2, 3, UNLIMITED), (2.5, 5, 10), (7, 3, 0), (7, 14, 21), (1, 2, UNLIMITED), (50, 25, 0),
    ),
    "it_consulting": _template(
        (30, 45, 60), (2, 4, UNLIMITED), (1.5, 3, 10), (30, 15, 0), (30, 45, 60), (1, 2, UNLIMITED), (25, 10, 0),
    ),
}

# violation type -> numeric term measured in its clause
VIOLATION_TERMS: Dict[str, str] = {
    "paymentTerms": "payment_days",
    "termination": "client_notice_days",
    "unlimitedLiability": "liability_cap",
}

QUALITATIVE_STANDARDS: Dict[str, QualitativeStandard] = {
    "section27": QualitativeStandard(
        "section27", "Restraint of Trade",
        "No post-termination restraint; client non-solicitation for at most 6 months",
        "Strike the non-compete. Offer a narrow non-solicitation of clients you personally served.",
    ),
    "section23": QualitativeStandard(
        "section23", "Unlawful Object",
        "No obligations with an unlawful object",
        "Remove the clause before signing.",
    ),
    "penaltyClause": QualitativeStandard(
        "penaltyClause", "Excessive Penalty",
        "Damages limited to a genuine pre-estimate of loss",
        "Replace the penalty with capped liquidated damages tied to actual loss.",
    ),
    "moralRightsWaiver": QualitativeStandard(
        "moralRightsWaiver", "Moral Rights Waiver",
        "Author retains attribution and integrity rights",
        "Delete the waiver and keep a credit and portfolio clause.",
    ),
    "ipOverreach": QualitativeStandard(
        "ipOverreach", "IP Overreach",
        "IP in paid deliverables transfers on final payment; pre-existing and personal work excluded",
        "Limit the assignment to paid deliverables and transfer it only on final payment.",
    ),
    "jurisdiction": QualitativeStandard(
        "jurisdiction", "Jurisdiction Issue",
        "Indian law with arbitration seated in India",
        "Ask for Indian governing law and an Indian seat of arbitration.",
    ),
    "paymentTerms": QualitativeStandard(
        "paymentTerms", "Payment Terms",
        "Payment within 30 days of invoice",
        "Replace approval or satisfaction conditions with a fixed due date after invoice.",
    ),
    "termination": QualitativeStandard(
        "termination", "Unfair Termination",
        "Mutual termination on 15 days notice with payment for work done",
        "Ask for mutual notice and payment for all work completed to the termination date.",
    ),
    "unlimitedLiability": QualitativeStandard(
        "unlimitedLiability", "Unlimited Liability",
        "Liability capped at 1x contract value",
        "Cap total liability at the fees paid and exclude consequential damages.",
    ),
}


@dataclass(frozen=True)
class RuleLibrary:
    """Read-only bundle of rules and fair-standard tables."""
    rules: Tuple[ViolationRule, ...]
    templates: Dict[str, Dict[str, TermStandard]] = field(default_factory=dict)
    terms: Dict[str, TermDefinition] = field(default_factory=dict)
    violation_terms: Dict[str, str] = field(default_factory=dict)
    qualitative: Dict[str, QualitativeStandard] = field(default_factory=dict)
    default_template: str = "freelance_general"

    def __post_init__(self):
        seen = set()
        for rule in self.rules:
            if rule.type in seen:
                raise ValueError(f"Duplicate violation rule type: {rule.type}")
            seen.add(rule.type)
        if self.templates and self.default_template not in self.templates:
            raise ValueError(f"Unknown default template: {self.default_template}")

    def get_rule(self, rule_type: str) -> Optional[ViolationRule]:
        for rule in self.rules:
            if rule.type == rule_type:
                return rule
        return None

    def label_for(self, rule_type: str) -> str:
        """Human-readable label for a violation type, known or not."""
        rule = self.get_rule(rule_type)
        if rule:
            return rule.label
        return re.sub(r"([A-Z])", r" \1", rule_type).strip().title()

    def template(self, name: Optional[str] = None) -> Dict[str, TermStandard]:
        if name and name in self.templates:
            return self.templates[name]
        return self.templates[self.default_template]


def build_rule_library(
    definitions: Optional[List[dict]] = None,
    default_template: str = "freelance_general",
) -> RuleLibrary:
    """Build a rule library from rule definitions.

    Args:
        definitions: Rule definitions, defaults to the built-in catalogue
        default_template: Fair template used when none is requested

    Returns:
        Immutable rule library

    Raises:
        ValueError: If two rules share a type identifier
    """
    definitions = RULE_DEFINITIONS if definitions is None else definitions
    rules = tuple(ViolationRule(**definition) for definition in definitions)
    return RuleLibrary(
        rules=rules,
        templates=FAIR_TEMPLATES,
        terms=TERM_DEFINITIONS,
        violation_terms=VIOLATION_TERMS,
        qualitative=QUALITATIVE_STANDARDS,
        default_template=default_template,
    )


@lru_cache(maxsize=1)
def get_rule_library() -> RuleLibrary:
    """Process-wide rule library."""
    from verity.core.config import settings

    return build_rule_library(default_template=settings.DEFAULT_TEMPLATE)
