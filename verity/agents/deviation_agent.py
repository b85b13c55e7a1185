import re
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from verity.core.config import settings
from verity.rules.library import (
    UNLIMITED,
    RuleLibrary,
    TermStandard,
    get_rule_library,
)
from verity.schemas.analysis import Deviation, DeviationLevel, Violation, ViolationCategory

logger = logging.getLogger(__name__)

Found = Union[float, str]

GAP = r"[^.;]{0,150}?"

PAYMENT_DAY_PATTERNS = [
    re.compile(r"within\s+(\d{1,3})\s+days", re.IGNORECASE),
    re.compile(r"(\d{1,3})\s+days?\s+(?:of|from|after)", re.IGNORECASE),
    re.compile(r"payment\s+terms?[:\s]+(\d{1,3})\s+days", re.IGNORECASE),
    re.compile(r"net\s*[-\s]?(\d{1,3})\b", re.IGNORECASE),
]

REVISION_PATTERNS = [
    re.compile(r"(\d{1,2})\s+(?:rounds?\s+of\s+)?revisions?", re.IGNORECASE),
    re.compile(r"revisions?[:\s]+(\d{1,2})\b", re.IGNORECASE),
    re.compile(r"up\s+to\s+(\d{1,2})\s+revisions?", re.IGNORECASE),
]
UNLIMITED_REVISIONS = re.compile(r"unlimited\s+(?:rounds\s+of\s+)?revisions?", re.IGNORECASE)

NOTICE_PARTIES = {
    "client": ("company", "client", "employer", "principal"),
    "freelancer": ("contractor", "freelancer", "employee", "consultant"),
}
GENERIC_NOTICE = re.compile(r"(\d{1,3})\s+days?\s+(?:prior\s+)?(?:written\s+)?notice", re.IGNORECASE)
NO_NOTICE = re.compile(r"without\s+(?:any\s+)?(?:prior\s+)?notice|terminate\s+immediately", re.IGNORECASE)

LATE_FEE_PATTERNS = [
    re.compile(rf"late\s+(?:payment\s+)?(?:fee|charge|interest){GAP}(\d{{1,2}}(?:\.\d{{1,2}})?)\s*%", re.IGNORECASE),
    re.compile(r"(\d{1,2}(?:\.\d{1,2})?)\s*%\s*(?:per\s+month|monthly|a\s+month)", re.IGNORECASE),
]

KILL_FEE_PATTERNS = [
    re.compile(rf"(?:kill|cancellation)\s+fee{GAP}(\d{{1,3}})\s*%", re.IGNORECASE),
    re.compile(rf"(\d{{1,3}})\s*%{GAP}(?:kill|cancellation)\s+fee", re.IGNORECASE),
]
NO_KILL_FEE = re.compile(r"no\s+(?:kill|cancellation)\s+fee", re.IGNORECASE)

UNLIMITED_LIABILITY = re.compile(
    rf"(?:liab\w*|indemn\w*|harmless){GAP}(?:unlimited|without\s+limit|any\s+and\s+all|regardless\s+of)"
    r"|(?:any\s+and\s+all|unlimited)\s+(?:liabilit\w*|damages|losses|claims)",
    re.IGNORECASE,
)
LIABILITY_MULTIPLE = re.compile(
    r"(\d{1,2}(?:\.\d{1,2})?)\s*(?:x|times)\s+(?:the\s+)?(?:total\s+)?(?:contract|fees?|value)",
    re.IGNORECASE,
)


def _first_number(patterns: Iterable[re.Pattern], text: str) -> Optional[Tuple[float, int]]:
    """First match across patterns, in pattern priority order."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return float(match.group(1)), match.start()
    return None


def extract_payment_days(text: str) -> Optional[Tuple[Found, int]]:
    return _first_number(PAYMENT_DAY_PATTERNS, text)


def extract_revision_rounds(text: str) -> Optional[Tuple[Found, int]]:
    match = UNLIMITED_REVISIONS.search(text)
    if match:
        return UNLIMITED, match.start()
    return _first_number(REVISION_PATTERNS, text)


def extract_notice_days(text: str, party: str = "client") -> Optional[Tuple[Found, int]]:
    """Notice period the given party must give, in days."""
    terms = "|".join(NOTICE_PARTIES[party])
    pattern = re.compile(
        rf"\b(?:{terms})\b{GAP}(\d{{1,3}})\s+days?\s+(?:prior\s+)?(?:written\s+)?notice",
        re.IGNORECASE,
    )
    match = pattern.search(text)
    if match:
        return float(match.group(1)), match.start()
    return None


def extract_client_notice_days(text: str) -> Optional[Tuple[Found, int]]:
    found = extract_notice_days(text, "client")
    if found:
        return found
    match = NO_NOTICE.search(text)
    if match:
        return 0.0, match.start()
    return _first_number([GENERIC_NOTICE], text)


def extract_freelancer_notice_days(text: str) -> Optional[Tuple[Found, int]]:
    return extract_notice_days(text, "freelancer")


def extract_late_fee(text: str) -> Optional[Tuple[Found, int]]:
    return _first_number(LATE_FEE_PATTERNS, text)


def extract_kill_fee(text: str) -> Optional[Tuple[Found, int]]:
    match = NO_KILL_FEE.search(text)
    if match:
        return 0.0, match.start()
    return _first_number(KILL_FEE_PATTERNS, text)


def extract_liability_cap(text: str) -> Optional[Tuple[Found, int]]:
    match = LIABILITY_MULTIPLE.search(text)
    if match:
        return float(match.group(1)), match.start()
    match = UNLIMITED_LIABILITY.search(text)
    if match:
        return UNLIMITED, match.start()
    return None


EXTRACTORS: Dict[str, Callable[[str], Optional[Tuple[Found, int]]]] = {
    "payment_days": extract_payment_days,
    "revision_rounds": extract_revision_rounds,
    "late_fee_monthly": extract_late_fee,
    "client_notice_days": extract_client_notice_days,
    "freelancer_notice_days": extract_freelancer_notice_days,
    "liability_cap": extract_liability_cap,
    "kill_fee_percent": extract_kill_fee,
}

UNIT_SUFFIX = {"days": " days", "rounds": " rounds", "percent": "%", "multiple": "x contract value"}


def format_value(value: Found, unit: str) -> str:
    if value == UNLIMITED:
        return "Unlimited"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value}{UNIT_SUFFIX.get(unit, '')}"


class DeviationAgent:
    """Agent for comparing contract terms against fair standards."""

    def __init__(self, library: Optional[RuleLibrary] = None):
        """Initialize the deviation agent.

        Args:
            library: Rule library holding the fair templates
        """
        self.library = library or get_rule_library()

    def compare_deviations(
        self,
        text: Optional[str],
        detected_types: Iterable[str] = (),
        violations: Optional[List[Violation]] = None,
        template: Optional[str] = None,
    ) -> List[Deviation]:
        """Compare contract terms against the fair template.

        Clauses flagged by the detector are compared first, in detector
        order. The whole text is then scanned for template terms not
        already covered by a flagged clause.

        Args:
            text: Redacted contract text
            detected_types: Violation types found by the detector
            violations: Detector output, used to locate flagged clauses.
                When omitted, the first clause of each detected type is
                located with the rule patterns
            template: Fair template name, defaults to the library default

        Returns:
            List of deviations
        """
        if not isinstance(text, str) or not text.strip():
            return []

        standards = self.library.template(template)
        detected = set(detected_types)
        if violations is None:
            violations = self.locate_clauses(text, detected)
        else:
            violations = [v for v in violations if v.type in detected]

        deviations: List[Deviation] = []
        covered_terms = set()

        for violation in violations:
            deviation = self._compare_violation(violation, standards)
            term = self.library.violation_terms.get(violation.type)
            if term:
                covered_terms.add(term)
            if deviation:
                deviations.append(deviation)

        scanned = []
        for term, standard in standards.items():
            if term in covered_terms or not self._applies(standard):
                continue
            found = EXTRACTORS[term](text)
            if found is None:
                continue
            value, offset = found
            deviation = self._compare_value(term, value, standard, offset)
            if deviation:
                scanned.append(deviation)

        scanned.sort(key=lambda d: d.offset or 0)
        deviations.extend(scanned)

        logger.info(f"Found {len(deviations)} deviations from fair standards")
        return deviations

    def locate_clauses(self, text: str, detected_types: Iterable[str]) -> List[Violation]:
        """First clause of each detected type, ordered like detector output."""
        detected = set(detected_types)
        window = settings.CONTEXT_WINDOW
        located: List[Violation] = []
        for rule in self.library.rules:
            if rule.type not in detected:
                continue
            matches = [m for m in (pattern.search(text) for pattern in rule.patterns) if m]
            if not matches:
                logger.info(f"No clause found for detected type {rule.type}")
                continue
            match = min(matches, key=lambda m: (m.start(), -(m.end() - m.start())))
            start = max(0, match.start() - window)
            end = min(len(text), match.end() + window)
            located.append(Violation(
                id=f"{rule.type}-{match.start()}",
                type=rule.type,
                label=rule.label,
                category=rule.category,
                clause_text=match.group(0),
                context=f"...{text[start:end].strip()}...",
                offset=match.start(),
                severity=max(1, rule.severity),
                section=rule.reference,
                citation=rule.case_law,
                explanation=rule.explanation,
                fair_alternative=rule.fair_alternative,
            ))
        located.sort(key=lambda v: (-v.severity, v.offset))
        return located

    def _compare_violation(self, violation: Violation, standards: Dict[str, TermStandard]) -> Optional[Deviation]:
        term = self.library.violation_terms.get(violation.type)
        if term and term in standards and self._applies(standards[term]):
            clause = violation.context or violation.clause_text
            found = EXTRACTORS[term](clause)
            if found is not None:
                return self._compare_value(term, found[0], standards[term], violation.offset)
        return self._qualitative(violation, standards.get(term) if term else None)

    def _qualitative(self, violation: Violation, standard: Optional[TermStandard]) -> Optional[Deviation]:
        """Fallback comparison when no numeric term could be extracted."""
        reference = self.library.qualitative.get(violation.type)
        if reference is None and standard is None:
            return None

        if standard is not None:
            definition = self.library.terms[self.library.violation_terms[violation.type]]
            fair_value = format_value(standard.fair, definition.unit)
            type_label = definition.label
        else:
            fair_value = reference.fair_value
            type_label = reference.label

        return Deviation(
            type=violation.type,
            type_label=type_label,
            found_value=violation.clause_text,
            fair_value=fair_value,
            unit="text",
            severity=self._base_weight(violation),
            level=DeviationLevel.CRITICAL if violation.category == ViolationCategory.LEGAL else DeviationLevel.WARNING,
            explanation=f"The contract says \"{violation.clause_text}\" where the fair standard is: {fair_value}.",
            recommendation=reference.recommendation if reference else violation.fair_alternative,
            offset=violation.offset,
        )

    def _base_weight(self, violation: Violation) -> int:
        rule = self.library.get_rule(violation.type)
        return rule.severity if rule else violation.severity

    @staticmethod
    def _applies(standard: TermStandard) -> bool:
        """Terms whose thresholds are all equal are not applicable."""
        return not (standard.fair == standard.warning == standard.critical)

    def _compare_value(
        self,
        term: str,
        value: Found,
        standard: TermStandard,
        offset: Optional[int],
    ) -> Optional[Deviation]:
        definition = self.library.terms[term]
        higher_is_worse = standard.critical == UNLIMITED or float(standard.critical) > float(standard.fair)

        if value == UNLIMITED:
            if not higher_is_worse:
                return None
            severity, level = 100, DeviationLevel.CRITICAL
        else:
            severity, level = self._score(float(value), standard, higher_is_worse)
            if level == DeviationLevel.FAIR:
                return None

        found_text = format_value(value, definition.unit)
        fair_text = format_value(standard.fair, definition.unit)
        return Deviation(
            type=term,
            type_label=definition.label,
            found_value=value if value == UNLIMITED else float(value),
            fair_value=float(standard.fair),
            unit=definition.unit,
            severity=severity,
            level=level,
            explanation=f"{definition.label}: the contract sets {found_text} against a fair standard of {fair_text}.",
            recommendation=self._recommend(term, found_text, fair_text, level),
            offset=offset,
        )

    @staticmethod
    def _score(value: float, standard: TermStandard, higher_is_worse: bool) -> Tuple[int, DeviationLevel]:
        """Severity grows linearly from the fair value to the critical one."""
        fair = float(standard.fair)
        warning = float(standard.warning)
        if standard.critical == UNLIMITED:
            critical = fair + 2 * (warning - fair)
        else:
            critical = float(standard.critical)

        distance = value - fair if higher_is_worse else fair - value
        span = abs(critical - fair) or 1.0
        severity = max(0, min(100, round(100 * distance / span)))

        if higher_is_worse:
            reached_warning = value >= warning
            reached_critical = standard.critical != UNLIMITED and value >= critical
        else:
            reached_warning = value <= warning
            reached_critical = value <= critical

        if distance <= 0 or not reached_warning:
            return severity, DeviationLevel.FAIR
        if reached_critical:
            return severity, DeviationLevel.CRITICAL
        return severity, DeviationLevel.WARNING

    @staticmethod
    def _recommend(term: str, found_text: str, fair_text: str, level: DeviationLevel) -> str:
        if term == "payment_days":
            if level == DeviationLevel.CRITICAL:
                return (
                    f"Payment terms of {found_text} are excessive. Industry standard is {fair_text}. "
                    "Under the MSMED Act, payment to MSMEs must be made within 45 days."
                )
            return f"Payment terms of {found_text} are above the industry standard of {fair_text}. Negotiate shorter terms."
        if term == "revision_rounds":
            if found_text == "Unlimited":
                return (
                    "Unlimited revisions create scope for exploitation. Negotiate a fixed number "
                    "(typically 2-3 rounds) with additional revisions billed separately."
                )
            return "Negotiate fewer revision rounds with a clear scope definition."
        if term == "client_notice_days":
            return f"The client can end the contract on {found_text} notice. Ask for at least {fair_text}."
        if term == "freelancer_notice_days":
            return f"You must give {found_text} notice to leave. Ask to reduce it to {fair_text}."
        if term == "liability_cap":
            return f"Liability is set at {found_text}. Cap it at {fair_text}."
        if term == "kill_fee_percent":
            return f"A kill fee of {found_text} leaves you exposed if the project is cancelled. Ask for {fair_text}."
        if term == "late_fee_monthly":
            return f"A late fee of {found_text} per month is above the usual {fair_text}."
        return f"Bring {found_text} in line with the fair standard of {fair_text}."
