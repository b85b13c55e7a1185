import re
import logging
from typing import List, Optional, Tuple

from verity.core.config import Settings, settings as default_settings
from verity.rules.library import RuleLibrary, ViolationRule, get_rule_library
from verity.schemas.analysis import Violation

logger = logging.getLogger(__name__)

SENTENCE_BOUNDARY = re.compile(r"[.;\n]")


class ViolationDetectionAgent:
    """Agent for detecting problematic clauses with the rule library."""

    def __init__(self, library: Optional[RuleLibrary] = None, settings: Optional[Settings] = None):
        """Initialize the violation detection agent.

        Args:
            library: Rule library to apply, defaults to the process-wide one
            settings: Severity heuristics, defaults to application settings
        """
        self.library = library or get_rule_library()
        self.settings = settings or default_settings
        self.keywords = [kw.lower() for kw in self.settings.SEVERITY_KEYWORDS]

    def detect(self, text: Optional[str]) -> List[Violation]:
        """Detect violations in redacted contract text.

        Every rule is applied to the full text. Overlapping matches of
        different rules are all reported; matches of one rule never overlap.

        Args:
            text: Redacted contract text

        Returns:
            Violations ordered by severity (highest first), then by offset
        """
        if not isinstance(text, str) or not text.strip():
            return []

        found: List[Tuple[int, int, int, Violation]] = []
        for rule_index, rule in enumerate(self.library.rules):
            for match in self._find_matches(rule, text):
                violation = self._build_violation(rule, match, text)
                found.append((violation.severity, match.start(), rule_index, violation))

        found.sort(key=lambda item: (-item[0], item[1], item[2]))

        violations = [
            violation.model_copy(update={"id": f"rule-{index + 1}"})
            for index, (_, _, _, violation) in enumerate(found)
        ]
        logger.info(f"Detected {len(violations)} violations")
        return violations

    def _find_matches(self, rule: ViolationRule, text: str) -> List[re.Match]:
        """All non-overlapping matches of one rule across its patterns.

        Earlier, then longer, matches win when spans overlap.
        """
        candidates = []
        for pattern in rule.patterns:
            for match in pattern.finditer(text):
                if match.end() > match.start():
                    candidates.append(match)
        candidates.sort(key=lambda m: (m.start(), -(m.end() - m.start())))

        accepted = []
        last_end = -1
        for match in candidates:
            if match.start() >= last_end:
                accepted.append(match)
                last_end = match.end()
        return accepted

    def _build_violation(self, rule: ViolationRule, match: re.Match, text: str) -> Violation:
        window = self.settings.CONTEXT_WINDOW
        start = max(0, match.start() - window)
        end = min(len(text), match.end() + window)
        context = text[start:end].strip()

        return Violation(
            id=f"{rule.type}-{match.start()}",
            type=rule.type,
            label=rule.label,
            category=rule.category,
            clause_text=match.group(0),
            context=f"...{context}...",
            offset=match.start(),
            severity=self.score_severity(rule.severity, self._sentence(text, match)),
            section=rule.reference,
            citation=rule.case_law,
            explanation=rule.explanation,
            fair_alternative=rule.fair_alternative,
        )

    @staticmethod
    def _sentence(text: str, match: re.Match) -> str:
        """The sentence (or sentences) a match falls in."""
        start = match.start()
        while start > 0 and not SENTENCE_BOUNDARY.match(text, start - 1):
            start -= 1
        boundary = SENTENCE_BOUNDARY.search(text, match.end())
        end = boundary.start() if boundary else len(text)
        return text[start:end]

    def score_severity(self, base: int, clause: str) -> int:
        """Adjust a rule's base weight by absolute language in the clause."""
        lowered = clause.lower()
        hits = sum(1 for keyword in self.keywords if keyword in lowered)
        bonus = min(hits * self.settings.SEVERITY_KEYWORD_BONUS, self.settings.SEVERITY_MAX_BONUS)
        return max(self.settings.SEVERITY_MIN, min(self.settings.SEVERITY_MAX, base + bonus))
