import logging
from typing import List, Optional
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate

from verity.core.llm import GroqChatModel, parse_json_object
from verity.rules.library import RuleLibrary, get_rule_library
from verity.schemas.analysis import (
    ModelAnalysis,
    Violation,
    ViolationCategory,
    ViolationSource,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are Verity, an expert Indian contract lawyer analyzing freelance contracts under Indian law.

LEGAL KNOWLEDGE BASE:
- Indian Contract Act, 1872 (especially Sections 10, 14, 23, 27, 28, 73, 74)
- Copyright Act, 1957 (Sections 17, 18, 57)
- Information Technology Act, 2000 (Sections 43A, 72)
- Specific Relief Act, 1963 (Sections 10, 14, 21)

ABSOLUTE RULES:
1. Section 27: all post-termination non-compete clauses are void. Duration and geography do not matter.
2. Section 57 Copyright Act: moral rights cannot be waived by contract.
3. Section 23: agreements with an unlawful object or opposed to public policy are void.
4. Section 74: penalty clauses can be reduced by courts. Unlimited liability is unconscionable.

Never apply US or UK standards such as "reasonable non-compete" or "at-will employment".

OUTPUT FORMAT (strict JSON, nothing else):
{{
  "violations": [
    {{
      "type": "section27 | section23 | penaltyClause | moralRightsWaiver | unlimitedLiability | jurisdiction | termination | ipOverreach | paymentTerms",
      "clause_text": "exact text from the contract",
      "severity": 0-100,
      "section": "Section X, Act Name, Year",
      "case_law": "Case Name (Year) Citation or null",
      "explanation": "plain explanation a 15-year-old would understand",
      "fair_alternative": "what the clause should say"
    }}
  ],
  "overall_score": 0-100,
  "recommendation": "sign | negotiate | reject",
  "summary": "2-3 sentence overall assessment",
  "critical_issues": ["most dangerous clauses"]
}}

SEVERITY GUIDELINES:
- 90-100: void or illegal
- 70-89: highly unfair, likely unenforceable
- 50-69: concerning, should negotiate
- 30-49: minor issues
- 0-29: standard terms

The contract text has already been redacted. Keep every <REDACTED_...> placeholder as it is."""


class EnrichmentAgent:
    """Agent for the optional model-generated contract analysis."""

    def __init__(self, llm: Optional[BaseChatModel] = None, library: Optional[RuleLibrary] = None):
        """Initialize the enrichment agent."""
        self.llm = llm or GroqChatModel(temperature=0.0, max_tokens=4096, top_p=0.9)
        self.library = library or get_rule_library()

        self.prompt = ChatPromptTemplate.from_messages([
            ("system", SYSTEM_PROMPT),
            ("user", "Analyze this contract and return ONLY valid JSON (no markdown, no explanation):\n\n"
                     "CONTRACT TEXT:\n{contract_text}")
        ])

    def analyze(self, redacted_text: str) -> Optional[ModelAnalysis]:
        """Ask the model for a richer analysis of redacted contract text.

        Args:
            redacted_text: Contract text with PII removed

        Returns:
            Parsed model analysis, or None when the model is unavailable
            or its output cannot be parsed
        """
        try:
            if not redacted_text or not redacted_text.strip():
                raise ValueError("Empty contract text")

            chain = self.prompt | self.llm
            response = chain.invoke({"contract_text": redacted_text})

            return self.parse(response.content)

        except Exception as e:
            logger.error(f"Error in model analysis: {str(e)}")
            return None

    @staticmethod
    def parse(content: str) -> ModelAnalysis:
        """Parse model output, tolerating text around the JSON object."""
        data = parse_json_object(content)
        if not isinstance(data.get("violations"), list):
            raise ValueError("Invalid response structure")
        return ModelAnalysis.model_validate(data)

    def merge_violations(
        self,
        rule_violations: List[Violation],
        analysis: ModelAnalysis,
        text: str,
    ) -> List[Violation]:
        """Merge model findings into the rule findings.

        Model findings whose clause text overlaps a rule finding are
        dropped. The result keeps severity order with offset tie-breaks.
        """
        merged = list(rule_violations)
        seen = [v.clause_text.lower()[:50] for v in rule_violations]

        for index, item in enumerate(analysis.violations):
            key = item.clause_text.lower()[:50]
            if not key or any(key[:30] in s or s[:30] in key for s in seen):
                continue
            seen.append(key)

            rule = self.library.get_rule(item.type)
            if rule:
                category = rule.category
            else:
                category = ViolationCategory.LEGAL if item.severity >= 90 else ViolationCategory.UNFAIR
            offset = text.find(item.clause_text)

            merged.append(Violation(
                id=f"model-{index + 1}",
                type=item.type,
                label=self.library.label_for(item.type),
                category=category,
                clause_text=item.clause_text,
                offset=offset if offset >= 0 else len(text),
                severity=max(1, item.severity),
                section=item.section,
                citation=item.case_law,
                explanation=item.explanation,
                fair_alternative=item.fair_alternative,
                source=ViolationSource.MODEL,
            ))

        merged.sort(key=lambda v: (-v.severity, v.offset))
        return merged
