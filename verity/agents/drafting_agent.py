import logging
from typing import List, Optional
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate

from verity.core.config import settings
from verity.core.llm import GroqChatModel, parse_json_object
from verity.schemas.drafting import ClauseIssue, EmailRequest, EmailTone, NegotiationEmail

logger = logging.getLogger(__name__)

NAME_PLACEHOLDER = "[YOUR NAME]"

TONE_PROMPTS = {
    EmailTone.POLITE: """You are drafting a professional, diplomatic negotiation email for an Indian freelancer or professional.

TONE GUIDELINES:
- Be respectful and collaborative
- Express appreciation for the opportunity
- Frame concerns as "clarifications" or "suggestions"
- Use phrases like "I noticed", "I'd like to discuss", "Perhaps we could consider"
- Maintain a positive relationship focus
- Avoid accusatory language""",
    EmailTone.FIRM: """You are drafting a firm, assertive negotiation email for an Indian freelancer or professional.

TONE GUIDELINES:
- Be direct and clear about concerns
- Reference specific legal provisions confidently
- Use phrases like "This clause is unenforceable under Indian law", "I require modification of"
- Set clear expectations and boundaries
- Professional but not aggressive
- Make it clear these terms are non-negotiable for legal reasons""",
}

EMAIL_PROMPT = """
CONTEXT:
- This is for an Indian contract negotiation
- The sender has analyzed their contract with Verity
- Violations of the Indian Contract Act, 1872 and related laws were detected
- Goal is to renegotiate problematic clauses before signing

OUTPUT FORMAT:
Return ONLY valid JSON (no markdown, no explanation):
{{
  "subject": "Email subject line",
  "body": "Complete email body with proper greeting, paragraphs, and signature placeholder"
}}

EMAIL STRUCTURE:
1. Professional greeting
2. Express interest in the engagement (brief)
3. Mention you've reviewed the contract
4. List specific concerns with legal backing (cite Section numbers)
5. Propose fair alternatives for each issue
6. Request a discussion or a revised contract
7. Professional closing with [YOUR NAME] placeholder

IMPORTANT:
- Keep it concise (under 400 words)
- Use ₹ for any currency references
- Reference Indian law, never US/UK concepts
- Include the actual clause concerns provided
- Be specific, not generic"""

FIX_PROMPT = """You are Verity, an expert Indian contract lawyer. Rewrite contracts to be fair and legal under Indian law.

REWRITING RULES:

1. Section 27 violations (non-compete): REMOVE entirely, replace with:
   "Non-Solicitation: For six (6) months following termination, Contractor shall not directly solicit the specific clients with whom Contractor worked during the engagement."

2. Unlimited liability: CAP at contract value:
   "Contractor's total liability shall not exceed the total fees paid under this Agreement."

3. One-sided termination: Make MUTUAL:
   "Either party may terminate this Agreement with thirty (30) days written notice."

4. Foreign jurisdiction: Change to INDIA:
   "This Agreement shall be governed by the laws of India. Disputes shall be subject to the exclusive jurisdiction of courts in [City], India."

5. IP overreach: Limit to PROJECT work:
   "Intellectual property created specifically for this Project shall transfer to Client upon full payment. Contractor retains rights to pre-existing materials, general skills, and work created outside the scope of this Project."

6. Moral rights waiver: REMOVE entirely (void under Section 57 Copyright Act)

7. Excessive payment terms (>45 days): Change to:
   "Payment shall be made within thirty (30) days of invoice submission."

8. Penalty clauses: Add reasonableness:
   "Late payment shall incur interest at 2% per month, subject to Section 74 of the Indian Contract Act, 1872."

Keep all legitimate, fair terms unchanged.

OUTPUT FORMAT:
Return the complete rewritten contract with changes marked:
[REMOVED: original text that was deleted]
[ADDED: new text that was inserted]
[MODIFIED: old text → new text]

Start immediately with the rewritten contract. Do not add any preamble.
Keep every <REDACTED_...> placeholder as it is."""


def format_issues(violations: List[ClauseIssue]) -> str:
    """Numbered summary of flagged clauses for an email prompt."""
    lines = []
    for i, issue in enumerate(violations, 1):
        clause = issue.clause_text[:200] + ("..." if len(issue.clause_text) > 200 else "")
        lines.append(
            f"{i}. {issue.type} (Severity: {issue.severity}/100)\n"
            f"   - Clause: \"{clause}\"\n"
            f"   - Issue: {issue.explanation or 'Not specified'}\n"
            f"   - Legal Reference: {issue.section or 'Not specified'}"
        )
    return "\n\n".join(lines)


class DraftingAgent:
    """Agent for drafting negotiation emails and fair rewrites of contracts."""

    def __init__(self, llm: Optional[BaseChatModel] = None, fix_llm: Optional[BaseChatModel] = None):
        """Initialize the drafting agent.

        Args:
            llm: Chat model for emails
            fix_llm: Chat model for contract rewrites, defaults to ``llm``
                when given
        """
        self.llm = llm or GroqChatModel(
            temperature=settings.DRAFTING_TEMPERATURE,
            max_tokens=settings.DRAFTING_MAX_TOKENS,
            timeout=settings.DRAFTING_TIMEOUT,
        )
        self.fix_llm = fix_llm or llm or GroqChatModel(
            temperature=0.0,
            max_tokens=settings.FIX_MAX_TOKENS,
            timeout=settings.FIX_TIMEOUT,
        )

        self.email_prompts = {
            tone: ChatPromptTemplate.from_messages([
                ("system", f"{tone_prompt}\n{EMAIL_PROMPT}"),
                ("user", "Generate a negotiation email based on the following contract analysis:\n\n"
                         "SENDER NAME: {sender_name}\n"
                         "Recipient: {recipient}\n"
                         "TONE: {tone}\n\n"
                         "DETECTED ISSUES:\n{issues}\n\n"
                         "Write the email now. Return only JSON.")
            ])
            for tone, tone_prompt in TONE_PROMPTS.items()
        }
        self.fix_prompt = ChatPromptTemplate.from_messages([
            ("system", FIX_PROMPT),
            ("user", "Rewrite this contract to be fair and legal under Indian law.\n\n"
                     "ORIGINAL CONTRACT:\n{contract_text}\n\n"
                     "VIOLATIONS TO FIX:\n{violations}\n\n"
                     "Return the complete rewritten contract with all changes clearly marked.")
        ])

    def draft_email(self, request: EmailRequest) -> NegotiationEmail:
        """Draft a negotiation email about the flagged clauses.

        Args:
            request: Flagged clauses, tone and sender details

        Returns:
            Email subject and body

        Raises:
            ValueError: If the model output is not a usable email
        """
        chain = self.email_prompts[request.tone] | self.llm
        response = chain.invoke({
            "sender_name": request.sender_name or NAME_PLACEHOLDER,
            "recipient": request.recipient_role or "The contracting party",
            "tone": request.tone.value.upper(),
            "issues": format_issues(request.violations),
        })

        data = parse_json_object(response.content)
        subject, body = data.get("subject"), data.get("body")
        if not isinstance(subject, str) or not subject.strip() or not isinstance(body, str) or not body.strip():
            raise ValueError("Invalid email response structure")

        if request.sender_name:
            body = body.replace(NAME_PLACEHOLDER, request.sender_name)

        logger.info(f"Drafted {request.tone.value} email covering {len(request.violations)} clauses")
        return NegotiationEmail(subject=subject.strip(), body=body, tone=request.tone)

    def fix_contract(self, contract_text: str, violations: List[ClauseIssue]) -> str:
        """Rewrite a contract with its unfair clauses replaced.

        Args:
            contract_text: Redacted contract text
            violations: Clauses to fix

        Returns:
            Rewritten contract with [REMOVED]/[ADDED]/[MODIFIED] markers

        Raises:
            ValueError: If the model returned no text
        """
        listed = "\n".join(
            f"- {v.type}: \"{v.clause_text[:100]}...\" (Severity: {v.severity})" for v in violations
        ) or "No specific violations provided"

        chain = self.fix_prompt | self.fix_llm
        response = chain.invoke({"contract_text": contract_text, "violations": listed})

        content = response.content if isinstance(response.content, str) else ""
        if not content.strip():
            raise ValueError("No content in model response")

        logger.info(f"Rewrote contract fixing {len(violations)} clauses")
        return content.strip()
