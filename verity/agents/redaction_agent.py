import re
import logging
from typing import List, Optional, Tuple

from verity.schemas.analysis import RedactionResult

logger = logging.getLogger(__name__)

# Applied in order. GST numbers embed a PAN, so they are redacted before PAN.
PII_PATTERNS: Tuple[Tuple[str, re.Pattern, str], ...] = (
    # GST: 2-digit state code, PAN, entity digit, Z, check character
    ("gst", re.compile(r"\b\d{2}[A-Z]{5}\d{4}[A-Z]\d[Z][A-Z\d]\b"), "<REDACTED_GST>"),
    # PAN: 5 letters, 4 digits, 1 letter
    ("pan", re.compile(r"\b[A-Z]{5}[0-9]{4}[A-Z]\b"), "<REDACTED_PAN>"),
    # Aadhaar: 12 digits, optionally grouped in fours, not part of a +91 number
    ("aadhaar", re.compile(r"(?<!\+)\b\d{4}[ -]?\d{4}[ -]?\d{4}\b"), "<REDACTED_AADHAAR>"),
    # Indian mobile: optional +91, then 10 digits starting with 6-9
    ("phone", re.compile(r"(?:\+91[\s-]?|\b)[6-9]\d{9}\b"), "<REDACTED_PHONE>"),
    # Local part cannot restart inside a token, so long runs without '@' stay linear
    (
        "email",
        re.compile(r"(?<![\w.+-])[\w.+-]{1,64}@[\w-]{1,63}(?:\.[\w-]{1,63}){0,8}\.[A-Za-z]{2,24}"),
        "<REDACTED_EMAIL>",
    ),
)


class RedactionAgent:
    """Agent for stripping personal data from contract text."""

    def __init__(self, patterns: Optional[Tuple[Tuple[str, re.Pattern, str], ...]] = None):
        self.patterns = patterns or PII_PATTERNS

    def redact(self, text: Optional[str]) -> RedactionResult:
        """Replace every PII match with its category placeholder.

        Args:
            text: Raw contract text

        Returns:
            Redacted text with match count and categories found
        """
        redacted_text = text if isinstance(text, str) else ""
        redacted_count = 0
        redacted_types: List[str] = []

        for category, regex, placeholder in self.patterns:
            redacted_text, count = regex.subn(placeholder, redacted_text)
            if count > 0:
                redacted_count += count
                redacted_types.append(category)

        if redacted_count:
            logger.info(f"Redacted {redacted_count} PII matches ({', '.join(redacted_types)})")

        return RedactionResult(
            redacted_text=redacted_text,
            redacted_count=redacted_count,
            redacted_types=redacted_types,
        )

    def contains_pii(self, text: Optional[str]) -> bool:
        """Check whether text contains any PII without redacting it."""
        if not isinstance(text, str):
            return False
        return any(regex.search(text) for _, regex, _ in self.patterns)

    def detect_types(self, text: Optional[str]) -> List[str]:
        """List the PII categories present in text."""
        if not isinstance(text, str):
            return []
        return [category for category, regex, _ in self.patterns if regex.search(text)]
