import re
import time

from verity.agents.redaction_agent import RedactionAgent

agent = RedactionAgent()


def test_redacts_email_and_phone():
    result = agent.redact("Contact: jane.doe@example.com, phone 9876543210")

    assert result.redacted_text == "Contact: <REDACTED_EMAIL>, phone <REDACTED_PHONE>"
    assert result.redacted_count == 2
    assert result.redacted_types == ["phone", "email"]
    assert not re.search(r"[6-9]\d{9}", result.redacted_text)


def test_redacts_indian_identifiers():
    text = "PAN ABCDE1234F, Aadhaar 1234 5678 9012, GSTIN 27ABCDE1234F1Z5, mobile +91 9123456789."
    result = agent.redact(text)

    assert "<REDACTED_PAN>" in result.redacted_text
    assert "<REDACTED_AADHAAR>" in result.redacted_text
    assert "<REDACTED_GST>" in result.redacted_text
    assert "<REDACTED_PHONE>" in result.redacted_text
    assert "ABCDE1234F" not in result.redacted_text
    assert set(result.redacted_types) == {"gst", "pan", "aadhaar", "phone"}
    assert result.redacted_count == 4


def test_redaction_is_idempotent():
    text = "Mail a.b@corp.co.in or call 9876543210. PAN ABCDE1234F."
    once = agent.redact(text)
    twice = agent.redact(once.redacted_text)

    assert twice.redacted_text == once.redacted_text
    assert twice.redacted_count == 0
    assert twice.redacted_types == []


def test_text_without_pii_is_untouched():
    text = "The Consultant shall deliver the designs by March."
    result = agent.redact(text)

    assert result.redacted_text == text
    assert result.redacted_count == 0
    assert agent.contains_pii(text) is False
    assert agent.detect_types(text) == []


def test_detection_helpers():
    text = "Reach me at someone@example.org"

    assert agent.contains_pii(text) is True
    assert agent.detect_types(text) == ["email"]
    # Detection does not mutate anything
    assert text == "Reach me at someone@example.org"


def test_malformed_input_yields_no_matches():
    assert agent.redact(None).redacted_text == ""
    assert agent.redact("").redacted_count == 0
    assert agent.contains_pii(None) is False
    assert agent.detect_types(12345) == []


def test_international_mobile_without_separator_is_a_phone():
    result = agent.redact("Call +919876543210 today")

    assert result.redacted_text == "Call <REDACTED_PHONE> today"
    assert result.redacted_types == ["phone"]


def test_long_tokens_without_at_sign_finish_quickly():
    text = "a" * 50000 + " " + "b.c" * 20000 + " x@" + "d" * 50000

    start = time.perf_counter()
    result = agent.redact(text)

    assert time.perf_counter() - start < 2
    assert result.redacted_count == 0
