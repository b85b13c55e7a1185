"""
Verity - Contract Risk Analysis for Freelancers

Redacts personal data from contract text, detects void and unfair clauses,
compares terms against fair industry standards, scores the overall risk and
lets the user rehearse negotiating flagged clauses with a simulated client.
"""

__version__ = "1.0.0"
