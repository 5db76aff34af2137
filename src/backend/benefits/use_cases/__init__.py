"""Use-case level logic.

These modules implement the benefit rules (subsidy calculation, recipient
eligibility, usage monitoring) on top of in-memory state.

They should be:
- deterministic
- unit-testable
- free of web/framework code
"""
