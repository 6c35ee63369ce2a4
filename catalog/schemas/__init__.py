"""API Schemas — Pydantic request bodies at the HTTP boundary.

Invariants:
    - Schemas only shape input; domain rules live in core/validation.py
"""
