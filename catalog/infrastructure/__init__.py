"""Infrastructure Layer — database sessions, SQL store, logging, notification broker.

Invariants:
    - Implements the protocols declared in core/repository_protocols.py
    - No FastAPI imports: usable from scripts and tests directly
"""
