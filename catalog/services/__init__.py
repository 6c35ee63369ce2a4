"""Service Layer — orchestrates pure core decisions around store and broker IO.

Invariants:
    - Services depend on core protocols, never on FastAPI
    - Every public method returns JSON-ready dicts or raises CatalogError

Design Decisions:
    - Thin classes with injected collaborators: routes build them per request
"""
