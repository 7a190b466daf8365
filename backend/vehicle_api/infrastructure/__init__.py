"""Infrastructure Layer — database session management and observability.

Invariants:
    - Infrastructure never imports from core/ domain logic except the error hierarchy
    - Every store call goes through DatabaseSessionManager (timeouts, rollback, error mapping)
"""
