"""Infrastructure Layer — database, clock, notification delivery, logging.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All external calls wrapped with error mapping

Design Decisions:
    - Resilient wrappers over raw clients (ADR: single responsibility)
"""
