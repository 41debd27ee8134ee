"""BookSwap Application Package — swap negotiation engine.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports (ADR: ExMA no convention-over-config)
"""
