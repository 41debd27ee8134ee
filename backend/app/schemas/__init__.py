"""Pydantic Schemas — request/response contracts for the swap endpoints.

Invariants:
    - Request schemas validate at the system boundary (UUIDs, lengths, rating range)
    - Enum fields reuse core/domain_types (SwapStatus, SwapAction, CompletionProgress)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
"""
