"""Services Layer — IO shell around the pure swap core.

Invariants:
    - Services own the transaction: load → pure check → conditional write → commit → emit
    - No business rule lives here that core/ could express purely

Design Decisions:
    - One file per concern (lifecycle, completion, queries, store) for locality
      (ADR: no god objects)
"""
