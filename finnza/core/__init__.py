"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, repositories/ or db/
    - All functions are pure and deterministic (dates are passed in, never read)

Design Decisions:
    - Functional core separated from imperative shell: status rules are testable
      without a database or a payment provider
"""
