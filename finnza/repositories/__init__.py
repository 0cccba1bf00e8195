"""Repositories — async SQLAlchemy query objects, one per aggregate.

Invariants:
    - Finders exclude soft-deleted rows unless include_deleted=True is passed
    - Repositories never commit: the calling service owns the transaction

Design Decisions:
    - Classes satisfying core/repository_protocols.py so services can be tested
      against the real queries on in-memory SQLite
"""
