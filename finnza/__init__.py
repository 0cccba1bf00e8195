"""Finnza Back-Office Package — clients, contracts, charges, users and partner sync.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
