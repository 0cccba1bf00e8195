"""Services Layer — use cases over repositories and partner gateways.

Invariants:
    - Services own transactions: each public write ends in exactly one commit
    - Partner gateways injected through protocols (core/repository_protocols.py)
    - Services raise FinnzaError subclasses; routes never catch them

Design Decisions:
    - One service per aggregate or partner, constructed per request with its session
"""
