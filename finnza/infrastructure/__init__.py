"""Infrastructure Layer — database, partner clients, rate limiting and cross-cutting concerns.

Invariants:
    - Pure status rules stay in core/; this layer only does IO and wiring
    - Partner failures surface as core/errors.py types (PartnerAPIError, RateLimitExceededError)

Design Decisions:
    - One thin client per partner; retry, cache and fallback policy lives in rate_limiter.py
"""
