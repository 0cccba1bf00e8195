"""Partner Registry — process-wide partner clients and the BomControle rate limiter.

Invariants:
    - init_partners() called once by the lifespan; close_partners() releases HTTP pools
    - Accessors build from settings on first use, so scripts and tests work without lifespan

Design Decisions:
    - Module-level singletons, same lifecycle as db_manager (infrastructure/database.py)
"""

from finnza.config import Settings, get_settings
from finnza.infrastructure.asaas_client import AsaasClient
from finnza.infrastructure.bomcontrole_client import BomControleClient
from finnza.infrastructure.clint_client import ClintClient
from finnza.infrastructure.rate_limiter import PartnerRateLimiter

asaas_client: AsaasClient | None = None
bomcontrole_client: BomControleClient | None = None
clint_client: ClintClient | None = None
bomcontrole_limiter: PartnerRateLimiter | None = None


def build_limiter(settings: Settings) -> PartnerRateLimiter:
    return PartnerRateLimiter(
        partner="BomControle",
        max_concurrent=settings.rate_limiter_max_concurrent,
        default_ttl_seconds=settings.rate_limiter_cache_ttl_seconds,
        cooldown_seconds=settings.rate_limiter_cooldown_seconds,
        max_retries=settings.rate_limiter_max_retries,
        initial_delay_seconds=settings.rate_limiter_initial_delay_seconds,
        acquire_timeout_seconds=settings.rate_limiter_acquire_timeout_seconds,
    )


def init_partners(settings: Settings) -> None:
    global asaas_client, bomcontrole_client, clint_client, bomcontrole_limiter
    asaas_client = AsaasClient(
        settings.asaas_api_key,
        base_url=settings.asaas_base_url,
        mock_enabled=settings.asaas_mock_enabled,
        timeout_seconds=settings.asaas_timeout_seconds,
    )
    bomcontrole_client = BomControleClient(
        settings.bomcontrole_api_key,
        base_url=settings.bomcontrole_base_url,
        timeout_seconds=settings.bomcontrole_timeout_seconds,
    )
    clint_client = ClintClient(
        settings.clint_webhook_url, timeout_seconds=settings.clint_timeout_seconds,
    )
    if bomcontrole_limiter is None:
        bomcontrole_limiter = build_limiter(settings)


async def close_partners() -> None:
    global asaas_client, bomcontrole_client, clint_client
    for client in (asaas_client, bomcontrole_client, clint_client):
        if client is not None:
            await client.aclose()
    asaas_client = bomcontrole_client = clint_client = None


def get_asaas_client() -> AsaasClient:
    if asaas_client is None:
        init_partners(get_settings())
    return asaas_client


def get_bomcontrole_client() -> BomControleClient:
    if bomcontrole_client is None:
        init_partners(get_settings())
    return bomcontrole_client


def get_clint_client() -> ClintClient:
    if clint_client is None:
        init_partners(get_settings())
    return clint_client


def get_bomcontrole_limiter() -> PartnerRateLimiter:
    global bomcontrole_limiter
    if bomcontrole_limiter is None:
        bomcontrole_limiter = build_limiter(get_settings())
    return bomcontrole_limiter
