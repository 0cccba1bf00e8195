"""BomControle Client — thin async wrapper over the BomControle integration API.

Invariants:
    - Authorization header is "ApiKey <key>"
    - Mock mode when no API key is configured: canned empty-ish payloads, no network
    - HTTP errors propagate as httpx.HTTPStatusError: the rate limiter classifies
      429/401 and decides between retry, cache and fallback
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

COMPANIES_PATH = "/integracao/Empresa/Pesquisar"
MOVEMENTS_PATH = "/integracao/Financeiro/Pesquisar"


class BomControleClient:
    """Ledger gateway backed by BomControle."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://apinewintegracao.bomcontrole.com.br",
        timeout_seconds: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._mock = not api_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"ApiKey {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout_seconds,
            transport=transport,
        )
        if self._mock:
            logger.warning("BomControle client running in MOCK mode")

    @property
    def mock_enabled(self) -> bool:
        return self._mock

    async def aclose(self) -> None:
        await self._client.aclose()

    async def search_companies(self, term: str | None = None) -> list[dict]:
        if self._mock:
            return [{"Id": 1, "Nome": "Empresa Mock", "Documento": "00000000000191"}]
        params = {"pesquisa": term} if term else None
        response = await self._client.get(COMPANIES_PATH, params=params)
        response.raise_for_status()
        data = response.json()
        if isinstance(data, list):
            return data
        return data.get("Itens") or []

    async def search_movements(self, params: dict[str, Any]) -> dict:
        if self._mock:
            return {"Itens": [], "TotalItens": 0}
        query = {k: v for k, v in params.items() if v is not None}
        response = await self._client.get(MOVEMENTS_PATH, params=query)
        response.raise_for_status()
        return response.json() or {}
