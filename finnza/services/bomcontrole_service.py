"""BomControle Service — ledger queries through the partner rate limiter.

Invariants:
    - Every network call goes through PartnerRateLimiter.execute with a cache key
      derived from all query parameters
    - Company listings cache 10 minutes with an empty-list fallback
    - Movement searches cache 5 minutes with an empty-page fallback
    - Missing period bounds default to the first/last day of the current month
    - test_connection never raises: the outcome is reported in the payload

Design Decisions:
    - Date types accept the friendly names used by the frontend (DataVencimento,
      DataCriacao) and convert to the API vocabulary (DataPrevista, Criacao)
    - Page totals (income, expenses, balance) computed from the returned page's
      Debito/Valor fields
"""

import calendar
import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Callable

from finnza.core.errors import FinnzaError
from finnza.core.repository_protocols import LedgerGateway
from finnza.infrastructure.rate_limiter import PartnerRateLimiter

logger = logging.getLogger(__name__)

COMPANIES_TTL_SECONDS = 10 * 60
MOVEMENTS_TTL_SECONDS = 5 * 60
DEFAULT_PAGE_SIZE = 50

_DATE_TYPES = {
    "DataCriacao": "Criacao",
    "Criacao": "Criacao",
    "DataVencimento": "DataPrevista",
    "DataPrevista": "DataPrevista",
    "DataCompetencia": "DataCompetencia",
    "DataPagamento": "DataPagamento",
    "DataConciliacao": "DataConciliacao",
    "UltimaAlteracao": "UltimaAlteracao",
    "DataPadrao": "DataPadrao",
}
DEFAULT_DATE_TYPE = "DataPadrao"
EXPENSE = "despesa"
INCOME = "receita"


def convert_date_type(value: str | None) -> str:
    if not value:
        return DEFAULT_DATE_TYPE
    return _DATE_TYPES.get(value, DEFAULT_DATE_TYPE)


def month_bounds(day: date) -> tuple[date, date]:
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


@dataclass(frozen=True)
class MovementQuery:
    start: date | None = None
    end: date | None = None
    date_type: str | None = None
    company_id: int | None = None
    client_id: int | None = None
    supplier_id: int | None = None
    text: str | None = None
    category: str | None = None
    kind: str | None = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


def _value(raw) -> Decimal:
    try:
        return Decimal(str(raw)) if raw is not None else Decimal("0")
    except ArithmeticError:
        return Decimal("0")


class BomControleService:
    def __init__(
        self,
        client: LedgerGateway,
        limiter: PartnerRateLimiter,
        today: Callable[[], date] = date.today,
    ):
        self.client = client
        self.limiter = limiter
        self.today = today

    async def test_connection(self) -> dict:
        if self.client.mock_enabled:
            return {
                "success": True,
                "mode": "MOCK",
                "message": "Mock mode active: BOMCONTROLE_API_KEY not configured",
            }
        try:
            companies = await self.limiter.execute(
                "conexao:test", self.client.search_companies, ttl_seconds=60,
            )
        except FinnzaError as e:
            logger.error(f"BomControle connection test failed: {e.message}")
            return {"success": False, "message": e.message}
        return {
            "success": True,
            "message": "Connected to BomControle",
            "companies": len(companies),
        }

    async def list_companies(self, term: str | None = None) -> dict:
        term = term.strip() if term and term.strip() else None
        companies = await self.limiter.execute(
            f"empresas:{term or 'all'}",
            lambda: self.client.search_companies(term),
            ttl_seconds=COMPANIES_TTL_SECONDS,
            fallback=list,
        )
        return {"companies": companies, "total": len(companies)}

    async def search_movements(self, query: MovementQuery) -> dict:
        first, last = month_bounds(self.today())
        start = query.start or first
        end = query.end or last
        date_type = convert_date_type(query.date_type)
        params = {
            "dataInicio": f"{start.isoformat()} 00:00:00",
            "dataTermino": f"{end.isoformat()} 23:59:59",
            "tipoData": date_type,
            "idsEmpresa": query.company_id,
            "idsCliente": query.client_id,
            "idsFornecedor": query.supplier_id,
            "textoPesquisa": query.text,
            "categoria": query.category,
            "despesa": None if query.kind is None else query.kind == EXPENSE,
            "paginacao.itensPorPagina": query.page_size,
            "paginacao.numeroDaPagina": query.page,
        }
        cache_key = "movimentacoes:" + ":".join(
            "null" if v is None else str(v) for v in params.values()
        )
        response = await self.limiter.execute(
            cache_key,
            lambda: self.client.search_movements(params),
            ttl_seconds=MOVEMENTS_TTL_SECONDS,
            fallback=lambda: {"Itens": [], "TotalItens": 0},
        )

        items = response.get("Itens") or []
        income = sum((_value(i.get("Valor")) for i in items if not i.get("Debito")), Decimal("0"))
        expenses = sum((_value(i.get("Valor")) for i in items if i.get("Debito")), Decimal("0"))
        total = response.get("TotalItens")
        return {
            "movements": items,
            "total": total if isinstance(total, int) else len(items),
            "total_income": float(income),
            "total_expenses": float(expenses),
            "net_balance": float(income - expenses),
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "date_type": date_type,
            "pagination": {
                "page_size": query.page_size,
                "page": query.page,
                "total_items": total if isinstance(total, int) else len(items),
            },
        }

    async def payables(self, query: MovementQuery) -> dict:
        """Expenses, dated by due date unless another date type is asked for."""
        return await self.search_movements(self._kind(query, EXPENSE))

    async def receivables(self, query: MovementQuery) -> dict:
        return await self.search_movements(self._kind(query, INCOME))

    @staticmethod
    def _kind(query: MovementQuery, kind: str) -> MovementQuery:
        return replace(query, date_type=query.date_type or "DataVencimento", kind=kind)
