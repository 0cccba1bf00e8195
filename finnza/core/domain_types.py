"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ClientId, ContractId, ChargeId, UserId wrap integer primary keys
    - All valid states encoded as Enums — no raw string matching
    - Enum values equal member names: they are the persisted vocabulary

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to String columns without custom encoders
    - ChargeStatus mirrors the payment provider's vocabulary after normalization
      (see core/status_reconciler.py for the mapping of provider aliases)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ClientId = NewType("ClientId", int)
ContractId = NewType("ContractId", int)
ChargeId = NewType("ChargeId", int)
UserId = NewType("UserId", int)


# ─── Contracts & Charges ─────────────────────────────────────────

class ContractStatus(str, Enum):
    """Contract lifecycle — derived from charges, overridden by provider events."""
    PENDENTE = "PENDENTE"
    EM_DIA = "EM_DIA"
    VENCIDO = "VENCIDO"
    PAGO = "PAGO"
    CANCELADO = "CANCELADO"


class PaymentType(str, Enum):
    """UNICO bills once; RECORRENTE becomes a provider subscription."""
    UNICO = "UNICO"
    RECORRENTE = "RECORRENTE"


class SignatureStatus(str, Enum):
    PENDENTE = "PENDENTE"
    ASSINADO = "ASSINADO"
    CANCELADO = "CANCELADO"


class ChargeStatus(str, Enum):
    """Billing item (cobrança) states, normalized from the provider."""
    PENDING = "PENDING"
    RECEIVED = "RECEIVED"
    OVERDUE = "OVERDUE"
    REFUNDED = "REFUNDED"
    RECEIVED_IN_CASH_UNDONE = "RECEIVED_IN_CASH_UNDONE"
    CHARGEBACK_REQUESTED = "CHARGEBACK_REQUESTED"
    CHARGEBACK_DISPUTE = "CHARGEBACK_DISPUTE"
    AWAITING_CHARGEBACK_REVERSAL = "AWAITING_CHARGEBACK_REVERSAL"
    DUNNING_REQUESTED = "DUNNING_REQUESTED"
    DUNNING_RECEIVED = "DUNNING_RECEIVED"
    AWAITING_RISK_ANALYSIS = "AWAITING_RISK_ANALYSIS"


class ContractCategory(str, Enum):
    """Dashboard bucket for a contract — see core/contract_category.py."""
    EM_DIA = "EM_DIA"
    PENDENTE = "PENDENTE"
    EM_ATRASO = "EM_ATRASO"
    INADIMPLENTE = "INADIMPLENTE"


# ─── Users & Access ──────────────────────────────────────────────

class UserRole(str, Enum):
    ADMIN = "ADMIN"
    CLIENTE = "CLIENTE"


class UserStatus(str, Enum):
    ATIVO = "ATIVO"
    INATIVO = "INATIVO"


class Module(str, Enum):
    """Application modules gated by per-user permissions."""
    DASHBOARD = "DASHBOARD"
    RELATORIO = "RELATORIO"
    MOVIMENTACOES = "MOVIMENTACOES"
    FLUXO_CAIXA = "FLUXO_CAIXA"
    CONTRATOS = "CONTRATOS"
    CHAT = "CHAT"
    ASSINATURA = "ASSINATURA"
    GERENCIAR_ACESSOS = "GERENCIAR_ACESSOS"
    FINANCEIRO = "FINANCEIRO"
    CONFIGURACOES = "CONFIGURACOES"
