"""Domain Types — verifies identity types and the persisted enum vocabulary.

Tests:
    - NewType wrappers exist and are callable
    - Enum values equal member names (they are stored as-is)
    - ChargeStatus covers the provider vocabulary after normalization
"""

from finnza.core.domain_types import (
    ChargeId, ClientId, ContractId, UserId,
    ChargeStatus, ContractCategory, ContractStatus, Module, PaymentType,
    SignatureStatus, UserRole, UserStatus,
)


def test_identity_types_wrap_int():
    assert ClientId(1) == 1
    assert ContractId(2) == 2
    assert ChargeId(3) == 3
    assert UserId(4) == 4


def test_enum_values_equal_member_names():
    for enum_cls in (
        ContractStatus, PaymentType, SignatureStatus, ChargeStatus,
        ContractCategory, UserRole, UserStatus, Module,
    ):
        for member in enum_cls:
            assert member.value == member.name


def test_contract_status_has_five_states():
    assert {s.value for s in ContractStatus} == {
        "PENDENTE", "EM_DIA", "VENCIDO", "PAGO", "CANCELADO",
    }


def test_charge_status_has_eleven_states():
    assert len(ChargeStatus) == 11
    assert ChargeStatus("RECEIVED_IN_CASH_UNDONE") is ChargeStatus.RECEIVED_IN_CASH_UNDONE


def test_module_has_ten_members():
    assert len(Module) == 10


def test_str_enums_compare_to_raw_strings():
    assert ContractStatus.PAGO == "PAGO"
    assert UserRole.ADMIN == "ADMIN"
