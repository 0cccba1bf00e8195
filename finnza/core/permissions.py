"""Permissions — per-module access rules and the camelCase key vocabulary.

Invariants:
    - ADMIN passes every module check regardless of stored grants
    - Non-admin access requires an enabled grant for the exact module
    - key_to_module(module_to_key(m)) == m for every Module
    - Unknown module names and keys never raise — they resolve to "no access" / None

Design Decisions:
    - camelCase keys ("fluxoCaixa", "gerenciarAcessos") are the frontend contract;
      only the two compound module names differ from plain lowercase
    - plan_permission_update is a pure diff so the service owns the ORM mutations
"""

from dataclasses import dataclass, field
from typing import Mapping

from finnza.core.domain_types import Module, UserRole


_SPECIAL_KEYS: dict[Module, str] = {
    Module.FLUXO_CAIXA: "fluxoCaixa",
    Module.GERENCIAR_ACESSOS: "gerenciarAcessos",
}
_KEY_TO_MODULE: dict[str, Module] = {
    _SPECIAL_KEYS.get(m, m.value.lower()): m for m in Module
}


def module_to_key(module: Module) -> str:
    return _SPECIAL_KEYS.get(module, module.value.lower())


def key_to_module(key: str) -> Module | None:
    return _KEY_TO_MODULE.get(key)


def default_permissions(role: UserRole | str) -> dict[Module, bool]:
    """Grants given to a freshly created user."""
    if role == UserRole.ADMIN:
        return {m: True for m in Module}
    return {m: m != Module.GERENCIAR_ACESSOS for m in Module}


def has_permission(
    role: UserRole | str, grants: Mapping[Module, bool], module: Module | str,
) -> bool:
    if role == UserRole.ADMIN:
        return True
    try:
        wanted = Module(module)
    except ValueError:
        return False
    return bool(grants.get(wanted, False))


def permission_map(grants: Mapping[Module, bool]) -> dict[str, bool]:
    """Key -> enabled map for user representations."""
    return {module_to_key(m): bool(enabled) for m, enabled in grants.items()}


@dataclass
class PermissionPlan:
    """Diff between stored grants and a requested key map."""
    upserts: dict[Module, bool] = field(default_factory=dict)
    removals: list[Module] = field(default_factory=list)
    unknown_keys: list[str] = field(default_factory=list)


def plan_permission_update(
    existing: Mapping[Module, bool], requested: Mapping[str, bool],
) -> PermissionPlan:
    """Listed modules are upserted; stored modules absent from the request are removed."""
    plan = PermissionPlan()
    for key, enabled in requested.items():
        module = key_to_module(key)
        if module is None:
            plan.unknown_keys.append(key)
            continue
        plan.upserts[module] = bool(enabled)
    plan.removals = [m for m in existing if m not in plan.upserts]
    return plan
