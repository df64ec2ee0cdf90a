"""
Default roles for a new enterprise.

Every enterprise starts with the same four roles. Permissions are created
for each role over every feature in the catalog:

- Administrador: full access, except Logs which is create/read only.
- Técnico: full access, except the financial and admin features (no access)
  and Logs (create only).
- Financeiro, Cliente: no access.
"""

from __future__ import annotations

import uuid
from typing import NamedTuple

from core.errors import AppError, ErrorCode
from core.uow import Repos

ADMIN_ROLE = "Administrador"
TECHNICIAN_ROLE = "Técnico"
FINANCIAL_ROLE = "Financeiro"
CLIENT_ROLE = "Cliente"

DEFAULT_ROLES = (ADMIN_ROLE, TECHNICIAN_ROLE, FINANCIAL_ROLE, CLIENT_ROLE)

LOGS_FEATURE = "Logs"

TECHNICIAN_RESTRICTED = frozenset(
    {
        "Technician",
        "Logs",
        "Parameter",
        "TypeProduct",
        "Product",
        "Transaction",
        "CashFlow",
        "Bank",
        "FinancialCards",
    }
)


class Access(NamedTuple):
    create: bool
    read: bool
    update: bool
    delete: bool


FULL = Access(True, True, True, True)
NONE = Access(False, False, False, False)


def default_access(role: str, feature: str) -> Access:
    if role == ADMIN_ROLE:
        return Access(True, True, False, False) if feature == LOGS_FEATURE else FULL
    if role == TECHNICIAN_ROLE:
        if feature == LOGS_FEATURE:
            return Access(True, False, False, False)
        return NONE if feature in TECHNICIAN_RESTRICTED else FULL
    return NONE


async def create_default_roles(repos: Repos, enterprise_id: str) -> dict[str, str]:
    """
    Create the default roles and their permissions; returns title -> role id.

    Fails with `internal` when the feature catalog is empty, since the roles
    would otherwise carry no permissions at all.
    """
    roles = repos.roles()
    role_ids: dict[str, str] = {}
    for title in DEFAULT_ROLES:
        row = await roles.create(role_id=str(uuid.uuid4()), title=title, enterprise_id=enterprise_id)
        role_ids[title] = str(row["id"])

    features = await roles.list_features()
    if not features:
        raise AppError(ErrorCode.INTERNAL, "no features found in database")

    for title, role_id in role_ids.items():
        for feature in features:
            access = default_access(title, str(feature["name"]))
            await roles.create_permission(
                permission_id=str(uuid.uuid4()),
                feature_id=str(feature["id"]),
                role_id=role_id,
                **access._asdict(),
            )
    return role_ids
