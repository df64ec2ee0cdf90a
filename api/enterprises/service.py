"""
Enterprise business logic.

Onboarding writes everything a new enterprise starts with in one unit of
work: its address (reused when an identical one exists), the enterprise, the
default product and parameters, the default roles with their permissions,
and the first user holding the Administrador role. Reads and updates are
limited to the caller's own enterprise.
"""

from __future__ import annotations

import uuid

from starlette.concurrency import run_in_threadpool

from addresses.service import handle_address
from auth.security import PasswordHasher
from core.errors import AppError, ErrorCode
from core.logging import get_logger
from core.uow import Repos, UnitOfWork
from roles.service import ADMIN_ROLE, create_default_roles

from . import schemas

log = get_logger(__name__)

DEFAULT_PRODUCT = "Combustível"
DEFAULT_PARAMETERS = ("Tributo", "Consumo do automóvel", "Valor do combustível")


def _to_response(row: dict) -> schemas.EnterpriseResponse:
    return schemas.EnterpriseResponse(
        id=str(row["id"]),
        cnpj=str(row["cnpj"]),
        email=str(row["email"]),
        name=str(row["name"]),
        fantasy_name=row.get("fantasy_name"),
        phone=row.get("phone"),
        address_id=row.get("address_id"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


async def _create_defaults(repos: Repos, enterprise_id: str) -> None:
    enterprises = repos.enterprises()
    await enterprises.create_product(
        product_id=str(uuid.uuid4()),
        enterprise_id=enterprise_id,
        name=DEFAULT_PRODUCT,
        suggested_value="0",
        is_default=True,
    )
    for title in DEFAULT_PARAMETERS:
        await enterprises.create_parameter(
            parameter_id=str(uuid.uuid4()),
            enterprise_id=enterprise_id,
            title=title,
            value="0",
            is_default=True,
        )


async def create_enterprise(
    payload: schemas.CreateEnterpriseRequest,
    *,
    uow: UnitOfWork,
    hasher: PasswordHasher,
) -> schemas.CreateEnterpriseResponse:
    password_hash = await run_in_threadpool(hasher.hash, payload.admin.password)

    async def _write(repos: Repos) -> schemas.CreateEnterpriseResponse:
        address_id = None
        if payload.address is not None:
            address_id = await handle_address(repos, payload.address)

        enterprise = await repos.enterprises().create(
            enterprise_id=str(uuid.uuid4()),
            cnpj=payload.cnpj.strip(),
            email=payload.email.strip(),
            name=payload.name.strip(),
            fantasy_name=payload.fantasy_name,
            phone=payload.phone,
            address_id=address_id,
        )
        enterprise_id = str(enterprise["id"])

        await _create_defaults(repos, enterprise_id)
        role_ids = await create_default_roles(repos, enterprise_id)

        user = await repos.users().create(
            user_id=str(uuid.uuid4()),
            enterprise_id=enterprise_id,
            name=payload.admin.name.strip(),
            email=payload.admin.email,
            password_hash=password_hash,
            document=payload.admin.document.strip(),
            phone=payload.admin.phone,
            role_id=role_ids[ADMIN_ROLE],
        )
        return schemas.CreateEnterpriseResponse(enterprise_id=enterprise_id, user_id=str(user["id"]))

    created = await uow.run_in_tx(_write)
    log.info("enterprise_created", enterprise_id=created.enterprise_id, user_id=created.user_id)
    return created


async def get_enterprise(enterprise_id: str, *, tenant_id: str, uow: UnitOfWork) -> schemas.EnterpriseResponse:
    if enterprise_id != tenant_id:
        raise AppError(ErrorCode.FORBIDDEN, "enterprise access required", fields={"enterprise_id": enterprise_id})
    row = await uow.repos().enterprises().get_by_id(enterprise_id)
    if row is None:
        raise AppError(ErrorCode.NOT_FOUND, "enterprise not found", fields={"enterprise_id": enterprise_id})
    return _to_response(row)


async def update_enterprise(
    payload: schemas.UpdateEnterpriseRequest,
    *,
    tenant_id: str,
    uow: UnitOfWork,
) -> schemas.EnterpriseResponse:
    """
    Replace the caller's enterprise fields. A nested `address` wins over
    `addressId`; an `addressId` must name an existing address; with neither
    the stored address is kept.
    """

    async def _write(repos: Repos) -> dict:
        enterprises = repos.enterprises()
        current = await enterprises.get_by_id(tenant_id)
        if current is None:
            raise AppError(ErrorCode.NOT_FOUND, "enterprise not found", fields={"enterprise_id": tenant_id})

        address_id = payload.address_id or current.get("address_id")
        if payload.address is not None:
            address_id = await handle_address(repos, payload.address)
        elif payload.address_id is not None and await repos.addresses().get_by_id(payload.address_id) is None:
            raise AppError(ErrorCode.NOT_FOUND, "address not found", fields={"address_id": payload.address_id})

        row = await enterprises.update(
            tenant_id,
            cnpj=payload.cnpj.strip(),
            email=payload.email.strip(),
            name=payload.name.strip(),
            fantasy_name=payload.fantasy_name,
            phone=payload.phone,
            address_id=address_id,
        )
        if row is None:
            raise AppError(ErrorCode.NOT_FOUND, "enterprise not found", fields={"enterprise_id": tenant_id})
        return row

    return _to_response(await uow.run_in_tx(_write))
