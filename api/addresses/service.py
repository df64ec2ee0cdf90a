"""
Address business logic.
"""

from __future__ import annotations

import uuid

from core.errors import AppError, ErrorCode
from core.uow import Repos

from . import schemas

_REQUIRED = ("zip_code", "state", "city", "neighborhood", "street", "num")


def _absent_if_empty(value: str | None) -> str | None:
    return None if value == "" else value


async def handle_address(repos: Repos, payload: schemas.AddressInput) -> str:
    """
    Return the id of an address equal to `payload`, creating it when missing.

    Empty latitude, longitude and add-info are treated as absent both for the
    lookup and for the insert, so "" and a missing value reuse the same row.
    Runs on the caller's repositories, i.e. inside its transaction.
    """
    for name in _REQUIRED:
        if not getattr(payload, name).strip():
            raise AppError(ErrorCode.INVALID, "invalid address data", fields={"field": name})

    details = {
        "zip_code": payload.zip_code,
        "state": payload.state,
        "city": payload.city,
        "neighborhood": payload.neighborhood,
        "street": payload.street,
        "num": payload.num,
        "latitude": _absent_if_empty(payload.latitude),
        "longitude": _absent_if_empty(payload.longitude),
        "add_info": _absent_if_empty(payload.add_info),
    }

    addresses = repos.addresses()
    existing = await addresses.find_by_details(**details)
    if existing is not None:
        return str(existing["id"])

    row = await addresses.create(address_id=str(uuid.uuid4()), **details)
    return str(row["id"])
