"""
Address persistence helpers.

Addresses are shared rows: enterprises and users point at them by id, and an
identical address is reused instead of inserted twice.
"""

from __future__ import annotations

from core import db

_ADDRESS_COLUMNS = """
    id, zip_code, state, city, neighborhood, street, num, latitude, longitude, add_info,
    created_at, updated_at
"""


class AddressRepository:
    def __init__(self, executor: db.Executor) -> None:
        self._db = executor

    async def find_by_details(
        self,
        *,
        zip_code: str,
        state: str,
        city: str,
        neighborhood: str,
        street: str,
        num: str,
        latitude: str | None,
        longitude: str | None,
        add_info: str | None,
    ) -> dict | None:
        # Optional parts compare NULL-safely: an absent latitude only matches an absent one.
        return await db.fetch_one(
            self._db,
            f"""
            SELECT {_ADDRESS_COLUMNS}
            FROM addresses
            WHERE zip_code = $1
              AND state = $2
              AND city = $3
              AND neighborhood = $4
              AND street = $5
              AND num = $6
              AND latitude IS NOT DISTINCT FROM $7
              AND longitude IS NOT DISTINCT FROM $8
              AND add_info IS NOT DISTINCT FROM $9
            ORDER BY created_at, id
            LIMIT 1
            """,
            zip_code,
            state,
            city,
            neighborhood,
            street,
            num,
            latitude,
            longitude,
            add_info,
        )

    async def create(
        self,
        *,
        address_id: str,
        zip_code: str,
        state: str,
        city: str,
        neighborhood: str,
        street: str,
        num: str,
        latitude: str | None = None,
        longitude: str | None = None,
        add_info: str | None = None,
    ) -> dict:
        row = await db.fetch_one(
            self._db,
            f"""
            INSERT INTO addresses (id, zip_code, state, city, neighborhood, street, num, latitude, longitude, add_info)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
            RETURNING {_ADDRESS_COLUMNS}
            """,
            address_id,
            zip_code,
            state,
            city,
            neighborhood,
            street,
            num,
            latitude,
            longitude,
            add_info,
        )
        if row is None:
            raise RuntimeError("Failed to create address.")
        return row

    async def get_by_id(self, address_id: str) -> dict | None:
        return await db.fetch_one(
            self._db,
            f"""
            SELECT {_ADDRESS_COLUMNS}
            FROM addresses
            WHERE id = $1
            """,
            address_id,
        )
