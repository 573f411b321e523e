"""
Parcel store.

Maps parcels to rows of the `parcel` table. Every method issues a single
statement with bound parameters. Address changes and deletions carry the
status gate in their WHERE clause, so the check and the write are applied
by the database as one unit.
"""

import logging
from typing import List

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.app.core.exceptions import NoRowsAffectedError, ParcelNotFoundError
from tracker.app.models.parcel import Parcel
from tracker.app.models.parcel_enums import ParcelStatus
from tracker.app.schemas.parcel import ParcelCreate, ParcelRead

logger = logging.getLogger("tracker.parcel_store")

# Columns are selected explicitly so reads never go through the session's
# identity map and always reflect the committed row.
_PARCEL_COLUMNS = (
    Parcel.number,
    Parcel.client,
    Parcel.status,
    Parcel.address,
    Parcel.created_at,
)


def _to_parcel(row) -> ParcelRead:
    return ParcelRead(**row._mapping)


class ParcelStore:
    """
    Persistence for parcels.

    The session is owned by the caller; the store never opens or closes it.
    Writes are committed immediately. Storage errors are re-raised unchanged
    after the session is rolled back.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _write(self, stmt):
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return result

    async def add(self, parcel: ParcelCreate) -> int:
        """
        Insert a parcel and return the number assigned by storage.

        Args:
            parcel: Parcel to store; any number on it is ignored

        Returns:
            The new parcel number
        """
        stmt = insert(Parcel).values(
            client=parcel.client,
            status=parcel.status,
            address=parcel.address,
            created_at=parcel.created_at,
        ).returning(Parcel.number)

        try:
            result = await self.db.execute(stmt)
            number = result.scalar_one()
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        logger.debug("Parcel added", extra={"number": number, "client": parcel.client})
        return number

    async def get(self, number: int) -> ParcelRead:
        """
        Fetch one parcel by number.

        Raises:
            ParcelNotFoundError: No row has that number
        """
        result = await self.db.execute(
            select(*_PARCEL_COLUMNS).where(Parcel.number == number)
        )
        row = result.one_or_none()

        if row is None:
            raise ParcelNotFoundError(number)

        return _to_parcel(row)

    async def get_by_client(self, client: int) -> List[ParcelRead]:
        """All parcels of a client, in whatever order storage returns them."""
        result = await self.db.execute(
            select(*_PARCEL_COLUMNS).where(Parcel.client == client)
        )
        return [_to_parcel(row) for row in result.all()]

    async def set_status(self, number: int, status: str) -> None:
        """
        Overwrite a parcel's status. Any string is accepted.

        Raises:
            NoRowsAffectedError: No row has that number
        """
        stmt = (
            update(Parcel)
            .where(Parcel.number == number)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        result = await self._write(stmt)

        if result.rowcount == 0:
            raise NoRowsAffectedError("set_status", number)

    async def advance_status(self, number: int, expected: str, status: str) -> None:
        """
        Replace the status only if it is still `expected`.

        Raises:
            NoRowsAffectedError: Parcel is missing or its status has moved on
        """
        stmt = (
            update(Parcel)
            .where(
                Parcel.number == number,
                Parcel.status == expected,
            )
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        result = await self._write(stmt)

        if result.rowcount == 0:
            logger.info("Status change rejected", extra={"number": number, "expected": expected})
            raise NoRowsAffectedError("advance_status", number)

    async def set_address(self, number: int, address: str) -> None:
        """
        Change a parcel's address while it is still registered.

        Raises:
            NoRowsAffectedError: Parcel is missing or no longer registered
        """
        stmt = (
            update(Parcel)
            .where(
                Parcel.number == number,
                Parcel.status == ParcelStatus.REGISTERED.value,
            )
            .values(address=address)
            .execution_options(synchronize_session=False)
        )
        result = await self._write(stmt)

        if result.rowcount == 0:
            logger.info("Address change rejected", extra={"number": number})
            raise NoRowsAffectedError("set_address", number)

    async def delete(self, number: int) -> None:
        """
        Delete a parcel while it is still registered.

        Raises:
            NoRowsAffectedError: Parcel is missing or no longer registered
        """
        stmt = (
            delete(Parcel)
            .where(
                Parcel.number == number,
                Parcel.status == ParcelStatus.REGISTERED.value,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._write(stmt)

        if result.rowcount == 0:
            logger.info("Delete rejected", extra={"number": number})
            raise NoRowsAffectedError("delete", number)
