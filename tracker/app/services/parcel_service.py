"""
Parcel service.

Drives parcels through their lifecycle on top of ParcelStore:
register, list by client, advance status, change address, delete.
"""

import logging
from typing import List

from tracker.app.models.parcel_enums import ParcelStatus, next_status
from tracker.app.schemas.parcel import ParcelCreate, ParcelRead
from tracker.app.services.parcel_store import ParcelStore

logger = logging.getLogger("tracker.parcel_service")


class ParcelService:
    
    def __init__(self, store: ParcelStore):
        self.store = store

    async def register(self, client: int, address: str) -> ParcelRead:
        """
        Register a new parcel for a client.
        
        The parcel starts as 'registered' and is stamped with the current UTC time.
        
        Returns:
            The stored parcel with its assigned number
        """
        parcel = ParcelCreate(
            client=client,
            status=ParcelStatus.REGISTERED.value,
            address=address,
        )
        number = await self.store.add(parcel)
        
        logger.info(
            "New parcel no. %d at address %s from client %d registered at %s",
            number, parcel.address, parcel.client, parcel.created_at
        )
        
        return ParcelRead(number=number, **parcel.model_dump())

    async def get(self, number: int) -> ParcelRead:
        return await self.store.get(number)

    async def client_parcels(self, client: int) -> List[ParcelRead]:
        return await self.store.get_by_client(client)

    async def next_status(self, number: int) -> ParcelRead:
        """
        Move a parcel one step along registered → sent → delivered.
        
        A delivered parcel, or one carrying a status outside the usual flow,
        is returned unchanged.
        
        The write only applies while the stored status is still the one read,
        so concurrent callers cannot skip or repeat a step.

        Raises:
            ParcelNotFoundError: Parcel does not exist
            NoRowsAffectedError: Status changed since it was read
        """
        parcel = await self.store.get(number)

        new_status = next_status(parcel.status)
        if new_status is None:
            logger.info("Parcel %d stays %s", number, parcel.status)
            return parcel

        await self.store.advance_status(number, parcel.status, new_status.value)
        logger.info("Parcel %d status changed to %s", number, new_status.value)
        
        return parcel.model_copy(update={"status": new_status.value})

    async def set_status(self, number: int, status: str) -> ParcelRead:
        await self.store.set_status(number, status)
        return await self.store.get(number)

    async def change_address(self, number: int, address: str) -> ParcelRead:
        """
        Change the address of a registered parcel.
        
        Raises:
            NoRowsAffectedError: Parcel is missing or already sent
        """
        await self.store.set_address(number, address)
        logger.info("Parcel %d address changed to %s", number, address)
        return await self.store.get(number)

    async def delete(self, number: int) -> None:
        await self.store.delete(number)
        logger.info("Parcel %d deleted", number)
