"""
Parcel lifecycle walk-through.

Registers a parcel for a client, changes its address, moves it through
its statuses and then shows which operations the status gate refuses.
Run this script against a development database.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tracker.app.core.config import settings
from tracker.app.core.exceptions import NoRowsAffectedError
from tracker.app.core.observability import configure_logging
from tracker.app.db.session import AsyncSessionLocal, init_db
from tracker.app.services.parcel_service import ParcelService
from tracker.app.services.parcel_store import ParcelStore

DEMO_CLIENT = 1


def print_client_parcels(client: int, parcels) -> None:
    print(f"Parcels of client {client}:")
    for parcel in parcels:
        print(
            f"  no. {parcel.number} to {parcel.address}, "
            f"registered at {parcel.created_at}, status {parcel.status}"
        )


async def seed_parcels():
    """
    Register and advance demo parcels.
    
    Leaves one delivered parcel in the database; the second,
    still registered parcel is deleted again.
    """
    await init_db()
    
    async with AsyncSessionLocal() as db:
        service = ParcelService(ParcelStore(db))
        
        print("🌱 Registering parcel...")
        parcel = await service.register(DEMO_CLIENT, "Pskov, Verkhnyaya 5")
        
        parcel = await service.change_address(parcel.number, "Saratov, Teatralnaya 8")
        print(f"✅ Address of parcel {parcel.number} changed to {parcel.address}")
        
        parcel = await service.next_status(parcel.number)
        print(f"✅ Parcel {parcel.number} is now {parcel.status}")
        
        print_client_parcels(DEMO_CLIENT, await service.client_parcels(DEMO_CLIENT))
        
        try:
            await service.delete(parcel.number)
        except NoRowsAffectedError as exc:
            print(f"ℹ️  {exc.message} (parcel already {parcel.status})")
        
        parcel = await service.next_status(parcel.number)
        print(f"✅ Parcel {parcel.number} is now {parcel.status}")
        
        extra = await service.register(DEMO_CLIENT, "Pskov, Verkhnyaya 5")
        print_client_parcels(DEMO_CLIENT, await service.client_parcels(DEMO_CLIENT))
        
        await service.delete(extra.number)
        print(f"🗑️  Parcel {extra.number} deleted")
        
        print_client_parcels(DEMO_CLIENT, await service.client_parcels(DEMO_CLIENT))


if __name__ == "__main__":
    configure_logging(settings.log_level)
    asyncio.run(seed_parcels())
