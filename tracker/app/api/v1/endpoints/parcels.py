"""
Parcel API Endpoints.

Registration, lookup and lifecycle changes for parcels.
Address changes and deletion are refused (409) once a parcel has left 'registered'.
"""

from fastapi import APIRouter, Depends, Path, Response, status
from tracker.app.core.dependencies import get_parcel_service
from tracker.app.schemas.parcel import (
    ParcelAddressUpdate,
    ParcelListResponse,
    ParcelRead,
    ParcelRegister,
    ParcelStatusUpdate,
)
from tracker.app.services.parcel_service import ParcelService

router = APIRouter(tags=["Parcels"])


@router.post("/parcels", response_model=ParcelRead, status_code=status.HTTP_201_CREATED)
async def register_parcel(
    parcel_data: ParcelRegister,
    service: ParcelService = Depends(get_parcel_service)
):
    """Register a new parcel for a client."""
    return await service.register(parcel_data.client, parcel_data.address)


@router.get("/parcels/{number}", response_model=ParcelRead)
async def get_parcel(
    number: int = Path(..., description="Parcel number"),
    service: ParcelService = Depends(get_parcel_service)
):
    return await service.get(number)


@router.get("/clients/{client}/parcels", response_model=ParcelListResponse)
async def list_client_parcels(
    client: int = Path(..., description="Client ID"),
    service: ParcelService = Depends(get_parcel_service)
):
    """List every parcel of a client. No particular order is guaranteed."""
    parcels = await service.client_parcels(client)
    return ParcelListResponse(parcels=parcels, total=len(parcels))


@router.patch("/parcels/{number}/address", response_model=ParcelRead)
async def change_parcel_address(
    number: int = Path(..., description="Parcel number"),
    address_data: ParcelAddressUpdate = ...,
    service: ParcelService = Depends(get_parcel_service)
):
    """
    Change the delivery address.
    
    Only allowed while the parcel is 'registered'.
    """
    return await service.change_address(number, address_data.address)


@router.patch("/parcels/{number}/status", response_model=ParcelRead)
async def set_parcel_status(
    number: int = Path(..., description="Parcel number"),
    status_data: ParcelStatusUpdate = ...,
    service: ParcelService = Depends(get_parcel_service)
):
    """Overwrite the status. Any value is accepted."""
    return await service.set_status(number, status_data.status)


@router.post("/parcels/{number}/advance", response_model=ParcelRead)
async def advance_parcel(
    number: int = Path(..., description="Parcel number"),
    service: ParcelService = Depends(get_parcel_service)
):
    """Move the parcel to its next status (registered → sent → delivered)."""
    return await service.next_status(number)


@router.delete("/parcels/{number}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_parcel(
    number: int = Path(..., description="Parcel number"),
    service: ParcelService = Depends(get_parcel_service)
):
    """
    Delete a parcel.
    
    Only allowed while the parcel is 'registered'.
    """
    await service.delete(number)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
