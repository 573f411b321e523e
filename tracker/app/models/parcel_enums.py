"""
Parcel Status Enumeration.
"""

import enum
from typing import Optional


class ParcelStatus(str, enum.Enum):
    """
    Parcel status enumeration.
    
    Status flow:
        REGISTERED → SENT → DELIVERED
    
    Only REGISTERED parcels may change address or be deleted.
    The store itself accepts any status string.
    """
    REGISTERED = "registered"
    SENT = "sent"
    DELIVERED = "delivered"


_NEXT_STATUS = {
    ParcelStatus.REGISTERED.value: ParcelStatus.SENT,
    ParcelStatus.SENT.value: ParcelStatus.DELIVERED,
}


def next_status(status: str) -> Optional[ParcelStatus]:
    """Return the status following `status`, or None when there is nowhere to go."""
    return _NEXT_STATUS.get(status)
