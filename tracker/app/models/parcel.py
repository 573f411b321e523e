"""
Parcel database model.

One row per tracked shipment. The table is the only storage the tracker uses.
"""

from sqlalchemy import Column, Integer, String
from tracker.app.db.session import Base


class Parcel(Base):
    """
    Parcel model.
    
    `address` may only change, and the row may only be deleted,
    while `status` is 'registered'. The guard lives in the UPDATE/DELETE
    statements issued by ParcelStore, not here.
    """
    __tablename__ = "parcel"
    
    number = Column(Integer, primary_key=True, autoincrement=True)
    
    # Owning client
    client = Column(Integer, nullable=False, index=True)
    
    # Lifecycle state, stored as free text
    status = Column(String, nullable=False)
    
    address = Column(String, nullable=False)
    
    # RFC 3339 text, e.g. 2024-05-01T10:00:00Z
    created_at = Column(String, nullable=False)
    
    def __repr__(self):
        return f"<Parcel(number={self.number}, client={self.client}, status='{self.status}')>"
