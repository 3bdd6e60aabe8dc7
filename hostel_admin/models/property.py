import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship

from hostel_admin.lib.database import Base


class Property(Base):
    __tablename__ = "properties"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False, index=True)
    type = Column(String(20), nullable=False)  # male, female, unisex
    location = Column(String(500), nullable=False)
    contact_info = Column(String(255), nullable=False, default="")
    total_rooms = Column(Integer, nullable=False, default=1)
    total_beds = Column(Integer, nullable=False, default=1)
    floors = Column(Integer, nullable=False, default=1)
    images = Column(JSON, nullable=False, default=list)
    amenities = Column(JSON, nullable=False, default=list)
    room_types = Column(JSON, nullable=False, default=list)  # ordered [{id, name, capacity, price, amenities}]

    # Stored metrics, carried over on edit
    revenue = Column(Float, nullable=False, default=0)
    occupancy_rate = Column(Float, nullable=False, default=0)
    monthly_rent = Column(Float, nullable=False, default=0)
    actual_occupancy = Column(Integer, nullable=False, default=0)
    total_capacity = Column(Integer, nullable=False, default=0)

    manager_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    manager = Column(String(255), nullable=True)  # manager display name
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    manager_user = relationship("User", back_populates="managed_properties")
    rooms = relationship("Room", back_populates="property", passive_deletes=True)
