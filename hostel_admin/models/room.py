import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, JSON, UniqueConstraint, Index, Uuid
from sqlalchemy.orm import relationship

from hostel_admin.lib.database import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    pg_id = Column(Uuid, ForeignKey("properties.id"), nullable=False)
    number = Column(String(20), nullable=False)  # "101", "G-2"
    type = Column(String(50), nullable=False)  # Single, Double, Triple, Quad
    capacity = Column(Integer, nullable=False, default=1)
    rent = Column(Float, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="vacant")  # vacant, partial, full, maintenance
    students = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    property = relationship("Property", back_populates="rooms")

    __table_args__ = (
        UniqueConstraint('pg_id', 'number', name='uq_room_number'),
        Index('ix_rooms_pg', 'pg_id'),
        Index('ix_rooms_pg_type', 'pg_id', 'type'),
    )
