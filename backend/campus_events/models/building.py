"""
Buildings and the locations inside them.
"""

from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from campus_events.db.base import Base, TimestampMixin


class Building(Base, TimestampMixin):
    __tablename__ = "buildings"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    locations = relationship("Location", back_populates="building", order_by="Location.id")

    def __repr__(self) -> str:
        return f"<Building(id={self.id}, name={self.name})>"


class Location(Base, TimestampMixin):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False, index=True)

    building = relationship("Building", back_populates="locations")
    events = relationship("Event", back_populates="location")

    def __repr__(self) -> str:
        return f"<Location(id={self.id}, name={self.name}, building={self.building_id})>"
