"""
Event model with guest capacity tracking.

Key design decisions:
- `guest_count` is a denormalized counter of accepted requests, bounded by
  `max_guest_count` both in the acceptance UPDATE and by CHECK constraints
- `version` enables optimistic locking for concurrent request acceptance
- Closing and cancelling are status changes; events are never deleted
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from campus_events.db.base import Base, TimestampMixin, str_enum
from campus_events.models.user import event_guests


class EventStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(String(2000), nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    max_guest_count = Column(Integer, nullable=False)
    guest_count = Column(Integer, nullable=False, default=0)
    event_status = Column(str_enum(EventStatus, "event_status"), nullable=False, default=EventStatus.OPEN)
    host_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)

    # Optimistic locking version counter
    version = Column(Integer, nullable=False, default=1)

    # Relationships
    host = relationship("User", back_populates="host_events")
    location = relationship("Location", back_populates="events")
    requests = relationship("EventRequest", back_populates="event", order_by="EventRequest.id")
    guests = relationship("User", secondary=event_guests, back_populates="guest_events")

    __table_args__ = (
        CheckConstraint("guest_count >= 0", name="check_guest_count_non_negative"),
        CheckConstraint("max_guest_count > 0", name="check_max_guest_count_positive"),
        CheckConstraint("guest_count <= max_guest_count", name="check_guest_count_lte_max"),
        # The active listing filters on status and orders by id
        Index("ix_events_status_id", "event_status", "id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.id}, title={self.title}, "
            f"guests={self.guest_count}/{self.max_guest_count}, status={self.event_status})>"
        )
