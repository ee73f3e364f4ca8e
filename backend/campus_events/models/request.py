"""
Guest request to join an event.

A request is created pending and decided exactly once. The host is recorded
at creation time so hosts can list the requests waiting on them without
joining through events.
"""

import enum

from sqlalchemy import Column, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship

from campus_events.db.base import Base, TimestampMixin, str_enum


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class EventRequest(Base, TimestampMixin):
    __tablename__ = "requests"

    id = Column(Integer, primary_key=True, index=True)
    guest_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    host_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    request_status = Column(
        str_enum(RequestStatus, "request_status"),
        nullable=False,
        default=RequestStatus.PENDING,
    )

    # Relationships
    guest = relationship("User", foreign_keys=[guest_id])
    host = relationship("User", foreign_keys=[host_id])
    event = relationship("Event", back_populates="requests")

    __table_args__ = (
        Index("ix_requests_host_status", "host_id", "request_status"),
    )

    def __repr__(self) -> str:
        return (
            f"<EventRequest(id={self.id}, guest={self.guest_id}, "
            f"event={self.event_id}, status={self.request_status})>"
        )
