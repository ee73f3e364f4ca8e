"""
User model.

A user hosts events and joins events hosted by others. Joined events are
tracked through the event_guests association, which only gains a row when
a request is accepted.
"""

import enum

from sqlalchemy import Column, Integer, String, ForeignKey, Table
from sqlalchemy.orm import relationship

from campus_events.db.base import Base, TimestampMixin, str_enum


class UserType(str, enum.Enum):
    ADMIN = "admin"
    STUDENT = "student"


event_guests = Table(
    "event_guests",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
    Column("event_id", Integer, ForeignKey("events.id"), primary_key=True),
)


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    user_type = Column(str_enum(UserType, "user_type"), nullable=False, default=UserType.STUDENT)

    # Relationships
    host_events = relationship("Event", back_populates="host", order_by="Event.id")
    guest_events = relationship(
        "Event",
        secondary=event_guests,
        back_populates="guests",
        order_by="Event.id",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
