from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    role = Column(String, nullable=False, default="student")  # student or admin

    # Profile
    department = Column(String(100), nullable=True)
    year = Column(String(20), nullable=True)
    student_id = Column(String(50), nullable=True)
    phone_number = Column(String(30), nullable=True)
    profile_image = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    registered_events = relationship(
        "Registration",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Registration.registered_at"
    )
    notifications = relationship(
        "Notification",
        back_populates="user",
        cascade="all, delete-orphan"
    )

class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(20), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)  # Format: HH:MM
    end_time = Column(String(5), nullable=False)  # Format: HH:MM
    location = Column(String(200), nullable=False)
    image = Column(String, nullable=False, default="")
    max_participants = Column(Integer, nullable=False, default=100)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    selection_required = Column(Boolean, nullable=False, default=False)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    created_by = relationship("User")
    registered_participants = relationship(
        "Registration",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="Registration.registered_at"
    )

    @property
    def registration_count(self) -> int:
        return len(self.registered_participants)

    @property
    def available_spots(self) -> int:
        return self.max_participants - len(self.registered_participants)

class Registration(Base):
    """A user's place in an event.

    Both ``Event.registered_participants`` and ``User.registered_events`` read
    from this table, so a single row change updates both sides at once.
    """
    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_registration_event_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    registered_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    selected = Column(Boolean, nullable=False, default=False)

    event = relationship("Event", back_populates="registered_participants")
    user = relationship("User", back_populates="registered_events")

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(String(500), nullable=False)
    type = Column(String(20), nullable=False)  # welcome, confirmation, selection, cancellation
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="notifications")
