from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    Enum,
    Index,
)
from sqlalchemy.orm import relationship

from app.database import Base
from app.enums.booking import BookingType, BookingStatus, ParticipantType
from app.utils.datetime_utils import utcnow


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_court_interval", "court", "start_time", "end_time"),
        {"extend_existing": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    coach_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    court = Column(String, nullable=False)
    type = Column(
        Enum(
            BookingType,
            name="booking_type",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        default=BookingType.CAMPO,
    )
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(
        Enum(
            BookingStatus,
            name="booking_status",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    coach_confirmed = Column(Boolean, nullable=False, default=False)
    manager_confirmed = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship(
        "Profile", back_populates="bookings", foreign_keys=[user_id]
    )
    coach = relationship("Profile", foreign_keys=[coach_id])
    participants = relationship(
        "BookingParticipant",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingParticipant.order_index",
    )


class BookingParticipant(Base):
    __tablename__ = "booking_participants"
    __table_args__ = {"extend_existing": True}

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    is_registered = Column(Boolean, nullable=False, default=False)
    participant_type = Column(
        Enum(
            ParticipantType,
            name="booking_participant_type",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        default=ParticipantType.ATLETA,
    )
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow)

    booking = relationship("Booking", back_populates="participants")
