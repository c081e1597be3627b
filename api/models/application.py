"""Application ORM model — one courier application per profile."""

import uuid
from datetime import datetime
from sqlalchemy import String, Integer, DateTime, ForeignKey, Text, Enum as PgEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from db.database import Base

GENDERS = ("male", "female", "other", "prefer_not_to_say")
VEHICLE_TYPES = ("bicycle", "motorcycle", "car", "scooter", "e-bike")
STATUSES = ("pending", "approved", "rejected")


class Application(Base):
    __tablename__ = "applications"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), unique=True, nullable=False,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(30), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    gender: Mapped[str] = mapped_column(PgEnum(*GENDERS, name="gender_type"), nullable=False)
    vehicle_type: Mapped[str] = mapped_column(
        PgEnum(*VEHICLE_TYPES, name="vehicle_type"), nullable=False,
    )
    working_hours: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        PgEnum(*STATUSES, name="application_status"),
        default="pending",
    )
    admin_notes: Mapped[str | None] = mapped_column(Text)
    approved_by: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("profiles.id"))
    applied_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    profile = relationship(
        "Profile",
        back_populates="application",
        foreign_keys=[user_id],
        lazy="selectin",
    )

    def snapshot(self) -> dict:
        """Column values as a plain dict, for change-feed payloads."""
        return {c.key: getattr(self, c.key) for c in self.__table__.columns}
