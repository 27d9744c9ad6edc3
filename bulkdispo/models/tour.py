"""Modèle Tournée / Tour model."""

import enum
from decimal import Decimal

from sqlalchemy import Enum, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bulkdispo.database import Base


class TourStatus(str, enum.Enum):
    """Statut de la tournée / Tour status."""
    DRAFT = "DRAFT"
    PLANNED = "PLANNED"
    RELEASED = "RELEASED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class VehicleConfig(str, enum.Enum):
    """Configuration véhicule / Vehicle configuration."""
    MOTOR_UNIT = "MOTOR_UNIT"
    MOTOR_UNIT_WITH_TRAILER = "MOTOR_UNIT_WITH_TRAILER"


class Tour(Base):
    __tablename__ = "tours"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    date: Mapped[str] = mapped_column(String(10), default="")  # YYYY-MM-DD, vide = à fixer / empty = not yet fixed
    vehicle_config: Mapped[VehicleConfig] = mapped_column(
        Enum(VehicleConfig), default=VehicleConfig.MOTOR_UNIT
    )
    motor_unit_capacity_t: Mapped[Decimal] = mapped_column(Numeric(8, 3), nullable=False)
    trailer_capacity_t: Mapped[Decimal | None] = mapped_column(Numeric(8, 3))
    status: Mapped[TourStatus] = mapped_column(Enum(TourStatus), default=TourStatus.DRAFT)

    # Champs opérationnels / Operational fields
    driver_name: Mapped[str | None] = mapped_column(String(100))
    license_plate: Mapped[str | None] = mapped_column(String(20))
    remarks: Mapped[str | None] = mapped_column(Text)

    # Relations
    stops: Mapped[list["TourStop"]] = relationship(
        back_populates="tour", cascade="all, delete-orphan", order_by="TourStop.position"
    )

    def __repr__(self) -> str:
        return f"<Tour {self.name} - {self.date}>"
