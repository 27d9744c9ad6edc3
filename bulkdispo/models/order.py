"""Modèle Commande / Delivery order model."""

import enum
from decimal import Decimal

from sqlalchemy import Enum, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bulkdispo.database import Base


class DeliveryMode(str, enum.Enum):
    """Mode de livraison / Delivery-mode constraint."""
    MOTOR_UNIT_ONLY = "MOTOR_UNIT_ONLY"
    MOTOR_UNIT_WITH_TRAILER = "MOTOR_UNIT_WITH_TRAILER"
    PICKUP_AT_SOURCE = "PICKUP_AT_SOURCE"
    CRANE_PALLET = "CRANE_PALLET"
    BAG_LOAD = "BAG_LOAD"


class PlanningStatus(str, enum.Enum):
    """Statut de planification / Planning status.
    Le moteur n'écrit que UNPLANNED et PLANNED / The engine only writes UNPLANNED and PLANNED.
    """
    UNPLANNED = "UNPLANNED"
    PLANNED = "PLANNED"
    LOADING = "LOADING"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    customer_name: Mapped[str] = mapped_column(String(150), nullable=False)
    customer_number: Mapped[str | None] = mapped_column(String(30))

    # Adresse de livraison / Delivery address
    street: Mapped[str] = mapped_column(String(150), default="")
    postal_code: Mapped[str] = mapped_column(String(10), default="")
    city: Mapped[str] = mapped_column(String(100), default="")

    tonnage: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    delivery_mode: Mapped[DeliveryMode] = mapped_column(
        Enum(DeliveryMode), default=DeliveryMode.MOTOR_UNIT_WITH_TRAILER
    )
    planning_status: Mapped[PlanningStatus] = mapped_column(
        Enum(PlanningStatus), default=PlanningStatus.UNPLANNED
    )
    delivery_date: Mapped[str | None] = mapped_column(String(10))  # YYYY-MM-DD
    notes: Mapped[str | None] = mapped_column(Text)

    # Relations
    stops: Mapped[list["TourStop"]] = relationship(back_populates="order")

    def __repr__(self) -> str:
        return f"<Order {self.code} - {self.tonnage}t>"
