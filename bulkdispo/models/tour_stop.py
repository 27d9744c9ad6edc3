"""Modèle Arrêt de tournée / Tour stop model (une réservation / one booking)."""

from decimal import Decimal

from sqlalchemy import Enum, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bulkdispo.database import Base
from bulkdispo.models.order import DeliveryMode


class TourStop(Base):
    __tablename__ = "tour_stops"
    __table_args__ = (UniqueConstraint("tour_id", "order_id", name="uq_tour_stop_order"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tour_id: Mapped[int] = mapped_column(ForeignKey("tours.id"), nullable=False)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-basé / 1-based
    tonnage: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)

    # Copie figée à la réservation / Snapshot taken at booking time
    customer_name: Mapped[str] = mapped_column(String(150), default="")
    street: Mapped[str] = mapped_column(String(150), default="")
    postal_code: Mapped[str] = mapped_column(String(10), default="")
    city: Mapped[str] = mapped_column(String(100), default="")
    delivery_mode: Mapped[DeliveryMode] = mapped_column(Enum(DeliveryMode), nullable=False)
    compatibility_warning: Mapped[str | None] = mapped_column(String(255))

    # Relations
    tour: Mapped["Tour"] = relationship(back_populates="stops")
    order: Mapped["Order"] = relationship(back_populates="stops")

    def __repr__(self) -> str:
        return f"<TourStop tour={self.tour_id} pos={self.position} order={self.order_id}>"
