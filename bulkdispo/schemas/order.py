"""Schémas Commande / Order schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from bulkdispo.models.order import DeliveryMode, PlanningStatus
from bulkdispo.models.tour import VehicleConfig


class OrderBase(BaseModel):
    code: str
    customer_name: str
    customer_number: str | None = None
    street: str = ""
    postal_code: str = ""
    city: str = ""
    tonnage: Decimal = Field(gt=0, max_digits=10, decimal_places=3)
    delivery_mode: DeliveryMode = DeliveryMode.MOTOR_UNIT_WITH_TRAILER
    delivery_date: str | None = None
    notes: str | None = None


class OrderCreate(OrderBase):
    pass


class OrderUpdate(BaseModel):
    """Le statut de planification n'est pas modifiable ici / Planning status is not writable here."""
    code: str | None = None
    customer_name: str | None = None
    customer_number: str | None = None
    street: str | None = None
    postal_code: str | None = None
    city: str | None = None
    tonnage: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=3)
    delivery_mode: DeliveryMode | None = None
    delivery_date: str | None = None
    notes: str | None = None


class OrderRead(OrderBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    planning_status: PlanningStatus


class BookingLineRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    tour_id: int
    tour_name: str
    vehicle_config: VehicleConfig
    tonnage: Decimal


class OrderBookingSummaryRead(BaseModel):
    """Réservations d'une commande sur toutes les tournées / An order's bookings across tours."""
    model_config = ConfigDict(from_attributes=True)
    order_id: int
    demand_t: Decimal
    booked_t: Decimal
    open_t: Decimal
    fully_booked: bool
    overbooked: bool
    bookings: list[BookingLineRead] = []


class OrderSyncRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    order_id: int
    status: PlanningStatus
    changed: bool
    booked_t: Decimal
    demand_t: Decimal
