"""Schémas Réservation / Booking schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from bulkdispo.models.order import PlanningStatus
from bulkdispo.models.tour import VehicleConfig
from bulkdispo.schemas.tour import TourLoadRead


class BookRequest(BaseModel):
    tour_id: int
    order_id: int
    tonnage: Decimal


class ResizeRequest(BaseModel):
    tonnage: Decimal


class MoveStopRequest(BaseModel):
    """Nouvelle position 1-basée / New 1-based position."""
    position: int


class RebookRequest(BaseModel):
    """Source absente = réservation directe sur la destination / No source = direct booking."""
    source_tour_id: int | None = None
    destination_tour_id: int
    order_id: int
    tonnage: Decimal


class BookingOutcomeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    success: bool = True
    tour_id: int | None = None
    order_id: int | None = None
    load: TourLoadRead | None = None
    source_tour_id: int | None = None
    source_load: TourLoadRead | None = None
    overloaded: bool = False
    overload_warning: str | None = None
    compatibility_warning: str | None = None
    demand_warning: str | None = None
    order_status: PlanningStatus | None = None
    released_order_ids: list[int] = []


class ProposedTourIn(BaseModel):
    vehicle_config: VehicleConfig
    order_ids: list[int]
    capacity_t: Decimal | None = Field(default=None, gt=0, max_digits=8, decimal_places=3)
    name: str | None = None
    rationale: str = ""


class ProposalRequest(BaseModel):
    """Proposition de l'optimiseur / Optimizer proposal."""
    date: str
    tours: list[ProposedTourIn]
    deferred_order_ids: list[int] = []


class SkippedOrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    order_id: int
    reason: str


class ProposalResultRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    tour_ids: list[int]
    outcomes: list[BookingOutcomeRead]
    skipped: list[SkippedOrderRead]
    deferred_order_ids: list[int]
