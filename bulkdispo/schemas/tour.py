"""Schémas Tour / Tour schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from bulkdispo.models.order import DeliveryMode
from bulkdispo.models.tour import TourStatus, VehicleConfig


class TourStopRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    order_id: int
    position: int
    tonnage: Decimal
    customer_name: str
    street: str
    postal_code: str
    city: str
    delivery_mode: DeliveryMode
    compatibility_warning: str | None = None


class TourBase(BaseModel):
    name: str
    date: str = ""
    vehicle_config: VehicleConfig = VehicleConfig.MOTOR_UNIT
    status: TourStatus = TourStatus.DRAFT
    driver_name: str | None = None
    license_plate: str | None = None
    remarks: str | None = None


class TourCreate(TourBase):
    # Capacités standard si absentes / Standard capacities when omitted
    motor_unit_capacity_t: Decimal | None = Field(default=None, gt=0, max_digits=8, decimal_places=3)
    trailer_capacity_t: Decimal | None = Field(default=None, gt=0, max_digits=8, decimal_places=3)


class TourUpdate(BaseModel):
    name: str | None = None
    date: str | None = None
    vehicle_config: VehicleConfig | None = None
    motor_unit_capacity_t: Decimal | None = Field(default=None, gt=0, max_digits=8, decimal_places=3)
    trailer_capacity_t: Decimal | None = Field(default=None, gt=0, max_digits=8, decimal_places=3)
    status: TourStatus | None = None
    driver_name: str | None = None
    license_plate: str | None = None
    remarks: str | None = None


class TourRead(TourBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    motor_unit_capacity_t: Decimal
    trailer_capacity_t: Decimal | None = None
    stops: list[TourStopRead] = []


class TourLoadRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    total_loaded_t: Decimal
    combined_capacity_t: Decimal
    utilization_percent: float
    is_overloaded: bool
    motor_unit_load_t: Decimal
    trailer_load_t: Decimal
    free_capacity_t: Decimal


class CompatibilityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    allowed: bool
    capacity_ceiling_t: Decimal
    warning: str | None = None
    reason: str | None = None


class StopFindingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    order_id: int
    position: int
    compatibility: CompatibilityRead


class TourReviewRead(BaseModel):
    """Revue de compatibilité de la tournée / Tour compatibility review."""
    model_config = ConfigDict(from_attributes=True)
    effective_capacity_t: Decimal
    findings: list[StopFindingRead] = []


class PlanningStatisticsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    tour_count: int
    stop_count: int
    total_tonnage_t: Decimal
    average_utilization_percent: float
    overloaded_tour_count: int
