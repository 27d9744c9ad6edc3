"""
Documents de planification / Planning documents.
Le moteur de réservation travaille sur ces dataclasses, jamais sur les lignes ORM.
The booking engine works on these dataclasses, never on ORM rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from bulkdispo.models.order import DeliveryMode, PlanningStatus
from bulkdispo.models.tour import TourStatus, VehicleConfig

ZERO_T = Decimal("0")
# Précision des colonnes Numeric(…, 3) / Precision of the Numeric(…, 3) columns
TONNE_STEP = Decimal("0.001")


def to_tonnes(value: Decimal | float | int | str) -> Decimal:
    """Convertir en Decimal sans artefact binaire / Convert to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def fits_tonne_step(value: Decimal) -> bool:
    """Valeur stockable au kilo près sans arrondi / Value storable to the kilogram without rounding."""
    try:
        return value.quantize(TONNE_STEP) == value
    except InvalidOperation:
        return False


@dataclass
class Address:
    street: str = ""
    postal_code: str = ""
    city: str = ""


@dataclass
class StopLine:
    """Une réservation d'une commande sur une tournée / One booking of an order on a tour."""
    order_id: int
    position: int                   # 1-basé / 1-based
    tonnage: Decimal
    delivery_mode: DeliveryMode
    customer_name: str = ""
    address: Address = field(default_factory=Address)
    compatibility_warning: str | None = None


@dataclass
class TourDocument:
    """Tournée autonome avec ses arrêts / Self-contained tour with its stops."""
    id: int
    name: str
    vehicle_config: VehicleConfig
    motor_unit_capacity_t: Decimal
    trailer_capacity_t: Decimal | None = None
    date: str = ""
    status: TourStatus = TourStatus.DRAFT
    stops: list[StopLine] = field(default_factory=list)

    @property
    def has_trailer(self) -> bool:
        return self.vehicle_config == VehicleConfig.MOTOR_UNIT_WITH_TRAILER

    @property
    def combined_capacity_t(self) -> Decimal:
        """Capacité motrice + remorque / Motor-unit plus trailer capacity."""
        if self.has_trailer and self.trailer_capacity_t is not None:
            return self.motor_unit_capacity_t + self.trailer_capacity_t
        return self.motor_unit_capacity_t

    def stop_for(self, order_id: int) -> StopLine | None:
        for stop in self.stops:
            if stop.order_id == order_id:
                return stop
        return None

    def renumber(self) -> None:
        """Positions denses 1..N dans l'ordre de la liste / Dense 1..N positions in list order."""
        for idx, stop in enumerate(self.stops, start=1):
            stop.position = idx


@dataclass
class OrderDocument:
    id: int
    code: str
    customer_name: str
    tonnage: Decimal
    delivery_mode: DeliveryMode
    planning_status: PlanningStatus = PlanningStatus.UNPLANNED
    address: Address = field(default_factory=Address)
    delivery_date: str | None = None
