"""
Synchronisation du statut de planification / Order planning status synchronizer.
Le statut est une fonction pure des arrêts de toutes les tournées.
The status is a pure function of the stops across every tour.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from bulkdispo.models.order import PlanningStatus
from bulkdispo.models.tour import VehicleConfig
from bulkdispo.services.errors import OrderNotFoundError
from bulkdispo.services.planning import ZERO_T, OrderDocument, TourDocument
from bulkdispo.services.store import Store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingLine:
    tour_id: int
    tour_name: str
    vehicle_config: VehicleConfig
    tonnage: Decimal


@dataclass
class OrderBookingSummary:
    order_id: int
    demand_t: Decimal
    booked_t: Decimal
    bookings: list[BookingLine] = field(default_factory=list)

    @property
    def open_t(self) -> Decimal:
        return max(ZERO_T, self.demand_t - self.booked_t)

    @property
    def fully_booked(self) -> bool:
        return self.open_t <= 0

    @property
    def overbooked(self) -> bool:
        return self.booked_t > self.demand_t


@dataclass(frozen=True)
class SyncResult:
    order_id: int
    status: PlanningStatus
    changed: bool
    booked_t: Decimal
    demand_t: Decimal


def booked_tonnage(order_id: int, tours: list[TourDocument]) -> Decimal:
    """Tonnage réservé sur toutes les tournées / Booked tonnage across every tour."""
    total = ZERO_T
    for tour in tours:
        stop = tour.stop_for(order_id)
        if stop is not None:
            total += stop.tonnage
    return total


def derive_status(booked_t: Decimal) -> PlanningStatus:
    """UNPLANNED si rien n'est réservé, sinon PLANNED / UNPLANNED when nothing is booked, else PLANNED.

    Les statuts aval (chargement, transit, livré) ne survivent pas à un recalcul.
    """
    if booked_t <= 0:
        return PlanningStatus.UNPLANNED
    return PlanningStatus.PLANNED


class OrderStatusSynchronizer:
    """Recalcul idempotent du statut d'une commande / Idempotent order status recomputation."""

    def __init__(self, store: Store):
        self.store = store

    async def _order(self, order_id: int) -> OrderDocument:
        order = await self.store.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def summarize(self, order_id: int) -> OrderBookingSummary:
        """Réservations d'une commande sur toutes les tournées / An order's bookings across tours."""
        order = await self._order(order_id)
        tours = await self.store.tours_with_order(order_id)
        lines = [
            BookingLine(
                tour_id=tour.id,
                tour_name=tour.name,
                vehicle_config=tour.vehicle_config,
                tonnage=tour.stop_for(order_id).tonnage,
            )
            for tour in tours
            if tour.stop_for(order_id) is not None
        ]
        return OrderBookingSummary(
            order_id=order_id,
            demand_t=order.tonnage,
            booked_t=sum((line.tonnage for line in lines), ZERO_T),
            bookings=lines,
        )

    async def sync(self, order_id: int) -> SyncResult:
        """Recalculer et écrire le statut si nécessaire / Recompute and write the status if needed."""
        order = await self._order(order_id)
        tours = await self.store.tours_with_order(order_id)
        booked = booked_tonnage(order_id, tours)
        status = derive_status(booked)
        changed = status != order.planning_status
        if changed:
            await self.store.replace_order_status(order_id, status)
            logger.info(
                "Order %s status %s -> %s (%s t booked)",
                order.code, order.planning_status.value, status.value, booked,
            )
        else:
            logger.debug("Order %s status unchanged (%s)", order.code, status.value)
        return SyncResult(
            order_id=order_id, status=status, changed=changed, booked_t=booked, demand_t=order.tonnage
        )

    async def reconcile(self, date: str | None = None) -> list[int]:
        """Passe de réconciliation / Reconciliation pass.

        Couvre les commandes référencées par l'ensemble de travail et toutes celles
        qui ne sont pas UNPLANNED.
        Returns the ids whose status was corrected.
        """
        tours = await self.store.list_tours(date=date)
        order_ids = {stop.order_id for tour in tours for stop in tour.stops}
        marked = await self.store.list_orders(
            statuses=[status for status in PlanningStatus if status != PlanningStatus.UNPLANNED]
        )
        order_ids.update(order.id for order in marked)

        corrected = []
        for order_id in sorted(order_ids):
            result = await self.sync(order_id)
            if result.changed:
                corrected.append(order_id)
        if corrected:
            logger.warning("Reconciliation corrected %d order status(es): %s", len(corrected), corrected)
        return corrected
