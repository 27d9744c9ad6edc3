"""
Import des propositions d'optimisation / Route-optimization proposal import.
La proposition n'écrit jamais directement : chaque commande passe par BookingEngine.book.
The proposal never writes directly: every order goes through BookingEngine.book.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from bulkdispo.config import settings
from bulkdispo.models.tour import VehicleConfig
from bulkdispo.services.booking_engine import BookingEngine, BookingOutcome
from bulkdispo.services.conflict_checker import check_compatibility
from bulkdispo.services.planning import ZERO_T, to_tonnes

log = logging.getLogger(__name__)

VEHICLE_LABELS = {
    VehicleConfig.MOTOR_UNIT: "Motor unit",
    VehicleConfig.MOTOR_UNIT_WITH_TRAILER: "Motor unit + trailer",
}


@dataclass
class ProposedTour:
    """Tournée suggérée par l'optimiseur / Tour suggested by the optimizer."""
    vehicle_config: VehicleConfig
    order_ids: list[int]            # ordre de passage suggéré / suggested stop order
    capacity_t: Decimal | None = None   # capacité totale suggérée / suggested total capacity
    name: str | None = None
    rationale: str = ""


@dataclass
class RouteProposal:
    date: str                       # YYYY-MM-DD
    tours: list[ProposedTour]
    deferred_order_ids: list[int] = field(default_factory=list)   # pas pour aujourd'hui / not for today


@dataclass(frozen=True)
class SkippedOrder:
    order_id: int
    reason: str


@dataclass
class ProposalResult:
    tour_ids: list[int] = field(default_factory=list)
    outcomes: list[BookingOutcome] = field(default_factory=list)
    skipped: list[SkippedOrder] = field(default_factory=list)
    deferred_order_ids: list[int] = field(default_factory=list)


def split_capacity(
    vehicle_config: VehicleConfig,
    capacity_t: Decimal | None,
    motor_default: Decimal,
    trailer_default: Decimal,
) -> tuple[Decimal, Decimal | None]:
    """Répartir une capacité totale entre motrice et remorque / Split a total capacity into segments.

    La motrice garde sa capacité standard, la remorque prend le reste.
    """
    if vehicle_config == VehicleConfig.MOTOR_UNIT:
        return (capacity_t or motor_default), None
    if capacity_t is None:
        return motor_default, trailer_default
    motor = min(motor_default, capacity_t)
    return motor, max(ZERO_T, capacity_t - motor)


class ProposalImporter:
    """Transformer une proposition en tournées brouillon réservées / Turn a proposal into booked draft tours."""

    def __init__(
        self,
        engine: BookingEngine,
        motor_unit_capacity_t: Decimal | None = None,
        trailer_capacity_t: Decimal | None = None,
    ):
        self.engine = engine
        self.store = engine.store
        self.motor_default = motor_unit_capacity_t or to_tonnes(settings.DEFAULT_MOTOR_UNIT_CAPACITY_T)
        self.trailer_default = trailer_capacity_t or to_tonnes(settings.DEFAULT_TRAILER_CAPACITY_T)

    async def apply(self, proposal: RouteProposal) -> ProposalResult:
        result = ProposalResult(deferred_order_ids=list(proposal.deferred_order_ids))

        for idx, proposed in enumerate(proposal.tours, start=1):
            motor, trailer = split_capacity(
                proposed.vehicle_config,
                to_tonnes(proposed.capacity_t) if proposed.capacity_t is not None else None,
                self.motor_default,
                self.trailer_default,
            )
            name = proposed.name or f"Tour {idx} - {VEHICLE_LABELS[proposed.vehicle_config]}"
            tour = await self.store.create_tour(
                name=name,
                vehicle_config=proposed.vehicle_config,
                motor_unit_capacity_t=motor,
                trailer_capacity_t=trailer,
                date=proposal.date,
            )
            result.tour_ids.append(tour.id)
            log.info("Proposal tour %s created (%s)", name, proposed.rationale or "no rationale")

            for order_id in proposed.order_ids:
                order = await self.store.get_order(order_id)
                if order is None:
                    result.skipped.append(SkippedOrder(order_id, "unknown order"))
                    continue
                compat = check_compatibility(tour, order.delivery_mode)
                if not compat.allowed:
                    result.skipped.append(SkippedOrder(order_id, compat.reason))
                    continue
                summary = await self.engine.synchronizer.summarize(order_id)
                if summary.fully_booked:
                    result.skipped.append(SkippedOrder(order_id, "already fully booked"))
                    continue
                result.outcomes.append(await self.engine.book(tour.id, order_id, summary.open_t))

        if result.skipped:
            log.warning("Proposal import skipped %d order(s)", len(result.skipped))
        return result
