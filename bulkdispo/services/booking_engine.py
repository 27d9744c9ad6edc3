"""
Moteur de réservation de tournées / Tour booking engine.
Seul composant autorisé à modifier les arrêts d'une tournée.
Only component allowed to mutate a tour's stop list.

Chaque opération : validation → compatibilité → charge projetée → écriture tournée(s)
→ recalcul du statut de la commande. Surcharge et incompatibilité sont des
avertissements, jamais des refus.
Each operation: validate → compatibility → projected load → write tour(s)
→ recompute order status. Overload and incompatibility are warnings, never refusals.

Limite connue / Known limitation: pas de jeton de concurrence optimiste. Une
modification concurrente d'une tournée entre lecture et écriture n'est pas
détectée (dernier écrivain gagnant, un répartiteur à la fois par jour).
"""

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation

from bulkdispo.models.order import PlanningStatus
from bulkdispo.services.capacity import TourLoad, compute_load
from bulkdispo.services.conflict_checker import Compatibility, check_compatibility
from bulkdispo.services.errors import (
    DuplicateBookingError,
    InvalidPositionError,
    InvalidTonnageError,
    OrderNotFoundError,
    RebookAmountError,
    StopNotFoundError,
    TourNotFoundError,
)
from bulkdispo.services.order_status import OrderStatusSynchronizer, SyncResult
from bulkdispo.services.planning import OrderDocument, StopLine, TourDocument, fits_tonne_step, to_tonnes
from bulkdispo.services.store import Store

logger = logging.getLogger(__name__)


@dataclass
class BookingOutcome:
    """Résultat renvoyé à l'appelant / Result returned to the caller."""
    success: bool = True
    tour_id: int | None = None
    order_id: int | None = None
    load: TourLoad | None = None
    source_tour_id: int | None = None
    source_load: TourLoad | None = None
    overload_warning: str | None = None
    compatibility_warning: str | None = None
    demand_warning: str | None = None
    order_status: PlanningStatus | None = None
    released_order_ids: list[int] = field(default_factory=list)

    @property
    def overloaded(self) -> bool:
        return self.load is not None and self.load.is_overloaded


def validate_tonnage(value) -> Decimal:
    """Tonnage strictement positif, fini, au kilo près / Strictly positive, finite, to the kilogram."""
    try:
        tonnage = to_tonnes(value)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidTonnageError(value) from None
    if not tonnage.is_finite() or tonnage <= 0:
        raise InvalidTonnageError(value)
    if not fits_tonne_step(tonnage):
        raise InvalidTonnageError(value, "must not have more than 3 decimal places")
    return tonnage


def _new_stop(tour: TourDocument, order: OrderDocument, tonnage: Decimal, compat: Compatibility) -> StopLine:
    """Arrêt ajouté en fin de tournée, adresse figée / Stop appended at the end, address snapshot."""
    stop = StopLine(
        order_id=order.id,
        position=len(tour.stops) + 1,
        tonnage=tonnage,
        delivery_mode=order.delivery_mode,
        customer_name=order.customer_name,
        address=replace(order.address),
        compatibility_warning=compat.message,
    )
    tour.stops.append(stop)
    return stop


def _remove_stop(tour: TourDocument, stop: StopLine) -> None:
    tour.stops.remove(stop)
    tour.renumber()


class BookingEngine:
    """Réservation, redimensionnement, déplacement et libération / Book, resize, move and release."""

    def __init__(self, store: Store, synchronizer: OrderStatusSynchronizer | None = None):
        self.store = store
        self.synchronizer = synchronizer or OrderStatusSynchronizer(store)

    async def _tour(self, tour_id: int) -> TourDocument:
        tour = await self.store.get_tour(tour_id)
        if tour is None:
            raise TourNotFoundError(tour_id)
        return tour

    async def _order(self, order_id: int) -> OrderDocument:
        order = await self.store.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def _finish(
        self,
        action: str,
        tour: TourDocument,
        order: OrderDocument,
        load: TourLoad,
        compat: Compatibility | None = None,
        source: TourDocument | None = None,
        source_load: TourLoad | None = None,
    ) -> BookingOutcome:
        """Recalcul du statut puis assemblage des avertissements / Status sync then warnings."""
        sync: SyncResult = await self.synchronizer.sync(order.id)
        outcome = BookingOutcome(
            tour_id=tour.id,
            order_id=order.id,
            load=load,
            source_tour_id=source.id if source else None,
            source_load=source_load,
            order_status=sync.status,
        )
        if load.is_overloaded:
            outcome.overload_warning = (
                f"Tour {tour.name} is overloaded: {load.total_loaded_t} t loaded "
                f"for {load.combined_capacity_t} t capacity"
            )
            logger.warning(outcome.overload_warning)
        if compat is not None and compat.message:
            outcome.compatibility_warning = compat.message
            logger.warning("Order %s on tour %s: %s", order.code, tour.name, compat.message)
        if sync.booked_t > sync.demand_t:
            outcome.demand_warning = (
                f"Order {order.code} is over-booked: {sync.booked_t} t booked "
                f"for {sync.demand_t} t demand"
            )
            logger.warning(outcome.demand_warning)
        logger.info(
            "%s order %s on tour %s: %s t loaded (%s%%)",
            action, order.code, tour.name, load.total_loaded_t, load.utilization_percent,
        )
        return outcome

    # ── Opérations / Operations ──────────────────────────────────────

    async def book(self, tour_id: int, order_id: int, tonnage) -> BookingOutcome:
        """Nouvelle réservation ; doublon refusé / New booking; duplicates are rejected."""
        tonnage = validate_tonnage(tonnage)
        tour = await self._tour(tour_id)
        order = await self._order(order_id)
        if tour.stop_for(order_id) is not None:
            raise DuplicateBookingError(tour_id, order_id)

        compat = check_compatibility(tour, order.delivery_mode)
        _new_stop(tour, order, tonnage, compat)
        load = compute_load(tour)
        await self.store.replace_tour(tour)
        return await self._finish("Booked", tour, order, load, compat)

    async def resize(self, tour_id: int, order_id: int, new_tonnage) -> BookingOutcome:
        """Remplacer le tonnage d'une réservation existante / Replace an existing booking's tonnage."""
        tonnage = validate_tonnage(new_tonnage)
        tour = await self._tour(tour_id)
        stop = tour.stop_for(order_id)
        if stop is None:
            raise StopNotFoundError(tour_id, order_id)
        order = await self._order(order_id)

        stop.tonnage = tonnage
        compat = check_compatibility(tour, stop.delivery_mode)
        stop.compatibility_warning = compat.message
        load = compute_load(tour)
        await self.store.replace_tour(tour)
        return await self._finish("Resized", tour, order, load, compat)

    async def unbook(self, tour_id: int, order_id: int) -> BookingOutcome:
        """Retirer une réservation ; idempotent / Remove a booking; idempotent.

        Sans arrêt, aucune écriture tournée : seul le statut est re-vérifié.
        """
        tour = await self._tour(tour_id)
        stop = tour.stop_for(order_id)
        if stop is None:
            logger.debug("Unbook no-op: order %s not on tour %s", order_id, tour_id)
            outcome = BookingOutcome(tour_id=tour_id, order_id=order_id, load=compute_load(tour))
            if await self.store.get_order(order_id) is not None:
                outcome.order_status = (await self.synchronizer.sync(order_id)).status
            return outcome

        order = await self._order(order_id)
        _remove_stop(tour, stop)
        load = compute_load(tour)
        await self.store.replace_tour(tour)
        return await self._finish("Unbooked", tour, order, load)

    async def rebook(
        self, source_tour_id: int | None, destination_tour_id: int, order_id: int, tonnage
    ) -> BookingOutcome:
        """Déplacer du tonnage d'une tournée à une autre / Move tonnage from one tour to another.

        - Source absente : réservation directe (ajout) sur la destination.
        - Source = destination : aucune écriture, le tonnage reste en place.
        - Arrêt existant sur la destination : fusion additive.
        - Tonnage inférieur à l'arrêt source : l'arrêt source est réduit (fractionnement).
        """
        tonnage = validate_tonnage(tonnage)
        if source_tour_id is not None and source_tour_id == destination_tour_id:
            return await self._rebook_in_place(destination_tour_id, order_id, tonnage)

        destination = await self._tour(destination_tour_id)
        order = await self._order(order_id)

        source = None
        if source_tour_id is not None:
            source = await self._tour(source_tour_id)
            source_stop = source.stop_for(order_id)
            if source_stop is None:
                raise StopNotFoundError(source_tour_id, order_id)
            if tonnage > source_stop.tonnage:
                raise RebookAmountError(order_id, tonnage, source_stop.tonnage)
            if tonnage == source_stop.tonnage:
                _remove_stop(source, source_stop)
            else:
                source_stop.tonnage -= tonnage

        dest_stop = destination.stop_for(order_id)
        if dest_stop is None:
            compat = check_compatibility(destination, order.delivery_mode)
            _new_stop(destination, order, tonnage, compat)
        else:
            dest_stop.tonnage += tonnage
            compat = check_compatibility(destination, dest_stop.delivery_mode)
            dest_stop.compatibility_warning = compat.message

        load = compute_load(destination)
        source_load = compute_load(source) if source else None
        await self.store.replace_tour(destination)
        if source is not None:
            await self.store.replace_tour(source)
        return await self._finish(
            "Rebooked", destination, order, load, compat, source=source, source_load=source_load
        )

    async def _rebook_in_place(self, tour_id: int, order_id: int, tonnage: Decimal) -> BookingOutcome:
        """Source = destination : même validation, tonnage conservé / Same validation, tonnage conserved."""
        tour = await self._tour(tour_id)
        stop = tour.stop_for(order_id)
        if stop is None:
            raise StopNotFoundError(tour_id, order_id)
        if tonnage > stop.tonnage:
            raise RebookAmountError(order_id, tonnage, stop.tonnage)
        order = await self._order(order_id)
        compat = check_compatibility(tour, stop.delivery_mode)
        logger.debug("Rebook no-op: order %s stays on tour %s", order_id, tour_id)
        load = compute_load(tour)
        return await self._finish("Rebooked", tour, order, load, compat, source=tour, source_load=load)

    async def move_stop(self, tour_id: int, order_id: int, position: int) -> BookingOutcome:
        """Changer la position d'un arrêt dans la tournée / Move a stop within its tour."""
        tour = await self._tour(tour_id)
        stop = tour.stop_for(order_id)
        if stop is None:
            raise StopNotFoundError(tour_id, order_id)
        if not 1 <= position <= len(tour.stops):
            raise InvalidPositionError(position, len(tour.stops))

        tour.stops.remove(stop)
        tour.stops.insert(position - 1, stop)
        tour.renumber()
        await self.store.replace_tour(tour)
        logger.info("Moved order %s to position %d on tour %s", order_id, position, tour.name)
        return BookingOutcome(tour_id=tour_id, order_id=order_id, load=compute_load(tour))

    async def teardown_tour(self, tour_id: int) -> BookingOutcome:
        """Libérer tous les arrêts avant suppression / Release every stop before deletion."""
        tour = await self._tour(tour_id)
        released = []
        for stop in list(tour.stops):
            await self.unbook(tour_id, stop.order_id)
            released.append(stop.order_id)
        logger.info("Tour %s torn down, %d order(s) released", tour.name, len(released))
        tour.stops = []
        return BookingOutcome(tour_id=tour_id, load=compute_load(tour), released_order_ids=released)
