"""
Store tournées/commandes / Tour and order store.
Contrat minimal : lecture par identifiant, remplacement par identifiant.
Minimal contract: fetch by identifier, replace by identifier.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bulkdispo.config import settings
from bulkdispo.models.order import Order, PlanningStatus
from bulkdispo.models.tour import Tour, TourStatus, VehicleConfig
from bulkdispo.models.tour_stop import TourStop
from bulkdispo.services.errors import OrderNotFoundError, StoreError, TourNotFoundError
from bulkdispo.services.planning import Address, OrderDocument, StopLine, TourDocument

logger = logging.getLogger(__name__)


class Store(ABC):
    """Collaborateur de persistance du moteur / Persistence collaborator of the engine."""

    @abstractmethod
    async def get_tour(self, tour_id: int) -> TourDocument | None: ...

    @abstractmethod
    async def get_order(self, order_id: int) -> OrderDocument | None: ...

    @abstractmethod
    async def list_tours(
        self, date: str | None = None, tour_ids: list[int] | None = None
    ) -> list[TourDocument]: ...

    @abstractmethod
    async def tours_with_order(self, order_id: int) -> list[TourDocument]:
        """Toutes les tournées ayant un arrêt pour la commande / All tours holding a stop for the order."""

    @abstractmethod
    async def list_orders(
        self, statuses: list[PlanningStatus] | None = None, order_ids: list[int] | None = None
    ) -> list[OrderDocument]: ...

    @abstractmethod
    async def create_tour(
        self,
        name: str,
        vehicle_config: VehicleConfig,
        motor_unit_capacity_t: Decimal,
        trailer_capacity_t: Decimal | None = None,
        date: str = "",
    ) -> TourDocument: ...

    @abstractmethod
    async def replace_tour(self, tour: TourDocument) -> None:
        """Remplacer la liste d'arrêts complète / Replace the full stop list."""

    @abstractmethod
    async def replace_order_status(self, order_id: int, status: PlanningStatus) -> None: ...

    @abstractmethod
    async def delete_tour(self, tour_id: int) -> None: ...


@contextmanager
def _store_errors(action: str):
    """Convertir les erreurs SQLAlchemy en StoreError / Wrap SQLAlchemy errors into StoreError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Store failure during %s", action)
        raise StoreError(f"could not {action}") from exc


def tour_document(tour: Tour) -> TourDocument:
    """Ligne ORM → document / ORM row → document."""
    stops = [
        StopLine(
            order_id=s.order_id,
            position=s.position,
            tonnage=s.tonnage,
            delivery_mode=s.delivery_mode,
            customer_name=s.customer_name or "",
            address=Address(street=s.street or "", postal_code=s.postal_code or "", city=s.city or ""),
            compatibility_warning=s.compatibility_warning,
        )
        for s in tour.stops
    ]
    stops.sort(key=lambda s: s.position)
    return TourDocument(
        id=tour.id,
        name=tour.name,
        vehicle_config=tour.vehicle_config,
        motor_unit_capacity_t=tour.motor_unit_capacity_t,
        trailer_capacity_t=tour.trailer_capacity_t,
        date=tour.date or "",
        status=tour.status,
        stops=stops,
    )


def order_document(order: Order) -> OrderDocument:
    return OrderDocument(
        id=order.id,
        code=order.code,
        customer_name=order.customer_name,
        tonnage=order.tonnage,
        delivery_mode=order.delivery_mode,
        planning_status=order.planning_status,
        address=Address(street=order.street or "", postal_code=order.postal_code or "", city=order.city or ""),
        delivery_date=order.delivery_date,
    )


class SqlAlchemyStore(Store):
    """Store sur session async SQLAlchemy / Store backed by an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession, scan_limit: int | None = None):
        self.db = db
        self.scan_limit = scan_limit or settings.TOUR_SCAN_LIMIT

    def _tour_query(self):
        return (
            select(Tour)
            .options(selectinload(Tour.stops))
            .execution_options(populate_existing=True)
        )

    async def _load_tour(self, tour_id: int) -> Tour | None:
        result = await self.db.execute(self._tour_query().where(Tour.id == tour_id))
        return result.scalar_one_or_none()

    async def get_tour(self, tour_id: int) -> TourDocument | None:
        with _store_errors(f"load tour {tour_id}"):
            tour = await self._load_tour(tour_id)
        return tour_document(tour) if tour else None

    async def get_order(self, order_id: int) -> OrderDocument | None:
        with _store_errors(f"load order {order_id}"):
            order = await self.db.get(Order, order_id)
        return order_document(order) if order else None

    async def list_tours(self, date=None, tour_ids=None) -> list[TourDocument]:
        query = self._tour_query().order_by(Tour.name, Tour.id).limit(self.scan_limit)
        if date is not None:
            query = query.where(Tour.date == date)
        if tour_ids is not None:
            query = query.where(Tour.id.in_(tour_ids))
        with _store_errors("list tours"):
            result = await self.db.execute(query)
            tours = result.scalars().all()
        return [tour_document(t) for t in tours]

    async def tours_with_order(self, order_id: int) -> list[TourDocument]:
        query = (
            self._tour_query()
            .where(Tour.id.in_(select(TourStop.tour_id).where(TourStop.order_id == order_id)))
            .order_by(Tour.id)
            .limit(self.scan_limit)
        )
        with _store_errors(f"look up tours for order {order_id}"):
            result = await self.db.execute(query)
            tours = result.scalars().all()
        return [tour_document(t) for t in tours]

    async def list_orders(self, statuses=None, order_ids=None) -> list[OrderDocument]:
        query = select(Order).order_by(Order.id)
        if statuses is not None:
            query = query.where(Order.planning_status.in_(statuses))
        if order_ids is not None:
            query = query.where(Order.id.in_(order_ids))
        with _store_errors("list orders"):
            result = await self.db.execute(query)
            orders = result.scalars().all()
        return [order_document(o) for o in orders]

    async def create_tour(
        self, name, vehicle_config, motor_unit_capacity_t, trailer_capacity_t=None, date=""
    ) -> TourDocument:
        tour = Tour(
            name=name,
            date=date,
            vehicle_config=vehicle_config,
            motor_unit_capacity_t=motor_unit_capacity_t,
            trailer_capacity_t=trailer_capacity_t,
            status=TourStatus.DRAFT,
        )
        with _store_errors(f"create tour {name}"):
            self.db.add(tour)
            await self.db.flush()
        return TourDocument(
            id=tour.id,
            name=tour.name,
            vehicle_config=vehicle_config,
            motor_unit_capacity_t=motor_unit_capacity_t,
            trailer_capacity_t=trailer_capacity_t,
            date=date,
        )

    async def replace_tour(self, tour: TourDocument) -> None:
        """Mise à jour en place des lignes existantes, puis ajouts, puis suppressions /
        Update existing rows in place, then insert new ones, then delete removed ones.
        """
        with _store_errors(f"save tour {tour.id}"):
            row = await self._load_tour(tour.id)
            if row is None:
                raise TourNotFoundError(tour.id)
            existing = {s.order_id: s for s in row.stops}
            wanted = {line.order_id for line in tour.stops}

            for line in tour.stops:
                stop = existing.get(line.order_id)
                if stop is None:
                    stop = TourStop(order_id=line.order_id, delivery_mode=line.delivery_mode)
                    row.stops.append(stop)
                stop.position = line.position
                stop.tonnage = line.tonnage
                stop.delivery_mode = line.delivery_mode
                stop.customer_name = line.customer_name
                stop.street = line.address.street
                stop.postal_code = line.address.postal_code
                stop.city = line.address.city
                stop.compatibility_warning = line.compatibility_warning

            for order_id, stop in existing.items():
                if order_id not in wanted:
                    row.stops.remove(stop)
            await self.db.flush()

    async def replace_order_status(self, order_id: int, status: PlanningStatus) -> None:
        with _store_errors(f"save order {order_id}"):
            order = await self.db.get(Order, order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            order.planning_status = status
            await self.db.flush()

    async def delete_tour(self, tour_id: int) -> None:
        with _store_errors(f"delete tour {tour_id}"):
            row = await self._load_tour(tour_id)
            if row is None:
                raise TourNotFoundError(tour_id)
            await self.db.delete(row)
            await self.db.flush()
