"""Fixtures partagées / Shared fixtures."""

import copy
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from bulkdispo.database import get_db, init_db
from bulkdispo.main import app
from bulkdispo.models.order import DeliveryMode, PlanningStatus
from bulkdispo.models.tour import TourStatus, VehicleConfig
from bulkdispo.rate_limit import limiter
from bulkdispo.services.booking_engine import BookingEngine
from bulkdispo.services.errors import OrderNotFoundError, TourNotFoundError
from bulkdispo.services.planning import Address, OrderDocument, TourDocument
from bulkdispo.services.store import Store


class MemoryStore(Store):
    """Store en mémoire ; chaque lecture renvoie une copie / In-memory store; every read returns a copy."""

    def __init__(self):
        self.tours: dict[int, TourDocument] = {}
        self.orders: dict[int, OrderDocument] = {}
        self.tour_writes = 0
        self.status_writes = 0
        self._next_tour_id = 1

    def add_tour(self, motor_t, trailer_t=None, name=None, date="2026-10-20") -> TourDocument:
        tour_id = self._next_tour_id
        self._next_tour_id += 1
        tour = TourDocument(
            id=tour_id,
            name=name or f"T{tour_id}",
            vehicle_config=(
                VehicleConfig.MOTOR_UNIT_WITH_TRAILER if trailer_t is not None else VehicleConfig.MOTOR_UNIT
            ),
            motor_unit_capacity_t=Decimal(str(motor_t)),
            trailer_capacity_t=Decimal(str(trailer_t)) if trailer_t is not None else None,
            date=date,
        )
        self.tours[tour_id] = tour
        return copy.deepcopy(tour)

    def add_order(self, order_id, tonnage, mode=DeliveryMode.MOTOR_UNIT_WITH_TRAILER, city="Lyon") -> OrderDocument:
        order = OrderDocument(
            id=order_id,
            code=f"O{order_id}",
            customer_name=f"Customer {order_id}",
            tonnage=Decimal(str(tonnage)),
            delivery_mode=mode,
            address=Address(street="1 rue du Port", postal_code="69007", city=city),
        )
        self.orders[order_id] = order
        return copy.deepcopy(order)

    async def get_tour(self, tour_id):
        tour = self.tours.get(tour_id)
        return copy.deepcopy(tour) if tour else None

    async def get_order(self, order_id):
        order = self.orders.get(order_id)
        return copy.deepcopy(order) if order else None

    async def list_tours(self, date=None, tour_ids=None):
        return [
            copy.deepcopy(t)
            for t in self.tours.values()
            if (date is None or t.date == date) and (tour_ids is None or t.id in tour_ids)
        ]

    async def tours_with_order(self, order_id):
        return [copy.deepcopy(t) for t in self.tours.values() if t.stop_for(order_id) is not None]

    async def list_orders(self, statuses=None, order_ids=None):
        return [
            copy.deepcopy(o)
            for o in self.orders.values()
            if (statuses is None or o.planning_status in statuses)
            and (order_ids is None or o.id in order_ids)
        ]

    async def create_tour(self, name, vehicle_config, motor_unit_capacity_t, trailer_capacity_t=None, date=""):
        tour_id = self._next_tour_id
        self._next_tour_id += 1
        tour = TourDocument(
            id=tour_id,
            name=name,
            vehicle_config=vehicle_config,
            motor_unit_capacity_t=motor_unit_capacity_t,
            trailer_capacity_t=trailer_capacity_t,
            date=date,
            status=TourStatus.DRAFT,
        )
        self.tours[tour_id] = tour
        return copy.deepcopy(tour)

    async def replace_tour(self, tour):
        if tour.id not in self.tours:
            raise TourNotFoundError(tour.id)
        self.tour_writes += 1
        self.tours[tour.id] = copy.deepcopy(tour)

    async def replace_order_status(self, order_id, status: PlanningStatus):
        if order_id not in self.orders:
            raise OrderNotFoundError(order_id)
        self.status_writes += 1
        self.orders[order_id].planning_status = status

    async def delete_tour(self, tour_id):
        if self.tours.pop(tour_id, None) is None:
            raise TourNotFoundError(tour_id)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def engine(store):
    return BookingEngine(store)


@pytest.fixture
async def client(tmp_path):
    """Client HTTP sur une base SQLite par test / HTTP client over a per-test SQLite database."""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(bind=test_engine)
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    await test_engine.dispose()
