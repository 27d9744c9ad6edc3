"""
Dépendances injectées dans les routes / Route dependencies.
Le moteur et le synchroniseur reçoivent leur store explicitement.
The engine and synchronizer receive their store explicitly.
"""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from bulkdispo.database import get_db
from bulkdispo.services.booking_engine import BookingEngine
from bulkdispo.services.order_status import OrderStatusSynchronizer
from bulkdispo.services.store import SqlAlchemyStore


def get_store(db: AsyncSession = Depends(get_db)) -> SqlAlchemyStore:
    return SqlAlchemyStore(db)


def get_synchronizer(store: SqlAlchemyStore = Depends(get_store)) -> OrderStatusSynchronizer:
    return OrderStatusSynchronizer(store)


def get_engine(
    store: SqlAlchemyStore = Depends(get_store),
    synchronizer: OrderStatusSynchronizer = Depends(get_synchronizer),
) -> BookingEngine:
    return BookingEngine(store, synchronizer)


def get_dispatcher(x_dispatcher: str | None = Header(None, alias="X-Dispatcher")) -> str | None:
    """Nom du répartiteur pour l'historique / Dispatcher name for the audit trail."""
    return x_dispatcher
