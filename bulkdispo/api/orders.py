"""Routes Commandes / Order API routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulkdispo.api.audit import log_audit
from bulkdispo.api.deps import get_dispatcher, get_synchronizer
from bulkdispo.database import get_db
from bulkdispo.models.order import Order, PlanningStatus
from bulkdispo.models.tour_stop import TourStop
from bulkdispo.schemas.order import (
    OrderBookingSummaryRead,
    OrderCreate,
    OrderRead,
    OrderSyncRead,
    OrderUpdate,
)
from bulkdispo.services.order_status import OrderStatusSynchronizer

router = APIRouter()


@router.get("/", response_model=list[OrderRead])
async def list_orders(
    status: PlanningStatus | None = None,
    delivery_date: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Lister les commandes, filtres optionnels / List orders with optional filters."""
    query = select(Order).order_by(Order.id)
    if status is not None:
        query = query.where(Order.planning_status == status)
    if delivery_date is not None:
        query = query.where(Order.delivery_date == delivery_date)
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/reconcile")
async def reconcile_orders(
    date: str | None = None,
    synchronizer: OrderStatusSynchronizer = Depends(get_synchronizer),
):
    """Réconcilier les statuts de planification / Reconcile planning statuses."""
    corrected = await synchronizer.reconcile(date=date)
    return {"corrected": corrected}


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(order_id: int, db: AsyncSession = Depends(get_db)):
    order = await db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("/", response_model=OrderRead, status_code=201)
async def create_order(
    data: OrderCreate,
    db: AsyncSession = Depends(get_db),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Créer une commande (non planifiée) / Create an (unplanned) order."""
    order = Order(**data.model_dump(), planning_status=PlanningStatus.UNPLANNED)
    db.add(order)
    await db.flush()
    log_audit(db, "order", order.id, "CREATE", dispatcher, {"code": order.code, "tonnage": order.tonnage})
    await db.refresh(order)
    return order


@router.put("/{order_id}", response_model=OrderRead)
async def update_order(
    order_id: int,
    data: OrderUpdate,
    db: AsyncSession = Depends(get_db),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Modifier une commande ; les arrêts gardent leur copie / Update an order; stops keep their snapshot."""
    order = await db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    changes = data.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(order, key, value)
    log_audit(db, "order", order.id, "UPDATE", dispatcher, changes)
    await db.flush()
    await db.refresh(order)
    return order


@router.delete("/{order_id}", status_code=204)
async def delete_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Supprimer une commande sans réservation / Delete an order without bookings."""
    order = await db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    booked = await db.scalar(select(func.count(TourStop.id)).where(TourStop.order_id == order_id))
    if booked:
        raise HTTPException(
            status_code=409,
            detail=f"Order is still booked on {booked} tour(s); unbook it first",
        )
    log_audit(db, "order", order_id, "DELETE", dispatcher, {"code": order.code})
    await db.delete(order)


@router.get("/{order_id}/bookings", response_model=OrderBookingSummaryRead)
async def order_bookings(
    order_id: int,
    synchronizer: OrderStatusSynchronizer = Depends(get_synchronizer),
):
    """Réservations de la commande sur toutes les tournées / Order bookings across all tours."""
    summary = await synchronizer.summarize(order_id)
    return OrderBookingSummaryRead.model_validate(summary)


@router.post("/{order_id}/sync", response_model=OrderSyncRead)
async def sync_order(
    order_id: int,
    synchronizer: OrderStatusSynchronizer = Depends(get_synchronizer),
):
    """Recalculer le statut d'une commande / Recompute one order's status."""
    return await synchronizer.sync(order_id)
