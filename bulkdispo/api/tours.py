"""Routes Tournées / Tour API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bulkdispo.api.audit import log_audit
from bulkdispo.api.deps import get_dispatcher, get_engine, get_store
from bulkdispo.config import settings
from bulkdispo.database import get_db
from bulkdispo.models.order import DeliveryMode
from bulkdispo.models.tour import Tour, TourStatus, VehicleConfig
from bulkdispo.schemas.booking import BookingOutcomeRead
from bulkdispo.schemas.tour import (
    CompatibilityRead,
    PlanningStatisticsRead,
    TourCreate,
    TourLoadRead,
    TourRead,
    TourReviewRead,
    TourUpdate,
)
from bulkdispo.services.booking_engine import BookingEngine
from bulkdispo.services.capacity import compute_load, summarize_tours
from bulkdispo.services.conflict_checker import check_compatibility, review_tour
from bulkdispo.services.errors import TourNotFoundError
from bulkdispo.services.planning import TourDocument, to_tonnes
from bulkdispo.services.store import SqlAlchemyStore

logger = logging.getLogger(__name__)

router = APIRouter()


async def _tour_row(db: AsyncSession, tour_id: int) -> Tour:
    """Tournée avec ses arrêts, relue depuis la base / Tour with stops, re-read from the database."""
    result = await db.execute(
        select(Tour)
        .options(selectinload(Tour.stops))
        .where(Tour.id == tour_id)
        .execution_options(populate_existing=True)
    )
    tour = result.scalar_one_or_none()
    if not tour:
        raise HTTPException(status_code=404, detail="Tour not found")
    return tour


async def _tour_document(store: SqlAlchemyStore, tour_id: int) -> TourDocument:
    tour = await store.get_tour(tour_id)
    if tour is None:
        raise TourNotFoundError(tour_id)
    return tour


@router.get("/", response_model=list[TourRead])
async def list_tours(
    date: str | None = None,
    status: TourStatus | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Lister les tournées / List tours."""
    query = select(Tour).options(selectinload(Tour.stops)).order_by(Tour.date, Tour.name, Tour.id)
    if date is not None:
        query = query.where(Tour.date == date)
    if status is not None:
        query = query.where(Tour.status == status)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/statistics", response_model=PlanningStatisticsRead)
async def planning_statistics(
    date: str | None = None,
    store: SqlAlchemyStore = Depends(get_store),
):
    """Statistiques de planification du jour / Planning statistics for a day."""
    tours = await store.list_tours(date=date)
    return summarize_tours(tours)


@router.get("/{tour_id}", response_model=TourRead)
async def get_tour(tour_id: int, db: AsyncSession = Depends(get_db)):
    return await _tour_row(db, tour_id)


@router.post("/", response_model=TourRead, status_code=201)
async def create_tour(
    data: TourCreate,
    db: AsyncSession = Depends(get_db),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Créer une tournée vide / Create an empty tour.

    Capacités standard si non fournies ; une motrice seule n'a pas de remorque.
    """
    values = data.model_dump()
    if values["motor_unit_capacity_t"] is None:
        values["motor_unit_capacity_t"] = to_tonnes(settings.DEFAULT_MOTOR_UNIT_CAPACITY_T)
    if data.vehicle_config == VehicleConfig.MOTOR_UNIT:
        values["trailer_capacity_t"] = None
    elif values["trailer_capacity_t"] is None:
        values["trailer_capacity_t"] = to_tonnes(settings.DEFAULT_TRAILER_CAPACITY_T)

    tour = Tour(**values)
    db.add(tour)
    await db.flush()
    log_audit(db, "tour", tour.id, "CREATE", dispatcher, {
        "name": tour.name, "date": tour.date, "vehicle_config": tour.vehicle_config.value,
    })
    return await _tour_row(db, tour.id)


@router.put("/{tour_id}", response_model=TourRead)
async def update_tour(
    tour_id: int,
    data: TourUpdate,
    db: AsyncSession = Depends(get_db),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Modifier l'en-tête d'une tournée / Update a tour header.

    Les arrêts ne changent jamais ici, seulement via les réservations.
    """
    tour = await _tour_row(db, tour_id)
    changes = data.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(tour, key, value)
    if tour.vehicle_config == VehicleConfig.MOTOR_UNIT_WITH_TRAILER and tour.trailer_capacity_t is None:
        tour.trailer_capacity_t = to_tonnes(settings.DEFAULT_TRAILER_CAPACITY_T)
    log_audit(db, "tour", tour_id, "UPDATE", dispatcher, changes)
    await db.flush()
    return await _tour_row(db, tour_id)


@router.get("/{tour_id}/load", response_model=TourLoadRead)
async def tour_load(tour_id: int, store: SqlAlchemyStore = Depends(get_store)):
    """Charge et taux d'utilisation / Load and utilization."""
    return compute_load(await _tour_document(store, tour_id))


@router.get("/{tour_id}/compatibility", response_model=CompatibilityRead)
async def tour_compatibility(
    tour_id: int,
    delivery_mode: DeliveryMode,
    store: SqlAlchemyStore = Depends(get_store),
):
    """Compatibilité d'un mode de livraison avec la tournée / Delivery mode vs tour."""
    return check_compatibility(await _tour_document(store, tour_id), delivery_mode)


@router.get("/{tour_id}/review", response_model=TourReviewRead)
async def tour_review(tour_id: int, store: SqlAlchemyStore = Depends(get_store)):
    """Revue de tous les arrêts et capacité effective / Review every stop and effective capacity."""
    return review_tour(await _tour_document(store, tour_id))


@router.post("/{tour_id}/teardown", response_model=BookingOutcomeRead)
async def teardown_tour(
    tour_id: int,
    db: AsyncSession = Depends(get_db),
    engine: BookingEngine = Depends(get_engine),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Libérer toutes les commandes de la tournée / Release every order on the tour."""
    outcome = await engine.teardown_tour(tour_id)
    log_audit(db, "tour", tour_id, "TEARDOWN", dispatcher, {"released": outcome.released_order_ids})
    return BookingOutcomeRead.model_validate(outcome)


@router.delete("/{tour_id}", status_code=204)
async def delete_tour(
    tour_id: int,
    db: AsyncSession = Depends(get_db),
    engine: BookingEngine = Depends(get_engine),
    store: SqlAlchemyStore = Depends(get_store),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Supprimer une tournée et libérer les commandes / Delete a tour and release its orders."""
    outcome = await engine.teardown_tour(tour_id)

    # Audit log (avant suppression / before delete)
    log_audit(db, "tour", tour_id, "DELETE", dispatcher, {"released": outcome.released_order_ids})
    await store.delete_tour(tour_id)
    logger.info("Tour %s deleted, %d order(s) released", tour_id, len(outcome.released_order_ids))
