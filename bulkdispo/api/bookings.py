"""Routes Réservations / Booking API routes.
Toutes les écritures d'arrêts passent par BookingEngine / Every stop write goes through BookingEngine.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bulkdispo.api.audit import log_audit
from bulkdispo.api.deps import get_dispatcher, get_engine
from bulkdispo.config import settings
from bulkdispo.database import get_db
from bulkdispo.rate_limit import limiter
from bulkdispo.schemas.booking import (
    BookingOutcomeRead,
    BookRequest,
    MoveStopRequest,
    ProposalRequest,
    ProposalResultRead,
    RebookRequest,
    ResizeRequest,
)
from bulkdispo.services.booking_engine import BookingEngine
from bulkdispo.services.proposal import ProposalImporter, ProposedTour, RouteProposal

router = APIRouter()


@router.post("/", response_model=BookingOutcomeRead, status_code=201)
@limiter.limit(settings.RATE_LIMIT_BOOKING)
async def book_order(
    request: Request,
    data: BookRequest,
    db: AsyncSession = Depends(get_db),
    engine: BookingEngine = Depends(get_engine),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Réserver une commande sur une tournée / Book an order onto a tour."""
    outcome = await engine.book(data.tour_id, data.order_id, data.tonnage)
    log_audit(db, "tour", data.tour_id, "BOOK", dispatcher, {"order_id": data.order_id, "tonnage": data.tonnage})
    return BookingOutcomeRead.model_validate(outcome)


@router.put("/{tour_id}/{order_id}", response_model=BookingOutcomeRead)
@limiter.limit(settings.RATE_LIMIT_BOOKING)
async def resize_booking(
    request: Request,
    tour_id: int,
    order_id: int,
    data: ResizeRequest,
    db: AsyncSession = Depends(get_db),
    engine: BookingEngine = Depends(get_engine),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Modifier le tonnage réservé / Change the booked tonnage."""
    outcome = await engine.resize(tour_id, order_id, data.tonnage)
    log_audit(db, "tour", tour_id, "RESIZE", dispatcher, {"order_id": order_id, "tonnage": data.tonnage})
    return BookingOutcomeRead.model_validate(outcome)


@router.delete("/{tour_id}/{order_id}", response_model=BookingOutcomeRead)
@limiter.limit(settings.RATE_LIMIT_BOOKING)
async def unbook_order(
    request: Request,
    tour_id: int,
    order_id: int,
    db: AsyncSession = Depends(get_db),
    engine: BookingEngine = Depends(get_engine),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Retirer une commande de la tournée / Remove an order from the tour."""
    outcome = await engine.unbook(tour_id, order_id)
    log_audit(db, "tour", tour_id, "UNBOOK", dispatcher, {"order_id": order_id})
    return BookingOutcomeRead.model_validate(outcome)


@router.put("/{tour_id}/{order_id}/position", response_model=BookingOutcomeRead)
@limiter.limit(settings.RATE_LIMIT_BOOKING)
async def move_stop(
    request: Request,
    tour_id: int,
    order_id: int,
    data: MoveStopRequest,
    db: AsyncSession = Depends(get_db),
    engine: BookingEngine = Depends(get_engine),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Changer l'ordre de passage / Change the stop sequence."""
    outcome = await engine.move_stop(tour_id, order_id, data.position)
    log_audit(db, "tour", tour_id, "MOVE", dispatcher, {"order_id": order_id, "position": data.position})
    return BookingOutcomeRead.model_validate(outcome)


@router.post("/rebook", response_model=BookingOutcomeRead)
@limiter.limit(settings.RATE_LIMIT_BOOKING)
async def rebook_order(
    request: Request,
    data: RebookRequest,
    db: AsyncSession = Depends(get_db),
    engine: BookingEngine = Depends(get_engine),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Déplacer du tonnage entre tournées / Move tonnage between tours."""
    outcome = await engine.rebook(
        data.source_tour_id, data.destination_tour_id, data.order_id, data.tonnage
    )
    log_audit(db, "tour", data.destination_tour_id, "REBOOK", dispatcher, {
        "order_id": data.order_id,
        "source_tour_id": data.source_tour_id,
        "tonnage": data.tonnage,
    })
    return BookingOutcomeRead.model_validate(outcome)


@router.post("/proposals", response_model=ProposalResultRead, status_code=201)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
async def import_proposal(
    request: Request,
    data: ProposalRequest,
    db: AsyncSession = Depends(get_db),
    engine: BookingEngine = Depends(get_engine),
    dispatcher: str | None = Depends(get_dispatcher),
):
    """Importer une proposition de tournées / Import a route proposal as draft tours."""
    proposal = RouteProposal(
        date=data.date,
        tours=[ProposedTour(**t.model_dump()) for t in data.tours],
        deferred_order_ids=data.deferred_order_ids,
    )
    result = await ProposalImporter(engine).apply(proposal)
    for tour_id in result.tour_ids:
        log_audit(db, "tour", tour_id, "PROPOSAL", dispatcher, {"date": data.date})
    return ProposalResultRead.model_validate(result)
