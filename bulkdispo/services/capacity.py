"""
Service de calcul de charge / Tour load calculation service.
Calcul unique et pur de l'utilisation d'une tournée / Single pure computation of tour utilization.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from bulkdispo.services.planning import ZERO_T, TourDocument


@dataclass(frozen=True)
class TourLoad:
    total_loaded_t: Decimal
    combined_capacity_t: Decimal
    utilization_percent: float
    is_overloaded: bool
    # Répartition indicative : motrice d'abord, puis remorque /
    # Indicative split: motor unit first, then trailer
    motor_unit_load_t: Decimal
    trailer_load_t: Decimal
    free_capacity_t: Decimal


@dataclass(frozen=True)
class PlanningStatistics:
    tour_count: int
    stop_count: int
    total_tonnage_t: Decimal
    average_utilization_percent: float
    overloaded_tour_count: int


def utilization_percent(total: Decimal, capacity: Decimal) -> float:
    """Taux d'utilisation / Utilization rate (%)."""
    if capacity <= 0:
        return 0.0
    return round(float(total / capacity * 100), 1)


def compute_load(tour: TourDocument) -> TourLoad:
    """Charge d'une tournée / Load of a tour.

    Surcharge stricte : exactement à pleine capacité reste valide /
    Strict overload: exactly at capacity is still valid.
    """
    total = sum((stop.tonnage for stop in tour.stops), ZERO_T)
    combined = tour.combined_capacity_t
    motor_load = min(total, tour.motor_unit_capacity_t)
    trailer_load = max(ZERO_T, total - tour.motor_unit_capacity_t) if tour.has_trailer else ZERO_T
    return TourLoad(
        total_loaded_t=total,
        combined_capacity_t=combined,
        utilization_percent=utilization_percent(total, combined),
        is_overloaded=total > combined,
        motor_unit_load_t=motor_load,
        trailer_load_t=trailer_load,
        free_capacity_t=max(ZERO_T, combined - total),
    )


def summarize_tours(tours: Sequence[TourDocument]) -> PlanningStatistics:
    """Statistiques de planification / Planning statistics for a set of tours."""
    loads = [compute_load(tour) for tour in tours]
    return PlanningStatistics(
        tour_count=len(tours),
        stop_count=sum(len(tour.stops) for tour in tours),
        total_tonnage_t=sum((load.total_loaded_t for load in loads), ZERO_T),
        average_utilization_percent=(
            round(sum(load.utilization_percent for load in loads) / len(loads), 1) if loads else 0.0
        ),
        overloaded_tour_count=sum(1 for load in loads if load.is_overloaded),
    )
