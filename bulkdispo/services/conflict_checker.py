"""
Vérification de compatibilité commande/tournée / Order-to-tour compatibility checker.
Purement consultatif : le moteur affiche le résultat mais ne bloque jamais l'écriture.
Advisory only: the engine surfaces the result but never refuses the write.
"""

from dataclasses import dataclass
from decimal import Decimal

from bulkdispo.models.order import DeliveryMode
from bulkdispo.services.planning import TourDocument

TRAILER_NOT_USABLE = "trailer capacity not usable for this stop"
PICKUP_NOT_PLANNED = "pickup-at-source orders are collected by the customer and are not planned onto tours"


@dataclass(frozen=True)
class Compatibility:
    allowed: bool
    capacity_ceiling_t: Decimal
    warning: str | None = None
    reason: str | None = None

    @property
    def message(self) -> str | None:
        """Texte à afficher au répartiteur / Text to show the dispatcher."""
        return self.reason or self.warning


@dataclass(frozen=True)
class StopFinding:
    order_id: int
    position: int
    compatibility: Compatibility


@dataclass(frozen=True)
class TourReview:
    effective_capacity_t: Decimal
    findings: list[StopFinding]


def check_compatibility(tour: TourDocument, delivery_mode: DeliveryMode) -> Compatibility:
    """Compatibilité d'un mode de livraison avec une tournée / Delivery mode vs tour compatibility.

    - MOTOR_UNIT_ONLY sur motrice + remorque : autorisé avec avertissement, plafond = motrice.
    - PICKUP_AT_SOURCE : jamais planifié, raison renvoyée (utilisée par le regroupement amont).
    - Tout le reste : autorisé.
    """
    if delivery_mode == DeliveryMode.PICKUP_AT_SOURCE:
        return Compatibility(
            allowed=False,
            capacity_ceiling_t=tour.combined_capacity_t,
            reason=PICKUP_NOT_PLANNED,
        )
    if delivery_mode == DeliveryMode.MOTOR_UNIT_ONLY and tour.has_trailer:
        return Compatibility(
            allowed=True,
            capacity_ceiling_t=tour.motor_unit_capacity_t,
            warning=TRAILER_NOT_USABLE,
        )
    return Compatibility(allowed=True, capacity_ceiling_t=tour.combined_capacity_t)


def review_tour(tour: TourDocument) -> TourReview:
    """Revue de tous les arrêts d'une tournée / Review every stop of a tour.

    Un seul arrêt motrice-seule sur une tournée avec remorque ramène le plafond
    effectif à la capacité motrice.
    """
    findings = []
    effective = tour.combined_capacity_t
    for stop in tour.stops:
        compat = check_compatibility(tour, stop.delivery_mode)
        effective = min(effective, compat.capacity_ceiling_t)
        if compat.message:
            findings.append(StopFinding(order_id=stop.order_id, position=stop.position, compatibility=compat))
    return TourReview(effective_capacity_t=effective, findings=findings)
