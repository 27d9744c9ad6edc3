"""
Modèles SQLAlchemy / SQLAlchemy models.
Importer tous les modèles ici pour que create_all les détecte.
Import all models here so create_all can detect them.
"""

from bulkdispo.models.order import DeliveryMode, Order, PlanningStatus
from bulkdispo.models.tour import Tour, TourStatus, VehicleConfig
from bulkdispo.models.tour_stop import TourStop
from bulkdispo.models.audit import AuditLog

__all__ = [
    "DeliveryMode",
    "Order",
    "PlanningStatus",
    "Tour",
    "TourStatus",
    "VehicleConfig",
    "TourStop",
    "AuditLog",
]
