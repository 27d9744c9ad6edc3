"""Tests des modèles / Model tests."""

from decimal import Decimal

from bulkdispo.models.order import DeliveryMode, Order, PlanningStatus
from bulkdispo.models.tour import Tour, TourStatus, VehicleConfig
from bulkdispo.models.tour_stop import TourStop


def test_order_repr():
    o = Order(id=1, code="A-100", customer_name="Baustoffe Nord", tonnage=Decimal("12.5"))
    assert "A-100" in repr(o)


def test_tour_and_stop_repr():
    t = Tour(id=1, name="Tour 1", date="2026-10-20", motor_unit_capacity_t=Decimal("14"))
    assert "Tour 1" in repr(t)
    s = TourStop(tour_id=1, order_id=7, position=2, tonnage=Decimal("3"))
    assert "order=7" in repr(s)


def test_enums():
    assert DeliveryMode.MOTOR_UNIT_ONLY.value == "MOTOR_UNIT_ONLY"
    assert DeliveryMode.PICKUP_AT_SOURCE.value == "PICKUP_AT_SOURCE"
    assert PlanningStatus.UNPLANNED.value == "UNPLANNED"
    assert PlanningStatus.IN_TRANSIT.value == "IN_TRANSIT"
    assert TourStatus.DRAFT.value == "DRAFT"
    assert VehicleConfig.MOTOR_UNIT_WITH_TRAILER.value == "MOTOR_UNIT_WITH_TRAILER"
