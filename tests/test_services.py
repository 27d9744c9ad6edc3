"""Tests des services / Service tests."""

from decimal import Decimal

from bulkdispo.models.order import DeliveryMode
from bulkdispo.models.tour import VehicleConfig
from bulkdispo.services.capacity import compute_load, summarize_tours, utilization_percent
from bulkdispo.services.conflict_checker import (
    PICKUP_NOT_PLANNED,
    TRAILER_NOT_USABLE,
    check_compatibility,
    review_tour,
)
from bulkdispo.services.planning import StopLine, TourDocument, to_tonnes
from bulkdispo.services.proposal import split_capacity


def _tour(motor, trailer=None, loads=()):
    tour = TourDocument(
        id=1,
        name="T1",
        vehicle_config=VehicleConfig.MOTOR_UNIT_WITH_TRAILER if trailer is not None else VehicleConfig.MOTOR_UNIT,
        motor_unit_capacity_t=Decimal(str(motor)),
        trailer_capacity_t=Decimal(str(trailer)) if trailer is not None else None,
    )
    for idx, (tonnage, mode) in enumerate(loads, start=1):
        tour.stops.append(StopLine(order_id=idx, position=idx, tonnage=Decimal(str(tonnage)), delivery_mode=mode))
    return tour


def test_to_tonnes_keeps_decimal_precision():
    assert to_tonnes(0.1) + to_tonnes(0.2) == Decimal("0.3")
    assert to_tonnes("12.125") == Decimal("12.125")


def test_utilization_percent():
    assert utilization_percent(Decimal("10"), Decimal("14")) == 71.4
    assert utilization_percent(Decimal("5"), Decimal("0")) == 0.0


def test_empty_tour_load():
    load = compute_load(_tour(14))
    assert load.total_loaded_t == 0
    assert load.utilization_percent == 0.0
    assert load.is_overloaded is False


def test_load_under_capacity():
    load = compute_load(_tour(14, loads=[(10, DeliveryMode.BAG_LOAD)]))
    assert load.total_loaded_t == Decimal("10")
    assert round(load.utilization_percent) == 71
    assert load.is_overloaded is False
    assert load.free_capacity_t == Decimal("4")


def test_load_overloaded():
    load = compute_load(_tour(14, loads=[(16, DeliveryMode.BAG_LOAD)]))
    assert load.is_overloaded is True
    assert load.free_capacity_t == 0


def test_exactly_at_capacity_is_not_overloaded():
    load = compute_load(_tour(14, 10, loads=[(20, DeliveryMode.CRANE_PALLET), (4, DeliveryMode.BAG_LOAD)]))
    assert load.total_loaded_t == load.combined_capacity_t == Decimal("24")
    assert load.utilization_percent == 100.0
    assert load.is_overloaded is False


def test_compute_load_is_pure():
    tour = _tour(14, 10, loads=[(9.5, DeliveryMode.BAG_LOAD), (7, DeliveryMode.CRANE_PALLET)])
    first = compute_load(tour)
    assert compute_load(tour) == first
    assert len(tour.stops) == 2


def test_segment_split():
    load = compute_load(_tour(14, 10, loads=[(18, DeliveryMode.BAG_LOAD)]))
    assert load.motor_unit_load_t == Decimal("14")
    assert load.trailer_load_t == Decimal("4")

    solo = compute_load(_tour(14, loads=[(18, DeliveryMode.BAG_LOAD)]))
    assert solo.trailer_load_t == 0


def test_trailer_capacity_ignored_without_trailer_config():
    tour = _tour(14)
    tour.trailer_capacity_t = Decimal("10")
    assert tour.combined_capacity_t == Decimal("14")


def test_summarize_tours():
    stats = summarize_tours([
        _tour(14, loads=[(7, DeliveryMode.BAG_LOAD)]),
        _tour(14, loads=[(16, DeliveryMode.BAG_LOAD), (1, DeliveryMode.BAG_LOAD)]),
    ])
    assert stats.tour_count == 2
    assert stats.stop_count == 3
    assert stats.total_tonnage_t == Decimal("24")
    assert stats.overloaded_tour_count == 1
    assert stats.average_utilization_percent == round((50.0 + 121.4) / 2, 1)
    assert summarize_tours([]).average_utilization_percent == 0.0


def test_motor_unit_only_on_trailer_tour_warns():
    compat = check_compatibility(_tour(14, 10), DeliveryMode.MOTOR_UNIT_ONLY)
    assert compat.allowed is True
    assert compat.warning == TRAILER_NOT_USABLE
    assert compat.capacity_ceiling_t == Decimal("14")


def test_motor_unit_only_on_solo_tour_is_clean():
    compat = check_compatibility(_tour(14), DeliveryMode.MOTOR_UNIT_ONLY)
    assert compat.allowed is True
    assert compat.message is None


def test_pickup_at_source_is_excluded():
    compat = check_compatibility(_tour(14, 10), DeliveryMode.PICKUP_AT_SOURCE)
    assert compat.allowed is False
    assert compat.reason == PICKUP_NOT_PLANNED


def test_other_modes_allowed():
    for mode in (DeliveryMode.MOTOR_UNIT_WITH_TRAILER, DeliveryMode.CRANE_PALLET, DeliveryMode.BAG_LOAD):
        compat = check_compatibility(_tour(14, 10), mode)
        assert compat.allowed is True
        assert compat.message is None
        assert compat.capacity_ceiling_t == Decimal("24")


def test_review_tour_caps_effective_capacity():
    tour = _tour(14, 10, loads=[(8, DeliveryMode.BAG_LOAD), (5, DeliveryMode.MOTOR_UNIT_ONLY)])
    review = review_tour(tour)
    assert review.effective_capacity_t == Decimal("14")
    assert [f.order_id for f in review.findings] == [2]
    assert review.findings[0].compatibility.warning == TRAILER_NOT_USABLE


def test_review_clean_tour():
    review = review_tour(_tour(14, 10, loads=[(8, DeliveryMode.BAG_LOAD)]))
    assert review.effective_capacity_t == Decimal("24")
    assert review.findings == []


def test_split_capacity():
    motor, trailer = Decimal("14"), Decimal("10")
    assert split_capacity(VehicleConfig.MOTOR_UNIT, None, motor, trailer) == (Decimal("14"), None)
    assert split_capacity(VehicleConfig.MOTOR_UNIT, Decimal("12"), motor, trailer) == (Decimal("12"), None)
    assert split_capacity(VehicleConfig.MOTOR_UNIT_WITH_TRAILER, None, motor, trailer) == (motor, trailer)
    assert split_capacity(VehicleConfig.MOTOR_UNIT_WITH_TRAILER, Decimal("26"), motor, trailer) == (
        Decimal("14"), Decimal("12"),
    )
