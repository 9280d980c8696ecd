"""Unit tests for the per-category overall-condition rules."""

import pytest

from vhc_offline.domain.condition_rules import (
    BRAKES,
    Condition,
    EXHAUST,
    SERVICE,
    apply_derived_fields,
    assess,
    cabin_filter_replacement_needed,
    compute_service_interval,
    minimum_tread_depth,
    tyre_photo_required,
)
from vhc_offline.domain.entities import InspectionCategory, InspectionStatus, ServiceInterval


# ── Brakes ──


def test_brakes_all_good_is_pass():
    fields = {
        "frontBrakes": {"padThickness": "good", "discCondition": "good", "fluidLevel": "good"},
        "rearBrakes": {"padThickness": "good", "discCondition": "good", "fluidLevel": "good"},
        "handbrake": {"effectiveness": "good"},
    }
    assert assess("brakes", fields) is InspectionStatus.PASS


def test_brakes_fair_front_pads_is_advisory():
    fields = {"frontBrakes": {"padThickness": "fair"}, "rearBrakes": {"padThickness": "good"}}
    assert assess(InspectionCategory.BRAKES, fields) is InspectionStatus.ADVISORY


def test_brakes_fail_wins_over_advisory():
    fields = {
        "frontBrakes": {"padThickness": "fair"},
        "rearBrakes": {"discCondition": "cracked"},
    }
    assert assess("brakes", fields) is InspectionStatus.FAIL
    assert BRAKES.explain(fields) == ["rearBrakes.discCondition is cracked"]


def test_missing_sections_never_match():
    assert assess("brakes", {}) is InspectionStatus.PASS
    assert assess("brakes", {"frontBrakes": None}) is InspectionStatus.PASS
    assert assess("brakes", {"frontBrakes": "poor"}) is InspectionStatus.PASS


# ── Exhaust ──


@pytest.mark.parametrize(
    ("section", "field", "value", "status"),
    [
        ("visualInspection", "damage", "holes", InspectionStatus.FAIL),
        ("visualInspection", "damage", "major_damage", InspectionStatus.FAIL),
        ("visualInspection", "mounting", "missing", InspectionStatus.FAIL),
        ("emissionsTest", "smokeColor", "blue", InspectionStatus.FAIL),
        ("visualInspection", "mounting", "loose", InspectionStatus.ADVISORY),
        ("soundTest", "idleNoise", "loud", InspectionStatus.ADVISORY),
        ("emissionsTest", "smokeVolume", "moderate", InspectionStatus.ADVISORY),
        ("emissionsTest", "smokeColor", "white", InspectionStatus.PASS),
    ],
)
def test_exhaust_single_field(section, field, value, status):
    assert EXHAUST.evaluate({section: {field: value}}) is status


# ── Air conditioning ──


def test_ac_weak_function_is_advisory():
    fields = {"systemOperation": {"acFunction": "weak"}, "visualInspection": {"belts": "good"}}
    assert assess("air-conditioning", fields) is InspectionStatus.ADVISORY


def test_ac_empty_refrigerant_is_fail():
    fields = {"visualInspection": {"refrigerantLevel": "empty"}}
    assert assess("air-conditioning", fields) is InspectionStatus.FAIL


@pytest.mark.parametrize(
    ("condition", "needed"),
    [("very_dirty", True), ("blocked", True), ("missing", True), ("dirty", False), ("clean", False), (None, False)],
)
def test_cabin_filter_replacement(condition, needed):
    assert cabin_filter_replacement_needed(condition) is needed


def test_ac_derived_replacement_flag():
    derived = apply_derived_fields(
        InspectionCategory.AIR_CONDITIONING, {"cabinFilter": {"condition": "blocked"}}
    )
    assert derived["cabinFilter"]["replacementNeeded"] is True


# ── Summer / winter ──


def test_summer_bulging_rear_tyre_is_fail():
    fields = {"tyreCondition": {"rearTyres": "bulging", "pressureCheck": "some_low"}}
    assert assess("summer-checks", fields) is InspectionStatus.FAIL


def test_summer_low_coolant_is_advisory():
    assert assess("summer-checks", {"coolingSystem": {"coolantLevel": "low"}}) is InspectionStatus.ADVISORY


def test_winter_battery_voltage_below_12v_is_fail():
    fields = {"batterySystem": {"voltageTest": "below_12_0v", "batteryCondition": "good"}}
    assert assess("winter-checks", fields) is InspectionStatus.FAIL


def test_winter_missing_emergency_kit_is_advisory():
    assert assess("winter-checks", {"emergencyPrep": {"emergencyKit": "missing"}}) is InspectionStatus.ADVISORY


# ── Service ──


@pytest.mark.parametrize(
    ("mileage", "last", "interval", "next_due"),
    [
        (50_000, 45_000, ServiceInterval.EARLY, 57_000),
        (50_000, 40_000, ServiceInterval.DUE, 52_000),
        (50_000, 38_000, ServiceInterval.OVERDUE, 62_000),
        (50_000, 35_000, ServiceInterval.OVERDUE, 59_000),
    ],
)
def test_compute_service_interval(mileage, last, interval, next_due):
    assert compute_service_interval(mileage, last) == (interval, next_due)


def test_compute_service_interval_needs_both_readings():
    assert compute_service_interval(0, 40_000) is None
    assert compute_service_interval(50_000, 0) is None


def test_overdue_service_derived_from_mileage_is_advisory():
    fields = {"serviceDetails": {"mileage": 60_000, "lastServiceMileage": 45_000}}

    derived = apply_derived_fields(InspectionCategory.SERVICE, fields)

    assert derived["serviceDetails"]["serviceInterval"] == "overdue"
    assert fields["serviceDetails"].get("serviceInterval") is None
    assert assess("service", fields) is InspectionStatus.ADVISORY


def test_service_broken_springs_is_fail():
    assert SERVICE.evaluate({"suspension": {"springs": "broken"}}) is InspectionStatus.FAIL


# ── Tyres ──


def _tyre(inner, middle, outer):
    return {"innerTread": inner, "middleTread": middle, "outerTread": outer}


@pytest.mark.parametrize(
    ("depths", "status"),
    [
        ((6, 6, 5), InspectionStatus.PASS),
        ((6, 3, 5), InspectionStatus.ADVISORY),
        ((6, 3.5, 5), InspectionStatus.PASS),
        ((2, 6, 6), InspectionStatus.FAIL),
        ((1.6, 6, 6), InspectionStatus.FAIL),
    ],
)
def test_tyres_status_follows_minimum_tread(depths, status):
    fields = {"tyres": [_tyre(7, 7, 7), _tyre(*depths)]}
    assert assess("tyres", fields) is status


def test_tyres_without_readings_pass():
    assert assess("tyres", {"tyres": [{"position": "front-left"}]}) is InspectionStatus.PASS
    assert minimum_tread_depth([]) is None


def test_tyre_photo_required_at_or_below_3mm():
    assert tyre_photo_required(4, 3, 5) is True
    assert tyre_photo_required(4, 3.1, 5) is False


def test_tyre_derived_photo_flag():
    derived = apply_derived_fields(InspectionCategory.TYRES, {"tyres": [_tyre(2, 5, 5), _tyre(5, 5, 5)]})
    assert [t["photoRequired"] for t in derived["tyres"]] == [True, False]


def test_unknown_category_raises():
    with pytest.raises(ValueError):
        assess("bodywork", {})


# ── Conditions ──


def test_condition_subclass_must_describe_itself():
    class AlwaysFails(Condition):
        def __call__(self, fields):
            return True

    with pytest.raises(TypeError):
        AlwaysFails()
    with pytest.raises(TypeError):
        Condition()
