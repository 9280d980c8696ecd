"""Overall-condition decision tables, one per inspection category.

Every table is evaluated the same way: fail conditions first (any match
short-circuits to ``fail``), then advisory conditions, otherwise ``pass``.
Evaluation is a pure function of the current field values.

Fields are the nested mapping a form submits, e.g.::

    {"frontBrakes": {"padThickness": "fair", ...}, "handbrake": {...}}

Conditions address them with a dotted path (``"frontBrakes.padThickness"``).
A missing section or field never matches.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from vhc_offline.domain.entities import (
    InspectionCategory,
    InspectionStatus,
    ServiceInterval,
)

SERVICE_INTERVAL_MILES = 12_000
SERVICE_DUE_MILES = 10_000
TYRE_FAIL_MAX_MM = 2.0
TYRE_ADVISORY_MAX_MM = 3.0
TYRE_PHOTO_MAX_MM = 3.0

_TREAD_FIELDS = ("innerTread", "middleTread", "outerTread")


def _lookup(fields: Mapping[str, Any], path: str) -> Any:
    value: Any = fields
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


class Condition(ABC):
    """A single predicate over the form's fields."""

    @abstractmethod
    def __call__(self, fields: Mapping[str, Any]) -> bool:
        ...

    @abstractmethod
    def describe(self) -> str:
        ...


@dataclass(frozen=True)
class FieldIs(Condition):
    path: str
    values: frozenset[str]

    def __call__(self, fields: Mapping[str, Any]) -> bool:
        value = _lookup(fields, self.path)
        return isinstance(value, str) and value in self.values

    def describe(self) -> str:
        return f"{self.path} is {' or '.join(sorted(self.values))}"


@dataclass(frozen=True)
class MinTreadAtMost(Condition):
    """Matches when the shallowest tread reading over all tyres is <= limit_mm."""

    limit_mm: float

    def __call__(self, fields: Mapping[str, Any]) -> bool:
        depth = minimum_tread_depth(fields.get("tyres") or [])
        return depth is not None and depth <= self.limit_mm

    def describe(self) -> str:
        return f"minimum tread depth <= {self.limit_mm:g}mm"


def field_is(path: str, *values: str) -> FieldIs:
    return FieldIs(path, frozenset(values))


@dataclass(frozen=True)
class DecisionTable:
    """Ordered fail and advisory conditions for one inspection category."""

    category: InspectionCategory
    fail_conditions: tuple[Condition, ...]
    advisory_conditions: tuple[Condition, ...] = ()

    def evaluate(self, fields: Mapping[str, Any]) -> InspectionStatus:
        if any(condition(fields) for condition in self.fail_conditions):
            return InspectionStatus.FAIL
        if any(condition(fields) for condition in self.advisory_conditions):
            return InspectionStatus.ADVISORY
        return InspectionStatus.PASS

    def explain(self, fields: Mapping[str, Any]) -> list[str]:
        """Describe the conditions behind the status (fail ones if any, else advisory)."""
        failing = [c.describe() for c in self.fail_conditions if c(fields)]
        if failing:
            return failing
        return [c.describe() for c in self.advisory_conditions if c(fields)]


# ── Decision tables ─────────────────────────────────────────────────

BRAKES = DecisionTable(
    InspectionCategory.BRAKES,
    fail_conditions=(
        field_is("frontBrakes.padThickness", "poor"),
        field_is("rearBrakes.padThickness", "poor"),
        field_is("frontBrakes.discCondition", "cracked"),
        field_is("rearBrakes.discCondition", "cracked"),
        field_is("frontBrakes.fluidLevel", "contaminated"),
        field_is("rearBrakes.fluidLevel", "contaminated"),
        field_is("handbrake.effectiveness", "poor"),
    ),
    advisory_conditions=(
        field_is("frontBrakes.padThickness", "fair"),
        field_is("rearBrakes.padThickness", "fair"),
        field_is("frontBrakes.discCondition", "scored"),
        field_is("rearBrakes.discCondition", "scored"),
        field_is("handbrake.effectiveness", "adjustment_needed"),
    ),
)

EXHAUST = DecisionTable(
    InspectionCategory.EXHAUST,
    fail_conditions=(
        field_is("visualInspection.damage", "holes", "major_damage"),
        field_is("visualInspection.mounting", "damaged", "missing"),
        field_is("visualInspection.leaks", "significant"),
        field_is("emissionsTest.smokeColor", "black", "blue"),
        field_is("emissionsTest.smokeVolume", "heavy"),
        field_is("soundTest.blowingSound", "significant"),
    ),
    advisory_conditions=(
        field_is("visualInspection.corrosion", "significant"),
        field_is("visualInspection.mounting", "loose"),
        field_is("emissionsTest.smokeVolume", "moderate"),
        field_is("soundTest.rattling", "noticeable"),
        field_is("soundTest.idleNoise", "loud"),
    ),
)

AIR_CONDITIONING = DecisionTable(
    InspectionCategory.AIR_CONDITIONING,
    fail_conditions=(
        field_is("systemOperation.acFunction", "not_working"),
        field_is("systemOperation.coolingEffectiveness", "none"),
        field_is("visualInspection.belts", "missing", "cracked"),
        field_is("visualInspection.hoses", "leaking"),
        field_is("visualInspection.condenser", "damaged"),
        field_is("visualInspection.refrigerantLevel", "empty"),
    ),
    advisory_conditions=(
        field_is("systemOperation.acFunction", "weak"),
        field_is("systemOperation.coolingEffectiveness", "poor"),
        field_is("visualInspection.belts", "worn"),
        field_is("visualInspection.condenser", "dirty"),
        field_is("cabinFilter.condition", "very_dirty"),
        field_is("controls.temperatureControl", "intermittent"),
    ),
)

SUMMER_CHECKS = DecisionTable(
    InspectionCategory.SUMMER_CHECKS,
    fail_conditions=(
        field_is("coolingSystem.coolantLevel", "empty"),
        field_is("coolingSystem.radiatorCondition", "leaking"),
        field_is("coolingSystem.fanOperation", "not_working"),
        field_is("tyreCondition.frontTyres", "bulging"),
        field_is("tyreCondition.rearTyres", "bulging"),
        field_is("fluids.brakeFluid", "contaminated"),
        field_is("electrical.batteryCondition", "failing"),
    ),
    advisory_conditions=(
        field_is("coolingSystem.coolantLevel", "low"),
        field_is("airConditioning.performance", "poor"),
        field_is("tyreCondition.pressureCheck", "some_low"),
        field_is("fluids.engineOil", "dirty"),
        field_is("electrical.lightsFunction", "some_out"),
    ),
)

WINTER_CHECKS = DecisionTable(
    InspectionCategory.WINTER_CHECKS,
    fail_conditions=(
        field_is("batterySystem.batteryCondition", "failing"),
        field_is("batterySystem.voltageTest", "below_12_0v"),
        field_is("heatingSystem.heaterOperation", "not_working"),
        field_is("coldWeatherPrep.coolantLevel", "empty"),
        field_is("tyreAssessment.treadDepth", "below_1_6mm"),
    ),
    advisory_conditions=(
        field_is("batterySystem.batteryCondition", "poor"),
        field_is("heatingSystem.heaterOperation", "poor"),
        field_is("coldWeatherPrep.antifreezeConcentration", "weak"),
        field_is("tyreAssessment.treadDepth", "1_6_to_3mm"),
        field_is("emergencyPrep.emergencyKit", "missing"),
    ),
)

SERVICE = DecisionTable(
    InspectionCategory.SERVICE,
    fail_conditions=(
        field_is("engineService.oilLevel", "empty"),
        field_is("engineService.oilCondition", "metallic"),
        field_is("fluidChecks.brakeFluid", "contaminated"),
        field_is("beltsAndHoses.brakeHoses", "leaking"),
        field_is("suspension.springs", "broken"),
    ),
    advisory_conditions=(
        field_is("serviceDetails.serviceInterval", ServiceInterval.OVERDUE.value),
        field_is("engineService.oilCondition", "dirty"),
        field_is("beltsAndHoses.drivebelt", "worn"),
        field_is("suspension.frontShocks", "worn"),
    ),
)

TYRES = DecisionTable(
    InspectionCategory.TYRES,
    fail_conditions=(MinTreadAtMost(TYRE_FAIL_MAX_MM),),
    advisory_conditions=(MinTreadAtMost(TYRE_ADVISORY_MAX_MM),),
)

DECISION_TABLES: dict[InspectionCategory, DecisionTable] = {
    table.category: table
    for table in (BRAKES, EXHAUST, AIR_CONDITIONING, SUMMER_CHECKS, WINTER_CHECKS, SERVICE, TYRES)
}


# ── Derived fields ──────────────────────────────────────────────────

def minimum_tread_depth(tyres: list[Mapping[str, Any]]) -> float | None:
    """Shallowest numeric tread reading across all tyres, or None if none recorded."""
    readings = [
        float(tyre[name])
        for tyre in tyres
        if isinstance(tyre, Mapping)
        for name in _TREAD_FIELDS
        if isinstance(tyre.get(name), (int, float)) and not isinstance(tyre.get(name), bool)
    ]
    return min(readings) if readings else None


def tyre_photo_required(inner: float, middle: float, outer: float) -> bool:
    """A tread photo is required when any reading is at or below 3mm."""
    return min(inner, middle, outer) <= TYRE_PHOTO_MAX_MM


def cabin_filter_replacement_needed(condition: str | None) -> bool:
    return condition in {"very_dirty", "blocked", "missing"}


def compute_service_interval(
    mileage: int, last_service_mileage: int
) -> tuple[ServiceInterval, int] | None:
    """Classify the service interval and compute the next-service mileage.

    Returns None unless both readings are recorded (non-zero).
    """
    if not mileage or not last_service_mileage:
        return None

    since_service = mileage - last_service_mileage
    if since_service >= SERVICE_INTERVAL_MILES:
        overrun = since_service - SERVICE_INTERVAL_MILES
        return ServiceInterval.OVERDUE, mileage + (SERVICE_INTERVAL_MILES - overrun)
    if since_service >= SERVICE_DUE_MILES:
        return ServiceInterval.DUE, mileage + (SERVICE_INTERVAL_MILES - since_service)
    return ServiceInterval.EARLY, last_service_mileage + SERVICE_INTERVAL_MILES


def apply_derived_fields(
    category: InspectionCategory, fields: Mapping[str, Any]
) -> dict[str, Any]:
    """Return a copy of the fields with the category's derived values filled in."""
    derived = dict(fields)

    if category is InspectionCategory.SERVICE:
        details = derived.get("serviceDetails")
        if isinstance(details, Mapping):
            interval = compute_service_interval(
                details.get("mileage") or 0, details.get("lastServiceMileage") or 0
            )
            if interval is not None:
                derived["serviceDetails"] = {
                    **details,
                    "serviceInterval": interval[0].value,
                    "nextServiceDue": interval[1],
                }

    elif category is InspectionCategory.AIR_CONDITIONING:
        cabin_filter = derived.get("cabinFilter")
        if isinstance(cabin_filter, Mapping):
            derived["cabinFilter"] = {
                **cabin_filter,
                "replacementNeeded": cabin_filter_replacement_needed(
                    cabin_filter.get("condition")
                ),
            }

    elif category is InspectionCategory.TYRES:
        tyres = derived.get("tyres")
        if isinstance(tyres, list):
            derived["tyres"] = [_with_photo_flag(tyre) for tyre in tyres]

    return derived


def _with_photo_flag(tyre: Any) -> Any:
    if not isinstance(tyre, Mapping):
        return tyre
    readings = [tyre.get(name) for name in _TREAD_FIELDS]
    if not all(isinstance(r, (int, float)) for r in readings):
        return dict(tyre)
    return {**tyre, "photoRequired": tyre_photo_required(*readings)}


def assess(category: InspectionCategory | str, fields: Mapping[str, Any]) -> InspectionStatus:
    """Overall status for a form, after filling in its derived fields.

    Raises ValueError for an unknown category.
    """
    category = InspectionCategory(category)
    return DECISION_TABLES[category].evaluate(apply_derived_fields(category, fields))
