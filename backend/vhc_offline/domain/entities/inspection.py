"""Domain entity: inspection categories and their overall status."""

from enum import Enum


class InspectionStatus(str, Enum):
    """Overall condition derived from a form's field values."""

    PASS = "pass"
    ADVISORY = "advisory"
    FAIL = "fail"


class InspectionCategory(str, Enum):
    """Inspection forms that derive an overall status."""

    BRAKES = "brakes"
    EXHAUST = "exhaust"
    AIR_CONDITIONING = "air-conditioning"
    SUMMER_CHECKS = "summer-checks"
    WINTER_CHECKS = "winter-checks"
    SERVICE = "service"
    TYRES = "tyres"


class ServiceInterval(str, Enum):
    EARLY = "early"
    DUE = "due"
    OVERDUE = "overdue"
