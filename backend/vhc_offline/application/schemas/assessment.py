"""Pydantic DTOs for the overall-condition assessment endpoint."""

from typing import Any

from pydantic import BaseModel, Field

from vhc_offline.domain.entities import InspectionCategory, InspectionStatus


class AssessmentRequest(BaseModel):
    """The nested field mapping submitted by an inspection form."""

    fields: dict[str, Any] = Field(
        default_factory=dict,
        examples=[{"frontBrakes": {"padThickness": "fair"}, "handbrake": {"effectiveness": "good"}}],
    )


class AssessmentResponse(BaseModel):
    category: InspectionCategory
    status: InspectionStatus
    reasons: list[str] = []
    fields: dict[str, Any] = Field(
        default_factory=dict, description="Submitted fields with derived values filled in"
    )
