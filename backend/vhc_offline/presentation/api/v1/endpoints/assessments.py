"""Overall-condition assessment for inspection forms."""

from fastapi import APIRouter, HTTPException, status

from vhc_offline.application.schemas import AssessmentRequest, AssessmentResponse
from vhc_offline.domain.condition_rules import DECISION_TABLES, apply_derived_fields, assess
from vhc_offline.domain.entities import InspectionCategory

router = APIRouter(prefix="/assessments", tags=["Assessments"])


@router.post("/{category}", response_model=AssessmentResponse)
async def assess_form(category: str, data: AssessmentRequest) -> AssessmentResponse:
    """Derive pass / advisory / fail for a form's current field values."""
    try:
        inspection = InspectionCategory(category)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown inspection category: {category!r}",
        )

    table = DECISION_TABLES[inspection]
    fields = apply_derived_fields(inspection, data.fields)
    return AssessmentResponse(
        category=inspection,
        status=assess(inspection, data.fields),
        reasons=table.explain(fields),
        fields=fields,
    )
