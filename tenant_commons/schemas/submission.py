"""
Incident submission schemas.
"""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, StringConstraints, field_validator

from tenant_commons.models.submission import IssueType, SubmissionStatus


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class SubmissionCreate(BaseModel):
    """Validated incident report as typed by the submitter."""

    full_name: Optional[str] = None
    property_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
    unit_number: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
    contact_info: Optional[Annotated[str, StringConstraints(max_length=200)]] = None
    issue_type: IssueType
    incident_dates: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
    description: Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=5000)]
    location_notes: Optional[Annotated[str, StringConstraints(max_length=500)]] = None
    truthfulness_affirmation: bool
    allow_followup: bool = False

    @field_validator("full_name", "contact_info", "location_notes", mode="before")
    @classmethod
    def empty_strings_are_missing(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @field_validator("truthfulness_affirmation")
    @classmethod
    def must_affirm(cls, v: bool) -> bool:
        if not v:
            raise ValueError("You must affirm that the information is accurate")
        return v


class SubmissionReceipt(BaseModel):
    """What the submitter gets back."""

    submission_id: str
    reference_id: str
    evidence_count: int


class SubmissionFileResponse(BaseModel):
    id: str
    file_name: str
    file_size: int
    file_type: str
    created_at: datetime

    model_config = {"from_attributes": True}


class SubmissionResponse(BaseModel):
    id: str
    reference_id: str
    full_name: Optional[str] = None
    contact_info: Optional[str] = None
    allow_followup: bool
    property_name: str
    unit_number: str
    issue_type: IssueType
    incident_dates: str
    description: str
    location_notes: Optional[str] = None
    status: SubmissionStatus
    created_at: datetime
    files: List[SubmissionFileResponse] = []

    model_config = {"from_attributes": True}


class SubmissionStatusUpdate(BaseModel):
    status: SubmissionStatus


class SiteInfoResponse(BaseModel):
    """Public information the intake form needs."""

    name: str
    version: str
    issue_types: List[str]
    accepted_file_types: List[str]
    max_file_size: int
