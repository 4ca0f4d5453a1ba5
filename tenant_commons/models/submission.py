"""
Incident submission models.
A submission is an anonymous report; evidence files are tracked alongside it.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlmodel import Field, SQLModel

from tenant_commons.models.account import utcnow


class IssueType(str, Enum):
    """Kind of incident being reported."""

    HARASSMENT = "Harassment"
    UNSAFE_CONDITIONS = "Unsafe Conditions"
    MAINTENANCE_NEGLECT = "Maintenance Neglect"
    DISCRIMINATION = "Discrimination"
    PRIVACY_VIOLATIONS = "Privacy Violations"
    RETALIATION = "Retaliation"
    OTHER = "Other"


class SubmissionStatus(str, Enum):
    """Triage state set by admins."""

    NEW = "new"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"


class Submission(SQLModel, table=True):
    """
    Incident report.

    The reference id is handed back to the submitter so they can follow up
    without an account.
    """

    __tablename__ = "submissions"  # type: ignore

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    reference_id: str = Field(unique=True, index=True, max_length=64)

    # Reporter
    full_name: Optional[str] = Field(default=None, max_length=200)
    contact_info: Optional[str] = Field(default=None, max_length=200)
    allow_followup: bool = Field(default=False)

    # Incident
    property_name: str = Field(max_length=200)
    unit_number: str = Field(max_length=50)
    issue_type: IssueType
    incident_dates: str = Field(max_length=200)
    description: str = Field(max_length=5000)
    location_notes: Optional[str] = Field(default=None, max_length=500)

    status: SubmissionStatus = Field(default=SubmissionStatus.NEW, index=True)
    created_at: datetime = Field(default_factory=utcnow)


class SubmissionFile(SQLModel, table=True):
    """Evidence file stored for a submission."""

    __tablename__ = "submission_files"  # type: ignore

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    submission_id: str = Field(foreign_key="submissions.id", index=True)
    file_name: str = Field(max_length=255)
    file_path: str
    file_size: int
    file_type: str = Field(max_length=120)
    created_at: datetime = Field(default_factory=utcnow)
