"""
Incident submission intake.
Anyone may submit; evidence files are type- and size-gated before anything
is stored.
"""

from typing import List, Optional

from fastapi import APIRouter, File, Form, UploadFile, status
from pydantic import ValidationError

from tenant_commons.api.deps import EvidenceStorageDep, PublicActorDep, SessionDep
from tenant_commons.core.errors import ValidationFailed
from tenant_commons.schemas.submission import SubmissionCreate, SubmissionReceipt
from tenant_commons.services.submission_service import EvidenceUpload, SubmissionService

router = APIRouter(prefix="/submissions", tags=["submissions"])


def _upload_size(upload: UploadFile) -> int:
    upload.file.seek(0, 2)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


@router.post("", response_model=SubmissionReceipt, status_code=status.HTTP_201_CREATED)
def create_submission(
    actor: PublicActorDep,
    session: SessionDep,
    storage: EvidenceStorageDep,
    property_name: str = Form(""),
    unit_number: str = Form(""),
    issue_type: str = Form(""),
    incident_dates: str = Form(""),
    description: str = Form(""),
    full_name: Optional[str] = Form(None),
    contact_info: Optional[str] = Form(None),
    location_notes: Optional[str] = Form(None),
    truthfulness_affirmation: bool = Form(False),
    allow_followup: bool = Form(False),
    files: List[UploadFile] = File(default=[]),
) -> SubmissionReceipt:
    """
    Record an incident report.

    Returns:
        The reference id the submitter should keep for follow-up
    """
    try:
        data = SubmissionCreate(
            full_name=full_name,
            property_name=property_name,
            unit_number=unit_number,
            contact_info=contact_info,
            issue_type=issue_type,
            incident_dates=incident_dates,
            description=description,
            location_notes=location_notes,
            truthfulness_affirmation=truthfulness_affirmation,
            allow_followup=allow_followup,
        )
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "form"
        raise ValidationFailed(field, first["msg"]) from e

    uploads = [
        EvidenceUpload(
            filename=f.filename or "evidence",
            content_type=f.content_type or "application/octet-stream",
            size=_upload_size(f),
            stream=f.file,
        )
        for f in files
    ]

    submission, stored = SubmissionService(session, storage).create_submission(data, uploads, actor=actor)
    return SubmissionReceipt(
        submission_id=submission.id,
        reference_id=submission.reference_id,
        evidence_count=len(stored),
    )
