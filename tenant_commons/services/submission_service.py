"""
Submission service for incident reports and their evidence.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence, Tuple

from sqlmodel import Session, col, select

from tenant_commons.core.config import settings
from tenant_commons.core.errors import AccessDenied, DenialReason, ValidationFailed
from tenant_commons.core.logging import get_logger
from tenant_commons.models.account import Account
from tenant_commons.models.submission import Submission, SubmissionFile, SubmissionStatus
from tenant_commons.schemas.submission import SubmissionCreate
from tenant_commons.services.access_policy import Action, enforce, enforce_on
from tenant_commons.services.evidence_storage import EvidenceStorage

logger = get_logger(__name__)

ACCEPTED_FILE_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "video/mp4",
    "video/quicktime",
    "video/webm",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "audio/mpeg",
    "audio/wav",
    "audio/mp4",
)


@dataclass
class EvidenceUpload:
    """One uploaded file, as received from the transport layer."""

    filename: str
    content_type: str
    size: int
    stream: BinaryIO


def check_evidence(uploads: Sequence[EvidenceUpload], max_size: Optional[int] = None) -> None:
    """
    Gate evidence files by type and size.

    Raises:
        ValidationFailed: naming the first offending file
    """
    limit = max_size if max_size is not None else settings.MAX_EVIDENCE_FILE_SIZE
    for upload in uploads:
        if upload.size > limit:
            raise ValidationFailed(
                "files",
                f'File "{upload.filename}" exceeds the {limit // (1024 * 1024)}MB limit',
            )
        if upload.content_type not in ACCEPTED_FILE_TYPES:
            raise ValidationFailed("files", f'File "{upload.filename}" has an unsupported format')


def make_reference_id(submission_id: str, now: Optional[datetime] = None) -> str:
    """Human-readable handle, e.g. ``JWC-20240131-1a2b3c4d``."""
    day = (now or datetime.now(timezone.utc)).strftime("%Y%m%d")
    return f"{settings.SUBMISSION_REFERENCE_PREFIX}-{day}-{submission_id[:8]}"


class SubmissionService:
    """
    Service for incident intake and admin triage.
    Coordinates evidence storage with the database.
    """

    def __init__(self, session: Session, storage: EvidenceStorage):
        self.session = session
        self.storage = storage

    def create_submission(
        self,
        data: SubmissionCreate,
        uploads: Sequence[EvidenceUpload] = (),
        actor: Optional[Account] = None,
    ) -> tuple[Submission, List[SubmissionFile]]:
        """
        Record an incident report with its evidence.

        Every file is checked before anything is written. Stored files are
        removed again if the database write fails.

        Returns:
            The submission and its file records
        """
        enforce(actor, Action.SUBMIT_INCIDENT)
        check_evidence(uploads)

        submission = Submission(
            reference_id="",
            full_name=data.full_name,
            property_name=data.property_name,
            unit_number=data.unit_number,
            contact_info=data.contact_info,
            issue_type=data.issue_type,
            incident_dates=data.incident_dates,
            description=data.description,
            location_notes=data.location_notes,
            allow_followup=data.allow_followup,
        )
        submission.reference_id = make_reference_id(submission.id)

        files: List[SubmissionFile] = []
        try:
            self.session.add(submission)
            for upload in uploads:
                stored_path = self.storage.save(submission.id, upload.filename, upload.stream)
                record = SubmissionFile(
                    submission_id=submission.id,
                    file_name=upload.filename,
                    file_path=stored_path,
                    file_size=upload.size,
                    file_type=upload.content_type,
                )
                self.session.add(record)
                files.append(record)
            self.session.commit()
        except Exception as e:
            logger.error(f"Failed to record submission {submission.reference_id}: {e}")
            self.session.rollback()
            self.storage.delete_submission_files(submission.id)
            raise

        self.session.refresh(submission)
        for record in files:
            self.session.refresh(record)
        logger.info(
            f"Submission {submission.reference_id} received "
            f"({submission.issue_type.value}, {len(files)} evidence files)"
        )
        return submission, files

    def list_submissions(
        self,
        actor: Optional[Account],
        status: Optional[SubmissionStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Submission]:
        """List submissions, newest first. Admin only."""
        enforce(actor, Action.MANAGE_SUBMISSIONS)
        statement = select(Submission).order_by(col(Submission.created_at).desc())
        if status is not None:
            statement = statement.where(Submission.status == status)
        statement = statement.offset(offset).limit(limit)
        return list(self.session.exec(statement).all())

    def get_submission(self, actor: Optional[Account], submission_id: str) -> tuple[Submission, List[SubmissionFile]]:
        """Fetch one submission with its files. Admin only."""
        submission = enforce_on(actor, Action.MANAGE_SUBMISSIONS, self.session.get(Submission, submission_id))
        return submission, self.get_files(submission_id)

    def get_files(self, submission_id: str) -> List[SubmissionFile]:
        statement = (
            select(SubmissionFile)
            .where(SubmissionFile.submission_id == submission_id)
            .order_by(col(SubmissionFile.created_at))
        )
        return list(self.session.exec(statement).all())

    def get_evidence(self, actor: Optional[Account], submission_id: str, file_id: str) -> Tuple[SubmissionFile, Path]:
        """
        Locate one evidence file for download. Admin only.

        A file that belongs to another submission, or whose bytes are gone
        from storage, is reported as not found.
        """
        self.get_submission(actor, submission_id)
        record = self.session.get(SubmissionFile, file_id)
        if record is None or record.submission_id != submission_id:
            raise AccessDenied(DenialReason.RESOURCE_NOT_FOUND)

        path = self.storage.resolve(record.file_path)
        if not path.is_file():
            logger.error(f"Evidence file {file_id} is missing from storage: {record.file_path}")
            raise AccessDenied(DenialReason.RESOURCE_NOT_FOUND)
        return record, path

    def update_status(
        self,
        actor: Optional[Account],
        submission_id: str,
        status: SubmissionStatus,
    ) -> Submission:
        """Move a submission through triage. Admin only."""
        submission, _ = self.get_submission(actor, submission_id)
        if submission.status == status:
            return submission

        submission.status = status
        self.session.add(submission)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(submission)
        logger.info(f"Submission {submission.reference_id} marked {status.value}")
        return submission
