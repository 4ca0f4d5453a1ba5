"""
Evidence storage for files attached to incident submissions.
Files live on local disk under ``<FILE_STORAGE_PATH>/evidence/<submission_id>/``.
"""

import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Optional

from tenant_commons.core.config import settings
from tenant_commons.core.logging import get_logger

logger = get_logger(__name__)

SAFE_FILENAME_CHARS = set('abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-')


class EvidenceStorage:
    """
    Writes and removes evidence files.

    Paths handed back are relative to the storage root so rows stay valid if
    the root moves.
    """

    def __init__(self, base_path: Optional[Path] = None):
        self.base_path = Path(base_path or settings.FILE_STORAGE_PATH)
        self.evidence_path = self.base_path / 'evidence'
        self.evidence_path.mkdir(parents=True, exist_ok=True)

    def save(self, submission_id: str, filename: str, source: BinaryIO) -> str:
        """
        Save one evidence file.

        Args:
            submission_id: Submission the file belongs to
            filename: Name supplied by the uploader
            source: Readable binary stream positioned at the start

        Returns:
            Path of the stored file, relative to the storage root
        """
        target_dir = self.evidence_path / submission_id
        target_dir.mkdir(parents=True, exist_ok=True)

        # Timestamp prefix keeps same-named uploads apart
        timestamp = datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S%f')
        file_path = target_dir / f"{timestamp}-{self.sanitize_filename(filename)}"

        with file_path.open('wb') as buffer:
            shutil.copyfileobj(source, buffer)

        logger.info(f"Stored evidence file {file_path.name} for submission {submission_id}")
        return str(file_path.relative_to(self.base_path))

    def resolve(self, relative_path: str) -> Path:
        """Absolute location of a stored file."""
        return self.base_path / relative_path

    def delete_submission_files(self, submission_id: str) -> None:
        """Remove every stored file of a submission."""
        target_dir = self.evidence_path / submission_id
        if target_dir.exists():
            shutil.rmtree(target_dir)
            logger.info(f"Deleted evidence directory: {target_dir}")

    @staticmethod
    def sanitize_filename(filename: str) -> str:
        """
        Sanitize a filename to prevent path traversal attacks.

        Args:
            filename: The original filename

        Returns:
            A safe filename
        """
        filename = Path(filename or "").name
        sanitized = ''.join(c if c in SAFE_FILENAME_CHARS else '_' for c in filename)
        if not sanitized.strip('._'):
            sanitized = "evidence"
        if '.' not in sanitized:
            sanitized = f"{sanitized}.unknown"
        return sanitized


_storage: Optional[EvidenceStorage] = None


def get_evidence_storage() -> EvidenceStorage:
    """Shared storage instance, created on first use."""
    global _storage
    if _storage is None:
        _storage = EvidenceStorage()
    return _storage
