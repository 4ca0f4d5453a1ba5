"""
Public site information. Open to everyone, signed in or not.
"""

from fastapi import APIRouter

from tenant_commons.api.deps import PublicActorDep
from tenant_commons.core.config import settings
from tenant_commons.models.submission import IssueType
from tenant_commons.schemas.submission import SiteInfoResponse
from tenant_commons.services.access_policy import Action, enforce
from tenant_commons.services.submission_service import ACCEPTED_FILE_TYPES

router = APIRouter(tags=["site"])


@router.get("/site", response_model=SiteInfoResponse)
def site_info(actor: PublicActorDep) -> SiteInfoResponse:
    """What the incident form accepts."""
    enforce(actor, Action.VIEW_PUBLIC)
    return SiteInfoResponse(
        name=settings.PROJECT_NAME,
        version=settings.VERSION,
        issue_types=[issue.value for issue in IssueType],
        accepted_file_types=list(ACCEPTED_FILE_TYPES),
        max_file_size=settings.MAX_EVIDENCE_FILE_SIZE,
    )
