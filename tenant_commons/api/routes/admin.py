"""
Admin console routes: account approvals, category management and
incident triage. The policy rejects non-admins before anything is read.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status
from fastapi.responses import FileResponse

from tenant_commons.api.deps import ActorDep, EvidenceStorageDep, SessionDep
from tenant_commons.models.account import AccountStatus
from tenant_commons.models.submission import SubmissionStatus
from tenant_commons.schemas.account import AccountResponse
from tenant_commons.schemas.forum import CategoryCreate, CategoryResponse, CategoryUpdate
from tenant_commons.schemas.submission import (
    SubmissionFileResponse,
    SubmissionResponse,
    SubmissionStatusUpdate,
)
from tenant_commons.services.account_service import AccountService
from tenant_commons.services.evidence_storage import EvidenceStorage
from tenant_commons.services.forum_service import ForumService
from tenant_commons.services.submission_service import SubmissionService

router = APIRouter(prefix="/admin", tags=["admin"])


# ========== Accounts ==========

@router.get("/accounts", response_model=List[AccountResponse])
def list_accounts(
    actor: ActorDep,
    session: SessionDep,
    status: Optional[AccountStatus] = AccountStatus.PENDING,
) -> List[AccountResponse]:
    """Accounts awaiting review (or in the given status), oldest first."""
    accounts = AccountService.list_by_status(session, actor, status)
    return [AccountResponse.model_validate(a) for a in accounts]


@router.post("/accounts/{user_id}/approve", response_model=AccountResponse)
def approve_account(user_id: str, actor: ActorDep, session: SessionDep) -> AccountResponse:
    return AccountResponse.model_validate(AccountService.approve(session, actor, user_id))


@router.post("/accounts/{user_id}/reject", response_model=AccountResponse)
def reject_account(user_id: str, actor: ActorDep, session: SessionDep) -> AccountResponse:
    return AccountResponse.model_validate(AccountService.reject(session, actor, user_id))


@router.post("/accounts/{user_id}/promote", response_model=AccountResponse)
def promote_account(user_id: str, actor: ActorDep, session: SessionDep) -> AccountResponse:
    """Make the account an admin; it is approved as part of the promotion."""
    return AccountResponse.model_validate(AccountService.promote(session, actor, user_id))


@router.post("/accounts/{user_id}/demote", response_model=AccountResponse)
def demote_account(user_id: str, actor: ActorDep, session: SessionDep) -> AccountResponse:
    return AccountResponse.model_validate(AccountService.demote(session, actor, user_id))


@router.post("/accounts/{user_id}/reopen", response_model=AccountResponse)
def reopen_account(user_id: str, actor: ActorDep, session: SessionDep) -> AccountResponse:
    """Put a rejected account back in the review queue."""
    return AccountResponse.model_validate(AccountService.reopen(session, actor, user_id))


# ========== Categories ==========

@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(category_in: CategoryCreate, actor: ActorDep, session: SessionDep) -> CategoryResponse:
    category = ForumService(session).create_category(actor, category_in)
    return CategoryResponse.model_validate(category)


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    category_in: CategoryUpdate,
    actor: ActorDep,
    session: SessionDep,
) -> CategoryResponse:
    category = ForumService(session).update_category(actor, category_id, category_in)
    return CategoryResponse.model_validate(category)


# ========== Submissions ==========

@router.get("/submissions", response_model=List[SubmissionResponse])
def list_submissions(
    actor: ActorDep,
    session: SessionDep,
    storage: EvidenceStorageDep,
    status: Optional[SubmissionStatus] = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> List[SubmissionResponse]:
    service = SubmissionService(session, storage)
    submissions = service.list_submissions(actor, status=status, limit=limit, offset=offset)
    return [SubmissionResponse.model_validate(s) for s in submissions]


@router.get("/submissions/{submission_id}", response_model=SubmissionResponse)
def get_submission(
    submission_id: str,
    actor: ActorDep,
    session: SessionDep,
    storage: EvidenceStorageDep,
) -> SubmissionResponse:
    """One submission with its evidence file list."""
    submission, files = SubmissionService(session, storage).get_submission(actor, submission_id)
    response = SubmissionResponse.model_validate(submission)
    response.files = [SubmissionFileResponse.model_validate(f) for f in files]
    return response


@router.patch("/submissions/{submission_id}", response_model=SubmissionResponse)
def update_submission_status(
    submission_id: str,
    update: SubmissionStatusUpdate,
    actor: ActorDep,
    session: SessionDep,
    storage: EvidenceStorageDep,
) -> SubmissionResponse:
    service = SubmissionService(session, storage)
    submission = service.update_status(actor, submission_id, update.status)
    response = SubmissionResponse.model_validate(submission)
    response.files = [SubmissionFileResponse.model_validate(f) for f in service.get_files(submission_id)]
    return response


@router.get("/submissions/{submission_id}/files/{file_id}", response_class=FileResponse)
def download_evidence(
    submission_id: str,
    file_id: str,
    actor: ActorDep,
    session: SessionDep,
    storage: EvidenceStorageDep,
) -> FileResponse:
    """Download one evidence file under the name it was uploaded with."""
    record, path = SubmissionService(session, storage).get_evidence(actor, submission_id, file_id)
    return FileResponse(
        path=path,
        media_type=record.file_type,
        filename=EvidenceStorage.sanitize_filename(record.file_name),
    )
