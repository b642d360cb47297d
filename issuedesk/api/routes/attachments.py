from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from issuedesk.api import deps
from issuedesk.api.responses import BAD_REQUEST, NOT_FOUND, TOO_LARGE
from issuedesk.core.config import settings
from issuedesk.models import User
from issuedesk.schemas.attachment import AttachmentOut
from issuedesk.services import issues as issue_service
from issuedesk.services.audit import AuditEvent, audit_log
from issuedesk.services.files import FileStore

router = APIRouter(tags=["attachments"])


@router.get(
    "/issues/{issue_id}/attachments",
    response_model=list[AttachmentOut],
    responses=NOT_FOUND,
)
def list_issue_attachments(
    issue_id: int,
    db: Session = Depends(deps.get_db),
    _: User = Depends(deps.get_current_user),
):
    issue = issue_service.get_issue_or_404(db, issue_id)
    return issue_service.list_attachments(db, issue.id)


@router.post(
    "/issues/{issue_id}/attachments",
    response_model=AttachmentOut,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST | NOT_FOUND | TOO_LARGE,
)
def upload_attachment(
    issue_id: int,
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(deps.get_db),
    files: FileStore = Depends(deps.get_file_store),
    current_user: User = Depends(deps.get_current_user),
):
    issue = issue_service.get_issue_or_404(db, issue_id)
    attachment = issue_service.add_attachment(
        db,
        files,
        issue,
        file,
        current_user.id,
        allowed_types=settings.upload_types,
        max_bytes=settings.max_upload_bytes,
    )
    audit_log(
        AuditEvent.attachment_upload,
        current_user.id,
        request.client.host if request.client else None,
        attachment_id=attachment.id,
        issue_id=issue_id,
        size=attachment.size,
    )
    return attachment


@router.get("/download/{file_id}", response_class=FileResponse, responses=NOT_FOUND)
def download_attachment(
    file_id: int,
    db: Session = Depends(deps.get_db),
    files: FileStore = Depends(deps.get_file_store),
    _: User = Depends(deps.get_current_user),
):
    attachment = issue_service.get_attachment_or_404(db, files, file_id)
    return FileResponse(
        attachment.filepath,
        media_type=attachment.content_type,
        filename=attachment.filename,
    )
