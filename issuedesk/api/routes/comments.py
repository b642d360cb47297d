from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from issuedesk.api import deps
from issuedesk.api.responses import BAD_REQUEST, NOT_FOUND
from issuedesk.models import User
from issuedesk.schemas.comment import CommentCreate, CommentOut
from issuedesk.services import issues as issue_service
from issuedesk.services.audit import AuditEvent, audit_log

router = APIRouter(tags=["comments"])


@router.get(
    "/issues/{issue_id}/comments", response_model=list[CommentOut], responses=NOT_FOUND
)
def list_issue_comments(
    issue_id: int,
    db: Session = Depends(deps.get_db),
    _: User = Depends(deps.get_current_user),
):
    issue = issue_service.get_issue_or_404(db, issue_id)
    return issue_service.list_comments(db, issue.id)


@router.post(
    "/issues/{issue_id}/comments",
    response_model=CommentOut,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST | NOT_FOUND,
)
def add_issue_comment(
    issue_id: int,
    payload: CommentCreate,
    request: Request,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    issue = issue_service.get_issue_or_404(db, issue_id)
    comment = issue_service.add_comment(db, issue, payload.content, current_user.id)
    audit_log(
        AuditEvent.comment_add,
        current_user.id,
        request.client.host if request.client else None,
        comment_id=comment.id,
        issue_id=issue_id,
    )
    return comment
