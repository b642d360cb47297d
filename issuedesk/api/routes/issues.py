from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from issuedesk.api import deps
from issuedesk.api.responses import BAD_REQUEST, NOT_FOUND
from issuedesk.models import IssueCategory, IssuePriority, IssueStatus, User
from issuedesk.schemas.issue import IssueCreate, IssueFilters, IssueOut, IssueUpdate
from issuedesk.services import issues as issue_service
from issuedesk.services.audit import AuditEvent, audit_log
from issuedesk.services.files import FileStore
from issuedesk.services.filters import filter_issues

router = APIRouter(prefix="/issues", tags=["issues"])


def issue_filters(
    status_filter: list[IssueStatus] = Query(default=[], alias="status"),
    priority: list[IssuePriority] = Query(default=[]),
    category: IssueCategory | None = Query(default=None),
    team: str | None = Query(default=None, max_length=50),
    environment: str | None = Query(default=None, max_length=50),
    assignee: str | None = Query(default=None, max_length=20),
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    search: str | None = Query(default=None, max_length=200),
) -> IssueFilters:
    return IssueFilters(
        status=status_filter,
        priority=priority,
        category=category,
        team=team or None,
        environment=environment or None,
        assignee=assignee or None,
        date_from=date_from,
        date_to=date_to,
        search=search or None,
    )


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.get("", response_model=list[IssueOut])
def list_issues(
    filters: IssueFilters = Depends(issue_filters),
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return filter_issues(issue_service.list_issues(db), filters, current_user.id)


@router.get("/{issue_id}", response_model=IssueOut, responses=NOT_FOUND)
def get_issue(
    issue_id: int,
    db: Session = Depends(deps.get_db),
    _: User = Depends(deps.get_current_user),
):
    return issue_service.get_issue_or_404(db, issue_id)


@router.post(
    "",
    response_model=IssueOut,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST,
)
def create_issue(
    payload: IssueCreate,
    request: Request,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    issue = issue_service.create_issue(db, payload)
    audit_log(
        AuditEvent.issue_create,
        current_user.id,
        _client_ip(request),
        issue_id=issue.id,
        assignee_id=issue.assignee_id,
    )
    return issue


@router.patch("/{issue_id}", response_model=IssueOut, responses=BAD_REQUEST | NOT_FOUND)
def update_issue(
    issue_id: int,
    payload: IssueUpdate,
    request: Request,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    issue = issue_service.get_issue_or_404(db, issue_id)
    issue, changes = issue_service.update_issue(db, issue, payload)
    audit_log(
        AuditEvent.issue_update,
        current_user.id,
        _client_ip(request),
        issue_id=issue.id,
        fields=list(changes.keys()),
        changes=changes,
    )
    return issue


@router.delete("/{issue_id}", responses=NOT_FOUND)
def delete_issue(
    issue_id: int,
    request: Request,
    db: Session = Depends(deps.get_db),
    files: FileStore = Depends(deps.get_file_store),
    current_user: User = Depends(deps.get_current_user),
):
    issue = issue_service.get_issue_or_404(db, issue_id)
    issue_service.delete_issue(db, files, issue)
    audit_log(AuditEvent.issue_delete, current_user.id, _client_ip(request), issue_id=issue_id)
    return {"message": "Issue deleted successfully"}
