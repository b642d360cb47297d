import enum
from datetime import date, datetime
from typing import Any

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from issuedesk.db.counters import next_id
from issuedesk.db.session import utcnow
from issuedesk.models import Attachment, Comment, Issue
from issuedesk.schemas.issue import IssueCreate, IssueUpdate
from issuedesk.services import notifications
from issuedesk.services.files import FileStore
from issuedesk.services.notifications import IssueState


def get_issue_or_404(db: Session, issue_id: int) -> Issue:
    issue = db.get(Issue, issue_id)
    if not issue:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issue not found")
    return issue


def list_issues(db: Session) -> list[Issue]:
    return db.query(Issue).order_by(Issue.created_at.desc(), Issue.id.desc()).all()


def create_issue(db: Session, payload: IssueCreate) -> Issue:
    now = utcnow()
    issue = Issue(
        id=next_id(db, "issues"),
        title=payload.title,
        description=payload.description,
        status=payload.status,
        priority=payload.priority,
        category=payload.category,
        team=payload.team,
        environment=payload.environment,
        reporter_id=payload.reporter_id,
        assignee_id=payload.assignee_id,
        created_at=now,
        updated_at=now,
    )
    db.add(issue)
    db.commit()
    db.refresh(issue)
    notifications.deliver(db, notifications.on_issue_created(IssueState.of(issue)))
    return issue


def update_issue(
    db: Session, issue: Issue, payload: IssueUpdate
) -> tuple[Issue, dict[str, dict[str, Any]]]:
    """Merge the fields present in ``payload`` and fire the change rules.

    Returns the refreshed issue and a ``{field: {"from", "to"}}`` map of the
    values that actually changed.
    """
    before = IssueState.of(issue)
    data = payload.model_dump(exclude_unset=True)
    changes: dict[str, dict[str, Any]] = {}
    for field, value in data.items():
        previous = _plain(getattr(issue, field))
        next_value = _plain(value)
        if previous == next_value:
            continue
        changes[field] = {"from": previous, "to": next_value}
        setattr(issue, field, value)
    issue.updated_at = utcnow()
    db.commit()
    db.refresh(issue)
    notifications.deliver(
        db, notifications.on_issue_updated(before, IssueState.of(issue))
    )
    return issue, changes


def delete_issue(db: Session, files: FileStore, issue: Issue) -> None:
    """Remove the issue with its comments, attachments and notifications."""
    stored = [attachment.filepath for attachment in issue.attachments]
    db.delete(issue)
    db.commit()
    for filepath in stored:
        files.delete(filepath)


def add_comment(db: Session, issue: Issue, content: str, user_id: int) -> Comment:
    comment = Comment(
        id=next_id(db, "comments"),
        content=content,
        issue_id=issue.id,
        user_id=user_id,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    notifications.deliver(
        db, notifications.on_comment_added(IssueState.of(issue), user_id)
    )
    return comment


def list_comments(db: Session, issue_id: int) -> list[Comment]:
    return (
        db.query(Comment)
        .filter(Comment.issue_id == issue_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .all()
    )


def add_attachment(
    db: Session,
    files: FileStore,
    issue: Issue,
    upload: UploadFile,
    uploader_id: int,
    allowed_types: set[str],
    max_bytes: int,
) -> Attachment:
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    if content_type not in allowed_types:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Only JPEG, PNG, GIF, and PDF files are allowed.",
        )
    path, size = files.save(upload, max_bytes)
    try:
        attachment = Attachment(
            id=next_id(db, "attachments"),
            filename=upload.filename or path.name,
            filepath=str(path),
            content_type=content_type,
            size=size,
            issue_id=issue.id,
            uploader_id=uploader_id,
        )
        db.add(attachment)
        db.commit()
    except Exception:
        db.rollback()
        files.delete(str(path))
        raise
    db.refresh(attachment)
    return attachment


def list_attachments(db: Session, issue_id: int) -> list[Attachment]:
    return (
        db.query(Attachment)
        .filter(Attachment.issue_id == issue_id)
        .order_by(Attachment.created_at, Attachment.id)
        .all()
    )


def get_attachment_or_404(db: Session, files: FileStore, attachment_id: int) -> Attachment:
    attachment = db.get(Attachment, attachment_id)
    if not attachment or not files.exists(attachment.filepath):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not found"
        )
    return attachment


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
