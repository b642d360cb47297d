from collections.abc import Iterable
from datetime import datetime, time, timezone

from issuedesk.models import Issue
from issuedesk.schemas.issue import IssueFilters


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _matches_assignee(issue: Issue, assignee: str, current_user_id: int | None) -> bool:
    if assignee == "me":
        return current_user_id is None or issue.assignee_id == current_user_id
    if assignee == "unassigned":
        return issue.assignee_id is None
    try:
        wanted = int(assignee)
    except ValueError:
        return True
    return issue.assignee_id == wanted


def matches(issue: Issue, filters: IssueFilters, current_user_id: int | None = None) -> bool:
    if filters.status and issue.status not in filters.status:
        return False
    if filters.priority and issue.priority not in filters.priority:
        return False
    if filters.category and issue.category != filters.category:
        return False
    if filters.team and issue.team != filters.team:
        return False
    if filters.environment and issue.environment != filters.environment:
        return False
    if filters.assignee and not _matches_assignee(
        issue, filters.assignee, current_user_id
    ):
        return False
    if filters.date_from or filters.date_to:
        created = _naive_utc(issue.created_at)
        if filters.date_from and created < datetime.combine(filters.date_from, time.min):
            return False
        if filters.date_to and created > datetime.combine(filters.date_to, time.max):
            return False
    if filters.search:
        needle = filters.search.lower()
        if needle not in issue.title.lower() and needle not in issue.description.lower():
            return False
    return True


def filter_issues(
    issues: Iterable[Issue], filters: IssueFilters, current_user_id: int | None = None
) -> list[Issue]:
    return [issue for issue in issues if matches(issue, filters, current_user_id)]
