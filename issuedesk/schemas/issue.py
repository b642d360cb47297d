from datetime import date, datetime

from pydantic import Field, field_validator

from issuedesk.models.issue import IssueCategory, IssuePriority, IssueStatus
from issuedesk.schemas.common import ApiModel


class IssueBase(ApiModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=10000)
    status: IssueStatus = IssueStatus.open
    priority: IssuePriority
    category: IssueCategory
    team: str | None = Field(default=None, max_length=50)
    environment: str | None = Field(default=None, max_length=50)


class IssueCreate(IssueBase):
    reporter_id: int
    assignee_id: int | None = None


class IssueUpdate(ApiModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=10000)
    status: IssueStatus | None = None
    priority: IssuePriority | None = None
    category: IssueCategory | None = None
    team: str | None = Field(default=None, max_length=50)
    environment: str | None = Field(default=None, max_length=50)
    assignee_id: int | None = None

    @field_validator("title", "description", "status", "priority", "category")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class IssueOut(ApiModel):
    id: int
    title: str
    description: str
    status: IssueStatus
    priority: IssuePriority
    category: IssueCategory
    team: str | None
    environment: str | None
    reporter_id: int
    assignee_id: int | None
    created_at: datetime
    updated_at: datetime


class IssueFilters(ApiModel):
    """Facets for narrowing an issue list; every facet that is set must match."""

    status: list[IssueStatus] = Field(default_factory=list)
    priority: list[IssuePriority] = Field(default_factory=list)
    category: IssueCategory | None = None
    team: str | None = None
    environment: str | None = None
    assignee: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    search: str | None = Field(default=None, max_length=200)


class AnalyticsSummary(ApiModel):
    total_issues: int
    open_issues: int
    resolved_issues: int
    avg_resolution_time: float
    by_status: dict[str, int]
    by_priority: dict[str, int]
    by_category: dict[str, int]
    recent_issues: list[IssueOut]
