"""Summary statistics over an issue list, recomputed on every call."""
from collections.abc import Sequence

from issuedesk.models import (
    Issue,
    IssueCategory,
    IssuePriority,
    IssueStatus,
    OPEN_STATUSES,
    RESOLVED_STATUSES,
)

SECONDS_PER_DAY = 24 * 60 * 60


def count_by(issues: Sequence[Issue], field: str, domain) -> dict[str, int]:
    """Count issues per enum value; every value of ``domain`` is present."""
    counts = {member.value: 0 for member in domain}
    for issue in issues:
        value = domain(getattr(issue, field)).value
        counts[value] += 1
    return counts


def average_resolution_days(issues: Sequence[Issue]) -> float:
    """Mean days from creation to last update over resolved and closed issues.

    The last update stands in for the resolution time, so later edits to a
    closed issue move its figure.
    """
    resolved = [i for i in issues if i.status in RESOLVED_STATUSES]
    if not resolved:
        return 0.0
    total = sum((i.updated_at - i.created_at).total_seconds() for i in resolved)
    return round(total / SECONDS_PER_DAY / len(resolved), 1)


def recent(issues: Sequence[Issue], limit: int) -> list[Issue]:
    return sorted(issues, key=lambda i: (i.created_at, i.id), reverse=True)[:limit]


def summarize(issues: Sequence[Issue], recent_limit: int = 5) -> dict[str, object]:
    by_status = count_by(issues, "status", IssueStatus)
    return {
        "total_issues": sum(by_status.values()),
        "open_issues": sum(by_status[s.value] for s in OPEN_STATUSES),
        "resolved_issues": sum(by_status[s.value] for s in RESOLVED_STATUSES),
        "avg_resolution_time": average_resolution_days(issues),
        "by_status": by_status,
        "by_priority": count_by(issues, "priority", IssuePriority),
        "by_category": count_by(issues, "category", IssueCategory),
        "recent_issues": recent(issues, recent_limit),
    }
