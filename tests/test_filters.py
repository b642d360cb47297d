from datetime import date, datetime

from issuedesk.models import Issue, IssueCategory, IssuePriority, IssueStatus
from issuedesk.schemas.issue import IssueFilters
from issuedesk.services.filters import filter_issues, matches


def _issue(issue_id: int, **overrides) -> Issue:
    values = {
        "id": issue_id,
        "title": f"Issue {issue_id}",
        "description": "Something is off",
        "status": IssueStatus.open,
        "priority": IssuePriority.medium,
        "category": IssueCategory.bug,
        "team": None,
        "environment": None,
        "reporter_id": 1,
        "assignee_id": None,
        "created_at": datetime(2024, 3, 10, 12, 0),
        "updated_at": datetime(2024, 3, 10, 12, 0),
    }
    values.update(overrides)
    return Issue(**values)


def _ids(issues):
    return [issue.id for issue in issues]


def test_empty_filters_keep_everything():
    issues = [_issue(1), _issue(2)]
    assert filter_issues(issues, IssueFilters()) == issues


def test_status_and_priority_are_any_of():
    issues = [
        _issue(1, status=IssueStatus.open, priority=IssuePriority.high),
        _issue(2, status=IssueStatus.closed, priority=IssuePriority.high),
        _issue(3, status=IssueStatus.in_progress, priority=IssuePriority.low),
    ]
    filters = IssueFilters(status=[IssueStatus.open, IssueStatus.in_progress])
    assert _ids(filter_issues(issues, filters)) == [1, 3]
    filters = IssueFilters(
        status=[IssueStatus.open, IssueStatus.closed], priority=[IssuePriority.high]
    )
    assert _ids(filter_issues(issues, filters)) == [1, 2]


def test_category_team_and_environment_match_exactly():
    issues = [
        _issue(1, category=IssueCategory.security, team="core", environment="prod"),
        _issue(2, category=IssueCategory.security, team="web", environment="prod"),
        _issue(3, category=IssueCategory.environment_error, team="core"),
    ]
    assert _ids(filter_issues(issues, IssueFilters(category=IssueCategory.security))) == [1, 2]
    assert _ids(filter_issues(issues, IssueFilters(team="core"))) == [1, 3]
    assert _ids(filter_issues(issues, IssueFilters(team="core", environment="prod"))) == [1]


def test_assignee_me_unassigned_and_numeric():
    issues = [_issue(1, assignee_id=5), _issue(2, assignee_id=None), _issue(3, assignee_id=6)]
    assert _ids(filter_issues(issues, IssueFilters(assignee="me"), current_user_id=5)) == [1]
    assert _ids(filter_issues(issues, IssueFilters(assignee="unassigned"))) == [2]
    assert _ids(filter_issues(issues, IssueFilters(assignee="6"))) == [3]


def test_assignee_me_without_a_user_keeps_everything():
    issues = [_issue(1, assignee_id=5), _issue(2)]
    assert _ids(filter_issues(issues, IssueFilters(assignee="me"))) == [1, 2]


def test_date_range_includes_whole_end_day():
    issues = [
        _issue(1, created_at=datetime(2024, 3, 1, 0, 0)),
        _issue(2, created_at=datetime(2024, 3, 5, 23, 59, 59)),
        _issue(3, created_at=datetime(2024, 3, 6, 0, 0)),
        _issue(4, created_at=datetime(2024, 2, 29, 23, 59)),
    ]
    filters = IssueFilters(date_from=date(2024, 3, 1), date_to=date(2024, 3, 5))
    assert _ids(filter_issues(issues, filters)) == [1, 2]
    assert _ids(filter_issues(issues, IssueFilters(date_from=date(2024, 3, 6)))) == [3]
    assert _ids(filter_issues(issues, IssueFilters(date_to=date(2024, 2, 29)))) == [4]


def test_search_is_case_insensitive_over_title_and_description():
    issues = [
        _issue(1, title="Login broken on Safari"),
        _issue(2, description="users cannot LOGIN after reset"),
        _issue(3, title="Slow dashboard"),
    ]
    assert _ids(filter_issues(issues, IssueFilters(search="login"))) == [1, 2]


def test_search_combines_with_other_facets():
    issues = [
        _issue(1, title="Login broken", status=IssueStatus.open),
        _issue(2, title="Login slow", status=IssueStatus.closed),
        _issue(3, title="Export fails", status=IssueStatus.open),
    ]
    filters = IssueFilters(search="login", status=[IssueStatus.open])
    assert _ids(filter_issues(issues, filters)) == [1]


def test_matches_rejects_on_any_failing_facet():
    issue = _issue(1, priority=IssuePriority.low, team="core")
    assert matches(issue, IssueFilters(team="core"))
    assert not matches(issue, IssueFilters(team="core", priority=[IssuePriority.high]))
