from datetime import timedelta

from issuedesk.models import Notification, NotificationType
from issuedesk.services.security import create_access_token


def _auth_headers(user_id: int) -> dict[str, str]:
    token = create_access_token(user_id, timedelta(minutes=15))
    return {"Authorization": f"Bearer {token}"}


def _comment(client, issue_id: int, user_id: int, content: str = "Looking into it"):
    return client.post(
        f"/api/issues/{issue_id}/comments",
        json={"content": content},
        headers=_auth_headers(user_id),
    )


def test_comment_is_attributed_to_caller(client, make_user, make_issue):
    reporter = make_user("reporter")
    commenter = make_user("commenter")
    issue = make_issue(reporter.id)
    resp = _comment(client, issue.id, commenter.id)
    assert resp.status_code == 201
    body = resp.json()
    assert body["userId"] == commenter.id
    assert body["issueId"] == issue.id
    assert body["content"] == "Looking into it"


def test_list_comments_newest_first(client, make_user, make_issue):
    reporter = make_user("reporter")
    issue = make_issue(reporter.id)
    _comment(client, issue.id, reporter.id, "first")
    _comment(client, issue.id, reporter.id, "second")
    resp = client.get(f"/api/issues/{issue.id}/comments", headers=_auth_headers(reporter.id))
    assert resp.status_code == 200
    assert [c["content"] for c in resp.json()] == ["second", "first"]


def test_comment_validation_and_missing_issue(client, make_user, make_issue):
    reporter = make_user("reporter")
    issue = make_issue(reporter.id)
    assert _comment(client, issue.id, reporter.id, "").status_code == 400
    resp = _comment(client, 999, reporter.id)
    assert resp.status_code == 404
    assert client.get("/api/issues/999/comments", headers=_auth_headers(reporter.id)).status_code == 404


def test_comment_content_is_stored_as_written(client, make_user, make_issue):
    reporter = make_user("reporter")
    issue = make_issue(reporter.id)
    content = "x < 3 && y > 4 <script>alert(1)</script>"
    resp = _comment(client, issue.id, reporter.id, content)
    assert resp.status_code == 201
    assert resp.json()["content"] == content
    listed = client.get(f"/api/issues/{issue.id}/comments", headers=_auth_headers(reporter.id))
    assert listed.json()[0]["content"] == content


def test_comment_notification_recipients(client, make_user, make_issue, db_session):
    reporter = make_user("reporter")
    assignee = make_user("assignee")
    outsider = make_user("outsider")
    issue = make_issue(reporter.id, assignee_id=assignee.id)

    def count():
        return db_session.query(Notification).filter(
            Notification.type == NotificationType.comment
        ).count()

    _comment(client, issue.id, outsider.id)
    assert count() == 2
    _comment(client, issue.id, reporter.id)
    assert count() == 3
    _comment(client, issue.id, assignee.id)
    assert count() == 4

    unassigned = make_issue(reporter.id)
    _comment(client, unassigned.id, reporter.id)
    assert count() == 4
