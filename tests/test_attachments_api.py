from datetime import timedelta
from io import BytesIO

import pytest
from fastapi import UploadFile
from sqlalchemy.exc import OperationalError
from starlette.datastructures import Headers

from issuedesk.core.config import settings
from issuedesk.services.security import create_access_token

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _auth_headers(user_id: int) -> dict[str, str]:
    token = create_access_token(user_id, timedelta(minutes=15))
    return {"Authorization": f"Bearer {token}"}


def _upload(client, issue_id, user_id, name="screen.png", data=PNG_BYTES, content_type="image/png"):
    return client.post(
        f"/api/issues/{issue_id}/attachments",
        files={"file": (name, data, content_type)},
        headers=_auth_headers(user_id),
    )


def test_upload_list_and_download(client, make_user, make_issue, file_store):
    user = make_user("uploader")
    issue = make_issue(user.id)
    resp = _upload(client, issue.id, user.id)
    assert resp.status_code == 201
    body = resp.json()
    assert body["filename"] == "screen.png"
    assert body["contentType"] == "image/png"
    assert body["size"] == len(PNG_BYTES)
    assert body["uploaderId"] == user.id
    assert file_store.exists(body["filepath"])

    listed = client.get(f"/api/issues/{issue.id}/attachments", headers=_auth_headers(user.id))
    assert [a["id"] for a in listed.json()] == [body["id"]]

    download = client.get(f"/api/download/{body['id']}", headers=_auth_headers(user.id))
    assert download.status_code == 200
    assert download.content == PNG_BYTES
    assert download.headers["content-type"] == "image/png"
    assert "screen.png" in download.headers["content-disposition"]


def test_rejects_unsupported_type(client, make_user, make_issue, file_store):
    user = make_user("uploader")
    issue = make_issue(user.id)
    resp = _upload(client, issue.id, user.id, name="notes.txt", data=b"hello", content_type="text/plain")
    assert resp.status_code == 400
    assert "Invalid file type" in resp.json()["error"]["message"]
    assert not file_store.root.exists() or not any(file_store.root.iterdir())


def test_rejects_oversize_file(client, make_user, make_issue, file_store, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 16)
    user = make_user("uploader")
    issue = make_issue(user.id)
    resp = _upload(client, issue.id, user.id)
    assert resp.status_code == 413
    assert not any(file_store.root.iterdir())


def test_missing_issue_and_attachment(client, make_user):
    user = make_user("uploader")
    assert _upload(client, 999, user.id).status_code == 404
    assert client.get("/api/download/999", headers=_auth_headers(user.id)).status_code == 404


def test_download_404_when_file_is_gone(client, make_user, make_issue, file_store):
    user = make_user("uploader")
    issue = make_issue(user.id)
    body = _upload(client, issue.id, user.id).json()
    file_store.delete(body["filepath"])
    resp = client.get(f"/api/download/{body['id']}", headers=_auth_headers(user.id))
    assert resp.status_code == 404


def test_stored_file_is_removed_when_record_cannot_be_saved(
    db_session, make_user, make_issue, file_store, monkeypatch
):
    from issuedesk.services import issues as issue_service

    def unavailable(*_args, **_kwargs):
        raise OperationalError("INSERT INTO counters", {}, Exception("database is locked"))

    user = make_user("uploader")
    issue = make_issue(user.id)
    monkeypatch.setattr(issue_service, "next_id", unavailable)
    upload = UploadFile(
        BytesIO(PNG_BYTES),
        filename="screen.png",
        headers=Headers({"content-type": "image/png"}),
    )

    with pytest.raises(OperationalError):
        issue_service.add_attachment(
            db_session, file_store, issue, upload, user.id, {"image/png"}, max_bytes=1024
        )
    assert not any(file_store.root.iterdir())
