import json
import logging

import pytest
from fastapi import HTTPException

from issuedesk.core.logging import JsonFormatter, request_context, request_id_ctx
from issuedesk.services import security
from issuedesk.services.audit import AuditEvent, audit_log
from issuedesk.services.token_store import InMemoryStore, build_store


def test_security_password_helpers():
    hashed = security.hash_password("Abc123!@")
    assert security.verify_password("Abc123!@", hashed)
    assert not security.verify_password("Wrong123!", hashed)
    assert not security.verify_password("Abc123!@", "not-a-hash")
    with pytest.raises(ValueError):
        security.hash_password("x" * 73)


def test_mask_sensitive():
    assert security.mask_sensitive("secretvalue") == "secr***"
    assert security.mask_sensitive("abcd") == "****"


def test_access_token_round_trip():
    token = security.create_access_token(7)
    payload = security.decode_token(token)
    assert payload["sub"] == "7"
    assert payload["type"] == "access"
    with pytest.raises(ValueError):
        security.decode_token(token + "tampered")


def test_audit_log_masks_secrets(caplog):
    caplog.set_level(logging.INFO, logger="audit")
    audit_log(AuditEvent.logout, 1, "127.0.0.1", token="secret123", password="hunter22", note="ok")
    record = caplog.records[-1]
    details = record.event["details"]
    assert details["token"] == "secr***"
    assert details["password"] == "hunt***"
    assert details["note"] == "ok"
    assert record.event["actor_id"] == 1
    assert "issue_id" not in record.event


def test_audit_log_links_issue_and_flags_failed_logins(caplog):
    caplog.set_level(logging.INFO, logger="audit")
    audit_log(AuditEvent.comment_add, 2, None, issue_id=9, comment_id=4)
    assert caplog.records[-1].event["issue_id"] == 9
    assert caplog.records[-1].getMessage() == "comment_add"

    audit_log(AuditEvent.login_failed, None, "10.0.0.1", username="ghost")
    assert caplog.records[-1].levelno == logging.WARNING
    with pytest.raises(ValueError):
        audit_log("project_create", 1, None)


def test_json_formatter_includes_context():
    record = logging.LogRecord("issuedesk", logging.INFO, __file__, 1, "hello", None, None)
    record.event = {"issue_id": 3}
    with request_context("req-1", "10.0.0.5"):
        line = json.loads(JsonFormatter().format(record))
    assert request_id_ctx.get() is None
    assert line["message"] == "hello"
    assert line["level"] == "INFO"
    assert line["request_id"] == "req-1"
    assert line["client_ip"] == "10.0.0.5"
    assert line["event"] == {"issue_id": 3}
    assert line["issue_id"] == 3


def test_inmemory_token_store():
    store = InMemoryStore()
    store.revoke("expired", -1)
    assert not store.is_revoked("expired")
    store.revoke("token", 60)
    assert store.is_revoked("token")

    assert store.inc_failure("user", window=60) == 1
    assert store.inc_failure("user", window=60) == 2
    store.clear_failure("user")
    assert store.inc_failure("user", window=60) == 1


def test_build_store_uses_memory_in_tests():
    assert isinstance(build_store("redis://localhost:6379/0"), InMemoryStore)


def test_file_store_enforces_size(tmp_path):
    from io import BytesIO

    from fastapi import UploadFile

    from issuedesk.services.files import FileStore

    store = FileStore(tmp_path)
    path, size = store.save(UploadFile(BytesIO(b"abc"), filename="../a b.pdf"), max_bytes=3)
    assert size == 3
    assert path.parent == tmp_path
    assert path.name.endswith("-a_b.pdf")
    with pytest.raises(HTTPException) as excinfo:
        store.save(UploadFile(BytesIO(b"abcd"), filename="big.pdf"), max_bytes=3)
    assert excinfo.value.status_code == 413
    assert [p.name for p in tmp_path.iterdir()] == [path.name]
