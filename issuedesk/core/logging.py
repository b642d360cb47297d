import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[int | None] = ContextVar("user_id", default=None)
client_ip_ctx: ContextVar[str | None] = ContextVar("client_ip", default=None)

_CONTEXT = (
    ("request_id", request_id_ctx),
    ("user_id", user_id_ctx),
    ("client_ip", client_ip_ctx),
)


@contextmanager
def request_context(request_id: str, client_ip: str | None):
    """Tag every record logged inside the block with the request's id and ip."""
    tokens = [request_id_ctx.set(request_id), client_ip_ctx.set(client_ip)]
    try:
        yield
    finally:
        client_ip_ctx.reset(tokens[1])
        request_id_ctx.reset(tokens[0])


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Request context is added when set, and an ``issue_id`` found in the
    structured ``event`` is lifted to the top level so one issue's history
    can be grepped across access, audit and notification lines.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, var in _CONTEXT:
            value = var.get()
            if value is not None:
                payload[key] = value
        event = getattr(record, "event", None)
        if event is not None:
            payload["event"] = event
            if isinstance(event, dict) and event.get("issue_id") is not None:
                payload["issue_id"] = event["issue_id"]
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())
