"""Audit logging middleware: records every state-changing API call to JSONL."""

import json
import logging
import time
from pathlib import Path

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from healthdesk.config import settings

logger = logging.getLogger(__name__)

LOG_DIR = Path(settings.log_dir)
AUDIT_LOG_FILE = LOG_DIR / "audit_log.jsonl"

MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def _bearer_user(request: Request) -> str | None:
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AuditLogMiddleware(BaseHTTPMiddleware):
    """Logs who changed what: mutating /api/* requests with caller and outcome."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method not in MUTATING_METHODS or not request.url.path.startswith("/api/"):
            response: Response = await call_next(request)
            return response

        response = await call_next(request)

        entry = {
            "timestamp": time.time(),
            "user_id": _bearer_user(request),
            "method": request.method,
            "endpoint": request.url.path,
            "status_code": response.status_code,
        }
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            with open(AUDIT_LOG_FILE, "a") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError:
            logger.warning("Could not write audit log entry")

        return response
