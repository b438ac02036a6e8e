# nextplay/middleware/audit_middleware.py
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from nextplay.utils.audit import AUTHN_FAILED, AUTHZ_DENIED, SERVER_ERROR, record_event

_DENIALS = {401: AUTHN_FAILED, 403: AUTHZ_DENIED}


def _request_summary(request: Request) -> dict:
    # first hop of X-Forwarded-For when behind a proxy
    forwarded = request.headers.get("x-forwarded-for", "")
    ip = forwarded.split(",")[0].strip() or (request.client.host if request.client else "")
    return {
        "id": request.state.request_id,
        "method": request.method,
        "path": request.url.path,
        "ip": ip,
        "user_agent": request.headers.get("user-agent", ""),
    }


class AuditMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with x-request-id and writes an audit event for each
    401/403 answer and each unhandled error. Successful writes are logged by
    the routes themselves through log_activity.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        try:
            response = await call_next(request)
        except Exception as exc:
            self._record(request, SERVER_ERROR, 500, repr(exc))
            raise

        event = _DENIALS.get(response.status_code)
        if event:
            self._record(request, event, response.status_code, getattr(request.state, "error_detail", None))
        response.headers["x-request-id"] = request.state.request_id
        return response

    @staticmethod
    def _record(request: Request, event: str, status: int, detail) -> None:
        record_event(
            event,
            status=status,
            detail=detail,
            actor=getattr(request.state, "actor", None),
            request=_request_summary(request),
        )
