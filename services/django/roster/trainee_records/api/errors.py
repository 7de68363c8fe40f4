from typing import Any, Dict, Optional

from rest_framework.response import Response

from ..exceptions import RosterImportError


def error_response(
    message: str,
    *,
    status_code: int,
    code: Optional[str] = None,
    **extra: Any,
) -> Response:
    payload: Dict[str, Any] = {"status": "error", "message": message}
    if code:
        payload["code"] = code
    payload.update(extra)
    return Response(payload, status=int(status_code))


def import_error_response(exc: RosterImportError, **extra: Any) -> Response:
    payload = exc.as_dict()
    payload.update(extra)
    return Response(payload, status=exc.http_status)
