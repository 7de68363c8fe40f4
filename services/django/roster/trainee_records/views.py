import logging

from django.contrib.auth.decorators import login_required
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_protect
from django.views.decorators.http import require_POST

from .exceptions import RecordStoreError
from .services import ingest_roster_result, response_payload
from .utils.roster_reader import parse_roster_file

logger = logging.getLogger(__name__)


def healthz_view(_request):
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as exc:
        return JsonResponse(
            {
                "status": "error",
                "services": {
                    "database": {"status": "error", "error": str(exc)},
                },
            },
            status=503,
        )

    return JsonResponse(
        {
            "status": "ok",
            "services": {
                "database": {"status": "ok"},
            },
        }
    )


def result_status(result):
    return 200 if result.get("status") in ("ok", "empty") else 400


@csrf_protect
@login_required
@require_POST
def upload_roster_file(request):
    upload = request.FILES.get("file")
    if not upload:
        return JsonResponse(
            {"status": "error", "message": "No file uploaded."}, status=400
        )

    result = parse_roster_file(upload)

    summary = None
    if result.get("status") == "ok":
        try:
            summary = ingest_roster_result(result, file_name=getattr(upload, "name", "uploaded_file"))
        except RecordStoreError as exc:
            logger.error("Roster upload %s failed: %s", result.get("file"), exc)
            payload = exc.as_dict()
            payload["file"] = result.get("file")
            return JsonResponse(payload, status=exc.http_status)

    return JsonResponse(response_payload(result, summary), status=result_status(result))
