import logging

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from ..constants import SUBJECTS, TRAINEES
from ..exceptions import RecordNotFound, RecordStoreError, RosterImportError
from ..services import clear_records, filter_trainees, ingest_roster_result, lookup_trainee, response_payload
from ..stores import get_record_store
from ..utils.roster_reader import parse_roster_file
from .errors import error_response, import_error_response
from .serializers import (
    BulkDeleteSerializer,
    SubjectSerializer,
    TraineeLookupSerializer,
    TraineeSerializer,
)
from .throttles import TraineeLookupThrottle

logger = logging.getLogger(__name__)


class RosterUploadView(APIView):
    """Accepts an uploaded roster and imports it into the configured record store."""
    parser_classes = (MultiPartParser, FormParser)
    permission_classes = [permissions.IsAdminUser]
    throttle_classes: list = []  # Admin-only; allow large rosters without throttling

    def post(self, request, *args, **kwargs):
        upload = request.FILES.get("file")
        if not upload:
            return error_response("No file uploaded.", status_code=status.HTTP_400_BAD_REQUEST)

        result = parse_roster_file(upload)
        if result.get("status") != "ok":
            http_status = (
                status.HTTP_200_OK if result.get("status") == "empty" else status.HTTP_400_BAD_REQUEST
            )
            return Response(result, status=http_status)

        try:
            summary = ingest_roster_result(
                result,
                file_name=getattr(upload, "name", "uploaded_file"),
                store=get_record_store(),
            )
        except RecordStoreError as exc:
            logger.error("Roster upload %s failed: %s", result.get("file"), exc)
            return import_error_response(exc, file=result.get("file"))

        return Response(response_payload(result, summary), status=status.HTTP_200_OK)


class StoreRecordViewSet(viewsets.ViewSet):
    """List, inspect and delete records held by the configured record store."""

    permission_classes = [permissions.IsAdminUser]
    throttle_classes: list = []  # Admin-only; allow large bulk operations without throttling
    collection: str = ""
    serializer_class = None

    def get_store(self):
        return get_record_store()

    def handle_exception(self, exc):
        if isinstance(exc, RosterImportError):
            return import_error_response(exc)
        return super().handle_exception(exc)

    def get_records(self, store):
        raise NotImplementedError

    def delete_record(self, store, record_id):
        raise NotImplementedError

    def list(self, request):
        records = self.get_records(self.get_store())
        return Response(self.serializer_class(records, many=True).data)

    def retrieve(self, request, pk=None):
        record = self.get_store().get_record(self.collection, pk)
        if record is None:
            raise RecordNotFound(collection=self.collection, record_id=pk)
        return Response(self.serializer_class(record).data)

    def destroy(self, request, pk=None):
        self.delete_record(self.get_store(), pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"], url_path="bulk-delete")
    def bulk_delete(self, request):
        """
        Delete multiple records (admin-only).
        Expects JSON body: {"ids": ["...", "..."]}
        """
        serializer = BulkDeleteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"detail": "Provide a non-empty list of ids."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        store = self.get_store()
        deleted, missing = 0, []
        for record_id in serializer.validated_data["ids"]:
            try:
                self.delete_record(store, record_id)
            except RecordNotFound:
                missing.append(record_id)
                continue
            deleted += 1
        return Response({"deleted": deleted, "missing": missing}, status=status.HTTP_200_OK)


class SubjectViewSet(StoreRecordViewSet):
    collection = SUBJECTS
    serializer_class = SubjectSerializer

    def get_records(self, store):
        subjects = store.list_subjects()
        return sorted(subjects, key=lambda s: (s.get("level") or 0, s.get("code") or ""))

    def delete_record(self, store, record_id):
        store.delete_subject(record_id)


class TraineeViewSet(StoreRecordViewSet):
    collection = TRAINEES
    serializer_class = TraineeSerializer

    def get_records(self, store):
        trainees = filter_trainees(store.list_trainees(), self.request.query_params.get("search", ""))
        return sorted(trainees, key=lambda t: t.get("full_name") or "")

    def delete_record(self, store, record_id):
        store.delete_trainee(record_id)

    @action(detail=False, methods=["post"], url_path="clear")
    def clear(self, request):
        """Delete every trainee and subject (admin-only)."""
        counts = clear_records(self.get_store())
        return Response({"status": "ok", "deleted": counts}, status=status.HTTP_200_OK)


class TraineeLookupView(APIView):
    """Public lookup of a trainee's outstanding courses by trainee number or national id."""
    permission_classes = [permissions.AllowAny]
    throttle_classes = [TraineeLookupThrottle]

    def get(self, request, *args, **kwargs):
        key = (request.query_params.get("key") or "").strip()
        if not key:
            return error_response(
                "Enter a trainee number or national id.",
                status_code=status.HTTP_400_BAD_REQUEST,
                code="missing_key",
            )

        try:
            found = lookup_trainee(get_record_store(), key)
        except RecordStoreError as exc:
            return import_error_response(exc)

        if found is None:
            return error_response(
                "No trainee matches this number.",
                status_code=status.HTTP_404_NOT_FOUND,
                code=RecordNotFound.code,
            )

        payload = TraineeLookupSerializer(found).data
        return Response({"status": "ok", **payload}, status=status.HTTP_200_OK)
