# census_core/admissions/api/views.py
from __future__ import annotations

from contextlib import contextmanager
from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response

from census_core.admissions import selectors
from census_core.admissions.api.filters import CensusFilter, MortalityFilter
from census_core.admissions.api.serializers import (
    AdmissionFormSerializer,
    AdmissionRecordSerializer,
    ArchiveSerializer,
    CensusSummarySerializer,
    ConsultantListSerializer,
    ExportSerializer,
)
from census_core.admissions.constants import MORTALITY_RECORDS, PATIENTS
from census_core.admissions.exceptions import InvalidTransition, NotPermitted, PersistenceError, RecordNotFound
from census_core.admissions.models import CensusRecord, MortalityRecord
from census_core.admissions.services import AdmissionService, LifecycleResult, OperationContext
from census_core.common.api.exceptions import ConflictError, PersistenceUnavailable
from census_core.common.api.pagination import paginate
from census_core.common.permissions import CensusPermission, MortalityPermission
from census_core.common.scope import require_scope

UUID_LOOKUP = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"

LIST_PARAMS = [
    OpenApiParameter("q", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False,
                     description="Space separated search tokens; every token must match."),
    OpenApiParameter("ordering", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False,
                     description="serial, los, name, admission_date, discharge_date (prefix '-' for descending)."),
]
CENSUS_PARAMS = LIST_PARAMS + [
    OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False, enum=["Active", "Discharged"]),
    OpenApiParameter("admitted_from", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("admitted_to", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
]
MORTALITY_PARAMS = LIST_PARAMS + [
    OpenApiParameter("died_from", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("died_to", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
]


def _context(request) -> OperationContext:
    scope = require_scope(request)
    return OperationContext.from_request(request, unit=scope.unit)


@contextmanager
def lifecycle_errors():
    """Translate lifecycle exceptions into API errors (error envelope)."""
    try:
        yield
    except NotPermitted as exc:
        raise PermissionDenied(str(exc)) from exc
    except RecordNotFound as exc:
        raise NotFound("Record not found.") from exc
    except InvalidTransition as exc:
        raise ConflictError(str(exc)) from exc
    except PersistenceError as exc:
        raise PersistenceUnavailable(str(exc)) from exc


def _ok(result: LifecycleResult) -> dict:
    if not result.ok:
        raise DRFValidationError({field: [message] for field, message in result.errors.items()})
    return result.record


def _filtered(filter_class, request, queryset, *, today, mortality=False) -> list:
    f = filter_class(request.query_params, queryset=queryset)
    if not f.is_valid():
        raise DRFValidationError(f.errors)
    return selectors.sort_records(f.qs, f.ordering_value, today=today, mortality=mortality)


def _form(request, *, partial=False) -> dict:
    ser = AdmissionFormSerializer(data=request.data, partial=partial)
    ser.is_valid(raise_exception=True)
    return dict(ser.validated_data)


def _export_response(records, *, today) -> Response:
    data = {"columns": list(selectors.EXPORT_COLUMNS), "rows": selectors.export_rows(records, today=today)}
    return Response(data, status=status.HTTP_200_OK)


class CensusViewSet(viewsets.ViewSet):
    """
    Live census for the unit named in X-Unit.
    """
    permission_classes = [CensusPermission]
    lookup_value_regex = UUID_LOOKUP

    serializer_class = AdmissionRecordSerializer
    queryset = CensusRecord.objects.none()

    def _current(self, ctx: OperationContext, pk) -> CensusRecord:
        try:
            return selectors.get_census_record(unit=ctx.unit, record_id=UUID(str(pk)))
        except CensusRecord.DoesNotExist:
            raise NotFound("Record not found.")

    @extend_schema(tags=["Census"], parameters=CENSUS_PARAMS, responses={200: AdmissionRecordSerializer(many=True)})
    def list(self, request):
        ctx = _context(request)
        today = ctx.reference_date()
        records = _filtered(CensusFilter, request, selectors.census_queryset(unit=ctx.unit), today=today)
        return paginate(request, records, AdmissionRecordSerializer, context={"today": today})

    @extend_schema(tags=["Census"], responses={200: AdmissionRecordSerializer})
    def retrieve(self, request, pk=None):
        ctx = _context(request)
        record = self._current(ctx, pk)
        return Response(AdmissionRecordSerializer(record, context={"today": ctx.reference_date()}).data)

    @extend_schema(tags=["Census"], request=AdmissionFormSerializer, responses={201: AdmissionRecordSerializer})
    def create(self, request):
        ctx = _context(request)
        with lifecycle_errors():
            record = _ok(AdmissionService.admit(ctx=ctx, data=_form(request)))
        return Response(
            AdmissionRecordSerializer(record, context={"today": ctx.reference_date()}).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(tags=["Census"], request=AdmissionFormSerializer, responses={200: AdmissionRecordSerializer})
    def update(self, request, pk=None):
        ctx = _context(request)
        with lifecycle_errors():
            record = _ok(AdmissionService.revise(ctx=ctx, record_id=UUID(str(pk)), data=_form(request)))
        return Response(AdmissionRecordSerializer(record, context={"today": ctx.reference_date()}).data)

    @extend_schema(tags=["Census"], request=AdmissionFormSerializer, responses={200: AdmissionRecordSerializer})
    def partial_update(self, request, pk=None):
        """
        Merge the supplied fields into the stored record, then run the
        same full-record save as PUT.
        """
        ctx = _context(request)
        current = self._current(ctx, pk)
        data = {**current.to_document(), **_form(request, partial=True)}
        with lifecycle_errors():
            record = _ok(AdmissionService.revise(ctx=ctx, record_id=current.id, data=data))
        return Response(AdmissionRecordSerializer(record, context={"today": ctx.reference_date()}).data)

    @extend_schema(tags=["Census"], responses={204: None})
    def destroy(self, request, pk=None):
        ctx = _context(request)
        with lifecycle_errors():
            AdmissionService.delete(ctx=ctx, collection=PATIENTS, record_id=UUID(str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Census"], request=ArchiveSerializer, responses={200: AdmissionRecordSerializer})
    @action(detail=True, methods=["post"], url_path="archive")
    def archive(self, request, pk=None):
        """
        Move the record into the mortality archive (status Deceased).
        The live row is removed; the archive row keeps the same id.
        """
        ctx = _context(request)
        ser = ArchiveSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        with lifecycle_errors():
            record = _ok(
                AdmissionService.archive_by_id(
                    ctx=ctx,
                    record_id=UUID(str(pk)),
                    expiry_date=ser.validated_data.get("expiry_date"),
                )
            )
        return Response(AdmissionRecordSerializer(record, context={"today": ctx.reference_date()}).data)

    @extend_schema(
        tags=["Census"],
        parameters=[OpenApiParameter("year", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False)],
        responses={200: CensusSummarySerializer},
    )
    @action(detail=False, methods=["get"], url_path="summary")
    def summary(self, request):
        ctx = _context(request)
        year_raw = request.query_params.get("year")
        try:
            year = int(year_raw) if year_raw else None
        except ValueError:
            raise DRFValidationError({"year": "Invalid year (int expected)."})

        data = selectors.census_summary(unit=ctx.unit, year=year, today=ctx.reference_date())
        return Response(CensusSummarySerializer(data).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Census"], parameters=CENSUS_PARAMS, responses={200: ExportSerializer})
    @action(detail=False, methods=["get"], url_path="export")
    def export(self, request):
        ctx = _context(request)
        today = ctx.reference_date()
        records = _filtered(CensusFilter, request, selectors.census_queryset(unit=ctx.unit), today=today)
        return _export_response(records, today=today)

    @extend_schema(tags=["Census"], responses={200: ConsultantListSerializer})
    @action(detail=False, methods=["get"], url_path="consultants")
    def consultants(self, request):
        ctx = _context(request)
        return Response({"consultants": selectors.consultant_suggestions(unit=ctx.unit)})


class MortalityViewSet(viewsets.ViewSet):
    """
    Mortality archive for the unit named in X-Unit.
    POST records a death directly; archived census rows arrive via /census/{id}/archive/.
    """
    permission_classes = [MortalityPermission]
    lookup_value_regex = UUID_LOOKUP

    serializer_class = AdmissionRecordSerializer
    queryset = MortalityRecord.objects.none()

    def _current(self, ctx: OperationContext, pk) -> MortalityRecord:
        try:
            return selectors.get_mortality_record(unit=ctx.unit, record_id=UUID(str(pk)))
        except MortalityRecord.DoesNotExist:
            raise NotFound("Record not found.")

    @extend_schema(tags=["Mortality"], parameters=MORTALITY_PARAMS, responses={200: AdmissionRecordSerializer(many=True)})
    def list(self, request):
        ctx = _context(request)
        records = _filtered(
            MortalityFilter,
            request,
            selectors.mortality_queryset(unit=ctx.unit),
            today=ctx.reference_date(),
            mortality=True,
        )
        return paginate(request, records, AdmissionRecordSerializer, context={"today": ctx.reference_date()})

    @extend_schema(tags=["Mortality"], responses={200: AdmissionRecordSerializer})
    def retrieve(self, request, pk=None):
        ctx = _context(request)
        return Response(AdmissionRecordSerializer(self._current(ctx, pk)).data)

    @extend_schema(tags=["Mortality"], request=AdmissionFormSerializer, responses={201: AdmissionRecordSerializer})
    def create(self, request):
        ctx = _context(request)
        with lifecycle_errors():
            record = _ok(AdmissionService.record_death(ctx=ctx, data=_form(request)))
        return Response(AdmissionRecordSerializer(record).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Mortality"], request=AdmissionFormSerializer, responses={200: AdmissionRecordSerializer})
    def update(self, request, pk=None):
        ctx = _context(request)
        with lifecycle_errors():
            record = _ok(AdmissionService.revise_mortality(ctx=ctx, record_id=UUID(str(pk)), data=_form(request)))
        return Response(AdmissionRecordSerializer(record).data)

    @extend_schema(tags=["Mortality"], request=AdmissionFormSerializer, responses={200: AdmissionRecordSerializer})
    def partial_update(self, request, pk=None):
        ctx = _context(request)
        current = self._current(ctx, pk)
        data = {**current.to_document(), **_form(request, partial=True)}
        with lifecycle_errors():
            record = _ok(AdmissionService.revise_mortality(ctx=ctx, record_id=current.id, data=data))
        return Response(AdmissionRecordSerializer(record).data)

    @extend_schema(tags=["Mortality"], responses={204: None})
    def destroy(self, request, pk=None):
        ctx = _context(request)
        with lifecycle_errors():
            AdmissionService.delete(ctx=ctx, collection=MORTALITY_RECORDS, record_id=UUID(str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Mortality"], parameters=MORTALITY_PARAMS, responses={200: ExportSerializer})
    @action(detail=False, methods=["get"], url_path="export")
    def export(self, request):
        ctx = _context(request)
        today = ctx.reference_date()
        records = _filtered(
            MortalityFilter,
            request,
            selectors.mortality_queryset(unit=ctx.unit),
            today=today,
            mortality=True,
        )
        return _export_response(records, today=today)
