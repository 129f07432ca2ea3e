from django.shortcuts import get_object_or_404
from django.utils import timezone

from rest_framework import generics, status
from rest_framework.response import Response

from clinic_backend.core.utils import log_patient_action
from clinic_backend.patients.exceptions import MISSING_REASON, UNSUPPORTED_ACTION, PatientStatusError
from clinic_backend.patients.models import Patient
from clinic_backend.patients.permissions import PatientPermission
from clinic_backend.patients.serializers import (
    PatientLifecycleEventSerializer,
    PatientReadSerializer,
    PatientStatusSerializer,
    PatientWriteSerializer,
)
from clinic_backend.patients.services.connections import build_graph_for_patient
from clinic_backend.patients.services.lifecycle import (
    ARCHIVE_REACTIVATION_REASON,
    lifecycle_history,
    parse_required_date,
    reactivate_patient,
    set_patient_inactive,
)


class OwnedPatientMixin:
    """Restricts lookups to patients owned by the requesting user."""

    def get_queryset(self):
        return Patient.objects.filter(owner=self.request.user)

    def get_owned_patient(self, pk):
        return get_object_or_404(Patient, pk=pk, owner=self.request.user)


class PatientListCreateView(OwnedPatientMixin, generics.ListCreateAPIView):
    """List the user's patients (``?status=ACTIVE|INACTIVE``) or create one."""

    permission_classes = [PatientPermission]

    def get_queryset(self):
        qs = super().get_queryset()
        wanted = (self.request.query_params.get('status') or '').upper()
        if wanted == 'ACTIVE':
            qs = qs.filter(archived_at__isnull=True)
        elif wanted == 'INACTIVE':
            qs = qs.filter(archived_at__isnull=False)
        return qs

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return PatientWriteSerializer
        return PatientReadSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        obj = serializer.save(owner=request.user)
        log_patient_action(request.user, 'patient_created', patient_id=obj.pk)
        data = PatientReadSerializer(obj).data
        return Response(data, status=status.HTTP_201_CREATED)


class PatientRetrieveUpdateView(OwnedPatientMixin, generics.RetrieveUpdateAPIView):
    """Retrieve or update a patient (including the fixed weekly slot)."""

    permission_classes = [PatientPermission]

    def get_serializer_class(self):
        if self.request.method in ['PUT', 'PATCH']:
            return PatientWriteSerializer
        return PatientReadSerializer

    def perform_update(self, serializer):
        obj = serializer.save()
        log_patient_action(
            self.request.user,
            'patient_updated',
            patient_id=obj.pk,
            meta={'fields': sorted(serializer.validated_data.keys())},
        )


class PatientStatusView(generics.GenericAPIView):
    """Change a patient's lifecycle status.

    PATCH /api/patients/<pk>/status/
    Body (set inactive):
        {"action": "set_inactive", "inactive_at": "...", "reason": "...",
         "cancel_future_sessions": true, "close_open_tasks": false}
    Body (reactivate):
        {"action": "reactivate", "reactivated_at": "...", "reason": "..."}
    """

    permission_classes = [PatientPermission]
    serializer_class = PatientStatusSerializer

    def patch(self, request, pk: int, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        action = (data.get('action') or '').strip()

        try:
            if action == 'set_inactive':
                result = set_patient_inactive(
                    patient_id=pk,
                    actor=request.user,
                    inactive_at=parse_required_date(data.get('inactive_at'), 'Inactive date'),
                    reason=data.get('reason'),
                    cancel_future_sessions=data.get('cancel_future_sessions', False),
                    close_open_tasks=data.get('close_open_tasks', False),
                )
            elif action == 'reactivate':
                reason = data.get('reason')
                if not (reason or '').strip():
                    raise PatientStatusError(
                        'A reason is required to reactivate a patient.', 400, MISSING_REASON,
                    )
                result = reactivate_patient(
                    patient_id=pk,
                    actor=request.user,
                    reactivated_at=parse_required_date(data.get('reactivated_at'), 'Reactivation date'),
                    reason=reason,
                )
            else:
                raise PatientStatusError('Unsupported action.', 400, UNSUPPORTED_ACTION)
        except PatientStatusError as e:
            log_patient_action(
                request.user,
                'patient_status_rejected',
                patient_id=pk,
                meta={'action': action, 'code': e.code},
            )
            return Response(e.to_dict(), status=e.status)

        log_patient_action(
            request.user,
            f'patient_{action}',
            patient_id=result.patient_id,
            meta=result.to_dict(),
        )
        return Response({'ok': True, **result.to_dict()}, status=status.HTTP_200_OK)


class PatientUnarchiveView(generics.GenericAPIView):
    """Reactivate a patient from the archive list with a fixed reason.

    POST /api/patients/<pk>/unarchive/
    """

    permission_classes = [PatientPermission]

    def post(self, request, pk: int, *args, **kwargs):
        try:
            result = reactivate_patient(
                patient_id=pk,
                actor=request.user,
                reactivated_at=timezone.now(),
                reason=ARCHIVE_REACTIVATION_REASON,
            )
        except PatientStatusError as e:
            return Response(e.to_dict(), status=e.status)

        log_patient_action(request.user, 'patient_unarchived', patient_id=result.patient_id)
        return Response({'ok': True, 'reactivated': True}, status=status.HTTP_200_OK)


class PatientLifecycleView(OwnedPatientMixin, generics.ListAPIView):
    """Lifecycle timeline of a patient, newest first.

    GET /api/patients/<pk>/lifecycle/
    """

    permission_classes = [PatientPermission]
    serializer_class = PatientLifecycleEventSerializer

    def get_queryset(self):
        return lifecycle_history(self.get_owned_patient(self.kwargs['pk']))


class PatientConnectionsView(OwnedPatientMixin, generics.GenericAPIView):
    """Connection graph of an active patient (nodes + edges, no layout).

    GET /api/patients/<pk>/connections/
    Inactive patients answer 404.
    """

    permission_classes = [PatientPermission]

    def get(self, request, pk: int, *args, **kwargs):
        patient = get_object_or_404(Patient, pk=pk, owner=request.user, archived_at__isnull=True)
        graph = build_graph_for_patient(patient)
        log_patient_action(request.user, 'patient_graph_viewed', patient_id=patient.pk)
        return Response(graph.to_dict(), status=status.HTTP_200_OK)
