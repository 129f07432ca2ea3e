from datetime import timedelta

from django.utils import timezone

from rest_framework import generics, status
from rest_framework.response import Response

from clinic_backend.core.utils import log_patient_action
from clinic_backend.patients.models import Patient

from .exceptions import InvalidScheduleData, SessionMergeError
from .models import SessionStatus, TherapySession
from .permissions import MergeSuggestionPermission, SessionPermission
from .serializers import (
	GeneratedSessionSerializer,
	MergeSuggestionRequestSerializer,
	NextSessionQuerySerializer,
	RecurringSessionsRequestSerializer,
	SessionMergeRequestSerializer,
	TherapySessionSerializer,
)
from .services.merging import merge_sessions
from .services.recurring import (
	CANCELED_STATUSES,
	create_recurring_sessions,
	detect_potential_merge,
	resolve_next_session,
)


# Sessions the merge check compares against: recent and upcoming, not canceled.
MERGE_LOOKBACK_DAYS = 7
MERGE_RELEVANT_STATUSES = (SessionStatus.SCHEDULED, SessionStatus.COMPLETED)


def _patient_not_found():
	return Response(
		{'detail': 'Patient not found.', 'code': 'PATIENT_NOT_FOUND'},
		status=status.HTTP_404_NOT_FOUND,
	)


def _owned_patient(request, patient_id):
	return Patient.objects.filter(pk=patient_id, owner=request.user).first()


class TherapySessionListView(generics.ListAPIView):
	"""
	Sessions of the user's patients, ordered by time.

	Query params:
		patient_id: restrict to one patient
		status: restrict to one status
	"""
	permission_classes = [SessionPermission]
	serializer_class = TherapySessionSerializer

	def get_queryset(self):
		qs = TherapySession.objects.filter(patient__owner=self.request.user)
		patient_id = self.request.query_params.get('patient_id')
		if patient_id:
			qs = qs.filter(patient_id=patient_id)
		status_param = self.request.query_params.get('status')
		if status_param:
			qs = qs.filter(status=status_param.upper())
		return qs.order_by('scheduled_at', 'id')

	def list(self, request, *args, **kwargs):
		patient_id = request.query_params.get('patient_id')
		if patient_id and not patient_id.isdigit():
			return Response({'detail': 'patient_id must be an integer.'}, status=status.HTTP_400_BAD_REQUEST)
		return super().list(request, *args, **kwargs)


class RecurringSessionsView(generics.GenericAPIView):
	"""
	Create the upcoming recurring sessions of a patient.

	POST /api/sessions/recurring/
	Body: {"patient_id": 12}
	Response: {"created": 4, "summary": "...", "sessions": [{"id", "scheduled_at"}]}
	"""
	permission_classes = [SessionPermission]
	serializer_class = RecurringSessionsRequestSerializer

	def post(self, request, *args, **kwargs):
		serializer = self.get_serializer(data=request.data)
		serializer.is_valid(raise_exception=True)
		patient = _owned_patient(request, serializer.validated_data['patient_id'])
		if patient is None:
			return _patient_not_found()
		if not patient.is_active:
			return Response(
				{'detail': 'Recurring sessions are not generated for inactive patients.', 'code': 'PATIENT_INACTIVE'},
				status=status.HTTP_400_BAD_REQUEST,
			)

		try:
			plan, created = create_recurring_sessions(patient)
		except InvalidScheduleData as e:
			return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)

		log_patient_action(
			request.user,
			'recurring_sessions_generate',
			patient.id,
			meta={'created': len(created)},
		)
		payload = {
			'created': len(created),
			'summary': plan.summary,
			'sessions': GeneratedSessionSerializer(created, many=True).data,
		}
		return Response(payload, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class MergeSuggestionView(generics.GenericAPIView):
	"""
	Check whether a manually entered appointment matches the recurring slot.

	POST /api/sessions/merge-suggestion/
	Body: {"patient_id": 12, "date": "2024-05-15", "hour": 14, "minute": 10}

	Read-only: nothing is created, moved or deleted.
	"""
	permission_classes = [MergeSuggestionPermission]
	serializer_class = MergeSuggestionRequestSerializer

	def post(self, request, *args, **kwargs):
		serializer = self.get_serializer(data=request.data)
		serializer.is_valid(raise_exception=True)
		data = serializer.validated_data
		patient = _owned_patient(request, data['patient_id'])
		if patient is None:
			return _patient_not_found()

		since = timezone.now() - timedelta(days=MERGE_LOOKBACK_DAYS)
		existing = TherapySession.objects.filter(
			patient=patient,
			status__in=MERGE_RELEVANT_STATUSES,
			scheduled_at__gte=since,
		).order_by('scheduled_at', 'id')

		try:
			suggestion = detect_potential_merge(
				data['date'],
				data['hour'],
				data['minute'],
				patient,
				existing,
			)
		except InvalidScheduleData as e:
			return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)

		return Response(suggestion.to_dict(), status=status.HTTP_200_OK)


class NextSessionView(generics.GenericAPIView):
	"""
	Next upcoming session of a patient, or the next expected recurring slot.

	GET /api/sessions/next/?patient_id=12
	Response: {"patient_id": 12, "next_session_at": "..." | null, "session_id": 7 | null}
	"""
	permission_classes = [SessionPermission]

	def get(self, request, *args, **kwargs):
		query = NextSessionQuerySerializer(data=request.query_params)
		query.is_valid(raise_exception=True)
		patient = _owned_patient(request, query.validated_data['patient_id'])
		if patient is None:
			return _patient_not_found()

		now = timezone.now()
		sessions = list(TherapySession.objects.filter(patient=patient, scheduled_at__gt=now))
		next_at = resolve_next_session(
			patient.fixed_session_day,
			patient.fixed_session_time,
			sessions,
			now,
		)
		session_id = next(
			(s.id for s in sessions if s.scheduled_at == next_at and s.status not in CANCELED_STATUSES),
			None,
		)
		return Response(
			{
				'patient_id': patient.id,
				'next_session_at': next_at.isoformat() if next_at else None,
				'session_id': session_id,
			},
			status=status.HTTP_200_OK,
		)


class SessionMergeView(generics.GenericAPIView):
	"""
	Merge a duplicate session into this one.

	POST /api/sessions/<pk>/merge/
	Body: {"merge_with_id": 31}
	Response: {"merged": true, "kept": 30, "deleted": 31, ...}

	The session in the URL is kept; the other one is deleted after its tasks,
	payment allocations and guidance links move over.
	"""
	permission_classes = [SessionPermission]
	serializer_class = SessionMergeRequestSerializer

	def post(self, request, pk: int, *args, **kwargs):
		serializer = self.get_serializer(data=request.data)
		serializer.is_valid(raise_exception=True)

		try:
			result = merge_sessions(
				primary_id=pk,
				secondary_id=serializer.validated_data['merge_with_id'],
				owner=request.user,
			)
		except SessionMergeError as e:
			return Response(e.to_dict(), status=e.status)

		log_patient_action(
			request.user,
			'session_merge',
			result.patient_id,
			meta={'kept': result.kept, 'deleted': result.deleted},
		)
		return Response(result.to_dict(), status=status.HTTP_200_OK)
