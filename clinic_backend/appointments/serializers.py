from rest_framework import serializers

from .models import TherapySession


class TherapySessionSerializer(serializers.ModelSerializer):
	class Meta:
		model = TherapySession
		fields = [
			'id',
			'patient',
			'scheduled_at',
			'status',
			'cancellation_reason',
			'canceled_at',
			'is_recurring_template',
			'created_at',
			'updated_at',
		]
		read_only_fields = fields


class GeneratedSessionSerializer(serializers.ModelSerializer):
	"""Compact shape returned by the recurring generation endpoint."""

	class Meta:
		model = TherapySession
		fields = ['id', 'scheduled_at']
		read_only_fields = fields


class RecurringSessionsRequestSerializer(serializers.Serializer):
	patient_id = serializers.IntegerField(min_value=1)


class MergeSuggestionRequestSerializer(serializers.Serializer):
	"""A manually entered appointment: local date plus wall-clock time."""

	patient_id = serializers.IntegerField(min_value=1)
	date = serializers.CharField()
	hour = serializers.IntegerField(min_value=0, max_value=23)
	minute = serializers.IntegerField(min_value=0, max_value=59)


class NextSessionQuerySerializer(serializers.Serializer):
	patient_id = serializers.IntegerField(min_value=1)


class SessionMergeRequestSerializer(serializers.Serializer):
	"""The duplicate to fold into the session named in the URL."""

	merge_with_id = serializers.IntegerField(min_value=1)
