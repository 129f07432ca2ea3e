from rest_framework import serializers

from clinic_backend.patients.models import FIXED_SESSION_TIME_RE, Patient, PatientLifecycleEvent


class PatientReadSerializer(serializers.ModelSerializer):
    """Read-only serializer with lifecycle status."""

    status = serializers.CharField(source='lifecycle_status', read_only=True)

    class Meta:
        model = Patient
        fields = [
            'id',
            'first_name',
            'last_name',
            'fixed_session_day',
            'fixed_session_time',
            'archived_at',
            'status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PatientWriteSerializer(serializers.ModelSerializer):
    """Write serializer for create/update operations.

    ``archived_at`` is not writable here; status changes go through the
    lifecycle endpoints so that every change is recorded.
    """

    class Meta:
        model = Patient
        fields = [
            'first_name',
            'last_name',
            'fixed_session_day',
            'fixed_session_time',
        ]

    def validate_fixed_session_day(self, value):
        if value is not None and not 0 <= value <= 6:
            raise serializers.ValidationError('Weekday must be between 0 (Sunday) and 6 (Saturday).')
        return value

    def validate_fixed_session_time(self, value):
        value = (value or '').strip()
        if value and not FIXED_SESSION_TIME_RE.match(value):
            raise serializers.ValidationError('Time must be in 24-hour HH:MM format.')
        return value


class PatientStatusSerializer(serializers.Serializer):
    """Body of PATCH /api/patients/<id>/status/.

    Dates are kept as raw values; parsing and the MISSING_DATE/INVALID_DATE
    codes belong to the lifecycle service.
    """

    action = serializers.CharField(required=False, allow_blank=True, default='')
    inactive_at = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    reactivated_at = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)
    cancel_future_sessions = serializers.BooleanField(required=False, default=False)
    close_open_tasks = serializers.BooleanField(required=False, default=False)


class PatientLifecycleEventSerializer(serializers.ModelSerializer):
    actor_display = serializers.SerializerMethodField()

    class Meta:
        model = PatientLifecycleEvent
        fields = [
            'id',
            'event_type',
            'occurred_at',
            'reason',
            'metadata',
            'actor',
            'actor_display',
            'created_at',
        ]
        read_only_fields = fields

    def get_actor_display(self, obj):
        actor = getattr(obj, 'actor', None)
        if actor is None:
            return 'System'
        return actor.get_full_name() or actor.username
