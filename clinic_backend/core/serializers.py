"""Serializers for the core app: JWT issuance and the current-user view."""

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from clinic_backend.core.models import Role, User


class RoleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Role
        fields = ['name', 'label']
        read_only_fields = fields


class StaffSerializer(serializers.ModelSerializer):
    """A staff account together with the size of its caseload."""

    role = RoleSerializer(read_only=True)
    active_patients = serializers.SerializerMethodField()
    inactive_patients = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'first_name',
            'last_name',
            'role',
            'active_patients',
            'inactive_patients',
        ]
        read_only_fields = fields

    def get_active_patients(self, obj):
        return obj.patients.filter(archived_at__isnull=True).count()

    def get_inactive_patients(self, obj):
        return obj.patients.filter(archived_at__isnull=False).count()


class ClinicTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Token pair carrying the staff role; the response also embeds the account."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role_name
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = StaffSerializer(self.user).data
        return data
