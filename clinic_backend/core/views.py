"""Authentication and liveness endpoints.

Token issuance and refresh are simplejwt's views; the login serializer adds
the role claim. ``MeView`` reports the signed-in account and its caseload.
"""

from django.conf import settings
from django.db import DatabaseError, connection
from django.http import JsonResponse

from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView

from clinic_backend.core.serializers import ClinicTokenObtainPairSerializer, StaffSerializer


def health(request):
    """Database ping plus the clinic timezone the scheduler runs in."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1;')
    except DatabaseError as exc:
        return JsonResponse({'status': 'error', 'detail': str(exc)}, status=503)

    return JsonResponse({'status': 'ok', 'clinic_time_zone': settings.CLINIC_TIME_ZONE})


class LoginView(TokenObtainPairView):
    serializer_class = ClinicTokenObtainPairSerializer


class MeView(generics.RetrieveAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StaffSerializer

    def get_object(self):
        return self.request.user
