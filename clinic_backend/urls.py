"""Clinic backend URL configuration.

API routes:
    /api/health/, /api/auth/   - Health check and JWT authentication (core)
    /api/patients/             - Patients, lifecycle and connection graph (patients)
    /api/sessions/             - Recurring generation and merge check (appointments)
"""

from django.http import HttpResponse
from django.urls import include, path

from clinic_backend.core.admin import clinic_admin_site


def root(request):
    """Plain-text liveness response for load balancers."""
    return HttpResponse("Clinic backend is running.")


urlpatterns = [
    path("", root, name="root"),
    path("admin/", clinic_admin_site.urls),

    path("api/", include("clinic_backend.core.urls")),
    path("api/", include("clinic_backend.patients.urls")),
    path("api/", include("clinic_backend.appointments.urls")),
]
