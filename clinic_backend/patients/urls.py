"""Patients App URLs.

Prefix: /api/
Routes:
    GET/POST    /api/patients/                   - List/Create own patients
    GET/PATCH   /api/patients/<pk>/              - Retrieve/Update patient
    PATCH       /api/patients/<pk>/status/       - set_inactive / reactivate
    POST        /api/patients/<pk>/unarchive/    - Reactivate from archive
    GET         /api/patients/<pk>/lifecycle/    - Lifecycle timeline
    GET         /api/patients/<pk>/connections/  - Connection graph
"""

from django.urls import path

from clinic_backend.patients.views import (
    PatientConnectionsView,
    PatientLifecycleView,
    PatientListCreateView,
    PatientRetrieveUpdateView,
    PatientStatusView,
    PatientUnarchiveView,
)

app_name = 'patients'

urlpatterns = [
    path('patients/', PatientListCreateView.as_view(), name='list'),
    path('patients/<int:pk>/', PatientRetrieveUpdateView.as_view(), name='detail'),
    path('patients/<int:pk>/status/', PatientStatusView.as_view(), name='status'),
    path('patients/<int:pk>/unarchive/', PatientUnarchiveView.as_view(), name='unarchive'),
    path('patients/<int:pk>/lifecycle/', PatientLifecycleView.as_view(), name='lifecycle'),
    path('patients/<int:pk>/connections/', PatientConnectionsView.as_view(), name='connections'),
]
