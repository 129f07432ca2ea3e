"""Appointments App URLs.

Prefix: /api/
Routes:
    GET   /api/sessions/                     - Sessions of own patients
    POST  /api/sessions/recurring/           - Generate upcoming recurring sessions
    POST  /api/sessions/merge-suggestion/    - Merge check for a manual appointment
    GET   /api/sessions/next/                - Next session or expected slot
    POST  /api/sessions/<pk>/merge/          - Merge a duplicate into this session
"""

from django.urls import path

from .views import (
	MergeSuggestionView,
	NextSessionView,
	RecurringSessionsView,
	SessionMergeView,
	TherapySessionListView,
)

app_name = 'appointments'

urlpatterns = [
	path('sessions/', TherapySessionListView.as_view(), name='session_list'),
	path('sessions/recurring/', RecurringSessionsView.as_view(), name='recurring'),
	path('sessions/merge-suggestion/', MergeSuggestionView.as_view(), name='merge_suggestion'),
	path('sessions/next/', NextSessionView.as_view(), name='next_session'),
	path('sessions/<int:pk>/merge/', SessionMergeView.as_view(), name='merge'),
]
