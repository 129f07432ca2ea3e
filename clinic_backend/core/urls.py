from django.urls import path

from rest_framework_simplejwt.views import TokenRefreshView

from clinic_backend.core.views import LoginView, MeView, health

app_name = 'core'

urlpatterns = [
    path('health/', health, name='health'),
    path('auth/login/', LoginView.as_view(), name='login'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='refresh'),
    path('auth/me/', MeView.as_view(), name='me'),
]
