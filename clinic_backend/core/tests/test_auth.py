"""Tests for Authentication endpoints.

Tests cover:
- Login (POST /api/auth/login/) with the role claim and embedded account
- Refresh (POST /api/auth/refresh/)
- Me (GET /api/auth/me/) with the caseload counts
- Health check
"""

from __future__ import annotations

from django.test import TestCase, override_settings
from django.utils import timezone

from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from clinic_backend.core.models import Role, User
from clinic_backend.patients.models import Patient


class AuthenticationTest(TestCase):
    """Tests for /api/auth/ endpoints."""

    databases = {"default"}

    def setUp(self):
        self.role_admin, _ = Role.objects.get_or_create(
            name="admin",
            defaults={"label": "Admin"},
        )
        self.role_therapist, _ = Role.objects.get_or_create(
            name="therapist",
            defaults={"label": "Therapist"},
        )

        self.admin = User.objects.create_user(
            username="admin_auth_test",
            email="admin_auth@example.com",
            password="SecurePass123!",
            role=self.role_admin,
        )
        self.therapist = User.objects.create_user(
            username="therapist_auth_test",
            email="therapist_auth@example.com",
            password="SecurePass123!",
            role=self.role_therapist,
        )
        self.inactive_user = User.objects.create_user(
            username="inactive_auth_test",
            email="inactive_auth@example.com",
            password="SecurePass123!",
            role=self.role_therapist,
            is_active=False,
        )

        self.client = APIClient()

    def _login(self, username):
        return self.client.post(
            "/api/auth/login/",
            {"username": username, "password": "SecurePass123!"},
            format="json",
        )

    # ========== LOGIN TESTS ==========

    def test_login_success_returns_tokens_and_user(self):
        response = self._login("admin_auth_test")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)

        user_data = response.data["user"]
        self.assertEqual(user_data["id"], self.admin.id)
        self.assertEqual(user_data["role"]["name"], "admin")
        self.assertEqual(user_data["active_patients"], 0)

    def test_login_wrong_password_returns_401(self):
        response = self.client.post(
            "/api/auth/login/",
            {"username": "admin_auth_test", "password": "WrongPassword!"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertNotIn("access", response.data)

    def test_login_inactive_user_returns_401(self):
        response = self._login("inactive_auth_test")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_missing_fields_returns_400(self):
        response = self.client.post("/api/auth/login/", {"username": "admin_auth_test"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post("/api/auth/login/", {"password": "SecurePass123!"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    # ========== REFRESH TESTS ==========

    def test_refresh_success_returns_new_access_token_with_role(self):
        refresh_token = self._login("therapist_auth_test").data["refresh"]

        response = self.client.post("/api/auth/refresh/", {"refresh": refresh_token}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(AccessToken(response.data["access"])["role"], "therapist")

    def test_refresh_invalid_token_returns_401(self):
        response = self.client.post("/api/auth/refresh/", {"refresh": "invalid_token_here"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    # ========== ME ENDPOINT TESTS ==========

    def test_me_reports_own_caseload(self):
        Patient.objects.create(owner=self.therapist, first_name="Active")
        Patient.objects.create(owner=self.therapist, first_name="Archived", archived_at=timezone.now())
        Patient.objects.create(owner=self.admin, first_name="Not mine")
        access_token = self._login("therapist_auth_test").data["access"]

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access_token}")
        response = self.client.get("/api/auth/me/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["id"], self.therapist.id)
        self.assertEqual(response.data["role"]["name"], "therapist")
        self.assertEqual(response.data["active_patients"], 1)
        self.assertEqual(response.data["inactive_patients"], 1)

    def test_me_without_token_returns_401(self):
        response = self.client.get("/api/auth/me/")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_with_invalid_token_returns_401(self):
        self.client.credentials(HTTP_AUTHORIZATION="Bearer invalid_token_here")
        response = self.client.get("/api/auth/me/")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    # ========== TOKEN CONTENT TESTS ==========

    def test_tokens_carry_user_id_and_role(self):
        data = self._login("therapist_auth_test").data

        access = AccessToken(data["access"])
        refresh = RefreshToken(data["refresh"])

        self.assertEqual(int(access["user_id"]), self.therapist.id)
        self.assertEqual(access["role"], "therapist")
        self.assertEqual(refresh["role"], "therapist")

    @override_settings(CLINIC_TIME_ZONE="Asia/Jerusalem")
    def test_health_endpoint_no_auth_required(self):
        response = self.client.get("/api/health/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"status": "ok", "clinic_time_zone": "Asia/Jerusalem"})


class AuthenticationEdgeCasesTest(TestCase):
    databases = {"default"}

    def setUp(self):
        User.objects.create_user(
            username="norole_auth_test",
            email="norole_auth@example.com",
            password="SecurePass123!",
            role=None,
        )
        self.client = APIClient()

    def test_user_without_role_can_login_and_read_me(self):
        login = self.client.post(
            "/api/auth/login/",
            {"username": "norole_auth_test", "password": "SecurePass123!"},
            format="json",
        )
        self.assertEqual(login.status_code, status.HTTP_200_OK)
        self.assertIsNone(login.data["user"]["role"])
        self.assertIsNone(AccessToken(login.data["access"])["role"])

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")
        response = self.client.get("/api/auth/me/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data["role"])
