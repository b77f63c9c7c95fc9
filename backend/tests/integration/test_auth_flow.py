"""Integration tests for authentication flow

Tests cover:
- Login endpoint with valid/invalid credentials
- JWT token issuance and claims
- Token-based authentication on /auth/me
- Missing, malformed and expired tokens
"""

import os
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from auth.jwt import decode_token
from conftest import ADMIN_PASSWORD, STUDENT_PASSWORD
from models.student import Student


pytestmark = pytest.mark.integration


class TestLoginEndpoint:
    """Test POST /api/v1/auth/login endpoint"""

    def test_login_with_valid_credentials(self, client: TestClient, student: Student):
        response = client.post(
            "/api/v1/auth/login",
            json={"matric": "eng/2020/001", "password": STUDENT_PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] > 0
        assert data["session"] == {
            "matric": "eng/2020/001",
            "role": "STUDENT",
            "email": "ada@uni.edu",
        }

    def test_token_claims(self, client: TestClient, admin: Student):
        response = client.post(
            "/api/v1/auth/login",
            json={"matric": admin.matric, "password": ADMIN_PASSWORD},
        )

        payload = decode_token(response.json()["access_token"])
        assert payload["sub"] == admin.matric
        assert payload["role"] == "ADMIN"
        assert payload["exp"] > payload["iat"]

    def test_login_with_wrong_password(self, client: TestClient, student: Student):
        response = client.post(
            "/api/v1/auth/login",
            json={"matric": student.matric, "password": "wrong-password1"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_CREDENTIALS"
        assert "access_token" not in response.json()

    def test_login_with_unknown_matric(self, client: TestClient, student: Student):
        """Unknown matric and wrong password are indistinguishable"""
        unknown = client.post(
            "/api/v1/auth/login",
            json={"matric": "eng/1999/404", "password": STUDENT_PASSWORD},
        )
        wrong = client.post(
            "/api/v1/auth/login",
            json={"matric": student.matric, "password": "wrong-password1"},
        )

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json()["message"] == wrong.json()["message"]

    def test_login_with_missing_fields(self, client: TestClient):
        response = client.post("/api/v1/auth/login", json={"matric": "eng/2020/001"})

        assert response.status_code == 422


class TestAuthenticatedRequests:
    """Test bearer token handling on protected endpoints"""

    def test_me_returns_session(self, client: TestClient, student: Student):
        login = client.post(
            "/api/v1/auth/login",
            json={"matric": student.matric, "password": STUDENT_PASSWORD},
        )
        token = login.json()["access_token"]

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["matric"] == student.matric
        assert response.json()["role"] == "STUDENT"

    def test_missing_token(self, client: TestClient):
        response = client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_malformed_token(self, client: TestClient):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["detail"].startswith("Invalid token")

    def test_expired_token(self, client: TestClient, student: Student):
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {
                "sub": student.matric,
                "role": "STUDENT",
                "iat": int(issued.timestamp()),
                "exp": int((issued + timedelta(minutes=60)).timestamp()),
            },
            os.environ["JWT_SECRET"],
            algorithm="HS256",
        )

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"

    def test_token_for_removed_account(self, client: TestClient, db_session, student: Student):
        login = client.post(
            "/api/v1/auth/login",
            json={"matric": student.matric, "password": STUDENT_PASSWORD},
        )
        token = login.json()["access_token"]
        db_session.delete(student)
        db_session.commit()

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
