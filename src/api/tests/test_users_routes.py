"""Tests for the /users routes with an in-memory directory."""

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
import sys
from pathlib import Path

# Add src to path
# test_users_routes.py is at src/api/tests/test_users_routes.py
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from fastapi.testclient import TestClient
from jose import jwt

from adapter.fake.user_directory import FakeUserDirectory
from api.dependencies import get_settings, get_token_issuer, get_user_service
from api.main import app
from domain.model.errors import InternalError
from domain.model.user import Role
from services.password_hasher import PasswordHasher
from services.token_issuer import JWT_ALGORITHM, TokenIssuer
from services.user_service import UserService
from utils.config import JWTSettings, MongoSettings, Settings

SETTINGS = Settings(
    jwt=JWTSettings(
        secret_key='test-secret-key-with-enough-length-0123456789',
        issuer='Users.Auth',
        audience='Users.Clients',
        expiry_minutes=60,
    ),
    mongo=MongoSettings(url=None),
    bcrypt_rounds=4,
)

REGISTER_BODY = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "a@b.com",
    "password": "secret1",
    "role": "Admin",
    "birthDate": "1990-05-17T00:00:00Z",
}


class UsersRouteTestCase(unittest.TestCase):

    def setUp(self):
        self.directory = FakeUserDirectory()
        self.service = UserService(self.directory, PasswordHasher(rounds=4))
        self.issuer = TokenIssuer(self.directory, SETTINGS.jwt)

        app.dependency_overrides[get_settings] = lambda: SETTINGS
        app.dependency_overrides[get_user_service] = lambda: self.service
        app.dependency_overrides[get_token_issuer] = lambda: self.issuer
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def _register(self, **overrides) -> dict:
        response = self.client.post("/users/register", json={**REGISTER_BODY, **overrides})
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def _bearer(self, user_id: str) -> dict:
        return {"Authorization": f"Bearer {self.issuer.issue(user_id).token}"}


class TestRegisterRoute(UsersRouteTestCase):

    def test_register_returns_201(self):
        body = self._register()

        self.assertEqual(body["email"], "a@b.com")
        self.assertEqual(body["firstName"], "Ada")
        self.assertEqual(body["role"], "Admin")
        self.assertIn("id", body)
        self.assertNotIn("hashedPassword", body)
        self.assertNotIn("jwtToken", body)

    def test_register_duplicate_returns_409(self):
        self._register()
        response = self.client.post("/users/register", json=REGISTER_BODY)
        self.assertEqual(response.status_code, 409)

    def test_register_short_password_returns_400(self):
        response = self.client.post("/users/register", json={**REGISTER_BODY, "password": "abc"})
        self.assertEqual(response.status_code, 400)

    def test_register_missing_body_returns_400(self):
        response = self.client.post("/users/register")
        self.assertEqual(response.status_code, 400)

    def test_register_keeps_email_as_sent(self):
        body = self._register(email="Ada@Example.COM")
        self.assertEqual(body["email"], "Ada@Example.COM")

    def test_register_malformed_email_returns_400(self):
        response = self.client.post("/users/register", json={**REGISTER_BODY, "email": "not-an-email"})
        self.assertEqual(response.status_code, 400)

    def test_register_unknown_role_is_guest(self):
        self.assertEqual(self._register(role="wizard")["role"], "Guest")

    def test_register_internal_error_hides_cause(self):
        service = MagicMock()
        service.register.side_effect = InternalError("Failed to register user", cause=RuntimeError("db password=hunter2"))
        app.dependency_overrides[get_user_service] = lambda: service

        response = self.client.post("/users/register", json=REGISTER_BODY)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["detail"], "Unexpected error occurred")


class TestLoginRoute(UsersRouteTestCase):

    def setUp(self):
        super().setUp()
        self.user_id = self._register()["id"]

    def test_login_success(self):
        response = self.client.post("/users/login", json={"email": "a@b.com", "password": "secret1"})

        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["user"]["id"], self.user_id)
        self.assertIsNotNone(body["user"]["lastLogin"])
        self.assertIn("expiresAt", body)

        claims = jwt.decode(
            body["token"],
            SETTINGS.jwt.secret_key,
            algorithms=[JWT_ALGORITHM],
            audience=SETTINGS.jwt.audience,
            issuer=SETTINGS.jwt.issuer,
        )
        self.assertEqual(claims["sub"], self.user_id)
        self.assertEqual(claims["role"], "Admin")

    def test_login_caches_token_and_last_login(self):
        response = self.client.post("/users/login", json={"email": "a@b.com", "password": "secret1"})

        stored = self.directory.get_by_id(self.user_id)
        self.assertEqual(stored.jwt_token, response.json()["token"])
        self.assertIsNotNone(stored.last_login)

    def test_login_failures_are_uniform(self):
        unknown = self.client.post("/users/login", json={"email": "nobody@b.com", "password": "secret1"})
        wrong = self.client.post("/users/login", json={"email": "a@b.com", "password": "wrong-one"})

        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.json(), wrong.json())
        self.assertNotIn("secret1", unknown.text)


class TestMixedCaseEmailLogin(UsersRouteTestCase):

    def test_login_with_exact_registered_email(self):
        user_id = self._register(email="Ada@Example.COM")["id"]

        response = self.client.post("/users/login", json={"email": "Ada@Example.COM", "password": "secret1"})

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["user"]["id"], user_id)
        self.assertEqual(self.directory.get_by_id(user_id).email, "Ada@Example.COM")


class TestUpdateRoute(UsersRouteTestCase):

    def setUp(self):
        super().setUp()
        self.user_id = self._register()["id"]

    def test_update_returns_200(self):
        response = self.client.put(
            f"/users/{self.user_id}",
            json={"lastName": "King"},
            headers=self._bearer(self.user_id),
        )

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["lastName"], "King")

    def test_update_unknown_user_returns_404(self):
        response = self.client.put(
            "/users/missing",
            json={"lastName": "King"},
            headers=self._bearer(self.user_id),
        )
        self.assertEqual(response.status_code, 404)

    def test_update_short_password_returns_400(self):
        response = self.client.put(
            f"/users/{self.user_id}",
            json={"password": "abc"},
            headers=self._bearer(self.user_id),
        )
        self.assertEqual(response.status_code, 400)

    def test_update_to_taken_email_returns_409(self):
        self._register(email="other@b.com")
        response = self.client.put(
            f"/users/{self.user_id}",
            json={"email": "other@b.com"},
            headers=self._bearer(self.user_id),
        )
        self.assertEqual(response.status_code, 409)

    def test_update_requires_token(self):
        response = self.client.put(f"/users/{self.user_id}", json={"lastName": "King"})
        self.assertEqual(response.status_code, 401)

    def test_update_rejects_guest(self):
        guest_id = self._register(email="guest@b.com", role="guest")["id"]
        response = self.client.put(
            f"/users/{self.user_id}",
            json={"lastName": "King"},
            headers=self._bearer(guest_id),
        )
        self.assertEqual(response.status_code, 403)

    def test_update_rejects_expired_token(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "sub": self.user_id,
                "role": Role.ADMIN.value,
                "iss": SETTINGS.jwt.issuer,
                "aud": SETTINGS.jwt.audience,
                "iat": now - timedelta(hours=2),
                "exp": now - timedelta(hours=1),
            },
            SETTINGS.jwt.secret_key,
            algorithm=JWT_ALGORITHM,
        )
        response = self.client.put(
            f"/users/{self.user_id}",
            json={"lastName": "King"},
            headers={"Authorization": f"Bearer {token}"},
        )
        self.assertEqual(response.status_code, 401)


class TestDeleteRoute(UsersRouteTestCase):

    def setUp(self):
        super().setUp()
        self.admin_id = self._register()["id"]

    def test_delete_returns_204(self):
        target = self._register(email="target@b.com", role="user")["id"]

        response = self.client.delete(f"/users/{target}", headers=self._bearer(self.admin_id))

        self.assertEqual(response.status_code, 204)
        self.assertIsNone(self.directory.get_by_id(target))

    def test_delete_unknown_returns_404(self):
        response = self.client.delete("/users/missing", headers=self._bearer(self.admin_id))
        self.assertEqual(response.status_code, 404)

    def test_delete_requires_admin(self):
        user_id = self._register(email="plain@b.com", role="user")["id"]
        response = self.client.delete(f"/users/{self.admin_id}", headers=self._bearer(user_id))
        self.assertEqual(response.status_code, 403)


if __name__ == '__main__':
    unittest.main()
