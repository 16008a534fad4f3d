from picwall.config import SESSION_COOKIE_NAME
from picwall.routers.users.models import User
from tests.helpers import ApiTestCase


class TestRegister(ApiTestCase):
    """Sign-up validation and account creation."""

    def register(self, **body):
        payload = {"name": "Alice", "email": "alice@example.com", "password": "supersecret"}
        payload.update(body)
        return self.client.post("/api/auth/register", json=payload)

    def test_register_creates_user_without_password(self):
        response = self.register()
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["email"], "alice@example.com")
        self.assertEqual(body["data"]["username"], "alice")
        self.assertNotIn("password", body["data"])
        self.assertNotIn("passwordHash", body["data"])

        user = self.db.query(User).filter(User.email == "alice@example.com").one()
        self.assertNotEqual(user.password_hash, "supersecret")
        self.assertTrue(user.verify_password("supersecret"))

    def test_missing_fields(self):
        response = self.register(name="")
        self.assertEqual(response.status_code, 400)
        error = response.json()["error"]
        self.assertEqual(error["code"], "VALIDATION_MISSING_FIELDS")
        self.assertEqual(error["source"], "VALIDATION")
        self.assertTrue(error["details"]["missingName"])

    def test_invalid_email(self):
        response = self.register(email="not-an-email")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "VALIDATION_INVALID_EMAIL")

    def test_weak_password(self):
        response = self.register(password="short")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "VALIDATION_WEAK_PASSWORD")

    def test_duplicate_email_is_case_insensitive(self):
        self.assertEqual(self.register().status_code, 201)
        response = self.register(email="ALICE@example.com", username="other")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"]["code"], "AUTH_EMAIL_IN_USE")

    def test_username_in_use(self):
        self.create_user(name="Bob", email="bob@example.com", username="taken")
        response = self.register(username="taken")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"]["code"], "AUTH_USERNAME_IN_USE")


class TestLogin(ApiTestCase):
    """Credential checks and the session cookie."""

    def setUp(self):
        super().setUp()
        self.user = self.create_user(username="alice", password="supersecret")

    def test_login_returns_token_and_sets_cookie(self):
        response = self.client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "supersecret"}
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["tokenType"], "bearer")
        self.assertEqual(data["user"]["id"], self.user.id)
        self.assertIn(SESSION_COOKIE_NAME, response.cookies)

        # the cookie alone authenticates follow-up requests
        profile = self.client.get("/api/user/profile")
        self.assertEqual(profile.status_code, 200)
        self.assertEqual(profile.json()["data"]["email"], "alice@example.com")

    def test_wrong_password_and_unknown_email_look_the_same(self):
        wrong = self.client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope-nope"})
        unknown = self.client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "supersecret"})
        for response in (wrong, unknown):
            self.assertEqual(response.status_code, 401)
            self.assertEqual(response.json()["error"]["code"], "AUTH_INVALID_CREDENTIALS")
        self.assertEqual(wrong.json()["message"], unknown.json()["message"])

    def test_oauth_only_account_cannot_use_password(self):
        self.create_user(name="Oauth", email="oauth@example.com")
        response = self.client.post("/api/auth/login", json={"email": "oauth@example.com", "password": "whatever1"})
        self.assertEqual(response.status_code, 401)

    def test_password_longer_than_bcrypt_limit_is_rejected(self):
        response = self.client.post("/api/auth/login", json={"email": "alice@example.com", "password": "x" * 100})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["code"], "AUTH_INVALID_CREDENTIALS")

        token = self.client.post("/token", data={"username": "alice@example.com", "password": "x" * 100})
        self.assertEqual(token.status_code, 401)

    def test_logout_clears_cookie(self):
        self.client.post("/api/auth/login", json={"email": "alice@example.com", "password": "supersecret"})
        response = self.client.post("/api/auth/logout")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get("/api/user/profile").status_code, 401)

    def test_token_endpoint_for_docs(self):
        response = self.client.post(
            "/token", data={"username": "alice@example.com", "password": "supersecret"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["token_type"], "bearer")
        headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
        self.assertEqual(self.client.get("/api/user/profile", headers=headers).status_code, 200)


class TestSyncProfile(ApiTestCase):
    """Username and email_verified backfill."""

    def test_requires_session(self):
        response = self.client.post("/api/auth/sync-profile")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["code"], "AUTH_UNAUTHORIZED")

    def test_generates_username_and_verifies_email(self):
        user = self.create_user(name="Jane Doe", email="jane.doe@example.com")
        self.assertIsNone(user.username)

        response = self.client.post("/api/auth/sync-profile", headers=self.auth_headers(user))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["username"], "jane.doe")

        self.db.refresh(user)
        self.assertIsNotNone(user.email_verified)

    def test_get_returns_safe_profile(self):
        user = self.create_user(username="alice", password="supersecret")
        response = self.client.get("/api/auth/sync-profile", headers=self.auth_headers(user))
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(set(data), {"id", "name", "email", "image", "username", "bio"})
