"""
Shared fixtures for the API tests: an in-memory database per test and a
TestClient whose ``get_db`` dependency points at it.
"""
import unittest
from unittest import mock

from fastapi.testclient import TestClient

from main import app
from picwall.database import Database, get_db
from picwall.routers.images.controller import url_cache
from picwall.routers.posts.models import Post
from picwall.routers.users.models import Follow, User
from picwall.utils.jwt import create_access_token


class ApiTestCase(unittest.TestCase):
    """Base class wiring a fresh SQLite database into the application."""

    def setUp(self):
        self.database = Database("sqlite://")
        self.database.create_tables()
        self.db = self.database.get_session()

        def override_get_db():
            session = self.database.get_session()
            try:
                yield session
            finally:
                session.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)
        url_cache.clear()

    def tearDown(self):
        app.dependency_overrides.clear()
        self.db.close()
        self.database.drop_tables()
        self.database.engine.dispose()

    # ---------- data helpers ----------
    def create_user(self, name="Alice", email="alice@example.com", username=None, password=None):
        user = User(name=name, email=email, username=username)
        if password:
            user.set_password(password)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def create_post(self, user, image_key="uploads/a.jpg", caption=None):
        post = Post(user_id=user.id, image_key=image_key, image_url=f"/api/images/{image_key}", caption=caption)
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        return post

    def create_follow(self, follower, following):
        edge = Follow(follower_id=follower.id, following_id=following.id)
        self.db.add(edge)
        self.db.commit()
        return edge

    def auth_headers(self, user):
        token = create_access_token(data={"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    def mock_s3(self, url="https://picwall-test.s3.amazonaws.com/signed"):
        """Patch the S3 client factory; returns the mock client."""
        s3_client = mock.MagicMock()
        s3_client.generate_presigned_url.return_value = url
        patcher = mock.patch("picwall.utils.storage.get_s3_client", return_value=s3_client)
        patcher.start()
        self.addCleanup(patcher.stop)
        return s3_client
