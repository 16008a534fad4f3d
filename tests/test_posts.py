from unittest import mock

from botocore.exceptions import ClientError

from picwall.routers.posts.models import Comment, Like, Post
from tests.helpers import ApiTestCase


class TestCreatePost(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.alice = self.create_user(username="alice")
        self.headers = self.auth_headers(self.alice)

    def test_create_defaults_image_url(self):
        response = self.client.post(
            "/api/posts",
            json={"imageKey": "uploads/abc.jpg", "caption": "  sunset  "},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["status"], 201)
        data = body["data"]
        self.assertEqual(data["caption"], "sunset")
        self.assertEqual(data["imageUrl"], "/api/images/uploads%2Fabc.jpg")
        self.assertEqual(data["user"]["username"], "alice")
        self.assertEqual(data["likes"], [])
        self.assertEqual(data["comments"], [])

    def test_explicit_image_url_is_kept(self):
        response = self.client.post(
            "/api/posts",
            json={"imageKey": "uploads/abc.jpg", "imageUrl": "https://cdn.example.com/abc.jpg"},
            headers=self.headers,
        )
        self.assertEqual(response.json()["data"]["imageUrl"], "https://cdn.example.com/abc.jpg")

    def test_image_key_required(self):
        response = self.client.post("/api/posts", json={"caption": "no image"}, headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "VALIDATION_MISSING_FIELDS")

    def test_caption_too_long(self):
        response = self.client.post(
            "/api/posts", json={"imageKey": "uploads/abc.jpg", "caption": "x" * 2201}, headers=self.headers
        )
        self.assertEqual(response.status_code, 422)

    def test_requires_auth(self):
        response = self.client.post("/api/posts", json={"imageKey": "uploads/abc.jpg"})
        self.assertEqual(response.status_code, 401)


class TestReadPosts(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.alice = self.create_user(username="alice")
        self.bob = self.create_user(name="Bob", email="bob@example.com", username="bob")

    def test_list_newest_first(self):
        first = self.create_post(self.alice, image_key="uploads/1.jpg")
        second = self.create_post(self.bob, image_key="uploads/2.jpg")
        self.db.add(Comment(post_id=first.id, user_id=self.bob.id, text="nice"))
        self.db.commit()

        response = self.client.get("/api/posts", headers=self.auth_headers(self.alice))
        self.assertEqual(response.status_code, 200)
        posts = response.json()["data"]
        self.assertEqual([p["id"] for p in posts], [second.id, first.id])
        self.assertEqual(posts[1]["comments"][0]["user"]["username"], "bob")

    def test_get_one_and_missing(self):
        post = self.create_post(self.alice)
        response = self.client.get(f"/api/posts/{post.id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["user"]["id"], self.alice.id)

        missing = self.client.get("/api/posts/9999")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["error"]["code"], "POST_NOT_FOUND")


class TestUpdateAndDelete(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.alice = self.create_user(username="alice")
        self.bob = self.create_user(name="Bob", email="bob@example.com", username="bob")
        self.post = self.create_post(self.alice, caption="old")

    def test_owner_updates_caption(self):
        response = self.client.put(
            f"/api/posts/{self.post.id}", json={"caption": "new"}, headers=self.auth_headers(self.alice)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["caption"], "new")

    def test_empty_caption_allowed_missing_rejected(self):
        headers = self.auth_headers(self.alice)
        response = self.client.put(f"/api/posts/{self.post.id}", json={"caption": ""}, headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["caption"], "")

        response = self.client.put(f"/api/posts/{self.post.id}", json={}, headers=headers)
        self.assertEqual(response.status_code, 400)

    def test_other_user_cannot_edit_or_delete(self):
        headers = self.auth_headers(self.bob)
        edit = self.client.put(f"/api/posts/{self.post.id}", json={"caption": "hijack"}, headers=headers)
        self.assertEqual(edit.status_code, 403)
        self.assertEqual(edit.json()["error"]["code"], "POST_FORBIDDEN")
        delete = self.client.delete(f"/api/posts/{self.post.id}", headers=headers)
        self.assertEqual(delete.status_code, 403)

    def test_delete_removes_likes_comments_and_object(self):
        self.db.add(Like(post_id=self.post.id, user_id=self.bob.id))
        self.db.add(Comment(post_id=self.post.id, user_id=self.bob.id, text="hi"))
        self.db.commit()
        s3_client = self.mock_s3()

        response = self.client.delete(f"/api/posts/{self.post.id}", headers=self.auth_headers(self.alice))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["id"], self.post.id)
        self.assertEqual(self.db.query(Post).count(), 0)
        self.assertEqual(self.db.query(Like).count(), 0)
        self.assertEqual(self.db.query(Comment).count(), 0)
        s3_client.delete_object.assert_called_once_with(Bucket=mock.ANY, Key="uploads/a.jpg")

    def test_storage_failure_does_not_fail_delete(self):
        s3_client = self.mock_s3()
        s3_client.delete_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "DeleteObject"
        )
        response = self.client.delete(f"/api/posts/{self.post.id}", headers=self.auth_headers(self.alice))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.db.query(Post).count(), 0)


class TestLikesAndComments(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.alice = self.create_user(username="alice")
        self.bob = self.create_user(name="Bob", email="bob@example.com", username="bob")
        self.post = self.create_post(self.alice)

    def test_like_toggles(self):
        headers = self.auth_headers(self.bob)
        liked = self.client.post(f"/api/posts/{self.post.id}/like", headers=headers).json()["data"]
        self.assertEqual(liked, {"likes": [self.bob.id], "liked": True})

        unliked = self.client.post(f"/api/posts/{self.post.id}/like", headers=headers).json()["data"]
        self.assertEqual(unliked, {"likes": [], "liked": False})

    def test_like_missing_post(self):
        response = self.client.post("/api/posts/9999/like", headers=self.auth_headers(self.bob))
        self.assertEqual(response.status_code, 404)

    def test_comment(self):
        response = self.client.post(
            f"/api/posts/{self.post.id}/comment", json={"text": " great shot "}, headers=self.auth_headers(self.bob)
        )
        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["text"], "great shot")
        self.assertEqual(data["user"]["username"], "bob")

    def test_empty_comment_rejected(self):
        response = self.client.post(
            f"/api/posts/{self.post.id}/comment", json={"text": "   "}, headers=self.auth_headers(self.bob)
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["source"], "VALIDATION")
