"""Tests for registration, login, profiles and user moderation."""

import freezegun
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from accounts.models import User
from accounts.stats import signup_pattern, signup_trend, user_stats
from blog.models import Like
from comments.models import Comment
from uploads import storage

from .helpers import client_for, make_admin, make_category, make_post, make_user


class RegisterTest(TestCase):
    def test_first_user_becomes_admin(self):
        response = APIClient().post(
            "/api/auth/register",
            {"email": "first@example.com", "password": "secret123", "name": "First"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["data"]["user"]["role"], "ADMIN")
        self.assertTrue(Token.objects.filter(key=response.data["data"]["token"]).exists())

    def test_later_users_are_readers(self):
        make_admin()
        response = APIClient().post(
            "/api/auth/register",
            {"email": "second@example.com", "password": "secret123", "name": "Second"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["data"]["user"]["role"], "USER")

    def test_configured_admin_email(self):
        make_admin()
        response = APIClient().post(
            "/api/auth/register",
            {"email": "owner@example.com", "password": "secret123", "name": "Owner"},
            format="json",
        )

        self.assertEqual(response.data["data"]["user"]["role"], "ADMIN")

    def test_admin_email_ignores_case(self):
        make_admin()
        response = APIClient().post(
            "/api/auth/register",
            {"email": "Owner@Example.com", "password": "secret123", "name": "Owner"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["data"]["user"]["role"], "ADMIN")

    def test_duplicate_email(self):
        make_user(email="taken@example.com")
        response = APIClient().post(
            "/api/auth/register",
            {"email": "taken@example.com", "password": "secret123", "name": "Again"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["status"], "error")
        self.assertIn("email", response.data["errors"])

    def test_validation(self):
        response = APIClient().post(
            "/api/auth/register",
            {"email": "not-an-email", "password": "123", "name": "X"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.data["errors"]), {"email", "password", "name"})


class LoginTest(TestCase):
    def setUp(self):
        self.user = make_user()

    def test_login_and_bearer_token(self):
        client = APIClient()
        response = client.post(
            "/api/auth/login", {"email": "reader@example.com", "password": "secret123"}, format="json"
        )
        self.assertEqual(response.status_code, 200)

        client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['data']['token']}")
        me = client.get("/api/auth/me")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.data["data"]["email"], "reader@example.com")

    def test_wrong_password(self):
        response = APIClient().post(
            "/api/auth/login", {"email": "reader@example.com", "password": "nope"}, format="json"
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data["message"], "Email or password is incorrect.")

    def test_invalid_token(self):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")

        self.assertEqual(client.get("/api/auth/me").status_code, 401)

    def test_logout_revokes_token(self):
        token = Token.objects.create(user=self.user)
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

        self.assertEqual(client.post("/api/auth/logout").status_code, 204)
        self.assertFalse(Token.objects.filter(user=self.user).exists())


class ProfileTest(TestCase):
    def setUp(self):
        self.user = make_user()
        self.client = client_for(self.user)

    def test_update_profile(self):
        response = self.client.put(
            "/api/auth/me", {"name": "Renamed", "bio": "Hi", "avatar": None}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, "Renamed")
        self.assertEqual(self.user.avatar, "")

    def test_change_password(self):
        response = self.client.put(
            "/api/auth/me",
            {"current_password": "secret123", "new_password": "another1"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("another1"))

    def test_change_password_needs_current(self):
        response = self.client.put("/api/auth/me", {"new_password": "another1"}, format="json")
        self.assertEqual(response.status_code, 400)

        response = self.client.put(
            "/api/auth/me",
            {"current_password": "wrong", "new_password": "another1"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("current_password", response.data["errors"])

    def test_requires_login(self):
        self.assertEqual(APIClient().get("/api/auth/me").status_code, 401)

    def test_replacing_avatar_deletes_old_file(self):
        name, url = storage.save_file("avatars", SimpleUploadedFile("me.png", b"png", content_type="image/png"))
        self.user.avatar = url
        self.user.save()

        self.client.put("/api/auth/me", {"avatar": "https://example.com/new.png"}, format="json")

        self.assertFalse(default_storage.exists(name))


class AuthorTest(TestCase):
    def test_default_author(self):
        response = APIClient().get("/api/author")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["data"]["name"], "Blog Author")

    def test_admin_profile(self):
        make_admin(name="Jane", title="SRE")
        response = APIClient().get("/api/author")

        self.assertEqual(response.data["data"]["name"], "Jane")
        self.assertEqual(response.data["data"]["title"], "SRE")
        self.assertNotIn("email", response.data["data"])


class UserAdminTest(TestCase):
    def setUp(self):
        self.admin = make_admin()
        self.reader = make_user(name="Alice", email="alice@example.com")
        self.client = client_for(self.admin)

    def test_list_requires_admin(self):
        self.assertEqual(APIClient().get("/api/users").status_code, 401)
        self.assertEqual(client_for(self.reader).get("/api/users").status_code, 403)

    def test_list_search_and_comment_count(self):
        post = make_post(self.admin, make_category())
        Comment.objects.create(post=post, author=self.reader, content="one")
        Comment.objects.create(post=post, author=self.reader, content="two", is_deleted=True)

        response = self.client.get("/api/users", {"search": "alice"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["meta"]["total"], 1)
        self.assertEqual(response.data["data"][0]["comment_count"], 1)

    def test_suspend_and_reactivate(self):
        response = self.client.patch(
            f"/api/users/{self.reader.pk}/status", {"status": "SUSPENDED"}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.reader.refresh_from_db()
        self.assertTrue(self.reader.is_suspended)

        filtered = self.client.get("/api/users", {"status": "suspended"})
        self.assertEqual([u["id"] for u in filtered.data["data"]], [self.reader.pk])

        self.client.patch(f"/api/users/{self.reader.pk}/status", {"status": "ACTIVE"}, format="json")
        self.reader.refresh_from_db()
        self.assertFalse(self.reader.is_suspended)

    def test_cannot_moderate_admins(self):
        other_admin = make_admin(email="other@example.com")

        own = self.client.patch(f"/api/users/{self.admin.pk}/status", {"status": "SUSPENDED"}, format="json")
        other = self.client.delete(f"/api/users/{other_admin.pk}")

        self.assertEqual(own.status_code, 403)
        self.assertEqual(other.status_code, 403)

    def test_delete_user(self):
        self.assertEqual(self.client.delete(f"/api/users/{self.reader.pk}").status_code, 204)
        self.assertFalse(User.objects.filter(pk=self.reader.pk).exists())
        self.assertEqual(self.client.delete("/api/users/9999").status_code, 404)

    def test_delete_user_drops_their_likes(self):
        category = make_category()
        quiet = make_post(self.admin, category, title="Quiet", view_count=5)
        liked = make_post(self.admin, category, title="Liked", like_count=1, view_count=1, featured=True)
        Like.objects.create(post=liked, user=self.reader)

        self.assertEqual(self.client.delete(f"/api/users/{self.reader.pk}").status_code, 204)

        liked.refresh_from_db()
        quiet.refresh_from_db()
        self.assertEqual(liked.like_count, 0)
        self.assertFalse(liked.featured)
        self.assertTrue(quiet.featured)

    def test_bad_trend_period(self):
        response = self.client.get("/api/users/signup-trend", {"period": "hourly"})
        self.assertEqual(response.status_code, 400)


@freezegun.freeze_time("2024-05-15 12:00:00")
class SignupStatsTest(TestCase):
    def _user_at(self, email, moment):
        with freezegun.freeze_time(moment):
            return make_user(email=email)

    def test_user_stats(self):
        self._user_at("a@example.com", "2024-05-15 08:00:00")
        self._user_at("b@example.com", "2024-05-14 08:00:00")
        self._user_at("c@example.com", "2024-05-08 08:00:00")
        self._user_at("d@example.com", "2024-04-20 08:00:00")
        make_user(email="e@example.com", status=User.Status.SUSPENDED)

        stats = user_stats()

        self.assertEqual(stats["total_users"], 5)
        self.assertEqual(stats["suspended_users"], 1)
        self.assertEqual(stats["active_users"], 4)
        self.assertEqual(stats["today_new_users"], 2)
        self.assertEqual(stats["yesterday_new_users"], 1)
        # 2024-05-15 is a Wednesday; the week starts on Monday the 13th
        self.assertEqual(stats["this_week_new_users"], 3)
        self.assertEqual(stats["last_week_new_users"], 1)
        self.assertEqual(stats["this_month_new_users"], 4)
        self.assertEqual(stats["last_month_new_users"], 1)

    def test_daily_trend(self):
        self._user_at("a@example.com", "2024-05-15 08:00:00")
        self._user_at("b@example.com", "2024-05-15 09:00:00")
        self._user_at("c@example.com", "2024-05-10 08:00:00")

        result = signup_trend("daily")

        self.assertEqual(len(result["trend"]), 14)
        self.assertEqual(result["trend"][0]["date"], "2024-05-02")
        self.assertEqual(result["trend"][-1], {"date": "2024-05-15", "count": 2})
        self.assertEqual(result["summary"]["total"], 3)
        self.assertEqual(result["summary"]["max"], {"date": "2024-05-15", "count": 2})

    def test_weekly_and_monthly_labels(self):
        weekly = signup_trend("weekly")
        monthly = signup_trend("monthly")

        self.assertEqual(len(weekly["trend"]), 8)
        self.assertEqual(weekly["trend"][-1]["date"], "5/13")
        self.assertEqual([p["date"] for p in monthly["trend"]][0], "2023-12")
        self.assertEqual(monthly["trend"][-1]["date"], "2024-05")

    def test_unknown_period(self):
        with self.assertRaises(ValueError):
            signup_trend("yearly")

    def test_pattern(self):
        self._user_at("a@example.com", "2024-05-15 08:00:00")
        self._user_at("b@example.com", "2024-05-08 08:00:00")
        self._user_at("c@example.com", "2024-05-01 08:00:00")
        self._user_at("d@example.com", "2024-05-13 08:00:00")

        result = signup_pattern()

        days = {entry["day"]: entry for entry in result["pattern"]}
        self.assertEqual(list(days), ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"])
        self.assertEqual(days["Wed"]["count"], 3)
        self.assertEqual(days["Mon"]["count"], 1)
        self.assertEqual(result["peak_day"], "Wed")

    def test_endpoint(self):
        response = client_for(make_admin()).get("/api/users/stats")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["data"]["total_users"], 1)
        self.assertEqual(
            response.data["data"]["last_month_new_users"], 0, msg="Admin was created today."
        )
