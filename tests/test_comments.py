"""Tests for threaded comments, guest identities and moderation."""

from django.test import TestCase

from accounts.models import User
from blog.models import Post
from comments.models import Comment
from comments.serializers import DELETED_PLACEHOLDER

from .helpers import client_for, make_admin, make_category, make_post, make_user


class CommentTestCase(TestCase):
    def setUp(self):
        self.admin = make_admin()
        self.user = make_user()
        self.post = make_post(self.admin, make_category(), title="Discussed")
        self.url = f"/api/comments/post/{self.post.pk}"

    def guest_comment(self, content="Hi from a guest", password="pass1234", **extra):
        comment = Comment(post=self.post, content=content, guest_name="Guest", **extra)
        comment.set_guest_password(password)
        comment.save()
        return comment


class CreateCommentTest(CommentTestCase):
    def test_guest_comment(self):
        response = client_for().post(
            self.url, {"content": "Nice post", "guest_name": "Bob", "guest_password": "1234"}, format="json"
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["data"]["guest_name"], "Bob")
        self.assertNotIn("guest_password", response.data["data"])
        comment = Comment.objects.get()
        self.assertTrue(comment.check_guest_password("1234"))
        self.assertNotEqual(comment.guest_password, "1234")

    def test_guest_needs_name_and_password(self):
        no_name = client_for().post(self.url, {"content": "x", "guest_password": "1234"}, format="json")
        no_password = client_for().post(self.url, {"content": "x", "guest_name": "Bob"}, format="json")
        short = client_for().post(
            self.url, {"content": "x", "guest_name": "Bob", "guest_password": "12"}, format="json"
        )

        self.assertEqual(no_name.status_code, 400)
        self.assertEqual(no_password.status_code, 400)
        self.assertEqual(short.status_code, 400)

    def test_user_comment(self):
        response = client_for(self.user).post(self.url, {"content": "Mine"}, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["data"]["author"]["id"], self.user.pk)
        self.assertTrue(response.data["data"]["is_owner"])

    def test_private_comment_requires_login(self):
        response = client_for().post(
            self.url,
            {"content": "psst", "guest_name": "Bob", "guest_password": "1234", "is_private": True},
            format="json",
        )

        self.assertEqual(response.status_code, 401)

    def test_suspended_user(self):
        suspended = make_user(email="bad@example.com", status=User.Status.SUSPENDED)

        response = client_for(suspended).post(self.url, {"content": "spam"}, format="json")

        self.assertEqual(response.status_code, 403)

    def test_private_post(self):
        secret = make_post(self.admin, self.post.category, title="Secret", status=Post.Status.PRIVATE)

        response = client_for(self.user).post(f"/api/comments/post/{secret.pk}", {"content": "x"}, format="json")

        self.assertEqual(response.status_code, 404)

    def test_private_post_closed_to_admins(self):
        secret = make_post(self.admin, self.post.category, title="Secret", status=Post.Status.PRIVATE)

        response = client_for(self.admin).post(f"/api/comments/post/{secret.pk}", {"content": "x"}, format="json")

        self.assertEqual(response.status_code, 403)

    def test_too_long(self):
        response = client_for(self.user).post(self.url, {"content": "x" * 2001}, format="json")

        self.assertEqual(response.status_code, 400)

    def test_replies(self):
        parent = Comment.objects.create(post=self.post, author=self.user, content="Top")
        client = client_for(self.admin)

        reply = client.post(self.url, {"content": "Reply", "parent_id": parent.pk}, format="json")
        nested = client.post(self.url, {"content": "Deeper", "parent_id": reply.data["data"]["id"]}, format="json")
        missing = client.post(self.url, {"content": "Lost", "parent_id": 9999}, format="json")

        self.assertEqual(reply.status_code, 201)
        self.assertEqual(reply.data["data"]["parent"], parent.pk)
        self.assertEqual(nested.status_code, 400)
        self.assertEqual(missing.status_code, 404)

    def test_reply_to_deleted(self):
        parent = Comment.objects.create(post=self.post, author=self.user, content="Top", is_deleted=True)

        response = client_for(self.user).post(self.url, {"content": "x", "parent_id": parent.pk}, format="json")

        self.assertEqual(response.status_code, 400)


class ListCommentTest(CommentTestCase):
    def setUp(self):
        super().setUp()
        self.top = Comment.objects.create(post=self.post, author=self.user, content="Top")
        self.secret = Comment.objects.create(post=self.post, author=self.user, content="Secret", is_private=True)
        self.reply = Comment.objects.create(post=self.post, author=self.admin, content="Reply", parent=self.top)
        self.private_reply = Comment.objects.create(
            post=self.post, author=self.admin, content="Private reply", parent=self.top, is_private=True
        )

    def test_anonymous_view(self):
        response = client_for().get(self.url)

        comments = response.data["data"]["comments"]
        self.assertEqual([c["id"] for c in comments], [self.top.pk])
        self.assertEqual([r["id"] for r in comments[0]["replies"]], [self.reply.pk])
        self.assertEqual(response.data["data"]["total_count"], 2)

    def test_private_post_hidden(self):
        secret = make_post(self.admin, self.post.category, title="Secret", status=Post.Status.PRIVATE)
        Comment.objects.create(post=secret, author=self.admin, content="Hidden")
        url = f"/api/comments/post/{secret.pk}"

        self.assertEqual(client_for().get(url).status_code, 404)
        self.assertEqual(client_for(self.user).get(url).status_code, 404)
        admin_view = client_for(self.admin).get(url)
        self.assertEqual(admin_view.data["data"]["total_count"], 1)

    def test_author_sees_own_private(self):
        response = client_for(self.user).get(self.url)

        ids = [c["id"] for c in response.data["data"]["comments"]]
        self.assertEqual(ids, [self.secret.pk, self.top.pk])
        self.assertTrue(response.data["data"]["comments"][0]["is_owner"])

    def test_admin_sees_everything(self):
        response = client_for(self.admin).get(self.url)

        comments = response.data["data"]["comments"]
        self.assertEqual(len(comments), 2)
        self.assertEqual(len(comments[1]["replies"]), 2)
        self.assertEqual(response.data["data"]["total_count"], 4)

    def test_deleted_comment_masked(self):
        self.top.soft_delete()

        response = client_for().get(self.url)

        top = response.data["data"]["comments"][0]
        self.assertTrue(top["is_deleted"])
        self.assertEqual(top["content"], DELETED_PLACEHOLDER)
        self.assertIsNone(top["author"])
        self.assertEqual(len(top["replies"]), 1)

    def test_missing_post(self):
        self.assertEqual(client_for().get("/api/comments/post/9999").status_code, 404)


class EditCommentTest(CommentTestCase):
    def test_guest_edit_with_password(self):
        comment = self.guest_comment()
        url = f"/api/comments/{comment.pk}"

        missing = client_for().put(url, {"content": "Edited"}, format="json")
        wrong = client_for().put(url, {"content": "Edited", "guest_password": "nope"}, format="json")
        right = client_for().put(url, {"content": "Edited", "guest_password": "pass1234"}, format="json")

        self.assertEqual(missing.status_code, 400)
        self.assertEqual(wrong.status_code, 403)
        self.assertEqual(right.status_code, 200)
        self.assertEqual(right.data["data"]["content"], "Edited")

    def test_other_users_cannot_edit(self):
        comment = Comment.objects.create(post=self.post, author=self.admin, content="Admin's")

        response = client_for(self.user).put(f"/api/comments/{comment.pk}", {"content": "x"}, format="json")

        self.assertEqual(response.status_code, 403)

    def test_author_edits_privacy(self):
        comment = Comment.objects.create(post=self.post, author=self.user, content="Mine")

        response = client_for(self.user).put(
            f"/api/comments/{comment.pk}", {"content": "Mine, edited", "is_private": True}, format="json"
        )

        comment.refresh_from_db()
        self.assertEqual(response.status_code, 200)
        self.assertTrue(comment.is_private)

    def test_delete_without_replies(self):
        comment = self.guest_comment()

        response = client_for().delete(f"/api/comments/{comment.pk}", {"guest_password": "pass1234"}, format="json")

        self.assertEqual(response.data["data"], {"soft_deleted": False})
        self.assertFalse(Comment.objects.filter(pk=comment.pk).exists())

    def test_delete_with_replies_is_soft(self):
        comment = Comment.objects.create(post=self.post, author=self.user, content="Top")
        Comment.objects.create(post=self.post, author=self.admin, content="Reply", parent=comment)
        client = client_for(self.user)

        response = client.delete(f"/api/comments/{comment.pk}")
        again = client.delete(f"/api/comments/{comment.pk}")

        comment.refresh_from_db()
        self.assertEqual(response.data["data"], {"soft_deleted": True})
        self.assertTrue(comment.is_deleted)
        self.assertEqual(comment.content, "")
        self.assertEqual(again.status_code, 400)


class CommentAdminTest(CommentTestCase):
    def test_my_comments(self):
        Comment.objects.create(post=self.post, author=self.user, content="Mine")
        Comment.objects.create(post=self.post, author=self.admin, content="Theirs")

        response = client_for(self.user).get("/api/comments/me")

        self.assertEqual(response.data["meta"]["total"], 1)
        self.assertEqual(response.data["data"][0]["post"]["slug"], "discussed")

    def test_admin_listing(self):
        Comment.objects.create(post=self.post, author=self.user, content="Live")
        Comment.objects.create(post=self.post, author=self.user, content="Gone", is_deleted=True)
        client = client_for(self.admin)

        live = client.get("/api/comments/admin")
        everything = client.get("/api/comments/admin", {"include_deleted": "true"})

        self.assertEqual(live.data["meta"]["total"], 1)
        self.assertEqual(live.data["meta"]["limit"], 20)
        self.assertEqual(everything.data["meta"]["total"], 2)
        self.assertEqual(client_for(self.user).get("/api/comments/admin").status_code, 403)

    def test_admin_delete_removes_thread(self):
        parent = Comment.objects.create(post=self.post, author=self.user, content="Top")
        Comment.objects.create(post=self.post, author=self.user, content="Reply", parent=parent)

        response = client_for(self.admin).delete(f"/api/comments/admin/{parent.pk}")

        self.assertEqual(response.status_code, 204)
        self.assertFalse(Comment.objects.exists())
