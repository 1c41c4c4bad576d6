"""Tests for JSON backups, restores and their management commands."""

import json
from io import StringIO
from unittest import mock

from django.core.files.base import ContentFile
from django.core.management import call_command
from django.core.management.base import CommandError
from django.core.serializers.json import DjangoJSONEncoder
from django.test import TestCase, TransactionTestCase

from accounts.models import User
from backups import services
from blog.models import Bookmark, Like, Post
from comments.models import Comment
from pages.models import Page

from .helpers import client_for, make_admin, make_category, make_post, make_tag, make_user


class BackupData:
    def setUp(self):
        self.admin = make_admin()
        self.reader = make_user()
        category = make_category()
        self.post = make_post(self.admin, category, title="Kept")
        self.post.tags.add(make_tag())
        parent = Comment.objects.create(post=self.post, author=self.reader, content="Top")
        Comment.objects.create(post=self.post, author=self.admin, content="Reply", parent=parent)
        Bookmark.objects.create(post=self.post, user=self.reader)
        Like.objects.create(post=self.post, user=self.reader)
        Like.objects.create(post=self.post, ip_hash="a" * 64)
        Page.objects.create(author=self.admin, title="About", slug="about", content="x")
        self.client = client_for(self.admin)

    def tearDown(self):
        store = services.backup_storage()
        for name in store.listdir("")[1]:
            store.delete(name)


class BackupTestCase(BackupData, TestCase):
    pass


class BackupApiTest(BackupTestCase):
    def test_create_and_list(self):
        created = self.client.post("/api/backups", {"description": "before upgrade"}, format="json")

        self.assertEqual(created.status_code, 201)
        name = created.data["data"]["file_name"]
        self.assertRegex(name, r"^backup_\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z\.json$")
        self.assertEqual(
            created.data["data"]["stats"],
            {
                "users": 2,
                "categories": 1,
                "tags": 1,
                "pages": 1,
                "posts": 1,
                "drafts": 0,
                "comments": 2,
                "bookmarks": 1,
                "likes": 1,
                "images": 0,
            },
        )

        listing = self.client.get("/api/backups")
        self.assertEqual([b["file_name"] for b in listing.data["data"]], [name])
        self.assertEqual(listing.data["data"][0]["description"], "before upgrade")

    def test_file_has_no_passwords(self):
        name = services.create_backup()["file_name"]

        payload = services.read_backup(name)

        self.assertEqual(payload["version"], "1.0")
        for record in payload["data"]["users"]:
            self.assertNotIn("password", record["fields"])
        self.assertEqual(payload["data"]["posts"][0]["fields"]["tags"], list(self.post.tags.values_list("pk", flat=True)))

    def test_info_download_delete(self):
        name = services.create_backup("nightly")["file_name"]

        info = self.client.get(f"/api/backups/{name}/info")
        download = self.client.get(f"/api/backups/{name}")

        self.assertEqual(info.data["data"]["description"], "nightly")
        self.assertEqual(info.data["data"]["stats"]["posts"], 1)
        self.assertEqual(download.status_code, 200)
        self.assertEqual(json.loads(b"".join(download.streaming_content))["description"], "nightly")
        self.assertEqual(self.client.delete(f"/api/backups/{name}").status_code, 204)
        self.assertEqual(self.client.get(f"/api/backups/{name}/info").status_code, 404)

    def test_bad_names(self):
        self.assertEqual(self.client.get("/api/backups/settings.py/info").status_code, 400)
        self.assertEqual(
            self.client.delete("/api/backups/backup_2020-01-01T00-00-00-000Z.json").status_code, 404
        )

    def test_admin_only(self):
        self.assertEqual(client_for(self.reader).get("/api/backups").status_code, 403)
        self.assertEqual(client_for().post("/api/backups").status_code, 401)


class RestoreTest(BackupTestCase):
    def test_restore_round_trip(self):
        name = services.create_backup()["file_name"]
        Post.objects.all().delete()
        make_user(email="new@example.com")

        response = self.client.post(f"/api/backups/{name}/restore")

        self.assertEqual(response.status_code, 200)
        data = response.data["data"]
        self.assertEqual(data["stats"]["posts"], 1)
        self.assertEqual(data["user"]["email"], self.admin.email)

        self.assertEqual(list(Post.objects.values_list("pk", flat=True)), [self.post.pk])
        self.assertEqual(Post.objects.get().tags.count(), 1)
        self.assertEqual(Comment.objects.filter(parent__isnull=False).count(), 1)
        self.assertFalse(User.objects.filter(email="new@example.com").exists())
        self.assertFalse(Like.objects.filter(ip_hash__isnull=False).exists())

        admin = User.objects.get(email=self.admin.email)
        self.assertTrue(admin.check_password("secret123"))
        self.assertFalse(User.objects.get(email=self.reader.email).has_usable_password())

        login = client_for().post(
            "/api/auth/login", {"email": self.admin.email, "password": "secret123"}, format="json"
        )
        self.assertEqual(login.status_code, 200)

    def test_admin_missing_from_backup(self):
        name = services.create_backup()["file_name"]
        other = make_admin(email="second@example.com", password="other123")

        response = client_for(other).post(f"/api/backups/{name}/restore")

        self.assertEqual(response.status_code, 200)
        restored = User.objects.get(email="second@example.com")
        self.assertTrue(restored.is_admin)
        self.assertTrue(restored.check_password("other123"))
        self.assertEqual(response.data["data"]["token"], restored.auth_token.key)

    def test_invalid_file(self):
        name = services.backup_storage().save("backup_broken.json", ContentFile(b'{"data": {}}'))

        response = self.client.post(f"/api/backups/{name}/restore")

        self.assertEqual(response.status_code, 400)
        self.assertTrue(Post.objects.exists())

    def test_wrong_section_contents(self):
        payload = services.build_backup()
        payload["data"]["tags"] = [{"model": "blog.post", "pk": 1, "fields": {}}]

        with self.assertRaises(services.InvalidBackup):
            services.restore_backup(payload)


class RestoreCommitTest(BackupData, TransactionTestCase):
    """Restores that only fail once foreign keys are checked."""

    def test_missing_category(self):
        payload = services.build_backup()
        for record in payload["data"]["posts"]:
            record["fields"]["category"] = 999
        body = json.dumps(payload, cls=DjangoJSONEncoder).encode("utf-8")
        name = services.backup_storage().save("backup_dangling.json", ContentFile(body))

        response = self.client.post(f"/api/backups/{name}/restore")

        self.assertEqual(response.status_code, 400)
        self.assertIn("missing records", response.data["message"])
        self.assertEqual(list(Post.objects.values_list("pk", flat=True)), [self.post.pk])
        self.assertEqual(Comment.objects.count(), 2)


class CommandTest(BackupTestCase):
    def setUp(self):
        super().setUp()
        input_patcher = mock.patch("builtins.input")
        self.mock_input = input_patcher.start()
        self.addCleanup(input_patcher.stop)

    def call_command(self, *args, **kwargs):
        outbuf = StringIO()
        call_command(*args, stdout=outbuf, **kwargs)
        return outbuf.getvalue().strip()

    def test_backupblog(self):
        out = self.call_command("backupblog", "--description", "cli")

        self.assertIn("Wrote backup_", out)
        self.assertEqual(services.list_backups()[0]["description"], "cli")

    def test_restoreblog_aborts(self):
        name = services.create_backup()["file_name"]
        Post.objects.all().delete()
        self.mock_input.return_value = "N\n"

        out = self.call_command("restoreblog", name)

        self.assertTrue(out.endswith("Aborted."))
        self.assertFalse(Post.objects.exists())

    def test_restoreblog_yes(self):
        name = services.create_backup()["file_name"]
        Post.objects.all().delete()

        out = self.call_command("restoreblog", name, "--yes", "--admin-email", self.admin.email)

        self.assertIn(f"Restored {name}", out)
        self.assertTrue(Post.objects.exists())
        self.assertTrue(User.objects.get(email=self.admin.email).check_password("secret123"))
        self.mock_input.assert_not_called()

    def test_restoreblog_unknown_file(self):
        with self.assertRaises(CommandError):
            self.call_command("restoreblog", "backup_missing.json", "--yes")
