"""JSON backups of every blog record, and restore from them.

A backup file looks like::

    {"version": "1.0", "description": "...", "created_at": "...",
     "data": {"users": [...], "categories": [...], ...}}

where each section is a list of records in Django's "python" serialization
format. Restores keep primary keys, so foreign keys survive the round trip.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone as dt_timezone

from django.core import serializers
from django.core.files.base import ContentFile
from django.core.files.storage import storages
from django.core.management.color import no_style
from django.core.serializers.base import DeserializationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import IntegrityError, connection, transaction
from django.utils import timezone
from rest_framework.authtoken.models import Token

from accounts.models import User
from blog.models import Bookmark, Category, Draft, Like, Post, PostView, Tag
from blogsite.conf import settings
from comments.models import Comment
from pages.models import Page, PageView
from uploads.models import Image

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"

NAME_RE = re.compile(r"^backup_[\w.-]+\.json$")
STAMP_RE = re.compile(r"^backup_(\d{4})-(\d{2})-(\d{2})T(\d{2})-(\d{2})-(\d{2})-(\d{3})Z\.json$")

USER_SECRET_FIELDS = ("password", "last_login")

# Section name and model, in insertion order
SECTIONS = (
    ("users", User),
    ("categories", Category),
    ("tags", Tag),
    ("pages", Page),
    ("posts", Post),
    ("drafts", Draft),
    ("comments", Comment),
    ("bookmarks", Bookmark),
    ("likes", Like),
    ("images", Image),
)

# Deletion order for a restore, children first
WIPE_ORDER = (
    Bookmark,
    Like,
    PostView,
    PageView,
    Comment,
    Image,
    Post,
    Draft,
    Page,
    Tag,
    Category,
    Token,
    User,
)


class BackupError(Exception):
    pass


class InvalidBackup(BackupError):
    pass


class BackupNotFound(BackupError):
    pass


def backup_storage():
    return storages[settings.BLOG_BACKUP_STORAGE]


def backup_name(moment: datetime) -> str:
    moment = moment.astimezone(dt_timezone.utc)
    return f"backup_{moment:%Y-%m-%dT%H-%M-%S}-{moment.microsecond // 1000:03d}Z.json"


def created_at_from_name(name: str) -> datetime | None:
    match = STAMP_RE.match(name)
    if not match:
        return None
    year, month, day, hour, minute, second, millis = (int(part) for part in match.groups())
    return datetime(year, month, day, hour, minute, second, millis * 1000, tzinfo=dt_timezone.utc)


def check_name(name: str) -> str:
    if not NAME_RE.match(name or ""):
        raise InvalidBackup(f"Not a backup file name: {name}")
    return name


def _queryset(section, model):
    qs = model._default_manager.order_by("pk")
    if section == "likes":
        # anonymous likes are tied to IP hashes and are not kept
        qs = qs.filter(user__isnull=False)
    return qs


def _dump(section, model) -> list[dict]:
    records = serializers.serialize("python", _queryset(section, model))
    if section == "users":
        for record in records:
            for field in USER_SECRET_FIELDS:
                record["fields"].pop(field, None)
    return records


def build_backup(description: str = "") -> dict:
    return {
        "version": BACKUP_VERSION,
        "description": description or "",
        "created_at": timezone.now(),
        "data": {section: _dump(section, model) for section, model in SECTIONS},
    }


def section_counts(payload: dict) -> dict:
    data = payload.get("data") or {}
    return {section: len(data.get(section) or []) for section, _ in SECTIONS}


def create_backup(description: str = "") -> dict:
    payload = build_backup(description)
    body = json.dumps(payload, cls=DjangoJSONEncoder, ensure_ascii=False, indent=2)
    name = backup_storage().save(backup_name(payload["created_at"]), ContentFile(body.encode("utf-8")))
    counts = section_counts(payload)
    logger.info("Created backup %s %s", name, counts)
    return {
        "file_name": name,
        "created_at": payload["created_at"],
        "description": payload["description"],
        "stats": counts,
    }


def read_backup(name: str) -> dict:
    check_name(name)
    store = backup_storage()
    if not store.exists(name):
        raise BackupNotFound(f"Backup not found: {name}")
    with store.open(name, "rb") as fh:
        try:
            payload = json.loads(fh.read().decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise InvalidBackup(f"{name} is not valid JSON") from exc
    validate_payload(payload)
    return payload


def validate_payload(payload) -> None:
    if not isinstance(payload, dict) or "version" not in payload or not isinstance(payload.get("data"), dict):
        raise InvalidBackup("Backup files need a version and a data section.")


def list_backups() -> list[dict]:
    store = backup_storage()
    if not store.exists(""):
        return []
    _, files = store.listdir("")

    backups = []
    for name in files:
        if not NAME_RE.match(name):
            continue
        try:
            description = read_backup(name).get("description") or ""
        except BackupError:
            logger.warning("Skipping unreadable backup %s", name)
            description = ""
        backups.append(
            {
                "file_name": name,
                "size": store.size(name),
                "created_at": created_at_from_name(name) or store.get_modified_time(name),
                "description": description,
            }
        )
    backups.sort(key=lambda item: item["created_at"], reverse=True)
    return backups


def backup_info(name: str) -> dict:
    payload = read_backup(name)
    return {
        "file_name": name,
        "version": payload["version"],
        "description": payload.get("description") or "",
        "created_at": payload.get("created_at"),
        "size": backup_storage().size(name),
        "stats": section_counts(payload),
    }


def delete_backup(name: str) -> None:
    check_name(name)
    store = backup_storage()
    if not store.exists(name):
        raise BackupNotFound(f"Backup not found: {name}")
    store.delete(name)
    logger.info("Deleted backup %s", name)


def reset_sequences() -> None:
    models = [model for _, model in SECTIONS] + [Post.tags.through, Draft.tags.through]
    statements = connection.ops.sequence_reset_sql(no_style(), models)
    if statements:
        with connection.cursor() as cursor:
            for sql in statements:
                cursor.execute(sql)


def _records(payload, section, model) -> list[dict]:
    records = payload["data"].get(section) or []
    if not isinstance(records, list):
        raise InvalidBackup(f"Section {section} must be a list.")
    label = model._meta.label_lower
    for record in records:
        if not isinstance(record, dict) or record.get("model") != label:
            raise InvalidBackup(f"Section {section} holds records that are not {label}.")
    if section == "comments":
        # parents before replies
        records = sorted(records, key=lambda r: r.get("fields", {}).get("parent") is not None)
    return records


def restore_backup(payload: dict, keep_admin: User | None = None) -> dict:
    """Replace every blog record with the contents of ``payload``.

    ``keep_admin`` is the account performing the restore. It keeps its
    password when its email is in the backup and is re-created otherwise;
    every other restored account gets an unusable password. Returns the
    per-section counts and, with ``keep_admin``, a fresh token for it.
    """
    validate_payload(payload)
    admin_email = keep_admin.email.lower() if keep_admin else None
    admin_snapshot = (
        {"email": keep_admin.email, "name": keep_admin.name, "password": keep_admin.password}
        if keep_admin
        else None
    )

    with transaction.atomic():
        for model in WIPE_ORDER:
            model._default_manager.all().delete()

        counts = {}
        for section, model in SECTIONS:
            records = _records(payload, section, model)
            try:
                for deserialized in serializers.deserialize("python", records):
                    obj = deserialized.object
                    if section == "users":
                        if admin_email and obj.email.lower() == admin_email:
                            obj.password = admin_snapshot["password"]
                            obj.role = User.Role.ADMIN
                        else:
                            obj.set_unusable_password()
                    deserialized.save()
            except (DeserializationError, IntegrityError) as exc:
                raise InvalidBackup(f"Could not restore {section}: {exc}") from exc
            counts[section] = len(records)

        # foreign keys are checked at commit on deferred backends
        try:
            connection.check_constraints()
        except IntegrityError as exc:
            raise InvalidBackup(f"Backup references missing records: {exc}") from exc

        reset_sequences()

        admin = token = None
        if admin_snapshot:
            admin = User.objects.filter(email__iexact=admin_email).first()
            if admin is None:
                admin = User(
                    email=admin_snapshot["email"],
                    name=admin_snapshot["name"],
                    password=admin_snapshot["password"],
                    role=User.Role.ADMIN,
                )
                admin.save()
                logger.warning("Restoring admin %s was missing from the backup; re-created", admin.email)
            token = Token.objects.create(user=admin)

    logger.warning("Restored backup %s", counts)
    return {
        "restored_at": timezone.now(),
        "stats": counts,
        "token": token.key if token else None,
        "user": admin,
    }
