from rest_framework.test import APIClient

from accounts.models import User
from blog.models import Category, Post, Tag


def make_user(email="reader@example.com", password="secret123", name="Reader", **extra):
    return User.objects.create_user(email, password, name=name, **extra)


def make_admin(email="admin@example.com", password="secret123", name="Admin", **extra):
    return User.objects.create_superuser(email, password, name=name, **extra)


def client_for(user=None):
    client = APIClient()
    if user is not None:
        client.force_authenticate(user=user)
    return client


def make_category(name="Python", slug="python", **extra):
    return Category.objects.create(name=name, slug=slug, **extra)


def make_tag(name="Django", slug="django"):
    return Tag.objects.create(name=name, slug=slug)


def make_post(author, category, title="Hello", slug=None, status=Post.Status.PUBLIC, **extra):
    extra.setdefault("content", "<p>Hello world</p>")
    return Post.objects.create(
        author=author,
        category=category,
        title=title,
        slug=slug or title.lower().replace(" ", "-"),
        status=status,
        **extra,
    )
