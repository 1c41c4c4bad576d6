from datetime import datetime, timezone

from django.core.management.base import BaseCommand

from accounts.models import User
from blog import content
from blog.models import Category, Post, Tag
from blog.services import refresh_featured_post


class Command(BaseCommand):
    help = "Seed a demo admin, categories, tags and posts"

    def add_arguments(self, parser):
        parser.add_argument("--email", default="admin@example.com", help="Demo admin email.")
        parser.add_argument("--password", default="changeme", help="Demo admin password.")

    def handle(self, *args, **options):
        admin = User.objects.filter(email__iexact=options["email"]).first()
        if admin is None:
            admin = User.objects.create_superuser(options["email"], options["password"], name="Demo Admin")

        categories = {
            "devops": ("DevOps", "Pipelines, containers and the glue between them.", "#2563eb"),
            "python": ("Python", "Notes from writing Python every day.", "#16a34a"),
        }
        category_objs = {}
        for slug, (name, description, color) in categories.items():
            c, _ = Category.objects.update_or_create(
                slug=slug, defaults={"name": name, "description": description, "color": color}
            )
            category_objs[slug] = c

        tags = {
            "docker": "Docker",
            "ci": "CI",
            "django": "Django",
            "testing": "Testing",
        }
        tag_objs = {}
        for slug, name in tags.items():
            t, _ = Tag.objects.update_or_create(slug=slug, defaults={"name": name})
            tag_objs[slug] = t

        posts = [
            dict(
                slug="smaller-docker-images",
                title="Smaller Docker images without the guesswork",
                excerpt="Multi-stage builds, layer ordering and what actually ends up in the final image.",
                content="<h2>Layers</h2><p>Order matters.</p><pre><code>FROM python:3.12-slim\nCOPY . /app</code></pre><h2>Stages</h2><p>Build once, copy the result.</p>",
                category="devops",
                tags=["docker", "ci"],
                published_at=datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc),
            ),
            dict(
                slug="testing-django-apis",
                title="Testing Django APIs with pytest",
                excerpt="Fixtures, the test client and keeping the database out of the way.",
                content="<h2>Fixtures</h2><p>Start small.</p><h2>Clients</h2><p>One request per test.</p>",
                category="python",
                tags=["django", "testing"],
                published_at=datetime(2024, 5, 14, 9, 0, tzinfo=timezone.utc),
            ),
            dict(
                slug="ci-caching",
                title="Caching in CI pipelines",
                excerpt="What to cache, what to rebuild and how to tell the difference.",
                content="<h2>Keys</h2><p>Hash the lockfile.</p><h2>Misses</h2><p>Measure before tuning.</p>",
                category="devops",
                tags=["ci"],
                published_at=datetime(2024, 8, 20, 9, 0, tzinfo=timezone.utc),
            ),
        ]
        for entry in posts:
            p, _ = Post.objects.update_or_create(
                slug=entry["slug"],
                defaults=dict(
                    title=entry["title"],
                    excerpt=entry["excerpt"],
                    content=entry["content"],
                    reading_time=content.reading_time(entry["content"]),
                    category=category_objs[entry["category"]],
                    author=admin,
                    status=Post.Status.PUBLIC,
                    published_at=entry["published_at"],
                ),
            )
            p.tags.set([tag_objs[slug] for slug in entry["tags"]])

        refresh_featured_post()
        self.stdout.write(self.style.SUCCESS("Seeded demo admin, categories, tags and posts."))
