from django.contrib.sites.shortcuts import get_current_site
from django.db.models import Count, Q, Sum
from django.http import HttpResponse
from django.urls import reverse
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.response import Response

from blog.models import Bookmark, Category, Draft, Like, Post, Tag
from blog.serializers import PostLinkSerializer
from comments.models import Comment
from comments.serializers import CommentAdminSerializer
from pages.models import Page
from uploads.models import Image

from .permissions import IsAdmin

RECENT_LIMIT = 5


@api_view(["GET"])
@throttle_classes([])
def health(request):
    return Response({"status": "ok", "timestamp": timezone.now()})


@api_view(["GET"])
def api_index(request):
    return Response(
        {
            "name": "blog-api",
            "endpoints": {
                "auth": "/api/auth",
                "posts": "/api/posts",
                "categories": "/api/categories",
                "tags": "/api/tags",
                "comments": "/api/comments",
                "bookmarks": "/api/bookmarks",
                "drafts": "/api/drafts",
                "pages": "/api/pages",
                "upload": "/api/upload",
                "backups": "/api/backups",
                "visitors": "/api/visitors",
                "users": "/api/users",
                "dashboard": "/api/stats/dashboard",
            },
        }
    )


@api_view(["GET"])
@permission_classes([IsAdmin])
def dashboard_stats(request):
    posts = Post.objects.aggregate(
        total=Count("id"),
        public=Count("id", filter=Q(status=Post.Status.PUBLIC)),
        private=Count("id", filter=Q(status=Post.Status.PRIVATE)),
        views=Sum("view_count"),
        likes=Sum("like_count"),
    )
    comments = Comment.objects.aggregate(
        total=Count("id", filter=Q(is_deleted=False)),
        guest=Count("id", filter=Q(is_deleted=False, author__isnull=True)),
        private=Count("id", filter=Q(is_deleted=False, is_private=True)),
    )
    pages = Page.objects.aggregate(
        total=Count("id"),
        published=Count("id", filter=Q(status=Page.Status.PUBLISHED)),
        views=Sum("view_count"),
    )

    categories = Category.objects.annotate(post_count=Count("posts")).order_by("-post_count", "name")
    tags = Tag.objects.annotate(post_count=Count("posts")).order_by("-post_count", "name")
    recent_posts = Post.objects.select_related("category")[:RECENT_LIMIT]
    recent_drafts = Draft.objects.filter(author=request.user)[:RECENT_LIMIT]
    recent_comments = Comment.objects.filter(is_deleted=False).select_related("author", "post")[:RECENT_LIMIT]

    return Response(
        {
            "data": {
                "posts": {
                    "total": posts["total"],
                    "public": posts["public"],
                    "private": posts["private"],
                },
                "drafts": Draft.objects.count(),
                "comments": comments,
                "views": posts["views"] or 0,
                "likes": posts["likes"] or 0,
                "bookmarks": Bookmark.objects.count(),
                "anonymous_likes": Like.objects.filter(user__isnull=True).count(),
                "pages": {
                    "total": pages["total"],
                    "published": pages["published"],
                    "views": pages["views"] or 0,
                },
                "images": Image.objects.count(),
                "categories": [
                    {"id": c.id, "name": c.name, "slug": c.slug, "post_count": c.post_count}
                    for c in categories
                ],
                "tags": [
                    {"id": t.id, "name": t.name, "slug": t.slug, "post_count": t.post_count}
                    for t in tags
                ],
                "recent_posts": PostLinkSerializer(recent_posts, many=True).data,
                "recent_drafts": [
                    {"id": d.id, "title": d.title, "updated_at": d.updated_at} for d in recent_drafts
                ],
                "recent_comments": CommentAdminSerializer(recent_comments, many=True).data,
            }
        }
    )


def robots_txt(request):
    site = get_current_site(request)
    scheme = "https" if request.is_secure() else "http"
    lines = [
        "User-agent: *",
        "Allow: /",
        "Disallow: /api/",
        "Disallow: /admin/",
        "",
        f"Sitemap: {scheme}://{site.domain}{reverse('sitemap')}",
    ]
    return HttpResponse("\n".join(lines) + "\n", content_type="text/plain")
