import logging

from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from blogsite.net import client_ip_hash
from blogsite.pagination import paginate
from blogsite.permissions import IsAdmin, is_admin, require_active, require_login

from . import content, services
from .models import Bookmark, Post, PostView
from .serializers import (
    BookmarkSerializer,
    BulkDeleteSerializer,
    PostDetailSerializer,
    PostLinkSerializer,
    PostListSerializer,
    PostWriteSerializer,
)

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "published_at": ("-published_at", "-id"),
    "updated_at": ("-updated_at", "-id"),
    "view_count": ("-view_count", "-published_at"),
    "like_count": ("-like_count", "-published_at"),
}

STATUS_FILTERS = ("PUBLIC", "PRIVATE", "PUBLISHED", "ALL")

RELATED_LIMIT = 3
RELATED_CANDIDATES = 20


def _posts():
    return Post.objects.select_related("author", "category").prefetch_related("tags")


def _visible_post(request, **lookup) -> Post:
    """Fetch a post; private posts do not exist for non-admins."""
    try:
        post = _posts().get(**lookup)
    except Post.DoesNotExist:
        raise NotFound("Post not found.")
    if not post.is_public and not is_admin(request.user):
        raise NotFound("Post not found.")
    return post


def _post_by_id(key) -> Post:
    try:
        pk = int(key)
    except (TypeError, ValueError):
        raise NotFound("Post not found.")
    try:
        return _posts().get(pk=pk)
    except Post.DoesNotExist:
        raise NotFound("Post not found.")


def _filtered_posts(request):
    qs = _posts()
    params = request.query_params
    admin = is_admin(request.user)

    status_filter = (params.get("status") or "").upper()
    if status_filter and status_filter not in STATUS_FILTERS:
        raise ValidationError({"status": f"Must be one of {', '.join(STATUS_FILTERS)}."})
    if status_filter not in ("", Post.Status.PUBLIC) and not admin:
        raise PermissionDenied("Only admins can list private posts.")

    if status_filter == Post.Status.PRIVATE:
        qs = qs.filter(status=Post.Status.PRIVATE)
    elif status_filter == Post.Status.PUBLIC or (not status_filter and not admin):
        qs = qs.filter(status=Post.Status.PUBLIC)

    if params.get("category"):
        qs = qs.filter(category__slug=params["category"])
    if params.get("tag"):
        qs = qs.filter(tags__slug=params["tag"])

    search = (params.get("search") or "").strip()
    if search:
        if len(search) > 100:
            raise ValidationError({"search": "Search terms are limited to 100 characters."})
        qs = qs.filter(Q(title__icontains=search) | Q(excerpt__icontains=search))

    sort_by = params.get("sort_by") or "published_at"
    if sort_by not in SORT_FIELDS:
        raise ValidationError({"sort_by": f"Must be one of {', '.join(SORT_FIELDS)}."})
    return qs.order_by(*SORT_FIELDS[sort_by])


@api_view(["GET", "POST"])
def post_collection(request):
    if request.method == "GET":
        posts, meta = paginate(request, _filtered_posts(request))
        return Response({"data": PostListSerializer(posts, many=True).data, "meta": meta})

    if not is_admin(request.user):
        require_login(request)
        raise PermissionDenied("Only admins can create posts.")

    s = PostWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data

    post = services.create_post(
        request.user,
        title=data["title"],
        content_html=data["content"],
        category=data["category"],
        excerpt=data.get("excerpt") or content.make_excerpt(data["content"]),
        cover_image=data.get("cover_image", ""),
        status=data.get("status", Post.Status.PUBLIC),
        published_at=data.get("published_at"),
        tags=data.get("tags"),
    )
    return Response({"data": PostDetailSerializer(post).data}, status=status.HTTP_201_CREATED)


@api_view(["GET"])
def featured_posts(request):
    posts = _posts().filter(status=Post.Status.PUBLIC, featured=True).order_by("-published_at")[:5]
    return Response({"data": PostListSerializer(posts, many=True).data})


@api_view(["GET"])
def top_viewed_post(request):
    qs = _posts().filter(status=Post.Status.PUBLIC)
    if request.query_params.get("category"):
        qs = qs.filter(category__slug=request.query_params["category"])
    post = qs.order_by("-view_count", "-published_at").first()
    return Response({"data": PostListSerializer(post).data if post else None})


@api_view(["GET"])
@permission_classes([IsAdmin])
def post_admin_detail(request, pk: int):
    post = _post_by_id(pk)
    return Response({"data": PostDetailSerializer(post).data})


def _update_post(request, post: Post) -> Post:
    s = PostWriteSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    data = s.validated_data

    if "title" in data and data["title"] != post.title:
        post.title = data["title"]
        post.slug = services.unique_slug(Post, post.title, "post", exclude_pk=post.pk)
    if "content" in data:
        post.content = data["content"]
        post.reading_time = content.reading_time(post.content)
    for field in ("excerpt", "cover_image", "category", "status"):
        if field in data:
            setattr(post, field, data[field])
    if "published_at" in data:
        post.published_at = data["published_at"] or timezone.now()

    post.save()
    if "tags" in data:
        post.tags.set(data["tags"])
    services.link_images(post, post.content, post.cover_image)
    services.refresh_featured_post()
    return _posts().get(pk=post.pk)


@api_view(["GET", "PUT", "DELETE"])
def post_detail(request, key: str):
    """GET addresses a post by slug; PUT and DELETE address it by id."""
    if request.method == "GET":
        post = _visible_post(request, slug=key)
        if services.register_view(post, PostView, client_ip_hash(request)):
            services.refresh_featured_post()
            post.refresh_from_db(fields=["view_count", "featured"])
        return Response({"data": PostDetailSerializer(post).data})

    require_login(request)
    post = _post_by_id(key)
    if not is_admin(request.user) and post.author_id != request.user.pk:
        raise PermissionDenied("You cannot modify this post.")

    if request.method == "PUT":
        post = _update_post(request, post)
        return Response({"data": PostDetailSerializer(post).data})

    services.delete_post(post)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["POST"])
@permission_classes([IsAdmin])
def bulk_delete_posts(request):
    s = BulkDeleteSerializer(data=request.data)
    s.is_valid(raise_exception=True)

    posts = list(Post.objects.filter(pk__in=s.validated_data["ids"]))
    if not posts:
        raise NotFound("No matching posts to delete.")

    for post in posts:
        services.delete_post(post)
    logger.info("Bulk deleted %d posts", len(posts))
    return Response({"data": {"deleted_count": len(posts)}})


@api_view(["GET"])
def adjacent_posts(request, slug: str):
    post = _visible_post(request, slug=slug)
    pivot = post.published_at or timezone.now()
    public = _posts().filter(status=Post.Status.PUBLIC).exclude(pk=post.pk)

    prev_post = public.filter(
        Q(published_at__lt=pivot) | Q(published_at=pivot, id__lt=post.pk)
    ).order_by("-published_at", "-id").first()
    next_post = public.filter(
        Q(published_at__gt=pivot) | Q(published_at=pivot, id__gt=post.pk)
    ).order_by("published_at", "id").first()
    return Response(
        {
            "data": {
                "prev": PostLinkSerializer(prev_post).data if prev_post else None,
                "next": PostLinkSerializer(next_post).data if next_post else None,
            }
        }
    )


@api_view(["GET"])
def related_posts(request, slug: str):
    """Score candidates: +2 for the same category, +1 per shared tag."""
    post = _visible_post(request, slug=slug)
    tag_ids = {tag.pk for tag in post.tags.all()}

    candidates = list(
        _posts()
        .filter(status=Post.Status.PUBLIC)
        .filter(Q(category_id=post.category_id) | Q(tags__in=tag_ids))
        .exclude(pk=post.pk)
        .distinct()
        .order_by("-published_at", "-id")[:RELATED_CANDIDATES]
    )

    def score(candidate):
        points = 2 if candidate.category_id == post.category_id else 0
        return points + len(tag_ids & {tag.pk for tag in candidate.tags.all()})

    # candidates are newest first and sorted() is stable
    ranked = sorted(candidates, key=score, reverse=True)[:RELATED_LIMIT]
    return Response({"data": PostLinkSerializer(ranked, many=True).data})


@api_view(["GET", "POST"])
def post_like(request, pk: int):
    post = _visible_post(request, pk=pk)
    user = request.user if request.user.is_authenticated else None
    ip_hash = None if user else client_ip_hash(request)

    if request.method == "GET":
        liked = services.has_liked(post, user=user, ip_hash=ip_hash)
        return Response({"data": {"liked": liked, "like_count": post.like_count}})

    if not post.is_public:
        raise PermissionDenied("Private posts cannot be liked.")
    if user is not None:
        require_active(request)

    liked, like_count = services.toggle_like(post, user=user, ip_hash=ip_hash)
    return Response({"data": {"liked": liked, "like_count": like_count}})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def bookmark_list(request):
    qs = (
        Bookmark.objects.filter(user=request.user, post__status=Post.Status.PUBLIC)
        .select_related("post__author", "post__category")
        .prefetch_related("post__tags")
        .annotate(comment_count=Count("post__comments", filter=Q(post__comments__is_deleted=False)))
        .order_by("-created_at", "-id")
    )
    bookmarks, meta = paginate(request, qs)
    return Response({"data": BookmarkSerializer(bookmarks, many=True).data, "meta": meta})


@api_view(["GET", "POST", "DELETE"])
def bookmark_detail(request, post_id: int):
    if request.method == "GET":
        if not request.user.is_authenticated:
            return Response({"data": {"bookmarked": False}})
        bookmarked = Bookmark.objects.filter(post_id=post_id, user=request.user).exists()
        return Response({"data": {"bookmarked": bookmarked}})

    if request.method == "DELETE":
        require_login(request)
        deleted, _ = Bookmark.objects.filter(post_id=post_id, user=request.user).delete()
        if not deleted:
            raise NotFound("Bookmark not found.")
        return Response(status=status.HTTP_204_NO_CONTENT)

    require_active(request)
    post = get_object_or_404(Post, pk=post_id)
    if not post.is_public:
        raise PermissionDenied("Private posts cannot be bookmarked.")

    deleted, _ = Bookmark.objects.filter(post=post, user=request.user).delete()
    if not deleted:
        Bookmark.objects.create(post=post, user=request.user)
    return Response({"data": {"bookmarked": not deleted}})
