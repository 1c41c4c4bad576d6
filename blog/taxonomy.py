"""Category and tag endpoints."""

import logging

from django.db.models import Count, Q
from django.utils.text import slugify
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from blogsite.pagination import paginate
from blogsite.permissions import is_admin, require_admin

from .models import Category, Post, Tag
from .serializers import CategorySerializer, PostListSerializer, TagSerializer

logger = logging.getLogger(__name__)

PUBLIC_POSTS = Q(posts__status=Post.Status.PUBLIC)
PRIVATE_POSTS = Q(posts__status=Post.Status.PRIVATE)


def _get(model, **lookup):
    try:
        return model.objects.get(**lookup)
    except (model.DoesNotExist, ValueError):
        raise NotFound(f"{model._meta.verbose_name.capitalize()} not found.")


def _slug_for(model, data, instance=None):
    if data.get("slug"):
        slug = data["slug"]
    elif "name" in data:
        slug = slugify(data["name"])
        if not slug:
            raise ValidationError({"slug": "A slug is required when the name has no Latin characters."})
    else:
        return None

    if model.objects.filter(slug=slug).exclude(pk=getattr(instance, "pk", None)).exists():
        raise ValidationError({"slug": "This slug is already in use."})
    return slug


def _create(request, model, serializer_class):
    require_admin(request)
    s = serializer_class(data=request.data)
    s.is_valid(raise_exception=True)
    obj = s.save(slug=_slug_for(model, s.validated_data))
    logger.info("Created %s %s", model._meta.model_name, obj.slug)
    return Response({"data": serializer_class(obj).data}, status=status.HTTP_201_CREATED)


def _update(request, obj, serializer_class):
    require_admin(request)
    s = serializer_class(obj, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    slug = _slug_for(type(obj), s.validated_data, instance=obj)
    obj = s.save(**({"slug": slug} if slug else {}))
    return Response({"data": serializer_class(obj).data})


def _posts_of(request, **lookup):
    qs = Post.objects.filter(**lookup).select_related("author", "category").prefetch_related("tags")
    if not is_admin(request.user):
        qs = qs.filter(status=Post.Status.PUBLIC)
    return paginate(request, qs.order_by("-published_at", "-id"))


def _categories(request):
    qs = Category.objects.annotate(post_count=Count("posts", filter=PUBLIC_POSTS))
    if is_admin(request.user):
        qs = qs.annotate(private_post_count=Count("posts", filter=PRIVATE_POSTS))
    return qs


@api_view(["GET", "POST"])
def category_collection(request):
    if request.method == "POST":
        return _create(request, Category, CategorySerializer)
    categories = _categories(request).order_by("-post_count", "name")
    return Response({"data": CategorySerializer(categories, many=True).data})


@api_view(["GET", "PUT", "DELETE"])
def category_detail(request, key: str):
    """GET addresses a category by slug; PUT and DELETE address it by id."""
    if request.method == "GET":
        try:
            category = _categories(request).get(slug=key)
        except Category.DoesNotExist:
            raise NotFound("Category not found.")
        return Response({"data": CategorySerializer(category).data})

    require_admin(request)
    category = _get(Category, pk=key)
    if request.method == "PUT":
        return _update(request, category, CategorySerializer)

    if category.posts.exists():
        raise ValidationError({"category": "Move or delete this category's posts first."})
    category.delete()
    logger.info("Deleted category %s", key)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET"])
def category_posts(request, slug: str):
    category = _get(Category, slug=slug)
    posts, meta = _posts_of(request, category=category)
    meta["category"] = CategorySerializer(category).data
    return Response({"data": PostListSerializer(posts, many=True).data, "meta": meta})


@api_view(["GET", "POST"])
def tag_collection(request):
    if request.method == "POST":
        return _create(request, Tag, TagSerializer)
    tags = Tag.objects.annotate(post_count=Count("posts", filter=PUBLIC_POSTS)).order_by("name")
    return Response({"data": TagSerializer(tags, many=True).data})


@api_view(["GET", "PUT", "DELETE"])
def tag_detail(request, key: str):
    """GET addresses a tag by slug; PUT and DELETE address it by id."""
    if request.method == "GET":
        try:
            tag = Tag.objects.annotate(post_count=Count("posts", filter=PUBLIC_POSTS)).get(slug=key)
        except Tag.DoesNotExist:
            raise NotFound("Tag not found.")
        return Response({"data": TagSerializer(tag).data})

    require_admin(request)
    tag = _get(Tag, pk=key)
    if request.method == "PUT":
        return _update(request, tag, TagSerializer)

    tag.delete()
    logger.info("Deleted tag %s", key)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET"])
def tag_posts(request, slug: str):
    tag = _get(Tag, slug=slug)
    posts, meta = _posts_of(request, tags=tag)
    meta["tag"] = TagSerializer(tag).data
    return Response({"data": PostListSerializer(posts, many=True).data, "meta": meta})
