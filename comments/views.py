import logging

from django.db.models import Count, Prefetch, Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotAuthenticated, NotFound, PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from blog.models import Post
from blogsite.net import client_ip_hash
from blogsite.pagination import paginate
from blogsite.permissions import IsAdmin, is_admin, require_active

from .models import Comment
from .serializers import (
    CommentAdminSerializer,
    CommentCreateSerializer,
    CommentSerializer,
    CommentUpdateSerializer,
)

logger = logging.getLogger(__name__)


def _visibility(user) -> Q:
    """Private comments are shown to admins and to their own author."""
    if is_admin(user):
        return Q()
    if user and user.is_authenticated:
        return Q(is_private=False) | Q(author=user)
    return Q(is_private=False)


def _thread(post, user):
    visible = _visibility(user)
    replies = (
        Comment.objects.filter(visible)
        .select_related("author")
        .annotate(reply_count=Count("replies"))
        .order_by("created_at", "id")
    )
    return (
        Comment.objects.filter(visible, post=post, parent__isnull=True)
        .select_related("author")
        .annotate(reply_count=Count("replies"))
        .prefetch_related(Prefetch("replies", queryset=replies, to_attr="visible_replies"))
        .order_by("-created_at", "-id")
    )


def _authorize(request, comment: Comment, password: str | None) -> bool:
    """Admins, the author, or a guest with the right password. Returns True for admin/author."""
    user = request.user
    if is_admin(user) or (user.is_authenticated and comment.author_id == user.pk):
        return True
    if not comment.is_guest:
        raise PermissionDenied("You cannot modify this comment.")
    if not password:
        raise ValidationError({"guest_password": "Enter the password for this comment."})
    if not comment.check_guest_password(password):
        raise PermissionDenied("The password does not match.")
    return False


@api_view(["GET", "POST"])
def post_comments(request, post_id: int):
    post = get_object_or_404(Post, pk=post_id)
    if not post.is_public and not is_admin(request.user):
        raise NotFound("Post not found.")
    context = {"viewer": request.user}

    if request.method == "GET":
        data = []
        for comment in _thread(post, request.user):
            item = CommentSerializer(comment, context=context).data
            item["replies"] = CommentSerializer(comment.visible_replies, many=True, context=context).data
            data.append(item)

        counted = Comment.objects.filter(post=post, is_deleted=False)
        if not is_admin(request.user):
            counted = counted.filter(is_private=False)
        return Response({"data": {"comments": data, "total_count": counted.count()}})

    if not post.is_public:
        raise PermissionDenied("Comments are closed on private posts.")
    s = CommentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data

    user = request.user if request.user.is_authenticated else None
    if user is not None:
        require_active(request)
    elif data["is_private"]:
        raise NotAuthenticated("Log in to leave a private comment.")

    parent = None
    if data.get("parent_id"):
        parent = Comment.objects.filter(pk=data["parent_id"], post=post).first()
        if parent is None:
            raise NotFound("The comment being replied to does not exist.")
        if parent.is_deleted:
            raise ValidationError({"parent_id": "Deleted comments cannot be replied to."})
        if parent.parent_id is not None:
            raise ValidationError({"parent_id": "Replies cannot be nested further."})

    comment = Comment(
        post=post,
        parent=parent,
        content=data["content"],
        is_private=data["is_private"],
        ip_hash=client_ip_hash(request),
    )
    if user is not None:
        comment.author = user
    else:
        guest_name = (data.get("guest_name") or "").strip()
        if not guest_name:
            raise ValidationError({"guest_name": "Guests must give a name."})
        if not data.get("guest_password"):
            raise ValidationError({"guest_password": "Guests must set a password of at least 4 characters."})
        comment.guest_name = guest_name
        comment.set_guest_password(data["guest_password"])
    comment.save()

    return Response(
        {"data": CommentSerializer(comment, context=context).data},
        status=status.HTTP_201_CREATED,
    )


@api_view(["PUT", "DELETE"])
def comment_detail(request, pk: int):
    comment = get_object_or_404(Comment.objects.select_related("author"), pk=pk)
    if comment.is_deleted:
        raise ValidationError({"comment": "This comment has been deleted."})

    if request.method == "DELETE":
        _authorize(request, comment, request.data.get("guest_password"))
        if comment.replies.exists():
            comment.soft_delete()
            soft = True
        else:
            comment.delete()
            soft = False
        return Response({"data": {"soft_deleted": soft}})

    s = CommentUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    privileged = _authorize(request, comment, s.validated_data.get("guest_password"))

    comment.content = s.validated_data["content"]
    if privileged and "is_private" in s.validated_data:
        comment.is_private = s.validated_data["is_private"]
    comment.save()
    return Response({"data": CommentSerializer(comment, context={"viewer": request.user}).data})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_comments(request):
    qs = (
        Comment.objects.filter(author=request.user, is_deleted=False)
        .select_related("author", "post")
        .order_by("-created_at", "-id")
    )
    comments, meta = paginate(request, qs)
    return Response({"data": CommentAdminSerializer(comments, many=True).data, "meta": meta})


@api_view(["GET"])
@permission_classes([IsAdmin])
def admin_comments(request):
    qs = Comment.objects.select_related("author", "post").order_by("-created_at", "-id")
    if request.query_params.get("include_deleted", "").lower() not in ("1", "true", "yes"):
        qs = qs.filter(is_deleted=False)
    comments, meta = paginate(request, qs, default_limit=20)
    return Response({"data": CommentAdminSerializer(comments, many=True).data, "meta": meta})


@api_view(["DELETE"])
@permission_classes([IsAdmin])
def admin_delete_comment(request, pk: int):
    comment = get_object_or_404(Comment, pk=pk)
    comment.delete()
    logger.info("Admin %s removed comment %s and its replies", request.user.pk, pk)
    return Response(status=status.HTTP_204_NO_CONTENT)
