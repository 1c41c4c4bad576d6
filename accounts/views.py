import logging

from django.db import transaction
from django.db.models import Count, F, Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import AuthenticationFailed, PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from blog import services as blog_services
from blog.models import Post
from blogsite.conf import settings
from blogsite.pagination import paginate
from blogsite.permissions import IsAdmin
from uploads import storage

from . import stats
from .models import User
from .serializers import (
    AdminUserSerializer,
    AuthorSerializer,
    LoginSerializer,
    ProfileSerializer,
    RegisterSerializer,
    UserSerializer,
    UserStatusSerializer,
)

logger = logging.getLogger(__name__)


def _auth_payload(user):
    token, _ = Token.objects.get_or_create(user=user)
    return {"token": token.key, "user": UserSerializer(user).data}


@api_view(["POST"])
def register(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    email = s.validated_data["email"]

    with transaction.atomic():
        first_user = not User.objects.exists()
        admin_emails = {address.lower() for address in settings.BLOG_ADMIN_EMAILS}
        role = User.Role.ADMIN if first_user or email.lower() in admin_emails else User.Role.USER
        user = User.objects.create_user(
            email,
            s.validated_data["password"],
            name=s.validated_data["name"],
            role=role,
        )

    logger.info("Registered user %s (%s)", user.pk, user.role)
    return Response({"data": _auth_payload(user)}, status=status.HTTP_201_CREATED)


@api_view(["POST"])
def login(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)

    user = User.objects.filter(email__iexact=s.validated_data["email"]).first()
    if user is None or not user.check_password(s.validated_data["password"]):
        raise AuthenticationFailed("Email or password is incorrect.")

    return Response({"data": _auth_payload(user)})


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def logout(request):
    Token.objects.filter(user=request.user).delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET", "PUT"])
@permission_classes([IsAuthenticated])
def me(request):
    user = request.user
    if request.method == "GET":
        return Response({"data": UserSerializer(user).data})

    s = ProfileSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)

    new_password = data.pop("new_password", None)
    current_password = data.pop("current_password", None)
    if new_password:
        if not user.check_password(current_password):
            raise ValidationError({"current_password": "Current password is incorrect."})
        user.set_password(new_password)

    old_avatar = user.avatar
    for field, value in data.items():
        setattr(user, field, value)
    user.save()

    if "avatar" in data and old_avatar and old_avatar != user.avatar and "/avatars/" in old_avatar:
        try:
            storage.delete_url(old_avatar)
        except OSError:
            logger.warning("Could not delete old avatar %s", old_avatar, exc_info=True)

    return Response({"data": UserSerializer(user).data})


@api_view(["GET"])
def author(request):
    admin = User.objects.filter(role=User.Role.ADMIN).order_by("-updated_at").first()
    if admin is None:
        return Response({"data": dict(settings.BLOG_DEFAULT_AUTHOR)})
    return Response({"data": AuthorSerializer(admin).data})


@api_view(["GET"])
@permission_classes([IsAdmin])
def user_list(request):
    qs = User.objects.annotate(
        comment_count=Count("comments", filter=Q(comments__is_deleted=False))
    ).order_by("-created_at", "-id")

    search = (request.query_params.get("search") or "").strip()
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(email__icontains=search))

    status_filter = (request.query_params.get("status") or "").upper()
    if status_filter in User.Status.values:
        qs = qs.filter(status=status_filter)

    users, meta = paginate(request, qs)
    return Response({"data": AdminUserSerializer(users, many=True).data, "meta": meta})


@api_view(["GET"])
@permission_classes([IsAdmin])
def user_stats(request):
    return Response({"data": stats.user_stats()})


@api_view(["GET"])
@permission_classes([IsAdmin])
def signup_trend(request):
    period = request.query_params.get("period") or "daily"
    if period not in stats.TREND_PERIODS:
        raise ValidationError({"period": f"Must be one of {', '.join(stats.TREND_PERIODS)}."})
    return Response({"data": stats.signup_trend(period)})


@api_view(["GET"])
@permission_classes([IsAdmin])
def signup_pattern(request):
    return Response({"data": stats.signup_pattern()})


def _moderation_target(request, pk):
    user = get_object_or_404(User, pk=pk)
    if user.pk == request.user.pk:
        raise PermissionDenied("You cannot moderate your own account.")
    if user.is_admin:
        raise PermissionDenied("Admin accounts cannot be suspended or deleted.")
    return user


@api_view(["PATCH"])
@permission_classes([IsAdmin])
def user_status(request, pk: int):
    s = UserStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)

    user = _moderation_target(request, pk)
    user.status = s.validated_data["status"]
    user.save(update_fields=["status", "updated_at"])

    if user.is_suspended:
        logger.warning("User %s suspended by %s", user.pk, request.user.pk)
    else:
        logger.info("User %s reactivated by %s", user.pk, request.user.pk)
    return Response({"data": AdminUserSerializer(user).data})


@api_view(["DELETE"])
@permission_classes([IsAdmin])
def user_delete(request, pk: int):
    user = _moderation_target(request, pk)
    with transaction.atomic():
        # likes go with the account, so their counters go too
        liked = list(user.likes.values_list("post_id", flat=True))
        Post.objects.filter(pk__in=liked, like_count__gt=0).update(like_count=F("like_count") - 1)
        user.delete()
    blog_services.refresh_featured_post()
    logger.warning("User %s deleted by %s", pk, request.user.pk)
    return Response(status=status.HTTP_204_NO_CONTENT)
