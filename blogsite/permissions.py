from rest_framework.exceptions import NotAuthenticated, PermissionDenied
from rest_framework.permissions import BasePermission

SUSPENDED_MESSAGE = "This account is suspended."


def is_admin(user) -> bool:
    return bool(user and user.is_authenticated and user.is_admin)


class IsAdmin(BasePermission):
    message = "Admin privileges are required."

    def has_permission(self, request, view):
        return is_admin(request.user)


def require_login(request):
    if not (request.user and request.user.is_authenticated):
        raise NotAuthenticated()


def require_admin(request):
    require_login(request)
    if not request.user.is_admin:
        raise PermissionDenied(IsAdmin.message)


def require_active(request):
    """Logged in and not suspended; suspended accounts keep read access only."""
    require_login(request)
    if request.user.is_suspended:
        raise PermissionDenied(SUSPENDED_MESSAGE)
