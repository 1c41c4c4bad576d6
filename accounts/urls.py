from django.urls import path
from . import views

app_name = "accounts"

urlpatterns = [
    path("auth/register", views.register, name="register"),
    path("auth/login", views.login, name="login"),
    path("auth/logout", views.logout, name="logout"),
    path("auth/me", views.me, name="me"),
    path("author", views.author, name="author"),
    path("users", views.user_list, name="user-list"),
    path("users/stats", views.user_stats, name="user-stats"),
    path("users/signup-trend", views.signup_trend, name="signup-trend"),
    path("users/signup-pattern", views.signup_pattern, name="signup-pattern"),
    path("users/<int:pk>/status", views.user_status, name="user-status"),
    path("users/<int:pk>", views.user_delete, name="user-delete"),
]
