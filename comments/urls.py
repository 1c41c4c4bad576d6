from django.urls import path
from . import views

app_name = "comments"

urlpatterns = [
    path("comments/post/<int:post_id>", views.post_comments, name="post-comments"),
    path("comments/me", views.my_comments, name="my-comments"),
    path("comments/admin", views.admin_comments, name="admin-comments"),
    path("comments/admin/<int:pk>", views.admin_delete_comment, name="admin-delete"),
    path("comments/<int:pk>", views.comment_detail, name="comment-detail"),
]
