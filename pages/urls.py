from django.urls import path
from . import views

app_name = "pages"

urlpatterns = [
    path("pages", views.page_collection, name="page-list"),
    path("pages/notices", views.notice_list, name="notice-list"),
    path("pages/notices/<str:slug>/adjacent", views.adjacent_notices, name="notice-adjacent"),
    path("pages/slug/<str:slug>", views.page_by_slug, name="page-by-slug"),
    path("pages/admin", views.admin_page_list, name="admin-page-list"),
    path("pages/admin/stats", views.admin_page_stats, name="admin-page-stats"),
    path("pages/admin/<int:pk>", views.admin_page_detail, name="admin-page-detail"),
    path("pages/<int:pk>", views.page_detail, name="page-detail"),
]
