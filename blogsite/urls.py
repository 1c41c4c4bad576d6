from django.contrib.sitemaps.views import sitemap
from django.urls import include, path

from . import views
from .feeds import LatestPostsFeed
from .sitemaps import sitemaps

urlpatterns = [
    path("health", views.health, name="health"),
    path("api/", views.api_index, name="api-index"),
    path("api/stats/dashboard", views.dashboard_stats, name="dashboard-stats"),
    path("api/", include("accounts.urls")),
    path("api/", include("blog.urls")),
    path("api/", include("comments.urls")),
    path("api/", include("pages.urls")),
    path("api/", include("uploads.urls")),
    path("api/", include("backups.urls")),
    path("api/", include("visitors.urls")),
    path("rss.xml", LatestPostsFeed(), name="rss"),
    path("sitemap.xml", sitemap, {"sitemaps": sitemaps}, name="sitemap"),
    path("robots.txt", views.robots_txt, name="robots"),
]
