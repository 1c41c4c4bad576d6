from django.urls import path

from . import views

app_name = "visitors"

urlpatterns = [
    path("visitors/track", views.track_visitor, name="visitor-track"),
    path("visitors/stats", views.visitor_stats, name="visitor-stats"),
]
