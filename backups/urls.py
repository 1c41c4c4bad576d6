from django.urls import path
from . import views

app_name = "backups"

urlpatterns = [
    path("backups", views.backup_collection, name="backup-list"),
    path("backups/<str:name>/info", views.backup_info, name="backup-info"),
    path("backups/<str:name>/restore", views.restore_backup, name="backup-restore"),
    path("backups/<str:name>", views.backup_detail, name="backup-detail"),
]
