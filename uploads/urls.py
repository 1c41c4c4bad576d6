from django.urls import path
from . import views

app_name = "uploads"

urlpatterns = [
    path("upload", views.upload_image, name="upload"),
    path("images/orphans", views.orphan_images, name="orphans"),
]
