from rest_framework import serializers

from .models import Image


class ImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Image
        fields = ("id", "url", "object_name", "filename", "size", "mimetype", "folder", "post", "created_at")
        read_only_fields = fields
