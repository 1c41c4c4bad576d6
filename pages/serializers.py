from rest_framework import serializers

from accounts.serializers import UserSummarySerializer

from .models import Page


class PageSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)

    class Meta:
        model = Page
        fields = (
            "id",
            "slug",
            "title",
            "type",
            "content",
            "excerpt",
            "status",
            "badge",
            "badge_color",
            "is_pinned",
            "template",
            "view_count",
            "author",
            "created_at",
            "updated_at",
            "published_at",
        )
        read_only_fields = fields


class PageWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    slug = serializers.RegexField(r"^[a-z0-9-]+$", max_length=100, required=False)
    type = serializers.ChoiceField(choices=Page.Type.choices, required=False)
    content = serializers.CharField()
    excerpt = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=Page.Status.choices, required=False)
    badge = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    badge_color = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    is_pinned = serializers.BooleanField(required=False)
    template = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        for field in ("excerpt", "badge", "badge_color", "template"):
            if field in attrs and attrs[field] is None:
                attrs[field] = ""
        return attrs


class NoticeLinkSerializer(serializers.ModelSerializer):
    class Meta:
        model = Page
        fields = ("slug", "title")
