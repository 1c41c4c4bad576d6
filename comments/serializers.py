from rest_framework import serializers

from accounts.serializers import UserSummarySerializer

from .models import Comment

DELETED_PLACEHOLDER = "This comment has been deleted."


class CommentSerializer(serializers.ModelSerializer):
    """Public rendering of a comment; deleted comments lose their author data.

    Pass ``viewer`` in the context to fill ``is_owner``.
    """

    author = UserSummarySerializer(read_only=True)
    reply_count = serializers.SerializerMethodField()
    is_owner = serializers.SerializerMethodField()

    class Meta:
        model = Comment
        fields = (
            "id",
            "content",
            "post",
            "parent",
            "is_private",
            "is_deleted",
            "author",
            "guest_name",
            "is_owner",
            "reply_count",
            "created_at",
            "updated_at",
        )

    def get_reply_count(self, obj):
        count = getattr(obj, "reply_count", None)
        return obj.replies.count() if count is None else count

    def get_is_owner(self, obj):
        viewer = self.context.get("viewer")
        return bool(viewer and viewer.is_authenticated and obj.author_id == viewer.pk)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if instance.is_deleted:
            data.update(
                content=DELETED_PLACEHOLDER,
                is_private=False,
                author=None,
                guest_name=None,
                is_owner=False,
            )
        return data


class CommentAdminSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)
    post = serializers.SerializerMethodField()

    class Meta:
        model = Comment
        fields = (
            "id",
            "content",
            "is_private",
            "is_deleted",
            "author",
            "guest_name",
            "post",
            "parent",
            "created_at",
        )

    def get_post(self, obj):
        return {"id": obj.post_id, "title": obj.post.title, "slug": obj.post.slug}

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if instance.is_deleted:
            data["content"] = DELETED_PLACEHOLDER
        return data


class CommentCreateSerializer(serializers.Serializer):
    content = serializers.CharField(max_length=2000)
    guest_name = serializers.CharField(max_length=50, required=False)
    guest_password = serializers.CharField(min_length=4, max_length=100, required=False, write_only=True)
    parent_id = serializers.IntegerField(required=False, allow_null=True)
    is_private = serializers.BooleanField(required=False, default=False)


class CommentUpdateSerializer(serializers.Serializer):
    content = serializers.CharField(max_length=2000)
    guest_password = serializers.CharField(required=False, write_only=True)
    is_private = serializers.BooleanField(required=False)
