from rest_framework import serializers

from accounts.serializers import UserSummarySerializer

from .models import Bookmark, Category, Draft, Post, Tag

SLUG_RE = r"^[a-z0-9-]+$"


class CategorySerializer(serializers.ModelSerializer):
    slug = serializers.RegexField(SLUG_RE, max_length=50, required=False)
    post_count = serializers.IntegerField(read_only=True, required=False)
    private_post_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Category
        fields = ("id", "name", "slug", "description", "icon", "color", "post_count", "private_post_count")
        extra_kwargs = {
            "description": {"max_length": 200},
        }


class TagSerializer(serializers.ModelSerializer):
    slug = serializers.RegexField(SLUG_RE, max_length=30, required=False)
    post_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Tag
        fields = ("id", "name", "slug", "post_count")


class CategoryBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ("id", "name", "slug", "icon", "color")


class TagBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Tag
        fields = ("id", "name", "slug")


class PostListSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)
    category = CategoryBriefSerializer(read_only=True)
    tags = TagBriefSerializer(many=True, read_only=True)

    class Meta:
        model = Post
        fields = (
            "id",
            "slug",
            "title",
            "excerpt",
            "cover_image",
            "view_count",
            "like_count",
            "reading_time",
            "status",
            "featured",
            "author",
            "category",
            "tags",
            "created_at",
            "updated_at",
            "published_at",
        )
        read_only_fields = fields


class PostDetailSerializer(PostListSerializer):
    author_bio = serializers.CharField(source="author.bio", read_only=True)

    class Meta(PostListSerializer.Meta):
        fields = PostListSerializer.Meta.fields + ("content", "author_bio")
        read_only_fields = fields


class PostLinkSerializer(serializers.ModelSerializer):
    category = CategoryBriefSerializer(read_only=True)

    class Meta:
        model = Post
        fields = ("id", "slug", "title", "cover_image", "category", "published_at")


class PostWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    excerpt = serializers.CharField(max_length=500, required=False, allow_blank=True)
    content = serializers.CharField()
    cover_image = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
    category_id = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all(), source="category")
    tag_ids = serializers.PrimaryKeyRelatedField(
        queryset=Tag.objects.all(), many=True, required=False, source="tags"
    )
    status = serializers.ChoiceField(choices=Post.Status.choices, required=False)
    published_at = serializers.DateTimeField(required=False, allow_null=True)

    def validate_cover_image(self, value):
        return value or ""


class BulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)


class BookmarkSerializer(serializers.BaseSerializer):
    """A bookmarked post, flattened, with its comment count and bookmark time."""

    def to_representation(self, instance: Bookmark):
        data = PostListSerializer(instance.post).data
        data["comment_count"] = getattr(instance, "comment_count", 0)
        data["bookmarked_at"] = serializers.DateTimeField().to_representation(instance.created_at)
        return data


class DraftSerializer(serializers.ModelSerializer):
    category = CategoryBriefSerializer(read_only=True)
    tags = TagBriefSerializer(many=True, read_only=True)
    category_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(), source="category", required=False, allow_null=True, write_only=True
    )
    tag_ids = serializers.PrimaryKeyRelatedField(
        queryset=Tag.objects.all(), many=True, required=False, source="tags", write_only=True
    )

    class Meta:
        model = Draft
        fields = (
            "id",
            "title",
            "content",
            "excerpt",
            "cover_image",
            "category",
            "category_id",
            "tags",
            "tag_ids",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")


class DraftPublishSerializer(serializers.Serializer):
    category_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(), source="category", required=False, allow_null=True
    )
    tag_ids = serializers.PrimaryKeyRelatedField(
        queryset=Tag.objects.all(), many=True, required=False, source="tags"
    )
    status = serializers.ChoiceField(choices=Post.Status.choices, required=False)
    published_at = serializers.DateTimeField(required=False, allow_null=True)
