from rest_framework import serializers

from .models import User

PROFILE_FIELDS = ("name", "avatar", "bio", "title", "github", "twitter", "linkedin", "website")


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("id", "email", *PROFILE_FIELDS, "role", "status", "created_at", "updated_at")
        read_only_fields = fields


class AuthorSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("name", "title", "bio", "avatar", "github", "twitter", "linkedin", "website")


class UserSummarySerializer(serializers.ModelSerializer):
    """Embedded author block on posts, comments and pages."""

    class Meta:
        model = User
        fields = ("id", "name", "avatar")


class AdminUserSerializer(serializers.ModelSerializer):
    comment_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = User
        fields = ("id", "email", "name", "avatar", "role", "status", "comment_count", "created_at")


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, max_length=128, write_only=True)
    name = serializers.CharField(min_length=2, max_length=50)

    def validate_email(self, value):
        email = User.objects.normalize_email(value)
        if User.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError("This email is already registered.")
        return email


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class ProfileSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=50, required=False)
    avatar = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)
    bio = serializers.CharField(max_length=500, required=False, allow_blank=True)
    title = serializers.CharField(max_length=100, required=False, allow_blank=True)
    github = serializers.CharField(max_length=200, required=False, allow_blank=True)
    twitter = serializers.CharField(max_length=200, required=False, allow_blank=True)
    linkedin = serializers.CharField(max_length=200, required=False, allow_blank=True)
    website = serializers.CharField(max_length=200, required=False, allow_blank=True)
    current_password = serializers.CharField(required=False, write_only=True)
    new_password = serializers.CharField(min_length=6, max_length=128, required=False, write_only=True)

    def validate(self, attrs):
        if attrs.get("new_password") and not attrs.get("current_password"):
            raise serializers.ValidationError(
                {"current_password": "Enter your current password to set a new one."}
            )
        if "avatar" in attrs and attrs["avatar"] is None:
            attrs["avatar"] = ""
        return attrs


class UserStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=User.Status.choices)
