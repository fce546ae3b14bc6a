from django.conf import settings
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from community_hub.recruits.models import ChatMessage
from community_hub.recruits.models import Recruit


class UserBriefSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(read_only=True)


class RecruitSerializer(serializers.ModelSerializer):
    author = UserBriefSerializer(read_only=True)
    members = UserBriefSerializer(many=True, read_only=True)
    pending_members = UserBriefSerializer(many=True, read_only=True)

    class Meta:
        model = Recruit
        fields = (
            "id",
            "title",
            "content",
            "category",
            "author",
            "members",
            "pending_members",
            "max_members",
            "current_members",
            "status",
            "deadline",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("current_members", "created_at", "updated_at")

    def validate_title(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError(_("Title is required."))
        return value

    def validate_max_members(self, value: int) -> int:
        if self.instance is not None and value < self.instance.current_members:
            msg = _("Max members cannot be below the current member count.")
            raise serializers.ValidationError(msg)
        return value


class ChatMessageSerializer(serializers.ModelSerializer):
    author = UserBriefSerializer(read_only=True)

    class Meta:
        model = ChatMessage
        fields = ("id", "author", "content", "created_at")
        read_only_fields = fields


class ChatMessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField(
        max_length=settings.RECRUIT_CHAT_MAX_LENGTH, trim_whitespace=True
    )


class DecisionSerializer(serializers.Serializer):
    approve = serializers.BooleanField(required=True)


class ChatRoomSerializer(serializers.ModelSerializer):
    """Recruit summary for the "my chats" list."""

    author = UserBriefSerializer(read_only=True)
    members = UserBriefSerializer(many=True, read_only=True)
    last_message = serializers.SerializerMethodField()

    class Meta:
        model = Recruit
        fields = (
            "id",
            "title",
            "category",
            "status",
            "author",
            "members",
            "last_message",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields

    def get_last_message(self, obj: Recruit) -> dict | None:
        latest = getattr(obj, "latest_messages", None)
        if latest is None:
            latest = list(obj.chat_messages.order_by("-created_at", "-id")[:1])
        return ChatMessageSerializer(latest[0]).data if latest else None
