"""Recruit (team) endpoints: CRUD, join flow and team chat."""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import permissions
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from community_hub.audit.utils import audit_request
from community_hub.realtime.events.recruits import RecruitEventPublisher
from community_hub.realtime.socketio import get_channel_router
from community_hub.recruits.api.filters import RecruitFilter
from community_hub.recruits.api.permissions import IsAuthorOrPrivilegedCanWrite
from community_hub.recruits.api.serializers import ChatMessageCreateSerializer
from community_hub.recruits.api.serializers import ChatMessageSerializer
from community_hub.recruits.api.serializers import ChatRoomSerializer
from community_hub.recruits.api.serializers import DecisionSerializer
from community_hub.recruits.api.serializers import RecruitSerializer
from community_hub.recruits.models import Recruit
from community_hub.recruits.services import MembershipGate
from community_hub.recruits.services import TeamChat
from community_hub.recruits.services import chat_rooms_for
from community_hub.recruits.services import create_recruit
from community_hub.users.permissions import is_privileged


class RecruitViewSet(viewsets.ModelViewSet):
    serializer_class = RecruitSerializer
    permission_classes = [
        permissions.IsAuthenticatedOrReadOnly,
        IsAuthorOrPrivilegedCanWrite,
    ]
    filter_backends = [DjangoFilterBackend]
    filterset_class = RecruitFilter
    lookup_value_regex = r"\d+"
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):
        return Recruit.objects.select_related("author").prefetch_related(
            "members", "pending_members"
        )

    def get_permissions(self):
        # Join/approve/chat actions check authorship and membership in the
        # services against the current recruit row.
        if self.action in {"list", "retrieve", "create", "partial_update", "destroy"}:
            return super().get_permissions()
        return [permissions.IsAuthenticated()]

    def get_publisher(self) -> RecruitEventPublisher:
        return RecruitEventPublisher(get_channel_router())

    def perform_create(self, serializer):
        serializer.instance = create_recruit(
            self.request.user, **serializer.validated_data
        )

    @extend_schema(request=None, responses={200: None})
    @action(detail=True, methods=["post", "delete"])
    def join(self, request, pk=None):
        gate = MembershipGate(self.get_publisher())
        if request.method == "DELETE":
            gate.withdraw_join(request.user, int(pk))
            return Response({"message": "Join request withdrawn"})

        gate.request_join(request.user, int(pk))
        return Response({"message": "Join request submitted"})

    @extend_schema(request=DecisionSerializer)
    @action(detail=True, methods=["post"], url_path=r"approve/(?P<user_id>\d+)")
    def approve(self, request, pk=None, user_id=None):
        payload = DecisionSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        approve = payload.validated_data["approve"]

        recruit = MembershipGate(self.get_publisher()).decide(
            request.user, int(pk), int(user_id), approve=approve
        )
        audit_request(
            request,
            "recruit_member_approved" if approve else "recruit_member_rejected",
            model_name="Recruit",
            record_id=recruit.pk,
            after={"user_id": int(user_id), "approve": approve},
        )
        recruit = self.get_queryset().get(pk=recruit.pk)
        data = RecruitSerializer(recruit).data
        return Response(
            {
                "message": "Member approved" if approve else "Application rejected",
                "members": data["members"],
                "pending_members": data["pending_members"],
            }
        )

    @extend_schema(request=None, responses={200: None})
    @action(detail=True, methods=["delete"], url_path=r"members/(?P<user_id>\d+)")
    def remove_member(self, request, pk=None, user_id=None):
        recruit = MembershipGate(self.get_publisher()).remove_member(
            request.user, int(pk), int(user_id)
        )
        audit_request(
            request,
            "recruit_member_removed",
            model_name="Recruit",
            record_id=recruit.pk,
            before={"user_id": int(user_id)},
        )
        return Response({"message": "Member removed"})

    @extend_schema(
        methods=["GET"], responses={200: ChatMessageSerializer(many=True)}
    )
    @extend_schema(
        methods=["POST"],
        request=ChatMessageCreateSerializer,
        responses={201: ChatMessageSerializer},
    )
    @action(detail=True, methods=["get", "post"])
    def chat(self, request, pk=None):
        team_chat = TeamChat(self.get_publisher())
        if request.method == "GET":
            messages = team_chat.messages(request.user, int(pk))
            return Response(
                {"messages": ChatMessageSerializer(messages, many=True).data}
            )

        payload = ChatMessageCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        message = team_chat.post(
            request.user, int(pk), payload.validated_data["content"]
        )
        return Response(
            {"chat_message": ChatMessageSerializer(message).data},
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(request=None, responses={204: None})
    @action(detail=True, methods=["delete"], url_path=r"chat/(?P<message_id>\d+)")
    def delete_chat_message(self, request, pk=None, message_id=None):
        TeamChat(self.get_publisher()).delete(
            request.user,
            int(pk),
            int(message_id),
            is_privileged=is_privileged(request.user),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: ChatRoomSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="my-chats")
    def my_chats(self, request):
        rooms = chat_rooms_for(request.user)
        return Response({"chat_rooms": ChatRoomSerializer(rooms, many=True).data})
