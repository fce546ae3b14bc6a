from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from django.utils import timezone

if TYPE_CHECKING:  # import for type checking only
    from community_hub.realtime.socketio import ChannelRouter
    from community_hub.recruits.models import ChatMessage
    from community_hub.recruits.models import Recruit

JOIN_APPLICATION = "join-application"
JOIN_DECISION = "join-decision"
GROUP_MESSAGE = "group-message"


def build_application_payload(recruit: Recruit, applicant) -> dict[str, Any]:
    return {
        "type": "recruit-application",
        "recruitId": recruit.pk,
        "recruitTitle": recruit.title,
        "applicantId": applicant.pk,
        "applicantUsername": applicant.username,
        "message": f"{applicant.username} applied to join the team.",
        "createdAt": timezone.now().isoformat(),
    }


def build_decision_payload(
    recruit: Recruit, *, approved: bool, reason: str = ""
) -> dict[str, Any]:
    if approved:
        message = f'Your request to join "{recruit.title}" was approved!'
    else:
        message = f'Your request to join "{recruit.title}" was declined.'
    return {
        "type": "recruit-approval" if approved else "recruit-rejection",
        "recruitId": recruit.pk,
        "recruitTitle": recruit.title,
        "approved": approved,
        "reason": reason,
        "message": message,
        "createdAt": timezone.now().isoformat(),
    }


def build_message_payload(message: ChatMessage) -> dict[str, Any]:
    return {
        "id": message.pk,
        "recruitId": message.recruit_id,
        "author": {"id": message.author_id, "username": message.author.username},
        "content": message.content,
        "createdAt": message.created_at.isoformat(),
    }


class RecruitEventPublisher:
    """Fire-and-forget notifications for the recruit flow.

    Only currently connected sessions receive anything; nothing is queued for
    offline users.
    """

    def __init__(self, router: ChannelRouter):
        self.router = router

    def join_application(self, recruit: Recruit, applicant) -> None:
        payload = build_application_payload(recruit, applicant)
        self.router.emit_to_user(recruit.author_id, JOIN_APPLICATION, payload)

    def join_decision(
        self, recruit: Recruit, target_id: int, *, approved: bool, reason: str = ""
    ) -> None:
        payload = build_decision_payload(recruit, approved=approved, reason=reason)
        self.router.emit_to_user(target_id, JOIN_DECISION, payload)

    def group_message(self, message: ChatMessage) -> None:
        payload = build_message_payload(message)
        self.router.emit_to_recruit(message.recruit_id, GROUP_MESSAGE, payload)
