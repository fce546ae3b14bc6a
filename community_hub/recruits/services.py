"""Membership authorization gate and the group mutations it guards.

``is_authorized`` is a pure decision over a recruit record the caller has
*just* loaded. Nothing here memoizes membership: an approval can land while a
socket is open, and the next privileged action must see it.

Mutations lock the recruit row for the duration of one transaction, which is
the per-document serialization the rest of the design relies on.
Notifications go out after the transaction block has committed.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from django.db import transaction
from django.db.models import Prefetch
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from community_hub.core.exceptions import ValidationError
from community_hub.recruits.exceptions import AlreadyMember
from community_hub.recruits.exceptions import AlreadyPending
from community_hub.recruits.exceptions import NotAuthor
from community_hub.recruits.exceptions import NotPending
from community_hub.recruits.exceptions import NotTeamMember
from community_hub.recruits.exceptions import RecruitClosed
from community_hub.recruits.exceptions import RecruitFull
from community_hub.recruits.exceptions import RecruitNotFound
from community_hub.recruits.models import ChatMessage
from community_hub.recruits.models import Recruit

if TYPE_CHECKING:  # import for type checking only
    from django.db.models import QuerySet

    from community_hub.realtime.events.recruits import RecruitEventPublisher

logger = logging.getLogger(__name__)

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.I)
_IFRAME_RE = re.compile(r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.I)
_JS_SCHEME_RE = re.compile(r"javascript:", re.I)
_HANDLER_ATTR_RE = re.compile(r"on\w+\s*=", re.I)


def is_authorized(actor_id: int | None, recruit: Recruit) -> bool:
    """True iff the actor authored the recruit or is one of its members."""
    if actor_id is None:
        return False
    if actor_id == recruit.author_id:
        return True
    return any(member.pk == actor_id for member in recruit.members.all())


def sanitize_chat_content(content: str) -> str:
    """Strip script/iframe blocks, ``javascript:`` URLs and inline handlers."""
    content = _SCRIPT_RE.sub("", content)
    content = _IFRAME_RE.sub("", content)
    content = _JS_SCHEME_RE.sub("", content)
    return _HANDLER_ATTR_RE.sub("", content)


def load_recruit(recruit_id: int) -> Recruit:
    """Fresh read of a recruit with its members, for authorization checks."""
    recruit = Recruit.objects.prefetch_related("members").filter(pk=recruit_id).first()
    if recruit is None:
        raise RecruitNotFound
    return recruit


def _lock_recruit(recruit_id: int) -> Recruit:
    recruit = Recruit.objects.select_for_update().filter(pk=recruit_id).first()
    if recruit is None:
        raise RecruitNotFound
    return recruit


@transaction.atomic
def create_recruit(author, **fields) -> Recruit:
    """Create a recruit; the author is its first member."""
    recruit = Recruit.objects.create(author=author, current_members=1, **fields)
    recruit.members.add(author)
    return recruit


class MembershipGate:
    def __init__(self, publisher: RecruitEventPublisher):
        self.publisher = publisher

    def request_join(self, actor, recruit_id: int) -> Recruit:
        with transaction.atomic():
            recruit = _lock_recruit(recruit_id)
            if recruit.status == Recruit.Status.CLOSED:
                raise RecruitClosed
            if (
                actor.pk == recruit.author_id
                or recruit.members.filter(pk=actor.pk).exists()
            ):
                raise AlreadyMember
            if recruit.pending_members.filter(pk=actor.pk).exists():
                raise AlreadyPending
            if recruit.is_full:
                raise RecruitFull
            recruit.pending_members.add(actor)

        logger.info("User %s applied to recruit %s", actor.pk, recruit.pk)
        self.publisher.join_application(recruit, actor)
        return recruit

    def withdraw_join(self, actor, recruit_id: int) -> Recruit:
        with transaction.atomic():
            recruit = _lock_recruit(recruit_id)
            recruit.pending_members.remove(actor)
        return recruit

    def decide(self, author, recruit_id: int, target_id: int, *, approve: bool) -> Recruit:
        """Approve or reject a pending applicant.

        The applicant leaves the pending queue in every outcome, including an
        approval that fails because the team filled up in the meantime.
        """

        admitted = False
        with transaction.atomic():
            recruit = _lock_recruit(recruit_id)
            if recruit.author_id != author.pk:
                raise NotAuthor
            if not recruit.pending_members.filter(pk=target_id).exists():
                raise NotPending
            recruit.pending_members.remove(target_id)
            if approve and not recruit.is_full:
                recruit.members.add(target_id)
                recruit.current_members += 1
                recruit.save(update_fields=["current_members", "updated_at"])
                admitted = True

        if approve and not admitted:
            logger.info(
                "Approval of user %s for recruit %s dropped: team full",
                target_id,
                recruit.pk,
            )
            self.publisher.join_decision(recruit, target_id, approved=False, reason="full")
            raise RecruitFull

        self.publisher.join_decision(recruit, target_id, approved=approve)
        return recruit

    def remove_member(self, author, recruit_id: int, target_id: int) -> Recruit:
        with transaction.atomic():
            recruit = _lock_recruit(recruit_id)
            if recruit.author_id != author.pk:
                raise NotAuthor
            if target_id == recruit.author_id:
                msg = _("The author cannot be removed from their own team.")
                raise ValidationError({"userId": [msg]})
            if recruit.members.filter(pk=target_id).exists():
                recruit.members.remove(target_id)
                recruit.current_members = max(1, recruit.current_members - 1)
                recruit.save(update_fields=["current_members", "updated_at"])
                logger.info("User %s removed from recruit %s", target_id, recruit.pk)
        return recruit


class TeamChat:
    """Team chat: persist first, then fan out to the recruit room."""

    def __init__(self, publisher: RecruitEventPublisher):
        self.publisher = publisher

    def messages(self, actor, recruit_id: int) -> QuerySet[ChatMessage]:
        recruit = load_recruit(recruit_id)
        if not is_authorized(actor.pk, recruit):
            raise NotTeamMember
        return recruit.chat_messages.select_related("author").order_by("created_at", "id")

    def post(self, actor, recruit_id: int, content: str) -> ChatMessage:
        recruit = load_recruit(recruit_id)
        if not is_authorized(actor.pk, recruit):
            raise NotTeamMember

        cleaned = sanitize_chat_content(content).strip()
        if not cleaned:
            raise ValidationError({"content": [_("Message content is required.")]})

        message = ChatMessage.objects.create(recruit=recruit, author=actor, content=cleaned)
        Recruit.objects.filter(pk=recruit.pk).update(updated_at=timezone.now())
        self.publisher.group_message(message)
        return message

    def delete(
        self, actor, recruit_id: int, message_id: int, *, is_privileged: bool = False
    ) -> None:
        recruit = load_recruit(recruit_id)
        message = recruit.chat_messages.filter(pk=message_id).first()
        if message is None:
            raise RecruitNotFound(_("Message not found."), "message_not_found")
        allowed = is_privileged or actor.pk in {recruit.author_id, message.author_id}
        if not allowed:
            raise NotAuthor(_("Not authorized to delete this message."))
        message.delete()


def chat_rooms_for(actor) -> QuerySet[Recruit]:
    """Recruits the actor authored or belongs to, newest activity first."""
    latest = ChatMessage.objects.select_related("author").order_by("-created_at", "-id")
    return (
        Recruit.objects.filter(Q(author=actor) | Q(members=actor))
        .distinct()
        .select_related("author")
        .prefetch_related(
            "members",
            Prefetch("chat_messages", queryset=latest, to_attr="latest_messages"),
        )
        .order_by("-updated_at")
    )
