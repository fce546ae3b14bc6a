import pytest

from community_hub.core.exceptions import ValidationError
from community_hub.realtime.events.recruits import JOIN_APPLICATION
from community_hub.realtime.events.recruits import JOIN_DECISION
from community_hub.realtime.events.recruits import RecruitEventPublisher
from community_hub.realtime.socketio import ChannelRouter
from community_hub.recruits.exceptions import AlreadyMember
from community_hub.recruits.exceptions import AlreadyPending
from community_hub.recruits.exceptions import NotAuthor
from community_hub.recruits.exceptions import NotPending
from community_hub.recruits.exceptions import RecruitClosed
from community_hub.recruits.exceptions import RecruitFull
from community_hub.recruits.models import Recruit
from community_hub.recruits.services import MembershipGate
from community_hub.recruits.services import is_authorized
from community_hub.recruits.services import load_recruit
from community_hub.recruits.services import sanitize_chat_content
from tests.factories import add_member
from tests.factories import create_team
from tests.factories import create_user
from tests.realtime import FakeServer


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def gate(server):
    return MembershipGate(RecruitEventPublisher(ChannelRouter(server)))


@pytest.fixture
def author(db):
    return create_user("author")


@pytest.mark.django_db
def test_author_is_first_member(author):
    recruit = create_team(author)

    assert list(recruit.members.all()) == [author]
    assert recruit.current_members == 1
    assert is_authorized(author.pk, load_recruit(recruit.pk))


@pytest.mark.django_db
def test_outsider_is_not_authorized(author, user):
    recruit = create_team(author)

    assert not is_authorized(user.pk, load_recruit(recruit.pk))
    assert not is_authorized(None, load_recruit(recruit.pk))


@pytest.mark.django_db
def test_request_join_queues_and_notifies_author(gate, server, author, user):
    recruit = create_team(author)

    gate.request_join(user, recruit.pk)

    assert recruit.pending_members.filter(pk=user.pk).exists()
    [event] = server.events(JOIN_APPLICATION)
    assert event.room == f"user_{author.pk}"
    assert event.data["applicantId"] == user.pk
    assert event.data["recruitId"] == recruit.pk


@pytest.mark.django_db
def test_request_join_rejections(gate, author, user):
    recruit = create_team(author, max_members=2)

    with pytest.raises(AlreadyMember):
        gate.request_join(author, recruit.pk)

    gate.request_join(user, recruit.pk)
    with pytest.raises(AlreadyPending):
        gate.request_join(user, recruit.pk)

    add_member(recruit, create_user("teammate"))
    with pytest.raises(RecruitFull):
        gate.request_join(create_user("late"), recruit.pk)

    Recruit.objects.filter(pk=recruit.pk).update(status=Recruit.Status.CLOSED)
    with pytest.raises(RecruitClosed):
        gate.request_join(create_user("later"), recruit.pk)


@pytest.mark.django_db
def test_withdraw_join_is_idempotent(gate, author, user):
    recruit = create_team(author)
    gate.request_join(user, recruit.pk)

    gate.withdraw_join(user, recruit.pk)
    gate.withdraw_join(user, recruit.pk)

    assert not recruit.pending_members.exists()


@pytest.mark.django_db
def test_approval_grants_access_on_next_check(gate, server, author, user):
    recruit = create_team(author)
    gate.request_join(user, recruit.pk)
    assert not is_authorized(user.pk, load_recruit(recruit.pk))

    gate.decide(author, recruit.pk, user.pk, approve=True)

    fresh = load_recruit(recruit.pk)
    assert is_authorized(user.pk, fresh)
    assert fresh.current_members == 2
    assert not fresh.pending_members.exists()
    [event] = server.events(JOIN_DECISION)
    assert event.room == f"user_{user.pk}"
    assert event.data["approved"] is True


@pytest.mark.django_db
def test_rejection_drops_applicant(gate, server, author, user):
    recruit = create_team(author)
    gate.request_join(user, recruit.pk)

    gate.decide(author, recruit.pk, user.pk, approve=False)

    fresh = load_recruit(recruit.pk)
    assert not is_authorized(user.pk, fresh)
    assert not fresh.pending_members.exists()
    assert server.events(JOIN_DECISION)[0].data["approved"] is False


@pytest.mark.django_db
def test_approval_when_full_removes_applicant_and_leaves_members(gate, server, author):
    recruit = create_team(author, max_members=2)
    first, second = create_user("first"), create_user("second")
    gate.request_join(first, recruit.pk)
    gate.request_join(second, recruit.pk)
    gate.decide(author, recruit.pk, first.pk, approve=True)

    with pytest.raises(RecruitFull):
        gate.decide(author, recruit.pk, second.pk, approve=True)

    fresh = load_recruit(recruit.pk)
    assert fresh.current_members == 2
    assert {m.pk for m in fresh.members.all()} == {author.pk, first.pk}
    assert not fresh.pending_members.filter(pk=second.pk).exists()
    decision = server.events(JOIN_DECISION)[-1]
    assert decision.room == f"user_{second.pk}"
    assert decision.data["approved"] is False
    assert decision.data["reason"] == "full"


@pytest.mark.django_db
def test_only_author_decides(gate, author, user):
    recruit = create_team(author)
    applicant = create_user("applicant")
    gate.request_join(applicant, recruit.pk)

    with pytest.raises(NotAuthor):
        gate.decide(user, recruit.pk, applicant.pk, approve=True)
    with pytest.raises(NotPending):
        gate.decide(author, recruit.pk, user.pk, approve=True)


@pytest.mark.django_db
def test_remove_member_revokes_access(gate, author, user):
    recruit = create_team(author)
    add_member(recruit, user)

    gate.remove_member(author, recruit.pk, user.pk)

    fresh = load_recruit(recruit.pk)
    assert not is_authorized(user.pk, fresh)
    assert fresh.current_members == 1

    with pytest.raises(ValidationError):
        gate.remove_member(author, recruit.pk, author.pk)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("hello <script>alert(1)</script>team", "hello team"),
        ('<a href="javascript:alert(1)">x</a>', '<a href="alert(1)">x</a>'),
        ('<img src=x onerror="boom()">', '<img src=x "boom()">'),
        ("<iframe src=evil></iframe>ok", "ok"),
        ("plain text", "plain text"),
    ],
)
def test_sanitize_chat_content(raw, expected):
    assert sanitize_chat_content(raw) == expected
