import pytest

from community_hub.realtime.events.recruits import build_decision_payload
from community_hub.realtime.events.recruits import build_message_payload
from community_hub.recruits.models import ChatMessage
from tests.factories import create_team
from tests.factories import create_user


@pytest.mark.django_db
def test_decision_payload_shapes():
    recruit = create_team(create_user("author"), title="Rust study")

    approved = build_decision_payload(recruit, approved=True)
    rejected = build_decision_payload(recruit, approved=False, reason="full")

    assert approved["type"] == "recruit-approval"
    assert approved["reason"] == ""
    assert "Rust study" in approved["message"]
    assert rejected["type"] == "recruit-rejection"
    assert rejected["reason"] == "full"


@pytest.mark.django_db
def test_message_payload_carries_author():
    author = create_user("author")
    recruit = create_team(author)
    message = ChatMessage.objects.create(recruit=recruit, author=author, content="hi")

    payload = build_message_payload(message)

    assert payload["recruitId"] == recruit.pk
    assert payload["author"] == {"id": author.pk, "username": "author"}
    assert payload["content"] == "hi"
