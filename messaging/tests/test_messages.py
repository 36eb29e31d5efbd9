from __future__ import annotations

import pytest

from messaging.models import Message
from access.tests.factories import client_for, make_user


@pytest.fixture
def pair(db):
    return make_user("mg_a"), make_user("mg_b", role="teacher")


def send(sender, recipient, subject="Hello", content="Hi there"):
    return client_for(sender).post(
        "/api/v1/messages/", {"recipient": recipient.pk, "subject": subject, "content": content}, format="json"
    )


def test_send_and_open_marks_read_for_recipient_only(pair):
    alice, bob = pair
    r = send(alice, bob)
    assert r.status_code == 201
    body = r.json()
    assert (body["sender"], body["recipient"], body["read"]) == (alice.pk, bob.pk, False)
    pk = body["id"]

    # The sender opening it does not mark it read
    assert client_for(alice).get(f"/api/v1/messages/{pk}/").json()["read"] is False
    assert client_for(bob).get(f"/api/v1/messages/{pk}/").json()["read"] is True
    assert Message.objects.get(pk=pk).read is True


def test_unknown_recipient_is_404(pair):
    alice, _ = pair
    r = client_for(alice).post(
        "/api/v1/messages/", {"recipient": 999999, "subject": "x", "content": "y"}, format="json"
    )
    assert r.status_code == 404
    assert not Message.objects.exists()


def test_third_parties_and_admins_cannot_read(pair):
    alice, bob = pair
    msg = Message.objects.create(sender=alice, recipient=bob, subject="s", content="c")
    for outsider in (make_user("mg_c"), make_user("mg_admin", role="admin")):
        c = client_for(outsider)
        assert c.get(f"/api/v1/messages/{msg.pk}/").status_code == 403
        assert c.delete(f"/api/v1/messages/{msg.pk}/").status_code == 403
    assert client_for(alice).get("/api/v1/messages/999999/").status_code == 404


def test_mailbox_filters_and_unread_count(pair):
    alice, bob = pair
    Message.objects.create(sender=alice, recipient=bob, subject="one", content="c")
    Message.objects.create(sender=alice, recipient=bob, subject="two", content="c")
    Message.objects.create(sender=bob, recipient=alice, subject="reply", content="c")

    c = client_for(bob)

    def subjects(box):
        return sorted(m["subject"] for m in c.get(f"/api/v1/messages/?type={box}").json()["results"])

    assert subjects("received") == ["one", "two"]
    assert subjects("sent") == ["reply"]
    assert subjects("all") == ["one", "reply", "two"]
    assert c.get("/api/v1/messages/unread-count/").json() == {"count": 2}

    first = Message.objects.get(subject="one")
    assert c.post(f"/api/v1/messages/{first.pk}/read/").json()["read"] is True
    assert c.get("/api/v1/messages/unread-count/").json() == {"count": 1}
    # The admin mailbox is their own
    assert client_for(make_user("mg_admin2", role="admin")).get("/api/v1/messages/").json()["results"] == []


def test_either_party_may_delete(pair):
    alice, bob = pair
    msg = Message.objects.create(sender=alice, recipient=bob, subject="s", content="c")
    assert client_for(bob).delete(f"/api/v1/messages/{msg.pk}/").status_code == 204
    assert not Message.objects.filter(pk=msg.pk).exists()
