from __future__ import annotations

from unittest import mock

import pytest
from django.db import IntegrityError

from access.errors import Conflict
from news import utils
from news.models import News
from access.tests.factories import client_for, make_user


@pytest.fixture
def admin(db):
    return make_user("nw_admin", role="admin")


def test_published_news_is_public(admin):
    News.objects.create(title="Open day", content="Saturday", author=admin)
    draft = News.objects.create(title="Draft", content="tbd", is_published=False)
    anon = client_for()
    titles = [n["title"] for n in anon.get("/api/v1/news/").json()["results"]]
    assert titles == ["Open day"]
    assert anon.get(f"/api/v1/news/{draft.pk}/").status_code == 401
    assert client_for(make_user("nw_s")).get(f"/api/v1/news/{draft.pk}/").status_code == 403
    assert client_for(admin).get(f"/api/v1/news/{draft.pk}/").status_code == 200
    assert anon.get("/api/v1/news/999999/").status_code == 404


def test_only_admins_write_or_see_drafts(admin):
    teacher = make_user("nw_t", role="teacher")
    payload = {"title": "Holiday", "content": "Closed Monday"}
    assert client_for(teacher).post("/api/v1/news/", payload, format="json").status_code == 403
    assert client_for().post("/api/v1/news/", payload, format="json").status_code == 401
    assert client_for(teacher).get("/api/v1/news/all/").status_code == 403
    r = client_for(admin).post("/api/v1/news/", payload, format="json")
    assert r.status_code == 201
    assert r.json()["author"] == admin.pk
    assert client_for(admin).get("/api/v1/news/all/").json()["count"] == 1


def test_second_visible_item_conflicts_with_id(admin):
    first = News.objects.create(title="A", content="a")
    second = News.objects.create(title="B", content="b")
    c = client_for(admin)
    assert c.post(f"/api/v1/news/{first.pk}/visibility/", {"is_visible": True}, format="json").status_code == 200

    r = c.post(f"/api/v1/news/{second.pk}/visibility/", {"is_visible": True}, format="json")
    assert r.status_code == 400
    assert r.json()["conflict_id"] == first.pk
    assert c.get("/api/v1/news/visible/").json()["id"] == first.pk

    # Hiding the first frees the slot
    c.post(f"/api/v1/news/{first.pk}/visibility/", {"is_visible": False}, format="json")
    assert c.post(f"/api/v1/news/{second.pk}/visibility/", {"is_visible": True}, format="json").status_code == 200
    assert list(News.objects.filter(is_visible=True).values_list("pk", flat=True)) == [second.pk]


def test_create_as_visible_is_checked_too(admin):
    shown = News.objects.create(title="A", content="a", is_visible=True)
    r = client_for(admin).post("/api/v1/news/", {"title": "B", "content": "b", "is_visible": True}, format="json")
    assert r.status_code == 400
    assert r.json()["conflict_id"] == shown.pk
    # The whole create was rolled back
    assert News.objects.count() == 1


def test_update_to_visible_reports_the_shown_item(admin):
    shown = News.objects.create(title="A", content="a", is_visible=True)
    other = News.objects.create(title="B", content="b")
    c = client_for(admin)
    r = c.patch(f"/api/v1/news/{other.pk}/", {"title": "B2", "is_visible": True}, format="json")
    assert r.status_code == 400
    assert r.json()["conflict_id"] == shown.pk
    other.refresh_from_db()
    assert (other.title, other.is_visible) == ("B", False)

    # Saving the shown item with its own visibility is not a conflict
    r = c.patch(f"/api/v1/news/{shown.pk}/", {"title": "A2", "is_visible": True}, format="json")
    assert r.status_code == 200
    assert r.json()["is_visible"] is True


def test_no_visible_item_is_404(db):
    assert client_for().get("/api/v1/news/visible/").status_code == 404


@pytest.mark.django_db
def test_database_constraint_rejects_two_visible_rows():
    News.objects.create(title="A", content="a", is_visible=True)
    with pytest.raises(IntegrityError):
        News.objects.create(title="B", content="b", is_visible=True)


@pytest.mark.django_db
def test_lost_race_is_reported_as_conflict():
    winner = News.objects.create(title="A", content="a")
    loser = News.objects.create(title="B", content="b")
    # Both toggles pass the read check before either writes
    with mock.patch.object(utils, "_visible_other", side_effect=[None, winner.pk]):
        News.objects.filter(pk=winner.pk).update(is_visible=True)
        with pytest.raises(Conflict) as exc:
            utils.set_visibility(loser, True)
    assert exc.value.conflict_id == winner.pk
    loser.refresh_from_db()
    assert loser.is_visible is False
