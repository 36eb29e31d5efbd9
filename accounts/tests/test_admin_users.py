from __future__ import annotations

import pytest
from django.contrib.auth import get_user_model

from accounts.models import Role
from access.tests.factories import client_for, make_user

User = get_user_model()


@pytest.mark.django_db
def test_only_admin_lists_users_and_can_filter_by_role():
    admin = make_user("adm", role="admin")
    make_user("u_t", role="teacher")
    make_user("u_s")
    assert client_for(make_user("u_s2")).get("/api/v1/users/").status_code == 403

    r = client_for(admin).get("/api/v1/users/?role=teacher")
    assert r.status_code == 200
    assert [u["username"] for u in r.json()["results"]] == ["u_t"]


@pytest.mark.django_db
def test_admin_assigns_roles_and_deletes_users():
    admin = make_user("adm2", role="admin")
    user = make_user("promote_me")
    c = client_for(admin)
    r = c.patch(f"/api/v1/users/{user.pk}/", {"role": "teacher"}, format="json")
    assert r.status_code == 200
    user.profile.refresh_from_db()
    assert user.profile.role == Role.TEACHER

    assert c.delete(f"/api/v1/users/{user.pk}/").status_code == 204
    assert not User.objects.filter(pk=user.pk).exists()
    assert c.get(f"/api/v1/users/{user.pk}/").status_code == 404


@pytest.mark.django_db
def test_users_may_read_but_not_edit_their_own_record():
    user = make_user("selfie")
    c = client_for(user)
    assert c.get(f"/api/v1/users/{user.pk}/").status_code == 200
    assert c.patch(f"/api/v1/users/{user.pk}/", {"role": "admin"}, format="json").status_code == 403
    other = make_user("other_selfie")
    assert c.get(f"/api/v1/users/{other.pk}/").status_code == 403
