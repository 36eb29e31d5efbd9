from __future__ import annotations

import pytest
from channels.db import database_sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from access.middleware import TokenAuthMiddleware
from activity.models import Notification
from activity.routing import websocket_urlpatterns
from access.tests.factories import enrol, make_course, make_user, token_for

pytestmark = [pytest.mark.ws, pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]


def app():
    return TokenAuthMiddleware(URLRouter(websocket_urlpatterns))


@database_sync_to_async
def course_with_member():
    teacher = make_user("ws_t", role="teacher")
    student = make_user("ws_s")
    course = make_course(teacher)
    enrol(course, student)
    return course, teacher, token_for(student)


@database_sync_to_async
def outsider_token():
    return token_for(make_user("ws_x"))


async def connect(path):
    communicator = WebsocketCommunicator(app(), path)
    connected, code = await communicator.connect()
    return communicator, connected, code


async def test_member_receives_alerts():
    course, teacher, token = await course_with_member()
    communicator, connected, _ = await connect(f"/ws/courses/{course.pk}/alerts/?token={token}")
    assert connected

    await database_sync_to_async(Notification.objects.create)(
        course=course, sender=teacher, title="Room change", message="B201"
    )
    event = await communicator.receive_json_from(timeout=2)
    assert event["title"] == "Room change"
    assert event["course"] == course.pk

    await database_sync_to_async(Notification.objects.create)(
        course=course, sender=teacher, title="Quiet", message="m", is_alert=False
    )
    assert await communicator.receive_nothing(timeout=0.2)
    await communicator.disconnect()


async def test_connection_rejections():
    course, _, _ = await course_with_member()
    _, connected, code = await connect(f"/ws/courses/{course.pk}/alerts/")
    assert (connected, code) == (False, 4001)

    _, connected, code = await connect(f"/ws/courses/{course.pk}/alerts/?token=garbage")
    assert (connected, code) == (False, 4001)

    token = await outsider_token()
    _, connected, code = await connect(f"/ws/courses/{course.pk}/alerts/?token={token}")
    assert (connected, code) == (False, 4003)

    _, connected, code = await connect(f"/ws/courses/999999/alerts/?token={token}")
    assert (connected, code) == (False, 4004)
