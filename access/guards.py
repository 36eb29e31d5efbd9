"""Synchronous glue between DRF views and the access core.

Views call `require` before touching a resource. It looks the resource
up first (so a missing resource is always a 404, whoever asks), then asks
the engine, and raises the mapped error on denial.
"""
from __future__ import annotations

from asgiref.sync import async_to_sync

from .errors import Forbidden, Unauthenticated
from .policy import Action, ResourceType, authorize
from .principal import Principal
from .relationships import NO_RELATIONSHIPS, Relationships, relationships_for

# Messages for denials whose failing check tells the caller something
# more useful than "not permitted".
DENIAL_MESSAGES = {
    "before_due": "The due date for this assignment has passed.",
    "participant": "You are not enrolled in this course.",
}


def principal_of(user) -> Principal | None:
    return user if isinstance(user, Principal) else None


def lookup(resource_type, resource_id) -> Relationships:
    return async_to_sync(relationships_for)(resource_type, resource_id)


def check(principal, action, resource_type, facts: Relationships, *, at=None, message=None) -> None:
    decision = authorize(principal, action, resource_type, facts, at=at)
    if decision:
        return
    if decision.unauthenticated:
        raise Unauthenticated()
    action, resource_type = Action(action), ResourceType(resource_type)
    raise Forbidden(
        message
        or DENIAL_MESSAGES.get(decision.reason)
        or f"You do not have permission to {action.value.replace('_', ' ')} this {resource_type.value}."
    )


def require(request, action, resource_type, resource_id=None, *, course_id=None, at=None, message=None) -> Relationships:
    """Look up and authorize; return the facts on success.

    ``resource_id`` names the resource itself. For actions on a child
    resource that does not exist yet (creating a material, an assignment,
    a grade...), pass the parent ``course_id`` instead: the course's facts
    are what the child will inherit.
    """
    if resource_id is not None:
        facts = lookup(resource_type, resource_id)
    elif course_id is not None:
        facts = lookup(ResourceType.COURSE, course_id)
    else:
        facts = NO_RELATIONSHIPS
    check(principal_of(request.user), action, resource_type, facts, at=at, message=message)
    return facts
