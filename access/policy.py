"""Authorization Decision Engine.

`authorize` is pure and synchronous: given a principal, an action, a
resource type and the relationship facts already looked up for the
resource, it returns a `Decision`. Evaluation order is fixed:

1. ``admin`` is allowed everything, except on resources and actions
   listed in `ADMIN_EXEMPT_RESOURCES` / `ADMIN_EXEMPT_ACTIONS`.
2. The rule registered in `POLICY` for ``(resource_type, action)``.
3. Anything else is denied.

A missing principal (anonymous caller) only passes rules that do not look
at the principal at all, such as reading published news.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from accounts.models import Role

logger = logging.getLogger(__name__)


class ResourceType(str, enum.Enum):
    COURSE = "course"
    MATERIAL = "material"
    ASSIGNMENT = "assignment"
    GRADE = "grade"
    NOTIFICATION = "notification"
    MESSAGE = "message"
    NEWS = "news"
    EVENT = "event"
    USER = "user"


class Action(str, enum.Enum):
    READ = "read"
    LIST = "list"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ENROLL = "enroll"
    UNENROLL = "unenroll"
    SUBMIT = "submit"
    GRADE = "grade"
    MARK_READ = "mark_read"
    TOGGLE_VISIBILITY = "toggle_visibility"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str
    # Denied only because nobody is logged in; callers answer 401, not 403.
    unauthenticated: bool = False

    def __bool__(self) -> bool:
        return self.allowed


class Rule:
    """A named predicate over ``(principal, facts, at)``."""

    needs_principal = True

    def __init__(self, name: str, test=None):
        self.name = name
        self._test = test

    def __call__(self, principal, facts, at) -> bool:
        return self.failing(principal, facts, at) is None

    def failing(self, principal, facts, at) -> str | None:
        """Name of the check that failed, or None when the rule holds."""
        if self.needs_principal and principal is None:
            return self.name
        return None if self._test(principal, facts, at) else self.name

    def __repr__(self) -> str:  # pragma: no cover
        return f"Rule({self.name})"


class PublicRule(Rule):
    needs_principal = False


class AllOf(Rule):
    def __init__(self, *rules: Rule):
        super().__init__(" and ".join(r.name for r in rules))
        self.rules = rules

    def failing(self, principal, facts, at):
        for rule in self.rules:
            reason = rule.failing(principal, facts, at)
            if reason is not None:
                return reason
        return None


class AnyOf(Rule):
    def __init__(self, *rules: Rule):
        super().__init__(" or ".join(r.name for r in rules))
        self.rules = rules

    def failing(self, principal, facts, at):
        if any(rule.failing(principal, facts, at) is None for rule in self.rules):
            return None
        return self.name


def has_role(role: Role) -> Rule:
    return Rule(role.value, lambda p, f, at: p.role == role)


authenticated = Rule("authenticated", lambda p, f, at: True)
is_owner = Rule("owner", lambda p, f, at: f.owner_id is not None and p.id == f.owner_id)
is_participant = Rule("participant", lambda p, f, at: p.id in f.participant_ids)
is_subject = Rule("subject", lambda p, f, at: f.subject_id is not None and p.id == f.subject_id)
before_due = PublicRule("before_due", lambda p, f, at: f.due_date is None or at <= f.due_date)
is_published = PublicRule("published", lambda p, f, at: bool(f.is_published))

owner_or_participant = AnyOf(is_owner, is_participant)
teaching_owner = AllOf(has_role(Role.TEACHER), is_owner)

R, A = ResourceType, Action

POLICY: dict[tuple[ResourceType, Action], Rule] = {
    (R.COURSE, A.READ): owner_or_participant,
    (R.COURSE, A.CREATE): has_role(Role.TEACHER),
    (R.COURSE, A.UPDATE): is_owner,
    (R.COURSE, A.DELETE): is_owner,
    (R.COURSE, A.ENROLL): is_owner,
    (R.COURSE, A.UNENROLL): is_owner,

    (R.MATERIAL, A.READ): owner_or_participant,
    (R.MATERIAL, A.CREATE): teaching_owner,
    (R.MATERIAL, A.UPDATE): teaching_owner,
    (R.MATERIAL, A.DELETE): teaching_owner,

    (R.ASSIGNMENT, A.READ): owner_or_participant,
    (R.ASSIGNMENT, A.CREATE): teaching_owner,
    (R.ASSIGNMENT, A.UPDATE): teaching_owner,
    (R.ASSIGNMENT, A.DELETE): teaching_owner,
    (R.ASSIGNMENT, A.SUBMIT): AllOf(is_participant, before_due),
    (R.ASSIGNMENT, A.GRADE): teaching_owner,

    (R.GRADE, A.READ): AnyOf(is_subject, is_owner),
    (R.GRADE, A.CREATE): teaching_owner,
    (R.GRADE, A.UPDATE): teaching_owner,
    (R.GRADE, A.DELETE): teaching_owner,

    (R.NOTIFICATION, A.CREATE): is_owner,
    (R.NOTIFICATION, A.READ): owner_or_participant,
    (R.NOTIFICATION, A.MARK_READ): owner_or_participant,

    (R.MESSAGE, A.CREATE): authenticated,
    (R.MESSAGE, A.READ): owner_or_participant,
    (R.MESSAGE, A.DELETE): owner_or_participant,
    (R.MESSAGE, A.MARK_READ): owner_or_participant,

    (R.NEWS, A.READ): is_published,

    (R.EVENT, A.CREATE): authenticated,
    (R.EVENT, A.READ): owner_or_participant,
    (R.EVENT, A.UPDATE): is_owner,
    (R.EVENT, A.DELETE): is_owner,

    (R.USER, A.READ): is_owner,
}

# Private messages stay private even for administrators, and admins are
# not course participants, so they cannot submit work either.
ADMIN_EXEMPT_RESOURCES = frozenset({R.MESSAGE})
ADMIN_EXEMPT_ACTIONS = frozenset({(R.ASSIGNMENT, A.SUBMIT)})

del R, A


def _admin_applies(resource_type: ResourceType, action: Action) -> bool:
    return resource_type not in ADMIN_EXEMPT_RESOURCES and (resource_type, action) not in ADMIN_EXEMPT_ACTIONS


def authorize(principal, action, resource_type, relationships, *, at: datetime | None = None) -> Decision:
    """Decide whether ``principal`` may perform ``action`` on a resource.

    ``relationships`` are the facts returned by
    `access.relationships.relationships_for` (or `NO_RELATIONSHIPS` for
    collection-level actions). ``at`` is the evaluation instant used by
    time-dependent rules; it defaults to now.
    """
    action = Action(action)
    resource_type = ResourceType(resource_type)

    if principal is not None and principal.is_admin and _admin_applies(resource_type, action):
        return Decision(True, "admin")

    rule = POLICY.get((resource_type, action))
    if rule is None:
        decision = Decision(False, "no rule", unauthenticated=principal is None)
    else:
        at = at or datetime.now(timezone.utc)
        failed = rule.failing(principal, relationships, at)
        if failed is None:
            return Decision(True, rule.name)
        decision = Decision(False, failed, unauthenticated=principal is None)

    logger.debug(
        "Denied %s %s for %s: %s",
        action.value,
        resource_type.value,
        f"{principal.role.value}:{principal.id}" if principal is not None else "anonymous",
        decision.reason,
    )
    return decision
