"""Permissions for REST API v1.

Fine-grained decisions are made by `access.policy`; the classes here only
gate whole endpoints and route object lookups through the access guard.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework.permissions import BasePermission

from access.guards import check, principal_of, require
from access.policy import Action
from access.relationships import NO_RELATIONSHIPS


class IsAuthenticatedPrincipal(BasePermission):
    def has_permission(self, request, view):  # noqa: D401
        return principal_of(request.user) is not None


class CollectionPolicy(BasePermission):
    """Apply the policy to collection-level actions such as ``list``.

    Views declare ``collection_actions = {"list": Action.LIST, ...}``;
    unlisted actions pass through to the view.
    """

    def has_permission(self, request, view):
        action = getattr(view, "collection_actions", {}).get(view.action)
        if action is not None:
            check(principal_of(request.user), action, view.policy_resource, NO_RELATIONSHIPS)
        return True


class PolicyObjectMixin:
    """Resolve detail lookups through the access guard.

    The guard checks existence before permission, so a missing object is a
    404 for everyone and an existing one the caller may not touch is a
    403. Lists use the scoped `get_queryset`; detail routes use the
    unscoped ``queryset``.
    """

    policy_resource = None
    object_actions = {
        "retrieve": Action.READ,
        "update": Action.UPDATE,
        "partial_update": Action.UPDATE,
        "destroy": Action.DELETE,
    }

    def scoped_queryset(self, queryset):
        return queryset

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == "list":
            return self.scoped_queryset(queryset)
        return queryset

    def get_object(self):
        lookup = self.kwargs[self.lookup_url_kwarg or self.lookup_field]
        action = self.object_actions.get(self.action, Action.READ)
        self.relationships = require(self.request, action, self.policy_resource, lookup)
        obj = get_object_or_404(self.get_queryset(), pk=lookup)
        self.check_object_permissions(self.request, obj)
        return obj
