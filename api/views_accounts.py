"""Account endpoints: registration, login sessions, profile, admin users."""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.models import update_last_login
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from access.errors import NotFound, Unauthenticated
from access.policy import Action, ResourceType
from accounts.models import UserSession
from accounts.sessions import open_session
from .filters import UserFilter
from .permissions import CollectionPolicy, IsAuthenticatedPrincipal, PolicyObjectMixin
from .serializers import (
    AdminUserSerializer,
    LoginSerializer,
    PasswordChangeSerializer,
    ProfileSerializer,
    RegisterSerializer,
    SessionSerializer,
)
from .throttles import AuthRateThrottle

logger = logging.getLogger(__name__)

User = get_user_model()


def _session_response(user, session, token, *, status_code=status.HTTP_200_OK) -> Response:
    return Response(
        {
            "success": True,
            "token": token,
            "token_type": "Bearer",
            "session_id": str(session.pk),
            "expires_at": session.expires_at.isoformat(),
            "user": ProfileSerializer(user).data,
        },
        status=status_code,
    )


@api_view(["POST"])
@permission_classes([AllowAny])
@throttle_classes([AuthRateThrottle])
def register(request):
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    session, token = open_session(user, request)
    logger.info("Registered user %s as %s", user.pk, user.profile.role)
    return _session_response(user, session, token, status_code=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([AllowAny])
@throttle_classes([AuthRateThrottle])
def login(request):
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    if data.get("email"):
        account = User.objects.filter(email__iexact=data["email"]).first()
    else:
        account = User.objects.filter(username__iexact=data["username"]).first()
    user = None
    if account is not None:
        user = authenticate(request._request, username=account.username, password=data["password"])
    if user is None:
        raise Unauthenticated("Invalid credentials.")
    session, token = open_session(user, request)
    update_last_login(None, user)
    return _session_response(user, session, token)


@api_view(["POST"])
def logout(request):
    session_id = request.user.session_id
    if session_id is not None:
        UserSession.objects.filter(pk=session_id, user_id=request.user.id).revoke()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET", "PATCH"])
def profile(request):
    user = User.objects.select_related("profile").get(pk=request.user.id)
    if request.method == "GET":
        return Response(ProfileSerializer(user).data)
    serializer = ProfileSerializer(user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@api_view(["POST"])
def change_password(request):
    user = User.objects.get(pk=request.user.id)
    serializer = PasswordChangeSerializer(data=request.data, context={"user": user})
    serializer.is_valid(raise_exception=True)
    user.set_password(serializer.validated_data["new_password"])
    user.save(update_fields=["password"])
    # Other devices must log in again with the new password
    UserSession.objects.filter(user_id=user.pk).exclude(pk=request.user.session_id).revoke()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET", "DELETE"])
def sessions(request):
    qs = UserSession.objects.filter(user_id=request.user.id)
    if request.method == "DELETE":
        revoked = qs.revoke()
        logger.info("Closed %s sessions for user %s", revoked, request.user.id)
        return Response({"success": True, "revoked": revoked})
    context = {"session_id": request.user.session_id}
    return Response(SessionSerializer(qs.active(), many=True, context=context).data)


@api_view(["DELETE"])
def session_detail(request, session_id):
    revoked = UserSession.objects.filter(pk=session_id, user_id=request.user.id).revoke()
    if not revoked:
        raise NotFound("Session not found.")
    return Response(status=status.HTTP_204_NO_CONTENT)


class UserViewSet(
    PolicyObjectMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Account administration. Listing and editing are admin-only."""

    queryset = User.objects.select_related("profile").order_by("username")
    serializer_class = AdminUserSerializer
    permission_classes = [IsAuthenticatedPrincipal, CollectionPolicy]
    policy_resource = ResourceType.USER
    collection_actions = {"list": Action.LIST}
    filterset_class = UserFilter
    search_fields = ["username", "email", "profile__full_name"]
    ordering_fields = ["username", "id", "date_joined"]
