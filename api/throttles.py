from rest_framework.throttling import AnonRateThrottle


class AuthRateThrottle(AnonRateThrottle):
    """Per-client limit on credential endpoints (register/login)."""

    scope = "auth"
