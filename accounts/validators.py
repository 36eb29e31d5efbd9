from __future__ import annotations

import re

from django.core.exceptions import ValidationError
from django.utils.translation import gettext as _


CHARACTER_CLASSES = (
    ("uppercase letter", re.compile(r"[A-Z]")),
    ("lowercase letter", re.compile(r"[a-z]")),
    ("digit", re.compile(r"\d")),
    ("symbol", re.compile(r"[^A-Za-z0-9]")),
)


class PasswordComplexityValidator:
    """Require one character of each class in `CHARACTER_CLASSES`.

    All missing classes are reported in a single error so a client can
    show the complete requirement at once. Length is checked separately
    by Django's ``MinimumLengthValidator``.
    """

    def validate(self, password: str, user=None):  # noqa: D401
        missing = [name for name, pattern in CHARACTER_CLASSES if not pattern.search(password or "")]
        if missing:
            raise ValidationError(
                _("Password must contain at least one %(classes)s.") % {"classes": ", one ".join(missing)},
                code="password_too_simple",
            )

    def get_help_text(self):  # noqa: D401
        return _("Password must include an uppercase letter, a lowercase letter, a digit and a symbol.")
