"""Signals for automatic profile management.

On user creation, create a default `UserProfile`: superusers get the
admin role, everyone else starts as a student. Registration then updates
the role when a teacher account is requested.
"""
from django.contrib.auth.models import User
from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import Role, UserProfile


@receiver(post_save, sender=User)
def create_user_profile(sender, instance: User, created: bool, **kwargs):  # noqa: D401
    """Create a profile for new users."""
    if created:
        role = Role.ADMIN if instance.is_superuser else Role.STUDENT
        UserProfile.objects.create(user=instance, role=role)


@receiver(pre_save, sender=UserProfile)
def ensure_student_number(sender, instance: UserProfile, **kwargs):  # noqa: D401
    """Ensure students always have a student_number assigned.

    If a profile transitions to the student role and the number is empty,
    assign a deterministic value based on the user id.
    """
    if instance.role == Role.STUDENT and not instance.student_number and instance.user_id:
        instance.student_number = f"S{instance.user_id:07d}"
