from django.contrib import admin

from .models import UserProfile, UserSession


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "full_name", "student_number", "created_at")
    list_filter = ("role",)
    search_fields = ("user__username", "user__email", "full_name", "student_number")


@admin.register(UserSession)
class UserSessionAdmin(admin.ModelAdmin):
    list_display = ("user", "device_type", "ip_address", "created_at", "expires_at", "revoked_at")
    list_filter = ("device_type",)
    search_fields = ("user__username", "device_name")
