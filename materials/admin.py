from django.contrib import admin

from .models import Material


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "uploaded_by", "mime", "size_bytes", "created_at")
    list_filter = ("mime",)
    search_fields = ("title", "course__code", "course__title", "uploaded_by__username")
    readonly_fields = ("size_bytes", "mime", "created_at", "updated_at")
