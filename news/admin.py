from django.contrib import admin

from .models import News


@admin.register(News)
class NewsAdmin(admin.ModelAdmin):
    list_display = ("title", "author", "is_published", "is_visible", "created_at")
    list_filter = ("is_published", "is_visible")
    search_fields = ("title", "content")
