from django.contrib import admin

from .models import CalendarEvent


@admin.register(CalendarEvent)
class CalendarEventAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "start", "end", "course", "created_by")
    list_filter = ("type",)
    search_fields = ("title", "description")
    filter_horizontal = ("participants",)
