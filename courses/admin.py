from django.contrib import admin

from .models import Course, Enrolment


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("code", "title", "instructor", "start_date", "end_date")
    search_fields = ("code", "title", "description", "instructor__username")


@admin.register(Enrolment)
class EnrolmentAdmin(admin.ModelAdmin):
    list_display = ("course", "student", "created_at")
    search_fields = ("course__title", "course__code", "student__username")
