from django.contrib import admin

from .models import Assignment, Grade, Submission


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "due_date", "points")
    list_filter = ("course",)
    search_fields = ("title", "course__title")


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ("assignment", "student", "submitted_at", "grade")
    list_filter = ("assignment",)
    search_fields = ("student__username",)


@admin.register(Grade)
class GradeAdmin(admin.ModelAdmin):
    list_display = ("student", "course", "assignment", "grade", "max_grade", "graded_at")
    list_filter = ("course",)
    search_fields = ("student__username", "course__title")
