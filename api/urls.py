"""API routes: versioned REST endpoints, OpenAPI schema and docs."""
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.routers import DefaultRouter

from . import views_accounts
from .views import AssignmentViewSet, CourseViewSet, GradeViewSet, MaterialViewSet
from .views_activity import MessageViewSet, NotificationViewSet
from .views_campus import CalendarEventViewSet, NewsViewSet

router = DefaultRouter()
router.register(r"api/v1/users", views_accounts.UserViewSet, basename="users")
router.register(r"api/v1/courses", CourseViewSet, basename="courses")
router.register(r"api/v1/assignments", AssignmentViewSet, basename="assignments")
router.register(r"api/v1/grades", GradeViewSet, basename="grades")
router.register(r"api/v1/notifications", NotificationViewSet, basename="notifications")
router.register(r"api/v1/messages", MessageViewSet, basename="messages")
router.register(r"api/v1/news", NewsViewSet, basename="news")
router.register(r"api/v1/events", CalendarEventViewSet, basename="events")

material_list = MaterialViewSet.as_view({"get": "list", "post": "create"})
material_detail = MaterialViewSet.as_view(
    {"get": "retrieve", "put": "update", "patch": "partial_update", "delete": "destroy"}
)

auth_patterns = [
    path("register/", views_accounts.register, name="auth-register"),
    path("login/", views_accounts.login, name="auth-login"),
    path("logout/", views_accounts.logout, name="auth-logout"),
    path("profile/", views_accounts.profile, name="auth-profile"),
    path("password/", views_accounts.change_password, name="auth-password"),
    path("sessions/", views_accounts.sessions, name="auth-sessions"),
    path("sessions/<uuid:session_id>/", views_accounts.session_detail, name="auth-session-detail"),
]

urlpatterns = [
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/v1/auth/", include(auth_patterns)),
    path("api/v1/courses/<int:course_id>/materials/", material_list, name="course-materials"),
    path("api/v1/courses/<int:course_id>/materials/<int:pk>/", material_detail, name="course-material-detail"),
    path("", include(router.urls)),
]
