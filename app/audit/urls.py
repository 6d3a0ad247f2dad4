"""
URL configuration for the audit app.

Routes:
    /logs/        - List audit entries (GET)
    /logs/{id}/   - Audit entry detail (GET)

All routes are prefixed with /api/v1/audit/ when included in the main URLconf.
"""

from rest_framework.routers import DefaultRouter

from audit.views import AuditLogViewSet

router = DefaultRouter()
router.register(r"logs", AuditLogViewSet, basename="audit-log")

app_name = "audit"
urlpatterns = router.urls
