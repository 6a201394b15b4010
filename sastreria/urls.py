from django.contrib import admin
from django.urls import include, path

from .views import health_view

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/health/", health_view, name="health"),
    path("api/auth/", include("users.urls")),
    path("api/", include("clients.urls")),
    path("api/", include("measurements.urls")),
    path("api/", include("orders.urls")),
    path("api/", include("payments.urls")),
    path("api/", include("dashboard.urls")),
]
