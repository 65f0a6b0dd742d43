from django.contrib import admin
from django.urls import path

from hackcore.apps.hackathons import views as hackathon_views

urlpatterns = [
    path("admin/", admin.site.urls),

    # API healthcheck
    path("api/health/", hackathon_views.health, name="api_health"),
]
