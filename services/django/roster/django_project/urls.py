from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("trainee_records.api.urls")),
    path("", include("trainee_records.urls")),
]
