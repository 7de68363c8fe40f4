from django.urls import path

from .views import healthz_view, upload_roster_file

urlpatterns = [
    path("healthz/", healthz_view, name="healthz"),
    path("upload/", upload_roster_file, name="upload-roster"),
]
