from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import RosterUploadView, SubjectViewSet, TraineeLookupView, TraineeViewSet

router = DefaultRouter()
router.register("subjects", SubjectViewSet, basename="subject")
router.register("trainees", TraineeViewSet, basename="trainee")

urlpatterns = [
    path("upload/", RosterUploadView.as_view(), name="api-upload"),
    path("lookup/", TraineeLookupView.as_view(), name="trainee-lookup"),
] + router.urls
