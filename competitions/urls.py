"""URL configuration for the events API."""

from rest_framework.routers import DefaultRouter

from .api import EventViewSet

router = DefaultRouter()
router.register(r"events", EventViewSet, basename="event")

urlpatterns = router.urls
