from rest_framework.routers import DefaultRouter

from .api import AgeClassViewSet, AthleteViewSet, SportViewSet, TeamViewSet

router = DefaultRouter()
router.register(r"teams", TeamViewSet, basename="team")
router.register(r"sports", SportViewSet, basename="sport")
router.register(r"age-classes", AgeClassViewSet, basename="age-class")
router.register(r"athletes", AthleteViewSet, basename="athlete")

urlpatterns = router.urls
