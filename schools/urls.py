from django.urls import path
from rest_framework.routers import DefaultRouter

from .api import LoginView, LogoutView, MeView, SchoolViewSet, SeasonViewSet, UserViewSet

router = DefaultRouter()
router.register(r"schools", SchoolViewSet, basename="school")
router.register(r"users", UserViewSet, basename="user")
router.register(r"seasons", SeasonViewSet, basename="season")

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="auth-login"),
    path("auth/logout/", LogoutView.as_view(), name="auth-logout"),
    path("auth/me/", MeView.as_view(), name="auth-me"),
] + router.urls
