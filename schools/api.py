"""REST API views for schools, user accounts, sessions and seasons."""

from __future__ import annotations

import logging

from django.contrib.auth import authenticate, get_user_model, login, logout
from django.db import transaction
from rest_framework import mixins, permissions, status, views, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .access import IsSuperAdmin, SchoolScopedMixin, accessible_schools
from .models import Season
from .serializers import (
    LoginSerializer,
    SchoolSerializer,
    SeasonSerializer,
    UserRegistrationSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


class SchoolViewSet(mixins.ListModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    serializer_class = SchoolSerializer

    def get_permissions(self):  # type: ignore[override]
        if self.action == "create":
            return [IsSuperAdmin()]
        return super().get_permissions()

    def get_queryset(self):
        return accessible_schools(self.request.user).order_by("name")

    def perform_create(self, serializer):
        school = serializer.save()
        logger.info("school %s created by %s", school.school_code, self.request.user)


class UserViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    queryset = User.objects.select_related("school").order_by("-date_joined")
    serializer_class = UserSerializer
    permission_classes = [IsSuperAdmin]

    @action(detail=False, methods=["post"])
    def register(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("registered %s user %s", user.role, user.email)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"].strip().lower()
        account = User.objects.filter(email__iexact=email).first()
        user = None
        if account is not None:
            user = authenticate(
                request,
                username=account.get_username(),
                password=serializer.validated_data["password"],
            )
        if user is None:
            logger.warning("failed login for %s", email)
            return Response({"detail": "Invalid email or password."}, status=status.HTTP_400_BAD_REQUEST)
        login(request, user)
        return Response(UserSerializer(user).data)


class LogoutView(views.APIView):
    def post(self, request, *args, **kwargs):
        logout(request)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(views.APIView):
    def get(self, request, *args, **kwargs):
        return Response(UserSerializer(request.user).data)


class SeasonViewSet(SchoolScopedMixin, mixins.ListModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    queryset = Season.objects.select_related("school")
    serializer_class = SeasonSerializer

    def list(self, request, *args, **kwargs):
        school = self.get_school()
        seasons = self.get_queryset().filter(school=school).order_by("-start_date", "name")
        return Response(self.get_serializer(seasons, many=True).data)

    def create(self, request, *args, **kwargs):
        school = self.get_school()
        serializer = self.get_serializer(data=request.data, context={**self.get_serializer_context(), "school": school})
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            if serializer.validated_data.get("is_active", True):
                Season.objects.filter(school=school, is_active=True).update(is_active=False)
            season = serializer.save(school=school)
        logger.info("season %s created for %s", season.name, school.school_code)
        return Response(self.get_serializer(season).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def current(self, request):
        school = self.get_school()
        seasons = Season.objects.filter(school=school)
        season = seasons.filter(is_active=True).order_by("-start_date").first() or seasons.order_by("-start_date").first()
        if season is None:
            return Response({"detail": "No seasons found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(self.get_serializer(season).data)
