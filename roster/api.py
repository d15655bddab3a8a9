"""REST API views for teams, sports, age classes and athletes."""

from __future__ import annotations

import logging

from django.db import transaction
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from schools.access import SchoolScopedMixin

from . import models
from .serializers import (
    ActiveAthleteFilterSerializer,
    ActiveAthleteSerializer,
    AgeClassSerializer,
    AthleteSerializer,
    SportSerializer,
    TeamSerializer,
    ToggleStatusSerializer,
)

logger = logging.getLogger(__name__)


class SchoolOwnedViewSet(SchoolScopedMixin, viewsets.ModelViewSet):
    """CRUD over records of one school; lists require a school code."""

    ordering: tuple[str, ...] = ()

    def get_serializer_context(self):  # type: ignore[override]
        context = super().get_serializer_context()
        if self.action == "create":
            context["school"] = self.get_school()
        return context

    def filter_list(self, queryset):
        return queryset

    def list(self, request, *args, **kwargs):
        school = self.get_school()
        queryset = self.filter_list(self.get_queryset().filter(school=school))
        if self.ordering:
            queryset = queryset.order_by(*self.ordering)
        return Response(self.get_serializer(queryset, many=True).data)

    def perform_create(self, serializer):
        instance = serializer.save(school=serializer.context["school"])
        logger.info("%s %s created for %s", instance._meta.model_name, instance.pk, instance.school.school_code)

    def perform_destroy(self, instance):
        logger.info("%s %s deleted by %s", instance._meta.model_name, instance.pk, self.request.user)
        instance.delete()


class TeamViewSet(SchoolOwnedViewSet):
    queryset = models.Team.objects.select_related("school")
    serializer_class = TeamSerializer
    ordering = ("name",)


class SportViewSet(SchoolOwnedViewSet):
    queryset = models.Sport.objects.select_related("school").prefetch_related("age_classes")
    serializer_class = SportSerializer
    ordering = ("name",)


class AgeClassViewSet(SchoolOwnedViewSet):
    queryset = models.AgeClass.objects.select_related("school")
    serializer_class = AgeClassSerializer
    ordering = ("gender", "min_age", "name")

    def filter_list(self, queryset):
        params = self.request.query_params
        if params.get("gender"):
            queryset = queryset.filter(gender=params["gender"])
        if params.get("is_active") is not None:
            queryset = queryset.filter(is_active=params["is_active"].lower() in {"1", "true", "yes"})
        return queryset


class AthleteViewSet(SchoolOwnedViewSet):
    queryset = models.Athlete.objects.select_related("school", "team", "age_class").prefetch_related(
        "sport_memberships__sport"
    )
    serializer_class = AthleteSerializer
    ordering = ("-created_at", "-id")

    def perform_create(self, serializer):
        with transaction.atomic():
            super().perform_create(serializer)

    def perform_update(self, serializer):
        with transaction.atomic():
            athlete = serializer.save()
        logger.info("athlete %s updated by %s", athlete.athlete_number, self.request.user)

    @action(detail=False, methods=["get"])
    def active(self, request):
        school = self.get_school()
        filters = ActiveAthleteFilterSerializer(
            data={key: value for key, value in request.query_params.items() if key in ("team", "age_class") and value}
        )
        filters.is_valid(raise_exception=True)
        athletes = self.get_queryset().filter(school=school, is_active=True)
        if "team" in filters.validated_data:
            athletes = athletes.filter(team_id=filters.validated_data["team"])
        if "age_class" in filters.validated_data:
            athletes = athletes.filter(age_class_id=filters.validated_data["age_class"])
        return Response(ActiveAthleteSerializer(athletes.order_by("full_name"), many=True).data)

    @action(detail=True, methods=["patch"], url_path="toggle-status")
    def toggle_status(self, request, pk=None):
        athlete = self.get_object()
        serializer = ToggleStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        athlete.is_active = serializer.validated_data["is_active"]
        athlete.save(update_fields=["is_active", "updated_at"])
        logger.info("athlete %s active=%s", athlete.athlete_number, athlete.is_active)
        return Response(AthleteSerializer(athlete, context=self.get_serializer_context()).data)
