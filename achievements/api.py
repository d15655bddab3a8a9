import logging

from django.shortcuts import get_object_or_404
from rest_framework import permissions, viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from roster.models import Athlete
from schools.access import accessible_schools, actor_label, resolve_school

from .models import Achievement
from .serializers import AchievementSerializer
from .services.standings import team_medals, top_athletes

logger = logging.getLogger(__name__)

MAX_TOP_ATHLETES = 100


class AthleteAchievementViewSet(viewsets.ModelViewSet):
    serializer_class = AchievementSerializer
    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ["get", "post", "put", "delete", "head", "options"]

    def get_athlete(self) -> Athlete:
        if not hasattr(self, "_athlete"):
            self._athlete = get_object_or_404(
                Athlete,
                pk=self.kwargs["athlete_id"],
                school__in=accessible_schools(self.request.user),
            )
        return self._athlete

    def get_queryset(self):
        return Achievement.objects.filter(athlete=self.get_athlete()).select_related(
            "sport", "season", "tournament_age_class"
        )

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["athlete"] = self.get_athlete()
        return context

    def perform_create(self, serializer):
        actor = actor_label(self.request.user)
        achievement = serializer.save(athlete=self.get_athlete(), created_by=actor, updated_by=actor)
        logger.info("achievement %s added to athlete %s", achievement.pk, achievement.athlete_id)

    def perform_update(self, serializer):
        serializer.save(updated_by=actor_label(self.request.user))

    def perform_destroy(self, instance):
        logger.info("achievement %s deleted by %s", instance.pk, self.request.user)
        instance.delete()


class TeamMedalsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(team_medals(resolve_school(request)))


class TopAthletesView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        school = resolve_school(request)
        try:
            limit = int(request.query_params.get("limit", 10))
        except ValueError:
            raise ValidationError({"limit": "A valid integer is required."}) from None
        limit = min(max(limit, 1), MAX_TOP_ATHLETES)
        return Response(top_athletes(school, limit=limit))
