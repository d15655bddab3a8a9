from django.urls import path

from .api import AthleteAchievementViewSet, TeamMedalsView, TopAthletesView

achievement_list = AthleteAchievementViewSet.as_view({"get": "list", "post": "create"})
achievement_detail = AthleteAchievementViewSet.as_view({"get": "retrieve", "put": "update", "delete": "destroy"})

urlpatterns = [
    path("athletes/<int:athlete_id>/achievements/", achievement_list, name="athlete-achievement-list"),
    path(
        "athletes/<int:athlete_id>/achievements/<int:pk>/",
        achievement_detail,
        name="athlete-achievement-detail",
    ),
    path("dashboard/team-medals/", TeamMedalsView.as_view(), name="dashboard-team-medals"),
    path("dashboard/top-athletes/", TopAthletesView.as_view(), name="dashboard-top-athletes"),
]
