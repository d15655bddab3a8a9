"""Medal standings for the school dashboard."""

from __future__ import annotations

from django.db.models import Count, F, Q

from achievements.models import Achievement
from roster.models import Athlete, Team
from schools.models import School

DEFAULT_TEAM_COLOR = "#cccccc"

MEDALS = (
    ("gold", Achievement.Medal.GOLD),
    ("silver", Achievement.Medal.SILVER),
    ("bronze", Achievement.Medal.BRONZE),
)


def _medals(row) -> dict:
    return {"gold": row.gold, "silver": row.silver, "bronze": row.bronze, "total": row.total}


def team_medals(school: School) -> list[dict]:
    """Medal counts of every active team over its active athletes' achievements."""

    teams = (
        Team.objects.filter(school=school, is_active=True)
        .annotate(
            **{
                key: Count(
                    "athletes__achievements",
                    filter=Q(athletes__is_active=True, athletes__achievements__medal=medal),
                )
                for key, medal in MEDALS
            }
        )
        .annotate(total=F("gold") + F("silver") + F("bronze"))
        .order_by("-gold", "-silver", "-bronze", "-total", "name")
    )
    return [
        {
            "id": team.pk,
            "name": team.name,
            "color": team.color or DEFAULT_TEAM_COLOR,
            "medals": _medals(team),
        }
        for team in teams
    ]


def top_athletes(school: School, *, limit: int = 10) -> list[dict]:
    """Active athletes holding achievements, ranked by medal totals."""

    athletes = (
        Athlete.objects.filter(school=school, is_active=True, achievements__isnull=False)
        .select_related("team", "age_class")
        .annotate(**{key: Count("achievements", filter=Q(achievements__medal=medal)) for key, medal in MEDALS})
        .annotate(total=F("gold") + F("silver") + F("bronze"))
        .order_by("-total", "-gold", "-silver", "-bronze", "full_name")[:limit]
    )
    return [
        {
            "id": athlete.pk,
            "athlete_number": athlete.athlete_number,
            "full_name": athlete.full_name,
            "image": athlete.image,
            "age_class": athlete.age_class.name,
            "team": {"name": athlete.team.name, "color": athlete.team.color or DEFAULT_TEAM_COLOR},
            "medals": _medals(athlete),
        }
        for athlete in athletes
    ]
