"""Roster helpers: age class lookup and demo data seeding."""

from __future__ import annotations

import logging
from datetime import date

from django.db import transaction
from django.utils import timezone

from schools.models import School, Season

from . import models

logger = logging.getLogger(__name__)

__all__ = [
    "find_overlapping_age_class",
    "suggest_age_class",
    "replace_sport_memberships",
    "seed_demo_school",
]


def find_overlapping_age_class(
    *,
    school: School,
    gender: str,
    min_age: int,
    max_age: int,
    exclude_pk: int | None = None,
) -> models.AgeClass | None:
    """Return the first class of the same gender whose age range intersects the given one."""

    candidates = models.AgeClass.objects.filter(
        school=school,
        gender=gender,
        min_age__lte=max_age,
        max_age__gte=min_age,
    )
    if exclude_pk:
        candidates = candidates.exclude(pk=exclude_pk)
    return candidates.order_by("min_age", "name").first()


def suggest_age_class(
    school: School,
    gender: str,
    date_of_birth: date,
    on: date | None = None,
) -> models.AgeClass | None:
    """Pick the active age class covering an athlete born on ``date_of_birth``."""

    on = on or timezone.localdate()
    age = on.year - date_of_birth.year - ((on.month, on.day) < (date_of_birth.month, date_of_birth.day))
    return (
        models.AgeClass.objects.filter(
            school=school,
            gender=gender,
            is_active=True,
            min_age__lte=age,
            max_age__gte=age,
        )
        .order_by("min_age", "name")
        .first()
    )


def replace_sport_memberships(athlete: models.Athlete, memberships: list[dict]) -> None:
    """Replace the athlete's sport memberships with ``memberships``."""

    athlete.sport_memberships.all().delete()
    models.AthleteSport.objects.bulk_create(
        [
            models.AthleteSport(
                athlete=athlete,
                sport=item["sport"],
                joined_at=item.get("joined_at") or timezone.now(),
                is_active=item.get("is_active", True),
            )
            for item in memberships
        ]
    )


DEMO_TEAMS = [
    ("Merah", "red", "Berani kerana benar"),
    ("Biru", "blue", "Tenang dan teguh"),
    ("Hijau", "green", "Maju terus"),
    ("Kuning", "yellow", "Cekal berusaha"),
]

DEMO_AGE_CLASSES = [
    ("L12", models.Gender.MALE, 11, 12),
    ("P12", models.Gender.FEMALE, 11, 12),
    ("L15", models.Gender.MALE, 13, 15),
    ("P15", models.Gender.FEMALE, 13, 15),
    ("L18", models.Gender.MALE, 16, 18),
    ("P18", models.Gender.FEMALE, 16, 18),
]

DEMO_SPORTS = [
    ("Olahraga", models.Sport.Type.INDIVIDUAL, None),
    ("Bola Sepak", models.Sport.Type.TEAM, 11),
    ("Bola Jaring", models.Sport.Type.TEAM, 7),
]

DEMO_ATHLETES = [
    ("Ahmad Faris", models.Gender.MALE, date(2012, 3, 14)),
    ("Nur Aisyah", models.Gender.FEMALE, date(2012, 7, 2)),
    ("Lim Wei Jie", models.Gender.MALE, date(2010, 1, 20)),
    ("Siti Hajar", models.Gender.FEMALE, date(2010, 11, 5)),
    ("Rajesh Kumar", models.Gender.MALE, date(2008, 5, 30)),
    ("Tan Mei Ling", models.Gender.FEMALE, date(2008, 9, 17)),
    ("Muhammad Irfan", models.Gender.MALE, date(2011, 6, 8)),
    ("Chong Hui Min", models.Gender.FEMALE, date(2009, 2, 25)),
]


@transaction.atomic
def seed_demo_school(code: str = "DEMO", on: date | None = None) -> School:
    """Create or refresh a demo school with a complete roster."""

    on = on or timezone.localdate()
    school, _ = School.objects.update_or_create(
        school_code=code,
        defaults={
            "name": f"Sekolah Demo {code}",
            "address": "Jalan Stadium, 50000 Kuala Lumpur",
            "contact_person": "Cikgu Rahman",
            "contact_phone": "03-12345678",
            "contact_email": f"sukan@{code.lower()}.edu.my",
        },
    )
    teams = [
        models.Team.objects.update_or_create(
            school=school, name=name, defaults={"color": color, "motto": motto}
        )[0]
        for name, color, motto in DEMO_TEAMS
    ]
    age_classes = [
        models.AgeClass.objects.update_or_create(
            school=school,
            name=name,
            defaults={"gender": gender, "min_age": low, "max_age": high},
        )[0]
        for name, gender, low, high in DEMO_AGE_CLASSES
    ]
    sports = []
    for name, kind, players in DEMO_SPORTS:
        sport, _ = models.Sport.objects.update_or_create(
            school=school,
            name=name,
            defaults={"type": kind, "max_players_per_team": players},
        )
        sport.age_classes.set(age_classes)
        sports.append(sport)

    Season.objects.filter(school=school).exclude(name=str(on.year)).update(is_active=False)
    Season.objects.update_or_create(
        school=school,
        name=str(on.year),
        defaults={
            "start_date": date(on.year, 1, 1),
            "end_date": date(on.year, 12, 31),
            "is_active": True,
        },
    )

    for index, (full_name, gender, born) in enumerate(DEMO_ATHLETES, start=1):
        age_class = suggest_age_class(school, gender, born, on) or next(
            item for item in age_classes if item.gender == gender
        )
        athlete, created = models.Athlete.objects.update_or_create(
            school=school,
            athlete_number=f"{code}{index:03d}",
            defaults={
                "full_name": full_name,
                "ic_number": f"{born:%y%m%d}14{index:04d}",
                "date_of_birth": born,
                "gender": gender,
                "team": teams[(index - 1) % len(teams)],
                "age_class": age_class,
            },
        )
        if created:
            models.AthleteSport.objects.create(athlete=athlete, sport=sports[0])

    logger.info("seeded demo school %s", school.school_code)
    return school
