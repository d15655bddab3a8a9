"""Shared fixtures for API tests across apps."""
from __future__ import annotations

from datetime import date
from types import SimpleNamespace

from django.contrib.auth import get_user_model

from roster import models
from schools.models import School, Season


def build_school(code: str = "SKA") -> SimpleNamespace:
    """Create a school with an admin, a season, two teams, age classes and a sport."""

    User = get_user_model()
    school = School.objects.create(
        name=f"Sekolah {code}",
        school_code=code,
        address="Jalan Sekolah 1",
        contact_person="Cikgu Aminah",
        contact_phone="0123456789",
        contact_email=f"office@{code.lower()}.edu.my",
    )
    admin = User.objects.create_user(
        username=f"admin@{code.lower()}.edu.my",
        email=f"admin@{code.lower()}.edu.my",
        password="p",
        role=User.Role.SCHOOL_ADMIN,
        school=school,
    )
    season = Season.objects.create(
        school=school, name="2026", start_date=date(2026, 1, 1), end_date=date(2026, 12, 31)
    )
    red = models.Team.objects.create(school=school, name="Merah", color="red")
    blue = models.Team.objects.create(school=school, name="Biru", color="blue")
    l12 = models.AgeClass.objects.create(school=school, name="L12", gender="L", min_age=11, max_age=12)
    p12 = models.AgeClass.objects.create(school=school, name="P12", gender="P", min_age=11, max_age=12)
    athletics = models.Sport.objects.create(school=school, name="Olahraga", type=models.Sport.Type.INDIVIDUAL)
    athletics.age_classes.set([l12, p12])
    return SimpleNamespace(
        school=school,
        admin=admin,
        season=season,
        red=red,
        blue=blue,
        l12=l12,
        p12=p12,
        athletics=athletics,
    )


def make_athlete(ctx: SimpleNamespace, number: str, gender: str = "L", team=None, **extra) -> models.Athlete:
    athlete = models.Athlete.objects.create(
        school=ctx.school,
        athlete_number=number,
        full_name=extra.pop("full_name", f"Athlete {number}"),
        ic_number=extra.pop("ic_number", f"1403140{number[-5:]:0>5}"),
        date_of_birth=extra.pop("date_of_birth", date(2014, 3, 14)),
        gender=gender,
        team=team or ctx.red,
        age_class=ctx.l12 if gender == "L" else ctx.p12,
        **extra,
    )
    models.AthleteSport.objects.create(athlete=athlete, sport=ctx.athletics)
    return athlete
