from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace

from django.utils import timezone

from competitions import models


def make_event(ctx: SimpleNamespace, name: str = "100m", **extra) -> models.Event:
    age_classes = extra.pop("age_classes", [ctx.l12, ctx.p12])
    event = models.Event.objects.create(
        school=ctx.school,
        name=name,
        sport=ctx.athletics,
        season=ctx.season,
        categories=extra.pop("categories", ["L", "P"]),
        date=extra.pop("date", date(2026, 5, 20)),
        venue=extra.pop("venue", "Padang Sekolah"),
        type=extra.pop("type", models.Event.Type.TRACK),
        max_participants=extra.pop("max_participants", 8),
        **extra,
    )
    event.age_classes.set(age_classes)
    return event


def enter(event: models.Event, athlete, **extra) -> models.Participant:
    return models.Participant.objects.create(
        event=event,
        athlete=athlete,
        age_class=athlete.age_class,
        number=athlete.athlete_number,
        category=athlete.gender,
        **extra,
    )


def at(hour: int, day: date = date(2026, 5, 20)) -> datetime:
    return timezone.make_aware(datetime(day.year, day.month, day.day, hour, 0))
