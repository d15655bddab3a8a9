from __future__ import annotations

import logging
from typing import List

from django.db import transaction

from achievements.models import Achievement
from competitions.models import Event, Round
from competitions.services import write_audit

logger = logging.getLogger(__name__)

MEDALS_BY_POSITION = {
    1: Achievement.Medal.GOLD,
    2: Achievement.Medal.SILVER,
    3: Achievement.Medal.BRONZE,
}


def medal_for(position: int | None) -> str:
    return MEDALS_BY_POSITION.get(position or 0, "")


@transaction.atomic
def grant(event: Event, participant, result, actor: str) -> Achievement:
    """Create the medal achievement of one final-round result, once per athlete and event."""

    medal = medal_for(result.position)
    achievement, created = Achievement.objects.get_or_create(
        athlete=participant.athlete,
        source_event=event,
        defaults={
            "title": f"{event.name} - {medal} Medal",
            "date": event.date,
            "sport": event.sport,
            "season": event.season,
            "tournament_name": event.name,
            "tournament_venue": event.venue,
            "tournament_age_class": participant.age_class,
            "tournament_level": Achievement.Level.SEKOLAH,
            "position": result.position,
            "medal": medal,
            "points": result.points or 0,
            "remarks": result.remarks or "",
            "created_by": actor,
            "updated_by": actor,
        },
    )
    if created:
        logger.info("granted %s to athlete %s for event %s", medal, participant.athlete_id, event.pk)
    return achievement


@transaction.atomic
def promote_final_medals(event: Event, actor: str = "system") -> List[Achievement]:
    """Turn final-round podium results into athlete achievements.

    Returns only the achievements created by this call; finalising the same
    event again creates nothing new.
    """

    final_round = event.rounds.filter(type=Round.Type.FINAL).first()
    if final_round is None or not final_round.results.exists():
        raise ValueError("Final round results not found")

    podium = (
        final_round.results.filter(position__gte=1, position__lte=3)
        .select_related("participant__athlete", "participant__age_class")
        .order_by("position", "id")
    )
    already = set(Achievement.objects.filter(source_event=event).values_list("athlete_id", flat=True))
    created: List[Achievement] = []
    for result in podium:
        participant = result.participant
        if participant.athlete_id in already:
            continue
        created.append(grant(event, participant, result, actor))
        already.add(participant.athlete_id)

    write_audit("results_finalized", actor, event_id=event.pk, achievements=[a.pk for a in created])
    logger.info("finalized event %s: %d achievements created", event.pk, len(created))
    return created
