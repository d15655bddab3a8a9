"""Domain helpers and result processing logic for competitions."""

from __future__ import annotations

import logging
import re
from collections import Counter
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from roster.models import Athlete
from schools.models import School

from . import models

logger = logging.getLogger(__name__)

__all__ = [
    "parse_time",
    "performance_value",
    "assign_positions",
    "check_eligibility",
    "add_participants",
    "remove_participants",
    "update_participant_status",
    "replace_heats",
    "upsert_rounds",
    "record_round_results",
    "set_round_participant_result",
    "advance_qualifiers",
    "record_event_results",
    "ranked_event_results",
    "event_statistics",
    "round_schedule",
    "delete_event",
    "bulk_update_status",
    "bulk_delete",
    "write_audit",
]

TIME_RE = re.compile(models.TIME_PATTERN)


def parse_time(value: str | float | Decimal | None) -> Decimal | None:
    """Parse ``[[hh:]mm:]ss[.fff]`` strings into seconds."""

    if value in (None, ""):
        return None
    if isinstance(value, Decimal):
        candidate = value
    elif isinstance(value, (int, float)):
        candidate = Decimal(str(value))
    else:
        text = value.strip()
        if not text:
            return None
        match = TIME_RE.match(text)
        if not match:
            raise ValueError("Use [[hh:]mm:]ss[.fff] for times.")
        hours, minutes, seconds, fraction = match.groups()
        try:
            candidate = (
                Decimal(hours or 0) * 3600
                + Decimal(minutes or 0) * 60
                + Decimal(seconds)
                + (Decimal(f"0.{fraction}") if fraction else Decimal(0))
            )
        except InvalidOperation as exc:  # pragma: no cover - regex guarantees digits
            raise ValueError("Invalid time value supplied.") from exc
    if candidate < 0:
        raise ValueError("Time cannot be negative.")
    return candidate.quantize(Decimal("0.001"))


def performance_value(result: Any, *, track_like: bool) -> Decimal | None:
    """Return the comparable mark of a result mapping or model instance."""

    def read(name: str):
        if isinstance(result, dict):
            return result.get(name)
        return getattr(result, name, None)

    if result is None:
        return None
    if track_like:
        return parse_time(read("time"))
    distance = read("distance")
    if distance is not None:
        return Decimal(str(distance))
    height = read("height")
    if height is not None:
        return Decimal(str(height))
    return None


def assign_positions(rows: list[dict], *, track_like: bool) -> None:
    """Assign positions from marks; ascending times or descending distances, ties share a place."""

    ranked: list[tuple[Decimal, dict]] = []
    for row in rows:
        row["position"] = None
        mark = performance_value(row, track_like=track_like)
        if mark is not None:
            ranked.append((mark, row))
    ranked.sort(key=lambda item: item[0], reverse=not track_like)
    running = 0
    last: Decimal | None = None
    for idx, (mark, row) in enumerate(ranked, start=1):
        if last is None or mark != last:
            running = idx
            last = mark
        row["position"] = running


def write_audit(action: str, actor: str, **payload: Any) -> models.AuditLog:
    return models.AuditLog.objects.create(action=action, actor=actor, payload=payload)


def _event_participants(event: models.Event, participant_ids: Iterable[int]) -> dict[int, models.Participant]:
    """Resolve participant ids against the event, rejecting unknown ids."""

    ids = [int(pk) for pk in participant_ids]
    found = {p.pk: p for p in event.participants.filter(pk__in=ids).select_related("athlete")}
    missing = sorted(set(ids) - set(found))
    if missing:
        raise ValueError(f"Participants not found in this event: {', '.join(map(str, missing))}")
    return found


def check_eligibility(
    event: models.Event,
    athlete: Athlete,
    *,
    age_class,
    category: str,
) -> None:
    """Raise ``ValueError`` when ``athlete`` cannot enter ``event``."""

    if athlete.school_id != event.school_id:
        raise ValueError(f"{athlete.full_name} does not belong to this school.")
    if not athlete.is_active:
        raise ValueError(f"{athlete.full_name} is not an active athlete.")
    if event.participants.filter(athlete=athlete).exists():
        raise ValueError(f"{athlete.full_name} is already entered in this event.")
    if not event.age_classes.filter(pk=age_class.pk).exists():
        raise ValueError(f"Age class {age_class.name} is not part of this event.")
    if category not in (event.categories or []):
        raise ValueError(f"Category {category} is not part of this event.")


@transaction.atomic
def add_participants(event: models.Event, entries: list[dict], *, actor: str) -> list[models.Participant]:
    """Enter a batch of athletes into ``event``."""

    if not event.accepts_entries:
        raise ValueError("Participants can only be changed while the event is draft or published.")
    if event.participants.count() + len(entries) > event.max_participants:
        raise ValueError(f"Event is limited to {event.max_participants} participants.")
    seen: set[int] = set()
    created: list[models.Participant] = []
    for entry in entries:
        athlete: Athlete = entry["athlete"]
        if athlete.pk in seen:
            raise ValueError(f"{athlete.full_name} appears more than once in this batch.")
        seen.add(athlete.pk)
        age_class = entry.get("age_class") or athlete.age_class
        category = entry.get("category") or athlete.gender
        check_eligibility(event, athlete, age_class=age_class, category=category)
        created.append(
            models.Participant.objects.create(
                event=event,
                athlete=athlete,
                age_class=age_class,
                number=entry.get("number") or athlete.athlete_number,
                category=category,
                lane=entry.get("lane"),
                order=entry.get("order"),
                heat=entry.get("heat"),
                status=entry.get("status") or models.Participant.Status.REGISTERED,
                created_by=actor,
                updated_by=actor,
            )
        )
    event.updated_by = actor
    event.save(update_fields=["updated_by", "updated_at"])
    logger.info("added %d participants to event %s", len(created), event.pk)
    return created


@transaction.atomic
def remove_participants(event: models.Event, participant_ids: Iterable[int], *, actor: str) -> int:
    if not event.accepts_entries:
        raise ValueError("Participants can only be changed while the event is draft or published.")
    found = _event_participants(event, participant_ids)
    models.Participant.objects.filter(pk__in=list(found)).delete()
    event.updated_by = actor
    event.save(update_fields=["updated_by", "updated_at"])
    logger.info("removed %d participants from event %s", len(found), event.pk)
    return len(found)


def update_participant_status(participant: models.Participant, status: str, *, actor: str) -> models.Participant:
    participant.status = status
    participant.updated_by = actor
    participant.save(update_fields=["status", "updated_by", "updated_at"])
    logger.info("participant %s status -> %s", participant.pk, status)
    return participant


def _ensure_unique_numbers(items: list[dict], label: str) -> None:
    duplicates = [number for number, total in Counter(item["number"] for item in items).items() if total > 1]
    if duplicates:
        raise ValueError(f"Duplicate {label} numbers: {', '.join(map(str, sorted(duplicates)))}")


@transaction.atomic
def replace_heats(event: models.Event, heats: list[dict], *, actor: str) -> list[models.Heat]:
    """Replace the event's heats and reassign every participant's heat."""

    _ensure_unique_numbers(heats, "heat")
    assignments: dict[int, int] = {}
    for heat in heats:
        for participant_id in _event_participants(event, heat.get("participant_ids") or []):
            if participant_id in assignments:
                raise ValueError(f"Participant {participant_id} is assigned to more than one heat.")
            assignments[participant_id] = heat["number"]

    now = timezone.now()
    event.heats.all().delete()
    created = [
        models.Heat.objects.create(
            event=event,
            number=heat["number"],
            start_time=heat["start_time"],
            status=heat.get("status") or models.Heat.Status.SCHEDULED,
        )
        for heat in sorted(heats, key=lambda item: item["number"])
    ]
    event.participants.update(heat=None, updated_by=actor, updated_at=now)
    for heat in heats:
        ids = [pk for pk, number in assignments.items() if number == heat["number"]]
        if ids:
            event.participants.filter(pk__in=ids).update(heat=heat["number"])
    event.updated_by = actor
    event.save(update_fields=["updated_by", "updated_at"])
    write_audit("heats_replaced", actor, event_id=event.pk, heats=len(created), assigned=len(assignments))
    logger.info("event %s now has %d heats", event.pk, len(created))
    return created


@transaction.atomic
def upsert_rounds(event: models.Event, rounds: list[dict], *, actor: str) -> list[models.Round]:
    """Create or update rounds by number, keeping results of existing rounds."""

    _ensure_unique_numbers(rounds, "round")
    types = dict(event.rounds.values_list("number", "type"))
    types.update({item["number"]: item["type"] for item in rounds})
    finals = [number for number, kind in types.items() if kind == models.Round.Type.FINAL]
    if len(finals) > 1:
        raise ValueError("An event can only have one final round.")
    if finals and finals[0] != max(types):
        raise ValueError("The final round must be the last round.")

    for item in rounds:
        qualified = None
        if item.get("qualified_participant_ids") is not None:
            qualified = list(_event_participants(event, item["qualified_participant_ids"]).values())
        round_obj, created = models.Round.objects.update_or_create(
            event=event,
            number=item["number"],
            defaults={
                "type": item["type"],
                "start_time": item["start_time"],
                "status": item.get("status") or models.Round.Status.SCHEDULED,
            },
        )
        if qualified is not None:
            round_obj.qualified_participants.set(qualified)
        logger.info("round %s of event %s %s", round_obj.number, event.pk, "created" if created else "updated")

    event.updated_by = actor
    event.save(update_fields=["updated_by", "updated_at"])
    write_audit("rounds_updated", actor, event_id=event.pk, rounds=[item["number"] for item in rounds])
    return list(event.rounds.order_by("number"))


def _round_participants(round_obj: models.Round, participant_ids: Iterable[int]) -> dict[int, models.Participant]:
    found = _event_participants(round_obj.event, participant_ids)
    qualified = set(round_obj.qualified_participants.values_list("pk", flat=True))
    if qualified:
        outside = sorted(set(found) - qualified)
        if outside:
            raise ValueError(
                f"Participants not qualified for round {round_obj.number}: {', '.join(map(str, outside))}"
            )
    return found


def _result_fields(payload: dict) -> dict:
    return {
        "position": payload.get("position"),
        "time": payload.get("time") or "",
        "distance": payload.get("distance"),
        "height": payload.get("height"),
        "points": payload.get("points"),
        "remarks": payload.get("remarks") or "",
    }


def _copy_to_event_result(participant: models.Participant, fields: dict, actor: str) -> models.ParticipantResult:
    result, created = models.ParticipantResult.objects.get_or_create(
        participant=participant,
        defaults={**fields, "created_by": actor, "updated_by": actor},
    )
    if not created:
        for name, value in fields.items():
            setattr(result, name, value)
        result.updated_by = actor
        result.save()
    return result


@transaction.atomic
def record_round_results(
    round_obj: models.Round,
    results: list[dict],
    *,
    actor: str,
    auto_rank: bool = False,
) -> list[models.RoundResult]:
    """Replace a round's results; final-round results are copied onto event results."""

    rows = [dict(item) for item in results]
    if len({row["participant_id"] for row in rows}) != len(rows):
        raise ValueError("Each participant can only have one result per round.")
    found = _round_participants(round_obj, [row["participant_id"] for row in rows])
    if auto_rank:
        assign_positions(rows, track_like=round_obj.event.is_track_like)

    round_obj.results.all().delete()
    created = []
    for row in rows:
        fields = _result_fields(row)
        participant = found[int(row["participant_id"])]
        created.append(
            models.RoundResult.objects.create(
                round=round_obj,
                participant=participant,
                created_by=actor,
                updated_by=actor,
                **fields,
            )
        )
        if round_obj.is_final:
            _copy_to_event_result(participant, fields, actor)

    write_audit(
        "round_results_recorded",
        actor,
        event_id=round_obj.event_id,
        round=round_obj.number,
        results=len(created),
        final=round_obj.is_final,
    )
    logger.info("recorded %d results for round %s of event %s", len(created), round_obj.number, round_obj.event_id)
    return created


@transaction.atomic
def set_round_participant_result(
    round_obj: models.Round,
    participant_id: int,
    result: dict,
    *,
    actor: str,
) -> models.RoundResult:
    """Create or update one participant's result in a round."""

    participant = _round_participants(round_obj, [participant_id])[int(participant_id)]
    fields = _result_fields(result)
    row, created = models.RoundResult.objects.get_or_create(
        round=round_obj,
        participant=participant,
        defaults={**fields, "created_by": actor, "updated_by": actor},
    )
    if not created:
        for name, value in fields.items():
            setattr(row, name, value)
        row.updated_by = actor
        row.save()
    if round_obj.is_final:
        _copy_to_event_result(participant, fields, actor)
    write_audit(
        "round_result_set",
        actor,
        event_id=round_obj.event_id,
        round=round_obj.number,
        participant_id=participant.pk,
    )
    return row


@transaction.atomic
def advance_qualifiers(round_obj: models.Round, count: int, *, actor: str) -> models.Round:
    """Qualify the best ``count`` ranked participants of a round into the next round.

    Everyone sharing the position of the last qualifier also advances, so a
    tie at the cut-off can qualify more than ``count`` participants.
    """

    if count < 1:
        raise ValueError("Count must be at least 1.")
    next_round = round_obj.event.rounds.filter(number=round_obj.number + 1).first()
    if next_round is None:
        raise ValueError(f"Round {round_obj.number + 1} does not exist.")
    ranked = list(
        round_obj.results.filter(position__isnull=False).select_related("participant").order_by("position", "id")
    )
    if not ranked:
        raise ValueError(f"Round {round_obj.number} has no ranked results.")
    if len(ranked) > count:
        cutoff = ranked[count - 1].position
        ranked = [row for row in ranked if row.position <= cutoff]
    participants = [row.participant for row in ranked]
    next_round.qualified_participants.set(participants)
    models.Participant.objects.filter(pk__in=[p.pk for p in participants]).update(
        round=next_round.number, updated_by=actor, updated_at=timezone.now()
    )
    write_audit(
        "qualifiers_advanced",
        actor,
        event_id=round_obj.event_id,
        from_round=round_obj.number,
        to_round=next_round.number,
        participants=[p.pk for p in participants],
    )
    logger.info(
        "advanced %d participants from round %s to %s in event %s",
        len(participants),
        round_obj.number,
        next_round.number,
        round_obj.event_id,
    )
    return next_round


@transaction.atomic
def record_event_results(
    event: models.Event,
    results: list[dict],
    *,
    actor: str,
    merge: bool = False,
    auto_rank: bool = False,
) -> list[models.ParticipantResult]:
    """Record event results; ``merge`` keeps fields the payload leaves out.

    ``auto_rank`` sets positions of the submitted rows from their marks.
    """

    if not merge and event.status != models.Event.Status.IN_PROGRESS:
        raise ValueError("Results can only be recorded for events in progress")
    found = _event_participants(event, [row["participant_id"] for row in results])
    results = [dict(row) for row in results]
    if auto_rank:
        assign_positions(results, track_like=event.is_track_like)
    saved = []
    for row in results:
        participant = found[int(row["participant_id"])]
        if merge:
            fields = {name: row[name] for name in models.PerformanceFields.RESULT_FIELDS if name in row}
        else:
            fields = _result_fields(row)
        result, created = models.ParticipantResult.objects.get_or_create(
            participant=participant,
            defaults={**_result_fields(fields), "created_by": actor, "updated_by": actor},
        )
        if not created:
            for name, value in fields.items():
                if name in ("time", "remarks") and value is None:
                    value = ""
                setattr(result, name, value)
            result.updated_by = actor
            result.save()
        saved.append(result)
    event.updated_by = actor
    event.save(update_fields=["updated_by", "updated_at"])
    write_audit(
        "event_results_merged" if merge else "event_results_recorded",
        actor,
        event_id=event.pk,
        results=len(saved),
    )
    logger.info("%s %d results for event %s", "merged" if merge else "recorded", len(saved), event.pk)
    return saved


def ranked_event_results(event: models.Event) -> QuerySet[models.Participant]:
    return (
        event.participants.filter(result__position__isnull=False)
        .select_related("athlete", "result")
        .order_by("result__position", "id")
    )


def _effective_results(event: models.Event) -> list[tuple[models.Participant, Any]]:
    """Pair each participant with its final-round result, else its event result."""

    final_round = event.final_round()
    final_results = {}
    if final_round is not None:
        final_results = {row.participant_id: row for row in final_round.results.all()}
    pairs = []
    for participant in event.participants.select_related("athlete", "result").order_by("id"):
        result = final_results.get(participant.pk)
        if result is None:
            result = getattr(participant, "result", None)
        pairs.append((participant, result))
    return pairs


def event_statistics(event: models.Event) -> dict[str, Any]:
    pairs = _effective_results(event)
    statuses = Counter(participant.status for participant, _ in pairs)
    placed = sorted(
        ((participant, result) for participant, result in pairs if result is not None and result.position),
        key=lambda pair: (pair[1].position, pair[0].pk),
    )

    best: str | None = None
    marks = [
        (performance_value(result, track_like=event.is_track_like), result)
        for _, result in pairs
        if result is not None
    ]
    marks = [(mark, result) for mark, result in marks if mark is not None]
    if marks:
        if event.is_track_like:
            best = min(marks, key=lambda item: item[0])[1].time
        else:
            best = f"{max(mark for mark, _ in marks).normalize():f} m"

    total_points = sum((result.points or Decimal(0) for _, result in pairs if result is not None), Decimal(0))
    return {
        "total_participants": len(pairs),
        "confirmed": statuses.get(models.Participant.Status.CONFIRMED, 0),
        "scratched": statuses.get(models.Participant.Status.SCRATCHED, 0),
        "dnf": statuses.get(models.Participant.Status.DNF, 0),
        "dq": statuses.get(models.Participant.Status.DQ, 0),
        "completed_results": len(placed),
        "medal_winners": sum(1 for _, result in placed if result.position <= 3),
        "top_three": [
            {
                "participant_id": participant.pk,
                "athlete_id": participant.athlete_id,
                "full_name": participant.athlete.full_name,
                "athlete_number": participant.athlete.athlete_number,
                "position": result.position,
                "time": result.time,
                "distance": result.distance,
                "height": result.height,
                "points": result.points,
            }
            for participant, result in placed[:3]
        ],
        "best_performance": best,
        "total_points": total_points,
    }


def round_schedule(school: School, on: date, event_id: int | None = None) -> list[dict[str, Any]]:
    rounds = (
        models.Round.objects.filter(event__school=school, start_time__date=on)
        .select_related("event")
        .order_by("start_time", "event__name", "number")
    )
    if event_id:
        rounds = rounds.filter(event_id=event_id)
    return [
        {
            "event_id": round_obj.event_id,
            "event_name": round_obj.event.name,
            "event_type": round_obj.event.type,
            "venue": round_obj.event.venue,
            "round_number": round_obj.number,
            "round_type": round_obj.type,
            "start_time": round_obj.start_time,
            "status": round_obj.status,
        }
        for round_obj in rounds
    ]


def delete_event(event: models.Event, *, actor: str) -> None:
    if event.status != models.Event.Status.DRAFT:
        raise ValueError("Only draft events can be deleted.")
    write_audit("event_deleted", actor, event_id=event.pk, name=event.name)
    logger.info("event %s deleted by %s", event.pk, actor)
    event.delete()


@transaction.atomic
def bulk_update_status(events: QuerySet[models.Event], new_status: str, *, actor: str) -> int:
    updated = events.update(status=new_status, updated_by=actor, updated_at=timezone.now())
    write_audit("events_bulk_status", actor, status=new_status, updated=updated)
    logger.info("bulk status %s applied to %d events", new_status, updated)
    return updated


@transaction.atomic
def bulk_delete(events: QuerySet[models.Event], *, actor: str) -> dict[str, int]:
    """Delete draft events only; others are reported as skipped."""

    total = events.count()
    drafts = events.filter(status=models.Event.Status.DRAFT)
    ids = list(drafts.values_list("pk", flat=True))
    models.Event.objects.filter(pk__in=ids).delete()
    write_audit("events_bulk_delete", actor, deleted=ids)
    logger.info("bulk deleted %d events, skipped %d", len(ids), total - len(ids))
    return {"deleted": len(ids), "skipped": total - len(ids)}
