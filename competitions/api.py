"""REST API views for events, participants, heats, rounds and results."""

from __future__ import annotations

import logging
from datetime import date

from django.conf import settings
from django.core.paginator import Paginator
from django.db import transaction
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from achievements.services.evaluator import promote_final_medals
from schools.access import SchoolScopedMixin, actor_label

from . import models, services
from .serializers import (
    AddParticipantsSerializer,
    AdvanceSerializer,
    BulkOperationSerializer,
    EventDetailSerializer,
    EventSerializer,
    HeatSerializer,
    HeatsRequestSerializer,
    ParticipantSerializer,
    ParticipantStatusSerializer,
    RemoveParticipantsSerializer,
    ResultsRequestSerializer,
    RoundParticipantResultSerializer,
    RoundParticipantSerializer,
    RoundResultSerializer,
    RoundSerializer,
    RoundsRequestSerializer,
)

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {"date", "name", "venue", "type", "status", "max_participants", "created_at", "updated_at"}


def _bad_request(exc: Exception) -> Response:
    logger.warning("rejected event operation: %s", exc)
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


def _int_param(value, default: int, minimum: int = 1, maximum: int | None = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    number = max(number, minimum)
    if maximum is not None:
        number = min(number, maximum)
    return number


class EventViewSet(
    SchoolScopedMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    queryset = models.Event.objects.select_related("school", "sport", "season").prefetch_related("age_classes")
    serializer_class = EventSerializer
    lookup_value_regex = r"\d+"

    def get_serializer_class(self):  # type: ignore[override]
        if self.action == "retrieve":
            return EventDetailSerializer
        return super().get_serializer_class()

    def get_serializer_context(self):  # type: ignore[override]
        context = super().get_serializer_context()
        if self.action == "create":
            context["school"] = self.get_school()
        return context

    def get_round(self, event: models.Event, round_number) -> models.Round:
        return get_object_or_404(event.rounds.all(), number=round_number)

    def list(self, request, *args, **kwargs):
        school = self.get_school()
        params = request.query_params
        events = self.get_queryset().filter(school=school).annotate(participant_total=Count("participants"))
        if params.get("status") and params["status"] != "ALL":
            events = events.filter(status=params["status"])
        if params.get("type") and params["type"] != "ALL":
            events = events.filter(type=params["type"])
        if params.get("search"):
            events = events.filter(Q(name__icontains=params["search"]) | Q(venue__icontains=params["search"]))

        sort_by = params.get("sort_by") if params.get("sort_by") in SORTABLE_FIELDS else "date"
        prefix = "" if params.get("sort_order") == "asc" else "-"
        events = events.order_by(f"{prefix}{sort_by}", f"{prefix}id")

        limit = _int_param(params.get("limit"), settings.EVENTS_PAGE_SIZE, maximum=settings.EVENTS_MAX_PAGE_SIZE)
        paginator = Paginator(events, limit)
        page = paginator.get_page(_int_param(params.get("page"), 1))
        total = paginator.count
        total_pages = paginator.num_pages if total else 0
        return Response(
            {
                "events": self.get_serializer(page.object_list, many=True).data,
                "pagination": {
                    "current_page": page.number,
                    "total_pages": total_pages,
                    "total_events": total,
                    "has_next_page": page.has_next(),
                    "has_previous_page": page.has_previous(),
                    "limit": limit,
                },
            }
        )

    def perform_create(self, serializer):
        actor = actor_label(self.request.user)
        with transaction.atomic():
            event = serializer.save(school=serializer.context["school"], created_by=actor, updated_by=actor)
        logger.info("event %s created for %s", event.pk, event.school.school_code)

    def perform_update(self, serializer):
        event = serializer.save(updated_by=actor_label(self.request.user))
        logger.info("event %s updated", event.pk)

    def destroy(self, request, *args, **kwargs):
        event = self.get_object()
        try:
            services.delete_event(event, actor=actor_label(request.user))
        except ValueError as exc:
            return _bad_request(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"])
    def bulk(self, request):
        school = self.get_school()
        serializer = BulkOperationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        events = models.Event.objects.filter(school=school, pk__in=data["event_ids"])
        actor = actor_label(request.user)
        if data["operation"] == "bulk_status_update":
            result = {"updated": services.bulk_update_status(events, data["new_status"], actor=actor)}
        else:
            result = services.bulk_delete(events, actor=actor)
        return Response({"detail": "Bulk operation completed successfully", "result": result})

    @action(detail=False, methods=["get"], url_path="rounds", url_name="round-schedule")
    def schedule(self, request):
        school = self.get_school()
        raw_date = request.query_params.get("date")
        try:
            on = date.fromisoformat(raw_date) if raw_date else timezone.localdate()
        except ValueError:
            return Response({"date": "Use YYYY-MM-DD."}, status=status.HTTP_400_BAD_REQUEST)
        event_id = request.query_params.get("event_id")
        return Response(services.round_schedule(school, on, int(event_id) if event_id and event_id.isdigit() else None))

    @action(detail=True, methods=["get", "post", "delete"])
    def participants(self, request, pk=None):
        event = self.get_object()
        actor = actor_label(request.user)
        if request.method == "POST":
            serializer = AddParticipantsSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            try:
                created = services.add_participants(event, serializer.validated_data["participants"], actor=actor)
            except ValueError as exc:
                return _bad_request(exc)
            return Response(ParticipantSerializer(created, many=True).data, status=status.HTTP_201_CREATED)
        if request.method == "DELETE":
            serializer = RemoveParticipantsSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            try:
                removed = services.remove_participants(event, serializer.validated_data["participant_ids"], actor=actor)
            except ValueError as exc:
                return _bad_request(exc)
            return Response({"removed": removed})
        participants = event.participants.select_related("athlete", "age_class", "result").order_by("number", "id")
        return Response(ParticipantSerializer(participants, many=True).data)

    @action(detail=True, methods=["patch"], url_path=r"participants/(?P<participant_id>\d+)")
    def participant_status(self, request, pk=None, participant_id=None):
        event = self.get_object()
        participant = get_object_or_404(event.participants.all(), pk=participant_id)
        serializer = ParticipantStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.update_participant_status(
            participant, serializer.validated_data["status"], actor=actor_label(request.user)
        )
        return Response(ParticipantSerializer(participant).data)

    @action(detail=True, methods=["get", "patch"])
    def heats(self, request, pk=None):
        event = self.get_object()
        if request.method == "PATCH":
            serializer = HeatsRequestSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            try:
                services.replace_heats(event, serializer.validated_data["heats"], actor=actor_label(request.user))
            except ValueError as exc:
                return _bad_request(exc)
        return Response(HeatSerializer(event.heats.order_by("number"), many=True).data)

    @action(detail=True, methods=["get", "patch"])
    def rounds(self, request, pk=None):
        event = self.get_object()
        if request.method == "PATCH":
            serializer = RoundsRequestSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            try:
                rounds = services.upsert_rounds(
                    event, serializer.validated_data["rounds"], actor=actor_label(request.user)
                )
            except ValueError as exc:
                return _bad_request(exc)
        else:
            rounds = event.rounds.order_by("number")
        return Response(RoundSerializer(rounds, many=True).data)

    @action(detail=True, methods=["get", "patch"], url_path=r"rounds/(?P<round_number>\d+)/participants")
    def round_participants(self, request, pk=None, round_number=None):
        event = self.get_object()
        round_obj = self.get_round(event, round_number)
        if request.method == "PATCH":
            serializer = RoundParticipantResultSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            try:
                row = services.set_round_participant_result(
                    round_obj,
                    serializer.validated_data["participant_id"],
                    serializer.validated_data["result"],
                    actor=actor_label(request.user),
                )
            except ValueError as exc:
                return _bad_request(exc)
            return Response(RoundResultSerializer(row).data)

        results = {row.participant_id: row for row in round_obj.results.all()}
        participants = round_obj.qualified_participants.select_related(
            "athlete", "athlete__team", "age_class"
        ).order_by("number", "id")
        return Response(
            {
                "participants": RoundParticipantSerializer(
                    participants, many=True, context={"results": results}
                ).data,
                "metadata": {
                    "round_type": round_obj.type,
                    "round_number": round_obj.number,
                    "round_status": round_obj.status,
                    "start_time": round_obj.start_time,
                    "has_results": bool(results),
                },
            }
        )

    @action(detail=True, methods=["get", "patch"], url_path=r"rounds/(?P<round_number>\d+)/results")
    def round_results(self, request, pk=None, round_number=None):
        event = self.get_object()
        round_obj = self.get_round(event, round_number)
        if request.method == "PATCH":
            serializer = ResultsRequestSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            try:
                services.record_round_results(
                    round_obj,
                    serializer.validated_data["results"],
                    actor=actor_label(request.user),
                    auto_rank=serializer.validated_data["auto_rank"],
                )
            except ValueError as exc:
                return _bad_request(exc)
        rows = round_obj.results.order_by("position", "id")
        return Response(RoundResultSerializer(rows, many=True).data)

    @action(detail=True, methods=["post"], url_path=r"rounds/(?P<round_number>\d+)/advance")
    def advance(self, request, pk=None, round_number=None):
        event = self.get_object()
        round_obj = self.get_round(event, round_number)
        serializer = AdvanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            next_round = services.advance_qualifiers(
                round_obj, serializer.validated_data["count"], actor=actor_label(request.user)
            )
        except ValueError as exc:
            return _bad_request(exc)
        return Response(RoundSerializer(next_round).data)

    @action(detail=True, methods=["get", "post", "put"])
    def results(self, request, pk=None):
        event = self.get_object()
        if request.method in ("POST", "PUT"):
            serializer = ResultsRequestSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            try:
                services.record_event_results(
                    event,
                    serializer.validated_data["results"],
                    actor=actor_label(request.user),
                    merge=request.method == "PUT",
                    auto_rank=serializer.validated_data["auto_rank"],
                )
            except ValueError as exc:
                return _bad_request(exc)
        ranked = services.ranked_event_results(event)
        return Response({"results": ParticipantSerializer(ranked, many=True).data})

    @action(detail=True, methods=["post"], url_path="finalize-results")
    def finalize_results(self, request, pk=None):
        event = self.get_object()
        try:
            created = promote_final_medals(event, actor=actor_label(request.user))
        except ValueError as exc:
            return _bad_request(exc)
        return Response(
            {
                "detail": "Athlete achievements created successfully",
                "created": len(created),
            }
        )

    @action(detail=True, methods=["get"])
    def statistics(self, request, pk=None):
        event = self.get_object()
        return Response(services.event_statistics(event))
