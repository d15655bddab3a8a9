"""Serializers for events, participants, heats, rounds and results."""
from __future__ import annotations

from typing import Any, Dict

from rest_framework import serializers

from roster.models import AgeClass, Athlete, Gender, Sport
from roster.serializers import AgeClassSummarySerializer, TeamSummarySerializer
from schools.models import Season

from . import models


class ResultInputSerializer(serializers.Serializer):
    """Result fields as submitted by scorers; omitted keys stay omitted."""

    position = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    time = serializers.RegexField(
        models.TIME_PATTERN,
        required=False,
        allow_blank=True,
        allow_null=True,
        error_messages={"invalid": "Invalid time format"},
    )
    distance = serializers.DecimalField(max_digits=8, decimal_places=3, min_value=0, required=False, allow_null=True)
    height = serializers.DecimalField(max_digits=6, decimal_places=3, min_value=0, required=False, allow_null=True)
    points = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0, required=False, allow_null=True)
    remarks = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ParticipantResultInputSerializer(ResultInputSerializer):
    participant_id = serializers.IntegerField()


class ResultsRequestSerializer(serializers.Serializer):
    results = ParticipantResultInputSerializer(many=True)
    auto_rank = serializers.BooleanField(default=False)


class RoundParticipantResultSerializer(serializers.Serializer):
    participant_id = serializers.IntegerField()
    result = ResultInputSerializer()


class ResultSerializer(serializers.ModelSerializer):
    class Meta:
        model = models.ParticipantResult
        fields = ["position", "time", "distance", "height", "points", "remarks", "updated_at", "updated_by"]


class RoundResultSerializer(serializers.ModelSerializer):
    participant_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = models.RoundResult
        fields = [
            "participant_id",
            "position",
            "time",
            "distance",
            "height",
            "points",
            "remarks",
            "created_at",
            "updated_at",
        ]


class AthleteBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Athlete
        fields = ["id", "full_name", "athlete_number", "gender"]


class ParticipantSerializer(serializers.ModelSerializer):
    athlete = AthleteBriefSerializer(read_only=True)
    age_class = AgeClassSummarySerializer(read_only=True)
    result = serializers.SerializerMethodField()

    class Meta:
        model = models.Participant
        fields = [
            "id",
            "athlete",
            "age_class",
            "number",
            "category",
            "lane",
            "order",
            "heat",
            "round",
            "status",
            "result",
            "created_at",
            "created_by",
            "updated_at",
            "updated_by",
        ]

    def get_result(self, obj: models.Participant):
        result = getattr(obj, "result", None)
        return ResultSerializer(result).data if result is not None else None


class ParticipantEntrySerializer(serializers.Serializer):
    athlete = serializers.PrimaryKeyRelatedField(queryset=Athlete.objects.select_related("age_class"))
    age_class = serializers.PrimaryKeyRelatedField(queryset=AgeClass.objects.all(), required=False)
    number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    category = serializers.ChoiceField(choices=Gender.choices, required=False)
    lane = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    order = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    heat = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    status = serializers.ChoiceField(choices=models.Participant.Status.choices, required=False)


class AddParticipantsSerializer(serializers.Serializer):
    participants = ParticipantEntrySerializer(many=True, allow_empty=False)


class RemoveParticipantsSerializer(serializers.Serializer):
    participant_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


class ParticipantStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=models.Participant.Status.choices)


class HeatInputSerializer(serializers.Serializer):
    number = serializers.IntegerField(min_value=1)
    start_time = serializers.DateTimeField()
    status = serializers.ChoiceField(choices=models.Heat.Status.choices, default=models.Heat.Status.SCHEDULED)
    participant_ids = serializers.ListField(child=serializers.IntegerField(), default=list)


class HeatsRequestSerializer(serializers.Serializer):
    heats = HeatInputSerializer(many=True)


class HeatSerializer(serializers.ModelSerializer):
    participant_ids = serializers.SerializerMethodField()

    class Meta:
        model = models.Heat
        fields = ["number", "start_time", "status", "participant_ids"]

    def get_participant_ids(self, obj: models.Heat) -> list[int]:
        return list(obj.event.participants.filter(heat=obj.number).values_list("pk", flat=True))


class RoundInputSerializer(serializers.Serializer):
    number = serializers.IntegerField(min_value=1)
    type = serializers.ChoiceField(choices=models.Round.Type.choices)
    start_time = serializers.DateTimeField()
    status = serializers.ChoiceField(choices=models.Heat.Status.choices, default=models.Heat.Status.SCHEDULED)
    qualified_participant_ids = serializers.ListField(child=serializers.IntegerField(), required=False)


class RoundsRequestSerializer(serializers.Serializer):
    rounds = RoundInputSerializer(many=True)


class RoundSerializer(serializers.ModelSerializer):
    qualified_participant_ids = serializers.PrimaryKeyRelatedField(
        source="qualified_participants", many=True, read_only=True
    )
    results = RoundResultSerializer(many=True, read_only=True)

    class Meta:
        model = models.Round
        fields = ["id", "number", "type", "start_time", "status", "qualified_participant_ids", "results"]


class RoundParticipantSerializer(serializers.ModelSerializer):
    """A qualified participant of a round together with its round result."""

    participant_id = serializers.IntegerField(source="pk", read_only=True)
    athlete_id = serializers.IntegerField(read_only=True)
    full_name = serializers.CharField(source="athlete.full_name", read_only=True)
    athlete_number = serializers.CharField(source="athlete.athlete_number", read_only=True)
    gender = serializers.CharField(source="athlete.gender", read_only=True)
    age_class = AgeClassSummarySerializer(read_only=True)
    team = TeamSummarySerializer(source="athlete.team", read_only=True)
    result = serializers.SerializerMethodField()

    class Meta:
        model = models.Participant
        fields = [
            "participant_id",
            "athlete_id",
            "full_name",
            "athlete_number",
            "gender",
            "number",
            "age_class",
            "team",
            "result",
        ]

    def get_result(self, obj: models.Participant):
        result = self.context.get("results", {}).get(obj.pk)
        return RoundResultSerializer(result).data if result is not None else None


class AdvanceSerializer(serializers.Serializer):
    count = serializers.IntegerField(min_value=1)


class EventSerializer(serializers.ModelSerializer):
    school_code = serializers.CharField(source="school.school_code", read_only=True)
    sport = serializers.PrimaryKeyRelatedField(queryset=Sport.objects.all())
    season = serializers.PrimaryKeyRelatedField(queryset=Season.objects.all())
    age_classes = serializers.PrimaryKeyRelatedField(queryset=AgeClass.objects.all(), many=True, allow_empty=False)
    categories = serializers.ListField(
        child=serializers.ChoiceField(choices=Gender.choices), allow_empty=False, max_length=2
    )
    max_participants = serializers.IntegerField(min_value=1, max_value=1000)
    participant_count = serializers.SerializerMethodField()

    class Meta:
        model = models.Event
        fields = [
            "id",
            "school_code",
            "name",
            "sport",
            "season",
            "age_classes",
            "categories",
            "date",
            "venue",
            "type",
            "status",
            "max_participants",
            "participant_count",
            "created_at",
            "created_by",
            "updated_at",
            "updated_by",
        ]
        read_only_fields = ["id", "created_at", "created_by", "updated_at", "updated_by"]

    @property
    def school(self):
        if self.instance is not None and isinstance(self.instance, models.Event):
            return self.instance.school
        return self.context["school"]

    def get_participant_count(self, obj: models.Event) -> int:
        annotated = getattr(obj, "participant_total", None)
        return annotated if annotated is not None else obj.participants.count()

    def validate_categories(self, value: list[str]) -> list[str]:
        if len(set(value)) != len(value):
            raise serializers.ValidationError("Categories must not repeat.")
        return value

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        school = self.school
        for field in ("sport", "season"):
            obj = attrs.get(field)
            if obj is not None and obj.school_id != school.pk:
                raise serializers.ValidationError({field: "Must belong to the same school."})
        for age_class in attrs.get("age_classes", []):
            if age_class.school_id != school.pk:
                raise serializers.ValidationError({"age_classes": "Must belong to the same school."})
        name = attrs.get("name", getattr(self.instance, "name", None))
        sport = attrs.get("sport", getattr(self.instance, "sport", None))
        if name and sport:
            clash = models.Event.objects.filter(school=school, sport=sport, name=name)
            if self.instance is not None:
                clash = clash.exclude(pk=self.instance.pk)
            if clash.exists():
                raise serializers.ValidationError({"name": "An event with this name already exists for this sport."})
        return attrs

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["sport"] = {"id": instance.sport_id, "name": instance.sport.name}
        data["season"] = {"id": instance.season_id, "name": instance.season.name}
        data["age_classes"] = AgeClassSummarySerializer(instance.age_classes.all(), many=True).data
        return data


class EventDetailSerializer(EventSerializer):
    participants = ParticipantSerializer(many=True, read_only=True)
    heats = HeatSerializer(many=True, read_only=True)
    rounds = RoundSerializer(many=True, read_only=True)

    class Meta(EventSerializer.Meta):
        fields = EventSerializer.Meta.fields + ["participants", "heats", "rounds"]


class BulkOperationSerializer(serializers.Serializer):
    OPERATIONS = ("bulk_status_update", "bulk_delete")

    operation = serializers.CharField()
    event_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    new_status = serializers.ChoiceField(choices=models.Event.Status.choices, required=False)

    def validate_operation(self, value: str) -> str:
        if value not in self.OPERATIONS:
            raise serializers.ValidationError("Invalid operation")
        return value

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        if attrs["operation"] == "bulk_status_update" and not attrs.get("new_status"):
            raise serializers.ValidationError({"new_status": "New status is required."})
        return attrs
