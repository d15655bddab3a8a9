"""Serializers for the roster API."""
from __future__ import annotations

from typing import Any, Dict

from rest_framework import serializers

from . import models, services


class SchoolOwnedSerializer(serializers.ModelSerializer):
    """Base serializer for records that belong to the school in ``context``."""

    unique_name_message = "A record with this name already exists."

    @property
    def school(self):
        if self.instance is not None and not isinstance(self.instance, (list, tuple)):
            return self.instance.school
        return self.context["school"]

    def validate_name(self, value: str) -> str:
        value = value.strip()
        clash = self.Meta.model.objects.filter(school=self.school, name=value)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError(self.unique_name_message)
        return value

    def _check_owner(self, field: str, obj) -> None:
        if obj is not None and obj.school_id != self.school.pk:
            raise serializers.ValidationError({field: "Must belong to the same school."})


class TeamSerializer(SchoolOwnedSerializer):
    unique_name_message = "A team with this name already exists."

    class Meta:
        model = models.Team
        fields = ["id", "name", "description", "color", "motto", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class AgeClassSerializer(SchoolOwnedSerializer):
    unique_name_message = "An age class with this name already exists."

    min_age = serializers.IntegerField(min_value=0, max_value=100)
    max_age = serializers.IntegerField(min_value=0, max_value=100)

    class Meta:
        model = models.AgeClass
        fields = [
            "id",
            "name",
            "description",
            "gender",
            "min_age",
            "max_age",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        instance = self.instance
        gender = attrs.get("gender", getattr(instance, "gender", None))
        min_age = attrs.get("min_age", getattr(instance, "min_age", None))
        max_age = attrs.get("max_age", getattr(instance, "max_age", None))
        if max_age < min_age:
            raise serializers.ValidationError(
                {"max_age": "Maximum age must be greater than or equal to minimum age."}
            )
        overlapping = services.find_overlapping_age_class(
            school=self.school,
            gender=gender,
            min_age=min_age,
            max_age=max_age,
            exclude_pk=instance.pk if instance is not None else None,
        )
        if overlapping is not None:
            raise serializers.ValidationError(
                {"detail": f"Age range overlaps with existing age class: {overlapping.name}"}
            )
        return attrs


class AgeClassSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = models.AgeClass
        fields = ["id", "name", "gender"]


class TeamSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = models.Team
        fields = ["id", "name", "color"]


class SportSerializer(SchoolOwnedSerializer):
    unique_name_message = "A sport with this name already exists."

    age_classes = serializers.PrimaryKeyRelatedField(
        queryset=models.AgeClass.objects.all(), many=True, required=False
    )

    class Meta:
        model = models.Sport
        fields = [
            "id",
            "name",
            "type",
            "description",
            "max_players_per_team",
            "age_classes",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        kind = attrs.get("type", getattr(self.instance, "type", None))
        players = attrs.get("max_players_per_team", getattr(self.instance, "max_players_per_team", None))
        if kind == models.Sport.Type.TEAM and not players:
            raise serializers.ValidationError(
                {"max_players_per_team": "Team sports need a maximum number of players."}
            )
        for age_class in attrs.get("age_classes", []):
            self._check_owner("age_classes", age_class)
        return attrs

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["age_classes"] = AgeClassSummarySerializer(instance.age_classes.all(), many=True).data
        return data


class AthleteSportSerializer(serializers.ModelSerializer):
    sport = serializers.PrimaryKeyRelatedField(queryset=models.Sport.objects.all())
    joined_at = serializers.DateTimeField(required=False)

    class Meta:
        model = models.AthleteSport
        fields = ["sport", "joined_at", "is_active"]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["sport"] = {"id": instance.sport_id, "name": instance.sport.name}
        return data


class AthleteSerializer(SchoolOwnedSerializer):
    ic_number = serializers.RegexField(r"^.{12}$", error_messages={"invalid": "IC number must be 12 digits"})
    sports = AthleteSportSerializer(source="sport_memberships", many=True, required=False)
    medical_conditions = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = models.Athlete
        fields = [
            "id",
            "athlete_number",
            "full_name",
            "ic_number",
            "date_of_birth",
            "gender",
            "team",
            "age_class",
            "image",
            "sports",
            "guardian_name",
            "guardian_contact",
            "guardian_email",
            "address",
            "medical_conditions",
            "emergency_contact",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def _check_unique(self, field: str, value: str, message: str) -> str:
        clash = models.Athlete.objects.filter(school=self.school, **{field: value})
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError(message)
        return value

    def validate_athlete_number(self, value: str) -> str:
        return self._check_unique("athlete_number", value.strip(), "An athlete with this number already exists")

    def validate_ic_number(self, value: str) -> str:
        return self._check_unique("ic_number", value.strip(), "An athlete with this IC number already exists")

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        self._check_owner("team", attrs.get("team"))
        self._check_owner("age_class", attrs.get("age_class"))
        memberships = attrs.get("sport_memberships")
        if self.instance is None and not memberships:
            raise serializers.ValidationError({"sports": "At least one sport is required"})
        if memberships is not None:
            if not memberships:
                raise serializers.ValidationError({"sports": "At least one sport is required"})
            for item in memberships:
                self._check_owner("sports", item["sport"])
        return attrs

    def create(self, validated_data: Dict[str, Any]) -> models.Athlete:
        memberships = validated_data.pop("sport_memberships")
        validated_data.setdefault("school", self.school)
        athlete = models.Athlete.objects.create(**validated_data)
        services.replace_sport_memberships(athlete, memberships)
        return athlete

    def update(self, instance: models.Athlete, validated_data: Dict[str, Any]) -> models.Athlete:
        memberships = validated_data.pop("sport_memberships", None)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        instance.save()
        if memberships is not None:
            services.replace_sport_memberships(instance, memberships)
        return instance

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["team"] = TeamSummarySerializer(instance.team).data
        data["age_class"] = AgeClassSummarySerializer(instance.age_class).data
        return data


class ActiveAthleteSerializer(serializers.ModelSerializer):
    team = TeamSummarySerializer(read_only=True)
    age_class = AgeClassSummarySerializer(read_only=True)

    class Meta:
        model = models.Athlete
        fields = ["id", "full_name", "athlete_number", "gender", "image", "age_class", "team"]


class ToggleStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class ActiveAthleteFilterSerializer(serializers.Serializer):
    team = serializers.IntegerField(min_value=1, required=False)
    age_class = serializers.IntegerField(min_value=1, required=False)
