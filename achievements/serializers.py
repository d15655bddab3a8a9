from rest_framework import serializers

from roster.models import AgeClass, Sport
from schools.models import Season

from .models import Achievement


class TournamentSerializer(serializers.Serializer):
    name = serializers.CharField(source="tournament_name", max_length=255)
    venue = serializers.CharField(source="tournament_venue", max_length=255, required=False, allow_blank=True)
    age_class = serializers.PrimaryKeyRelatedField(source="tournament_age_class", queryset=AgeClass.objects.all())
    level = serializers.ChoiceField(source="tournament_level", choices=Achievement.Level.choices)


class AchievementResultSerializer(serializers.Serializer):
    position = serializers.IntegerField(min_value=1)
    medal = serializers.ChoiceField(choices=Achievement.Medal.choices, required=False, allow_blank=True)
    points = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True)
    remarks = serializers.CharField(required=False, allow_blank=True)


class AchievementSerializer(serializers.ModelSerializer):
    sport = serializers.PrimaryKeyRelatedField(queryset=Sport.objects.all())
    season = serializers.PrimaryKeyRelatedField(queryset=Season.objects.all(), required=False, allow_null=True)
    tournament = TournamentSerializer(source="*")
    result = AchievementResultSerializer(source="*")

    class Meta:
        model = Achievement
        fields = [
            "id",
            "athlete",
            "title",
            "date",
            "description",
            "season",
            "sport",
            "tournament",
            "result",
            "source_event",
            "created_at",
            "created_by",
            "updated_at",
            "updated_by",
        ]
        read_only_fields = [
            "id",
            "athlete",
            "source_event",
            "created_at",
            "created_by",
            "updated_at",
            "updated_by",
        ]

    def validate(self, attrs):
        school_id = self.context["athlete"].school_id
        for field in ("sport", "season", "tournament_age_class"):
            obj = attrs.get(field)
            if obj is not None and obj.school_id != school_id:
                key = "tournament" if field == "tournament_age_class" else field
                raise serializers.ValidationError({key: "Must belong to the athlete's school."})
        return attrs
