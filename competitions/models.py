"""Database models for scheduled events, their entries, heats, rounds and results."""
from __future__ import annotations

from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models

from roster.models import AgeClass, Athlete, Gender, Sport
from schools.models import School, Season

TIME_PATTERN = r"^(?:(?:([01]?\d|2[0-3]):)?([0-5]?\d):)?([0-5]?\d)(?:\.(\d{1,3}))?$"

time_validator = RegexValidator(TIME_PATTERN, "Use [[hh:]mm:]ss[.fff] for times.")


class AuditFields(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.CharField(max_length=255, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)
    updated_by = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        abstract = True


class PerformanceFields(models.Model):
    """Result columns shared by event and round results."""

    position = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])
    time = models.CharField(max_length=16, blank=True, default="", validators=[time_validator])
    distance = models.DecimalField(max_digits=8, decimal_places=3, null=True, blank=True)
    height = models.DecimalField(max_digits=6, decimal_places=3, null=True, blank=True)
    points = models.DecimalField(
        max_digits=8, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    remarks = models.TextField(blank=True, default="")

    RESULT_FIELDS = ("position", "time", "distance", "height", "points", "remarks")

    class Meta:
        abstract = True

    def result_dict(self) -> dict:
        return {field: getattr(self, field) for field in self.RESULT_FIELDS}


class Event(AuditFields):
    class Type(models.TextChoices):
        TRACK = "TRACK", "Track"
        FIELD = "FIELD", "Field"
        RELAY = "RELAY", "Relay"
        CROSS_COUNTRY = "CROSS_COUNTRY", "Cross Country"

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PUBLISHED = "PUBLISHED", "Published"
        IN_PROGRESS = "IN_PROGRESS", "In Progress"
        COMPLETED = "COMPLETED", "Completed"

    OPEN_FOR_ENTRIES = (Status.DRAFT, Status.PUBLISHED)

    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="events")
    name = models.CharField(max_length=255)
    sport = models.ForeignKey(Sport, on_delete=models.PROTECT, related_name="events")
    season = models.ForeignKey(Season, on_delete=models.PROTECT, related_name="events")
    age_classes = models.ManyToManyField(AgeClass, related_name="events")
    categories = models.JSONField(default=list)
    date = models.DateField()
    venue = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=Type.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    max_participants = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(1000)]
    )

    class Meta:
        ordering = ("-date", "name")
        constraints = [
            models.UniqueConstraint(fields=["school", "sport", "name"], name="unique_event_name_per_sport"),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def is_track_like(self) -> bool:
        """Track, relay and cross-country events rank by ascending time."""

        return self.type != self.Type.FIELD

    @property
    def accepts_entries(self) -> bool:
        return self.status in self.OPEN_FOR_ENTRIES

    def final_round(self) -> "Round | None":
        return self.rounds.filter(type=Round.Type.FINAL).first()


class Participant(AuditFields):
    class Status(models.TextChoices):
        REGISTERED = "REGISTERED", "Registered"
        CONFIRMED = "CONFIRMED", "Confirmed"
        SCRATCHED = "SCRATCHED", "Scratched"
        DNS = "DNS", "Did Not Start"
        DNF = "DNF", "Did Not Finish"
        DQ = "DQ", "Disqualified"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="participants")
    athlete = models.ForeignKey(Athlete, on_delete=models.PROTECT, related_name="entries")
    age_class = models.ForeignKey(AgeClass, on_delete=models.PROTECT, related_name="entries")
    number = models.CharField(max_length=20)
    category = models.CharField(max_length=1, choices=Gender.choices)
    lane = models.PositiveSmallIntegerField(null=True, blank=True)
    order = models.PositiveSmallIntegerField(null=True, blank=True)
    heat = models.PositiveSmallIntegerField(null=True, blank=True)
    round = models.PositiveSmallIntegerField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.REGISTERED)

    class Meta:
        ordering = ("event", "number", "id")
        constraints = [
            models.UniqueConstraint(fields=["event", "athlete"], name="unique_athlete_per_event"),
        ]

    def __str__(self) -> str:
        return f"{self.number} {self.athlete.full_name}"


class ParticipantResult(PerformanceFields, AuditFields):
    participant = models.OneToOneField(Participant, on_delete=models.CASCADE, related_name="result")

    def __str__(self) -> str:
        return f"Result for {self.participant}"


class Heat(models.Model):
    class Status(models.TextChoices):
        SCHEDULED = "SCHEDULED", "Scheduled"
        IN_PROGRESS = "IN_PROGRESS", "In Progress"
        COMPLETED = "COMPLETED", "Completed"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="heats")
    number = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    start_time = models.DateTimeField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.SCHEDULED)

    class Meta:
        ordering = ("event", "number")
        constraints = [
            models.UniqueConstraint(fields=["event", "number"], name="unique_heat_number_per_event"),
        ]

    def __str__(self) -> str:
        return f"{self.event} heat {self.number}"


class Round(models.Model):
    class Type(models.TextChoices):
        QUALIFYING = "QUALIFYING", "Qualifying"
        QUARTERFINAL = "QUARTERFINAL", "Quarterfinal"
        SEMIFINAL = "SEMIFINAL", "Semifinal"
        FINAL = "FINAL", "Final"

    Status = Heat.Status

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="rounds")
    number = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    type = models.CharField(max_length=20, choices=Type.choices)
    start_time = models.DateTimeField()
    status = models.CharField(max_length=20, choices=Heat.Status.choices, default=Heat.Status.SCHEDULED)
    qualified_participants = models.ManyToManyField(Participant, related_name="qualified_rounds", blank=True)

    class Meta:
        ordering = ("event", "number")
        constraints = [
            models.UniqueConstraint(fields=["event", "number"], name="unique_round_number_per_event"),
        ]

    def __str__(self) -> str:
        return f"{self.event} round {self.number} ({self.type})"

    @property
    def is_final(self) -> bool:
        return self.type == self.Type.FINAL


class RoundResult(PerformanceFields, AuditFields):
    round = models.ForeignKey(Round, on_delete=models.CASCADE, related_name="results")
    participant = models.ForeignKey(Participant, on_delete=models.CASCADE, related_name="round_results")

    class Meta:
        ordering = ("round", "position", "id")
        constraints = [
            models.UniqueConstraint(fields=["round", "participant"], name="unique_participant_per_round"),
        ]

    def __str__(self) -> str:
        return f"{self.round} - {self.participant}"


class AuditLog(models.Model):
    """Simple audit trail for result and schedule changes."""

    ts = models.DateTimeField(auto_now_add=True)
    action = models.CharField(max_length=64)
    actor = models.CharField(max_length=255, blank=True, default="")
    payload = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ("-ts",)

    def __str__(self) -> str:
        return f"{self.action} at {self.ts:%Y-%m-%d %H:%M:%S}"
