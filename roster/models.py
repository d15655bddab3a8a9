"""Teams, age classes, sports and athletes of a school."""
from __future__ import annotations

from datetime import date

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator, MinLengthValidator, RegexValidator
from django.db import models
from django.utils import timezone

from schools.models import School


class Gender(models.TextChoices):
    MALE = "L", "Lelaki"
    FEMALE = "P", "Perempuan"


AGE_CLASS_NAME_PATTERN = r"^[LP]\d{1,2}$"


class Team(models.Model):
    """A sports house. Medal standings are aggregated per team."""

    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="teams")
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True, default="")
    color = models.CharField(max_length=30, blank=True, default="")
    motto = models.CharField(max_length=255, blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("name",)
        constraints = [
            models.UniqueConstraint(fields=["school", "name"], name="unique_team_name_per_school"),
        ]

    def __str__(self) -> str:
        return self.name


class AgeClass(models.Model):
    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="age_classes")
    name = models.CharField(
        max_length=3,
        validators=[RegexValidator(AGE_CLASS_NAME_PATTERN, "Use L or P followed by the age, e.g. L12.")],
    )
    description = models.CharField(max_length=255, blank=True, default="")
    gender = models.CharField(max_length=1, choices=Gender.choices)
    min_age = models.PositiveSmallIntegerField(validators=[MaxValueValidator(100)])
    max_age = models.PositiveSmallIntegerField(validators=[MaxValueValidator(100)])
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("gender", "min_age", "name")
        verbose_name_plural = "age classes"
        constraints = [
            models.UniqueConstraint(fields=["school", "name"], name="unique_age_class_name_per_school"),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        super().clean()
        if self.min_age is not None and self.max_age is not None and self.max_age < self.min_age:
            raise ValidationError({"max_age": "Maximum age must be greater than or equal to minimum age."})

    def covers(self, age: int) -> bool:
        return self.min_age <= age <= self.max_age

    def overlaps(self, min_age: int, max_age: int) -> bool:
        """Return True when the closed range ``[min_age, max_age]`` intersects this class."""

        return self.min_age <= max_age and min_age <= self.max_age


class Sport(models.Model):
    class Type(models.TextChoices):
        INDIVIDUAL = "individual", "Individual"
        TEAM = "team", "Team"

    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="sports")
    name = models.CharField(max_length=120)
    type = models.CharField(max_length=20, choices=Type.choices)
    description = models.TextField(blank=True, default="")
    max_players_per_team = models.PositiveIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1)]
    )
    age_classes = models.ManyToManyField(AgeClass, related_name="sports", blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("name",)
        constraints = [
            models.UniqueConstraint(fields=["school", "name"], name="unique_sport_name_per_school"),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        super().clean()
        if self.type == self.Type.TEAM and not self.max_players_per_team:
            raise ValidationError({"max_players_per_team": "Team sports need a maximum number of players."})


class Athlete(models.Model):
    """A competitor registered with a school."""

    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="athletes")
    athlete_number = models.CharField(max_length=40)
    full_name = models.CharField(max_length=255)
    ic_number = models.CharField(max_length=12, validators=[MinLengthValidator(12)])
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=1, choices=Gender.choices)
    team = models.ForeignKey(Team, on_delete=models.PROTECT, related_name="athletes")
    age_class = models.ForeignKey(AgeClass, on_delete=models.PROTECT, related_name="athletes")
    image = models.CharField(max_length=500, blank=True, default="")
    guardian_name = models.CharField(max_length=255, blank=True, default="")
    guardian_contact = models.CharField(max_length=40, blank=True, default="")
    guardian_email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")
    medical_conditions = models.JSONField(default=list, blank=True)
    emergency_contact = models.CharField(max_length=255, blank=True, default="")
    is_active = models.BooleanField(default=True)
    sports = models.ManyToManyField(Sport, through="AthleteSport", related_name="athletes")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at",)
        constraints = [
            models.UniqueConstraint(fields=["school", "athlete_number"], name="unique_athlete_number_per_school"),
            models.UniqueConstraint(fields=["school", "ic_number"], name="unique_ic_number_per_school"),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.athlete_number})"

    def age_on(self, on: date | None = None) -> int:
        """Return the athlete's age in whole years on ``on`` (today by default)."""

        on = on or timezone.localdate()
        born = self.date_of_birth
        return on.year - born.year - ((on.month, on.day) < (born.month, born.day))


class AthleteSport(models.Model):
    athlete = models.ForeignKey(Athlete, on_delete=models.CASCADE, related_name="sport_memberships")
    sport = models.ForeignKey(Sport, on_delete=models.CASCADE, related_name="memberships")
    joined_at = models.DateTimeField(default=timezone.now)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ("joined_at",)
        constraints = [
            models.UniqueConstraint(fields=["athlete", "sport"], name="unique_sport_per_athlete"),
        ]

    def __str__(self) -> str:
        return f"{self.athlete} - {self.sport}"
