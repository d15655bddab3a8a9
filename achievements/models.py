from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from roster.models import AgeClass, Athlete, Sport
from schools.models import Season


class Achievement(models.Model):
    class Level(models.TextChoices):
        SEKOLAH = "SEKOLAH", "Sekolah"
        MSSD = "MSSD", "MSSD"
        MSSN = "MSSN", "MSSN"
        MSSM = "MSSM", "MSSM"
        SUKMA = "SUKMA", "SUKMA"

    class Medal(models.TextChoices):
        GOLD = "GOLD", "Gold"
        SILVER = "SILVER", "Silver"
        BRONZE = "BRONZE", "Bronze"

    athlete = models.ForeignKey(Athlete, on_delete=models.CASCADE, related_name="achievements")
    title = models.CharField(max_length=255)
    date = models.DateField()
    description = models.TextField(blank=True, default="")
    season = models.ForeignKey(
        Season, on_delete=models.SET_NULL, null=True, blank=True, related_name="achievements"
    )
    sport = models.ForeignKey(Sport, on_delete=models.PROTECT, related_name="achievements")
    tournament_name = models.CharField(max_length=255)
    tournament_venue = models.CharField(max_length=255, blank=True, default="")
    tournament_age_class = models.ForeignKey(AgeClass, on_delete=models.PROTECT, related_name="achievements")
    tournament_level = models.CharField(max_length=10, choices=Level.choices)
    position = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    medal = models.CharField(max_length=10, choices=Medal.choices, blank=True, default="")
    points = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    remarks = models.TextField(blank=True, default="")
    source_event = models.ForeignKey(
        "competitions.Event",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="achievements",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.CharField(max_length=255, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)
    updated_by = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ("-date", "-id")
        constraints = [
            models.UniqueConstraint(
                fields=["athlete", "source_event"],
                condition=Q(source_event__isnull=False),
                name="unique_generated_achievement_per_event",
            ),
        ]
        indexes = [models.Index(fields=["athlete", "medal"], name="achievement_athlete_medal_idx")]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.athlete} - {self.title}"
