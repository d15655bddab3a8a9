import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("schools", "0001_initial"),
        ("roster", "0001_initial"),
        ("competitions", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Achievement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("date", models.DateField()),
                ("description", models.TextField(blank=True, default="")),
                ("tournament_name", models.CharField(max_length=255)),
                ("tournament_venue", models.CharField(blank=True, default="", max_length=255)),
                (
                    "tournament_level",
                    models.CharField(
                        choices=[
                            ("SEKOLAH", "Sekolah"),
                            ("MSSD", "MSSD"),
                            ("MSSN", "MSSN"),
                            ("MSSM", "MSSM"),
                            ("SUKMA", "SUKMA"),
                        ],
                        max_length=10,
                    ),
                ),
                ("position", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                (
                    "medal",
                    models.CharField(
                        blank=True,
                        choices=[("GOLD", "Gold"), ("SILVER", "Silver"), ("BRONZE", "Bronze")],
                        default="",
                        max_length=10,
                    ),
                ),
                ("points", models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ("remarks", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.CharField(blank=True, default="", max_length=255)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("updated_by", models.CharField(blank=True, default="", max_length=255)),
                (
                    "athlete",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="achievements",
                        to="roster.athlete",
                    ),
                ),
                (
                    "season",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="achievements",
                        to="schools.season",
                    ),
                ),
                (
                    "source_event",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="achievements",
                        to="competitions.event",
                    ),
                ),
                (
                    "sport",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="achievements", to="roster.sport"
                    ),
                ),
                (
                    "tournament_age_class",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="achievements",
                        to="roster.ageclass",
                    ),
                ),
            ],
            options={"ordering": ("-date", "-id")},
        ),
        migrations.AddIndex(
            model_name="achievement",
            index=models.Index(fields=["athlete", "medal"], name="achievement_athlete_medal_idx"),
        ),
        migrations.AddConstraint(
            model_name="achievement",
            constraint=models.UniqueConstraint(
                condition=models.Q(("source_event__isnull", False)),
                fields=("athlete", "source_event"),
                name="unique_generated_achievement_per_event",
            ),
        ),
    ]
