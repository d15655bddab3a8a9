import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

TIME_VALIDATOR = django.core.validators.RegexValidator(
    "^(?:(?:([01]?\\d|2[0-3]):)?([0-5]?\\d):)?([0-5]?\\d)(?:\\.(\\d{1,3}))?$",
    "Use [[hh:]mm:]ss[.fff] for times.",
)

SCHEDULE_STATUS = [("SCHEDULED", "Scheduled"), ("IN_PROGRESS", "In Progress"), ("COMPLETED", "Completed")]


def audit_fields():
    return [
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("created_by", models.CharField(blank=True, default="", max_length=255)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("updated_by", models.CharField(blank=True, default="", max_length=255)),
    ]


def result_fields():
    return [
        (
            "position",
            models.PositiveIntegerField(
                blank=True, null=True, validators=[django.core.validators.MinValueValidator(1)]
            ),
        ),
        ("time", models.CharField(blank=True, default="", max_length=16, validators=[TIME_VALIDATOR])),
        ("distance", models.DecimalField(blank=True, decimal_places=3, max_digits=8, null=True)),
        ("height", models.DecimalField(blank=True, decimal_places=3, max_digits=6, null=True)),
        (
            "points",
            models.DecimalField(
                blank=True,
                decimal_places=2,
                max_digits=8,
                null=True,
                validators=[django.core.validators.MinValueValidator(0)],
            ),
        ),
        ("remarks", models.TextField(blank=True, default="")),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("schools", "0001_initial"),
        ("roster", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ts", models.DateTimeField(auto_now_add=True)),
                ("action", models.CharField(max_length=64)),
                ("actor", models.CharField(blank=True, default="", max_length=255)),
                ("payload", models.JSONField(blank=True, default=dict)),
            ],
            options={"ordering": ("-ts",)},
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *audit_fields(),
                ("name", models.CharField(max_length=255)),
                ("categories", models.JSONField(default=list)),
                ("date", models.DateField()),
                ("venue", models.CharField(max_length=255)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("TRACK", "Track"),
                            ("FIELD", "Field"),
                            ("RELAY", "Relay"),
                            ("CROSS_COUNTRY", "Cross Country"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("PUBLISHED", "Published"),
                            ("IN_PROGRESS", "In Progress"),
                            ("COMPLETED", "Completed"),
                        ],
                        default="DRAFT",
                        max_length=20,
                    ),
                ),
                (
                    "max_participants",
                    models.PositiveIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(1000),
                        ]
                    ),
                ),
                ("age_classes", models.ManyToManyField(related_name="events", to="roster.ageclass")),
                (
                    "school",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="events", to="schools.school"
                    ),
                ),
                (
                    "season",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="events", to="schools.season"
                    ),
                ),
                (
                    "sport",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="events", to="roster.sport"
                    ),
                ),
            ],
            options={"ordering": ("-date", "name")},
        ),
        migrations.CreateModel(
            name="Heat",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "number",
                    models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("start_time", models.DateTimeField()),
                ("status", models.CharField(choices=SCHEDULE_STATUS, default="SCHEDULED", max_length=20)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="heats", to="competitions.event"
                    ),
                ),
            ],
            options={"ordering": ("event", "number")},
        ),
        migrations.CreateModel(
            name="Participant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *audit_fields(),
                ("number", models.CharField(max_length=20)),
                ("category", models.CharField(choices=[("L", "Lelaki"), ("P", "Perempuan")], max_length=1)),
                ("lane", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("order", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("heat", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("round", models.PositiveSmallIntegerField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("REGISTERED", "Registered"),
                            ("CONFIRMED", "Confirmed"),
                            ("SCRATCHED", "Scratched"),
                            ("DNS", "Did Not Start"),
                            ("DNF", "Did Not Finish"),
                            ("DQ", "Disqualified"),
                        ],
                        default="REGISTERED",
                        max_length=20,
                    ),
                ),
                (
                    "age_class",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="entries", to="roster.ageclass"
                    ),
                ),
                (
                    "athlete",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="entries", to="roster.athlete"
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="competitions.event",
                    ),
                ),
            ],
            options={"ordering": ("event", "number", "id")},
        ),
        migrations.CreateModel(
            name="ParticipantResult",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *result_fields(),
                *audit_fields(),
                (
                    "participant",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="result",
                        to="competitions.participant",
                    ),
                ),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="Round",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "number",
                    models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("QUALIFYING", "Qualifying"),
                            ("QUARTERFINAL", "Quarterfinal"),
                            ("SEMIFINAL", "Semifinal"),
                            ("FINAL", "Final"),
                        ],
                        max_length=20,
                    ),
                ),
                ("start_time", models.DateTimeField()),
                ("status", models.CharField(choices=SCHEDULE_STATUS, default="SCHEDULED", max_length=20)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="rounds", to="competitions.event"
                    ),
                ),
                (
                    "qualified_participants",
                    models.ManyToManyField(
                        blank=True, related_name="qualified_rounds", to="competitions.participant"
                    ),
                ),
            ],
            options={"ordering": ("event", "number")},
        ),
        migrations.CreateModel(
            name="RoundResult",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *result_fields(),
                *audit_fields(),
                (
                    "participant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="round_results",
                        to="competitions.participant",
                    ),
                ),
                (
                    "round",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="results", to="competitions.round"
                    ),
                ),
            ],
            options={"ordering": ("round", "position", "id")},
        ),
        migrations.AddConstraint(
            model_name="event",
            constraint=models.UniqueConstraint(fields=("school", "sport", "name"), name="unique_event_name_per_sport"),
        ),
        migrations.AddConstraint(
            model_name="heat",
            constraint=models.UniqueConstraint(fields=("event", "number"), name="unique_heat_number_per_event"),
        ),
        migrations.AddConstraint(
            model_name="participant",
            constraint=models.UniqueConstraint(fields=("event", "athlete"), name="unique_athlete_per_event"),
        ),
        migrations.AddConstraint(
            model_name="round",
            constraint=models.UniqueConstraint(fields=("event", "number"), name="unique_round_number_per_event"),
        ),
        migrations.AddConstraint(
            model_name="roundresult",
            constraint=models.UniqueConstraint(fields=("round", "participant"), name="unique_participant_per_round"),
        ),
    ]
