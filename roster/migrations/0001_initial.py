import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("schools", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Team",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("description", models.TextField(blank=True, default="")),
                ("color", models.CharField(blank=True, default="", max_length=30)),
                ("motto", models.CharField(blank=True, default="", max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "school",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="teams", to="schools.school"
                    ),
                ),
            ],
            options={"ordering": ("name",)},
        ),
        migrations.CreateModel(
            name="AgeClass",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "name",
                    models.CharField(
                        max_length=3,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^[LP]\\d{1,2}$", "Use L or P followed by the age, e.g. L12."
                            )
                        ],
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("gender", models.CharField(choices=[("L", "Lelaki"), ("P", "Perempuan")], max_length=1)),
                (
                    "min_age",
                    models.PositiveSmallIntegerField(validators=[django.core.validators.MaxValueValidator(100)]),
                ),
                (
                    "max_age",
                    models.PositiveSmallIntegerField(validators=[django.core.validators.MaxValueValidator(100)]),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "school",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="age_classes", to="schools.school"
                    ),
                ),
            ],
            options={"ordering": ("gender", "min_age", "name"), "verbose_name_plural": "age classes"},
        ),
        migrations.CreateModel(
            name="Sport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                (
                    "type",
                    models.CharField(choices=[("individual", "Individual"), ("team", "Team")], max_length=20),
                ),
                ("description", models.TextField(blank=True, default="")),
                (
                    "max_players_per_team",
                    models.PositiveIntegerField(
                        blank=True, null=True, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("age_classes", models.ManyToManyField(blank=True, related_name="sports", to="roster.ageclass")),
                (
                    "school",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="sports", to="schools.school"
                    ),
                ),
            ],
            options={"ordering": ("name",)},
        ),
        migrations.CreateModel(
            name="Athlete",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("athlete_number", models.CharField(max_length=40)),
                ("full_name", models.CharField(max_length=255)),
                (
                    "ic_number",
                    models.CharField(max_length=12, validators=[django.core.validators.MinLengthValidator(12)]),
                ),
                ("date_of_birth", models.DateField()),
                ("gender", models.CharField(choices=[("L", "Lelaki"), ("P", "Perempuan")], max_length=1)),
                ("image", models.CharField(blank=True, default="", max_length=500)),
                ("guardian_name", models.CharField(blank=True, default="", max_length=255)),
                ("guardian_contact", models.CharField(blank=True, default="", max_length=40)),
                ("guardian_email", models.EmailField(blank=True, default="", max_length=254)),
                ("address", models.TextField(blank=True, default="")),
                ("medical_conditions", models.JSONField(blank=True, default=list)),
                ("emergency_contact", models.CharField(blank=True, default="", max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "age_class",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="athletes", to="roster.ageclass"
                    ),
                ),
                (
                    "school",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="athletes", to="schools.school"
                    ),
                ),
                (
                    "team",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="athletes", to="roster.team"
                    ),
                ),
            ],
            options={"ordering": ("-created_at",)},
        ),
        migrations.CreateModel(
            name="AthleteSport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("joined_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "athlete",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sport_memberships",
                        to="roster.athlete",
                    ),
                ),
                (
                    "sport",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="memberships", to="roster.sport"
                    ),
                ),
            ],
            options={"ordering": ("joined_at",)},
        ),
        migrations.AddField(
            model_name="athlete",
            name="sports",
            field=models.ManyToManyField(related_name="athletes", through="roster.AthleteSport", to="roster.sport"),
        ),
        migrations.AddConstraint(
            model_name="team",
            constraint=models.UniqueConstraint(fields=("school", "name"), name="unique_team_name_per_school"),
        ),
        migrations.AddConstraint(
            model_name="ageclass",
            constraint=models.UniqueConstraint(fields=("school", "name"), name="unique_age_class_name_per_school"),
        ),
        migrations.AddConstraint(
            model_name="sport",
            constraint=models.UniqueConstraint(fields=("school", "name"), name="unique_sport_name_per_school"),
        ),
        migrations.AddConstraint(
            model_name="athlete",
            constraint=models.UniqueConstraint(
                fields=("school", "athlete_number"), name="unique_athlete_number_per_school"
            ),
        ),
        migrations.AddConstraint(
            model_name="athlete",
            constraint=models.UniqueConstraint(fields=("school", "ic_number"), name="unique_ic_number_per_school"),
        ),
        migrations.AddConstraint(
            model_name="athletesport",
            constraint=models.UniqueConstraint(fields=("athlete", "sport"), name="unique_sport_per_athlete"),
        ),
    ]
