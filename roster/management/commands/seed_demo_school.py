from __future__ import annotations

from django.core.management.base import BaseCommand

from roster import services


class Command(BaseCommand):
    help = "Seed a demo school with teams, age classes, sports, a season and athletes"

    def add_arguments(self, parser):
        parser.add_argument("--code", default="DEMO", help="School code of the demo school")
        parser.add_argument("--no-output", action="store_true", help="Suppress success output")

    def handle(self, *args, **options):
        school = services.seed_demo_school(options["code"].strip().upper())
        if not options["no_output"]:
            self.stdout.write(
                self.style.SUCCESS(
                    f"Seeded school: {school.name} ({school.school_code}) "
                    f"with {school.athletes.count()} athletes"
                )
            )
