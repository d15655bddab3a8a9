from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from achievements.services.evaluator import promote_final_medals
from competitions.models import Event


class Command(BaseCommand):
    help = "Create medal achievements from an event's final round results"

    def add_arguments(self, parser):
        parser.add_argument("event_id", type=int)
        parser.add_argument("--actor", default="system", help="Value recorded as the creator")

    def handle(self, *args, **options):
        try:
            event = Event.objects.get(pk=options["event_id"])
        except Event.DoesNotExist as exc:
            raise CommandError(f"Event {options['event_id']} not found") from exc
        try:
            created = promote_final_medals(event, actor=options["actor"])
        except ValueError as exc:
            raise CommandError(str(exc)) from exc
        self.stdout.write(self.style.SUCCESS(f"Created {len(created)} achievements for {event.name}"))
