from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from competitions import models, services
from competitions.tests.helpers import at, enter, make_event
from roster.tests.helpers import build_school, make_athlete


class TimeParsingTests(SimpleTestCase):
    def test_parse_time_formats(self) -> None:
        self.assertEqual(services.parse_time("12.34"), Decimal("12.340"))
        self.assertEqual(services.parse_time("1:02.5"), Decimal("62.500"))
        self.assertEqual(services.parse_time("1:00:00"), Decimal("3600.000"))
        self.assertIsNone(services.parse_time(""))
        self.assertIsNone(services.parse_time(None))

    def test_parse_time_rejects_garbage(self) -> None:
        with self.assertRaises(ValueError):
            services.parse_time("fast")
        with self.assertRaises(ValueError):
            services.parse_time("1:75")


class AssignPositionsTests(SimpleTestCase):
    def test_track_ranks_ascending_with_ties(self) -> None:
        rows = [{"time": "12.5"}, {"time": "12.1"}, {"time": "12.50"}, {"time": ""}]
        services.assign_positions(rows, track_like=True)
        self.assertEqual([row["position"] for row in rows], [2, 1, 2, None])

    def test_field_ranks_descending_distance_then_height(self) -> None:
        rows = [{"distance": Decimal("5.2")}, {"distance": Decimal("6.0")}, {"height": Decimal("1.1")}]
        services.assign_positions(rows, track_like=False)
        self.assertEqual([row["position"] for row in rows], [2, 1, 3])


class ParticipantServiceTests(TestCase):
    def setUp(self) -> None:
        self.ctx = build_school("SKA")
        self.event = make_event(self.ctx, max_participants=3)
        self.ali = make_athlete(self.ctx, "A0001")
        self.siti = make_athlete(self.ctx, "A0002", gender="P")

    def test_add_defaults_number_and_category(self) -> None:
        created = services.add_participants(self.event, [{"athlete": self.siti}], actor="t")
        self.assertEqual(created[0].number, "A0002")
        self.assertEqual(created[0].category, "P")
        self.assertEqual(created[0].age_class, self.ctx.p12)
        self.assertEqual(created[0].created_by, "t")

    def test_capacity_enforced(self) -> None:
        self.event.max_participants = 1
        self.event.save()
        with self.assertRaisesMessage(ValueError, "limited to 1"):
            services.add_participants(self.event, [{"athlete": self.ali}, {"athlete": self.siti}], actor="t")
        self.assertFalse(self.event.participants.exists())

    def test_duplicate_in_batch_and_existing(self) -> None:
        with self.assertRaisesMessage(ValueError, "more than once"):
            services.add_participants(self.event, [{"athlete": self.ali}, {"athlete": self.ali}], actor="t")
        services.add_participants(self.event, [{"athlete": self.ali}], actor="t")
        with self.assertRaisesMessage(ValueError, "already entered"):
            services.add_participants(self.event, [{"athlete": self.ali}], actor="t")

    def test_eligibility_rules(self) -> None:
        other = build_school("SKB")
        outsider = make_athlete(other, "B0001")
        with self.assertRaisesMessage(ValueError, "does not belong"):
            services.check_eligibility(self.event, outsider, age_class=self.ctx.l12, category="L")

        self.ali.is_active = False
        self.ali.save()
        with self.assertRaisesMessage(ValueError, "not an active athlete"):
            services.check_eligibility(self.event, self.ali, age_class=self.ctx.l12, category="L")

        self.event.age_classes.set([self.ctx.p12])
        with self.assertRaisesMessage(ValueError, "Age class L12"):
            services.check_eligibility(self.event, self.siti, age_class=self.ctx.l12, category="P")

        self.event.categories = ["L"]
        self.event.save()
        with self.assertRaisesMessage(ValueError, "Category P"):
            services.check_eligibility(self.event, self.siti, age_class=self.ctx.p12, category="P")

    def test_entries_closed_once_in_progress(self) -> None:
        self.event.status = models.Event.Status.IN_PROGRESS
        self.event.save()
        with self.assertRaises(ValueError):
            services.add_participants(self.event, [{"athlete": self.ali}], actor="t")

    def test_remove_rejects_unknown_ids(self) -> None:
        entry = enter(self.event, self.ali)
        with self.assertRaisesMessage(ValueError, "not found"):
            services.remove_participants(self.event, [entry.pk, 99999], actor="t")
        self.assertEqual(services.remove_participants(self.event, [entry.pk], actor="t"), 1)


class HeatAndRoundServiceTests(TestCase):
    def setUp(self) -> None:
        self.ctx = build_school("SKA")
        self.event = make_event(self.ctx, status=models.Event.Status.IN_PROGRESS)
        self.entries = [enter(self.event, make_athlete(self.ctx, f"A000{i}")) for i in range(1, 5)]

    def test_replace_heats_reassigns_participants(self) -> None:
        a, b, c, d = self.entries
        services.replace_heats(
            self.event,
            [
                {"number": 1, "start_time": at(8), "participant_ids": [a.pk, b.pk]},
                {"number": 2, "start_time": at(9), "participant_ids": [c.pk]},
            ],
            actor="t",
        )
        heats = dict(self.event.participants.values_list("pk", "heat"))
        self.assertEqual(heats, {a.pk: 1, b.pk: 1, c.pk: 2, d.pk: None})

        services.replace_heats(self.event, [{"number": 1, "start_time": at(8), "participant_ids": [d.pk]}], actor="t")
        heats = dict(self.event.participants.values_list("pk", "heat"))
        self.assertEqual(heats, {a.pk: None, b.pk: None, c.pk: None, d.pk: 1})
        self.assertEqual(self.event.heats.count(), 1)

    def test_replace_heats_rejects_double_assignment(self) -> None:
        a = self.entries[0]
        with self.assertRaisesMessage(ValueError, "more than one heat"):
            services.replace_heats(
                self.event,
                [
                    {"number": 1, "start_time": at(8), "participant_ids": [a.pk]},
                    {"number": 2, "start_time": at(9), "participant_ids": [a.pk]},
                ],
                actor="t",
            )
        with self.assertRaisesMessage(ValueError, "Duplicate heat numbers"):
            services.replace_heats(
                self.event,
                [{"number": 1, "start_time": at(8)}, {"number": 1, "start_time": at(9)}],
                actor="t",
            )

    def test_upsert_rounds_validates_final(self) -> None:
        with self.assertRaisesMessage(ValueError, "one final round"):
            services.upsert_rounds(
                self.event,
                [
                    {"number": 1, "type": "FINAL", "start_time": at(8)},
                    {"number": 2, "type": "FINAL", "start_time": at(9)},
                ],
                actor="t",
            )
        services.upsert_rounds(self.event, [{"number": 2, "type": "FINAL", "start_time": at(9)}], actor="t")
        with self.assertRaisesMessage(ValueError, "must be the last round"):
            services.upsert_rounds(self.event, [{"number": 3, "type": "SEMIFINAL", "start_time": at(10)}], actor="t")

    def test_upsert_keeps_qualified_when_not_supplied(self) -> None:
        ids = [p.pk for p in self.entries[:2]]
        services.upsert_rounds(
            self.event,
            [{"number": 1, "type": "QUALIFYING", "start_time": at(8), "qualified_participant_ids": ids}],
            actor="t",
        )
        rounds = services.upsert_rounds(
            self.event, [{"number": 1, "type": "QUALIFYING", "start_time": at(10)}], actor="t"
        )
        self.assertEqual(sorted(rounds[0].qualified_participants.values_list("pk", flat=True)), ids)
        self.assertEqual(rounds[0].start_time, at(10))

    def test_round_results_limited_to_qualified(self) -> None:
        round_obj = models.Round.objects.create(event=self.event, number=1, type="QUALIFYING", start_time=at(8))
        round_obj.qualified_participants.set(self.entries[:2])
        with self.assertRaisesMessage(ValueError, "not qualified"):
            services.record_round_results(
                round_obj, [{"participant_id": self.entries[3].pk, "time": "12.0"}], actor="t"
            )

    def test_progression_through_final(self) -> None:
        heat_round = models.Round.objects.create(event=self.event, number=1, type="QUALIFYING", start_time=at(8))
        final = models.Round.objects.create(event=self.event, number=2, type="FINAL", start_time=at(15))
        times = ["12.9", "12.2", "12.5", "13.4"]
        services.record_round_results(
            heat_round,
            [{"participant_id": p.pk, "time": t} for p, t in zip(self.entries, times)],
            actor="t",
            auto_rank=True,
        )
        self.assertFalse(models.ParticipantResult.objects.exists())

        services.advance_qualifiers(heat_round, 2, actor="t")
        qualified = set(final.qualified_participants.values_list("pk", flat=True))
        self.assertEqual(qualified, {self.entries[1].pk, self.entries[2].pk})
        self.entries[1].refresh_from_db()
        self.assertEqual(self.entries[1].round, 2)

        services.record_round_results(
            final,
            [
                {"participant_id": self.entries[1].pk, "time": "12.3", "position": 2},
                {"participant_id": self.entries[2].pk, "time": "12.1", "position": 1},
            ],
            actor="t",
        )
        result = models.ParticipantResult.objects.get(participant=self.entries[2])
        self.assertEqual(result.position, 1)
        self.assertEqual(result.time, "12.1")

        with self.assertRaisesMessage(ValueError, "Round 3 does not exist"):
            services.advance_qualifiers(final, 1, actor="t")

    def test_advance_requires_ranked_results(self) -> None:
        first = models.Round.objects.create(event=self.event, number=1, type="QUALIFYING", start_time=at(8))
        models.Round.objects.create(event=self.event, number=2, type="FINAL", start_time=at(15))
        with self.assertRaisesMessage(ValueError, "no ranked results"):
            services.advance_qualifiers(first, 2, actor="t")

    def test_advance_includes_ties_at_cutoff(self) -> None:
        first = models.Round.objects.create(event=self.event, number=1, type="QUALIFYING", start_time=at(8))
        final = models.Round.objects.create(event=self.event, number=2, type="FINAL", start_time=at(15))
        times = ["12.1", "12.4", "12.4", "12.9"]
        services.record_round_results(
            first,
            [{"participant_id": p.pk, "time": t} for p, t in zip(self.entries, times)],
            actor="t",
            auto_rank=True,
        )

        services.advance_qualifiers(first, 2, actor="t")
        qualified = set(final.qualified_participants.values_list("pk", flat=True))
        self.assertEqual(qualified, {p.pk for p in self.entries[:3]})
        audit = models.AuditLog.objects.filter(action="qualifiers_advanced").latest("id")
        self.assertEqual(len(audit.payload["participants"]), 3)

    def test_single_round_result_on_final_syncs_event_result(self) -> None:
        final = models.Round.objects.create(event=self.event, number=1, type="FINAL", start_time=at(15))
        services.set_round_participant_result(
            final, self.entries[0].pk, {"position": 1, "time": "11.9"}, actor="t"
        )
        services.set_round_participant_result(
            final, self.entries[0].pk, {"position": 2, "time": "12.0"}, actor="t"
        )
        self.assertEqual(final.results.count(), 1)
        self.assertEqual(models.ParticipantResult.objects.get(participant=self.entries[0]).position, 2)


class EventResultServiceTests(TestCase):
    def setUp(self) -> None:
        self.ctx = build_school("SKA")
        self.event = make_event(self.ctx, status=models.Event.Status.IN_PROGRESS)
        self.entries = [enter(self.event, make_athlete(self.ctx, f"A000{i}")) for i in range(1, 4)]

    def test_record_requires_in_progress(self) -> None:
        self.event.status = models.Event.Status.PUBLISHED
        self.event.save()
        with self.assertRaisesMessage(ValueError, "Results can only be recorded for events in progress"):
            services.record_event_results(
                self.event, [{"participant_id": self.entries[0].pk, "time": "12.0"}], actor="t"
            )

    def test_merge_keeps_omitted_fields(self) -> None:
        entry = self.entries[0]
        services.record_event_results(
            self.event,
            [{"participant_id": entry.pk, "time": "12.0", "position": 1, "remarks": "PB"}],
            actor="t",
        )
        self.event.status = models.Event.Status.COMPLETED
        self.event.save()
        services.record_event_results(
            self.event, [{"participant_id": entry.pk, "points": Decimal("5")}], actor="u", merge=True
        )
        result = models.ParticipantResult.objects.get(participant=entry)
        self.assertEqual((result.time, result.position, result.remarks), ("12.0", 1, "PB"))
        self.assertEqual(result.points, Decimal("5"))
        self.assertEqual(result.updated_by, "u")

    def test_auto_rank_sets_positions_from_marks(self) -> None:
        a, b, c = self.entries
        services.record_event_results(
            self.event,
            [
                {"participant_id": a.pk, "time": "12.8", "position": 1},
                {"participant_id": b.pk, "time": "12.1"},
                {"participant_id": c.pk, "time": "12.8"},
            ],
            actor="t",
            auto_rank=True,
        )
        positions = dict(models.ParticipantResult.objects.values_list("participant_id", "position"))
        self.assertEqual(positions, {a.pk: 2, b.pk: 1, c.pk: 2})

    def test_statistics_track(self) -> None:
        a, b, c = self.entries
        c.status = models.Participant.Status.DNF
        c.save()
        services.record_event_results(
            self.event,
            [
                {"participant_id": a.pk, "time": "12.4", "position": 2, "points": Decimal("3")},
                {"participant_id": b.pk, "time": "12.1", "position": 1, "points": Decimal("5")},
            ],
            actor="t",
        )
        stats = services.event_statistics(self.event)
        self.assertEqual(stats["total_participants"], 3)
        self.assertEqual(stats["dnf"], 1)
        self.assertEqual(stats["completed_results"], 2)
        self.assertEqual(stats["medal_winners"], 2)
        self.assertEqual([row["participant_id"] for row in stats["top_three"]], [b.pk, a.pk])
        self.assertEqual(stats["best_performance"], "12.1")
        self.assertEqual(stats["total_points"], Decimal("8"))

    def test_statistics_field_prefers_final_round(self) -> None:
        self.event.type = models.Event.Type.FIELD
        self.event.save()
        a, b, _ = self.entries
        services.record_event_results(
            self.event, [{"participant_id": a.pk, "distance": Decimal("4.000"), "position": 1}], actor="t"
        )
        final = models.Round.objects.create(event=self.event, number=1, type="QUALIFYING", start_time=at(15))
        models.RoundResult.objects.create(round=final, participant=b, distance=Decimal("9.000"), position=1)
        # only final rounds feed the statistics
        self.assertEqual(services.event_statistics(self.event)["best_performance"], "4 m")

        final.type = models.Round.Type.FINAL
        final.save()
        self.assertEqual(services.event_statistics(self.event)["best_performance"], "9 m")

    def test_delete_only_drafts(self) -> None:
        with self.assertRaisesMessage(ValueError, "Only draft events"):
            services.delete_event(self.event, actor="t")
        draft = make_event(self.ctx, name="200m")
        services.delete_event(draft, actor="t")
        self.assertFalse(models.Event.objects.filter(pk=draft.pk).exists())
        self.assertTrue(models.AuditLog.objects.filter(action="event_deleted").exists())

    def test_bulk_delete_skips_non_drafts(self) -> None:
        make_event(self.ctx, name="200m")
        result = services.bulk_delete(models.Event.objects.filter(school=self.ctx.school), actor="t")
        self.assertEqual(result, {"deleted": 1, "skipped": 1})

    def test_round_schedule_by_date(self) -> None:
        models.Round.objects.create(event=self.event, number=1, type="FINAL", start_time=at(9))
        models.Round.objects.create(
            event=make_event(self.ctx, name="Lompat Jauh", type="FIELD"),
            number=1,
            type="FINAL",
            start_time=at(9, date(2026, 5, 21)),
        )
        rows = services.round_schedule(self.ctx.school, date(2026, 5, 20))
        self.assertEqual([row["event_name"] for row in rows], ["100m"])
        self.assertEqual(rows[0]["round_type"], "FINAL")
