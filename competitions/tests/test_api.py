from datetime import date, timedelta

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from competitions import models
from competitions.tests.helpers import at, enter, make_event
from roster.tests.helpers import build_school, make_athlete


class EventAPITestCase(TestCase):
    def setUp(self) -> None:
        self.ctx = build_school("SKA")
        self.client = APIClient()
        self.client.force_authenticate(user=self.ctx.admin)


class EventListTests(EventAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        start = date(2026, 5, 1)
        for i in range(12):
            make_event(
                self.ctx,
                name=f"Acara {i:02d}",
                date=start + timedelta(days=i),
                venue="Stadium" if i % 2 else "Padang",
                status=models.Event.Status.PUBLISHED if i < 3 else models.Event.Status.DRAFT,
            )

    def test_default_page_sorted_by_date_desc(self) -> None:
        resp = self.client.get("/api/events/", {"school_code": "SKA"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(len(body["events"]), 10)
        self.assertEqual(body["events"][0]["name"], "Acara 11")
        self.assertEqual(
            body["pagination"],
            {
                "current_page": 1,
                "total_pages": 2,
                "total_events": 12,
                "has_next_page": True,
                "has_previous_page": False,
                "limit": 10,
            },
        )

    def test_filters_search_and_sort(self) -> None:
        resp = self.client.get(
            "/api/events/",
            {"school_code": "SKA", "status": "PUBLISHED", "sort_by": "name", "sort_order": "asc"},
        )
        self.assertEqual([e["name"] for e in resp.json()["events"]], ["Acara 00", "Acara 01", "Acara 02"])
        resp = self.client.get("/api/events/", {"school_code": "SKA", "search": "stadium", "limit": 100})
        self.assertEqual(resp.json()["pagination"]["total_events"], 6)
        resp = self.client.get("/api/events/", {"school_code": "SKA", "type": "FIELD"})
        self.assertEqual(resp.json()["pagination"]["total_pages"], 0)

    @override_settings(EVENTS_MAX_PAGE_SIZE=5)
    def test_limit_is_clamped(self) -> None:
        resp = self.client.get("/api/events/", {"school_code": "SKA", "limit": 50, "page": 3})
        pagination = resp.json()["pagination"]
        self.assertEqual(pagination["limit"], 5)
        self.assertEqual(pagination["current_page"], 3)
        self.assertFalse(pagination["has_next_page"])

    def test_requires_school_code_and_access(self) -> None:
        self.assertEqual(self.client.get("/api/events/").status_code, 400)
        build_school("SKB")
        self.assertEqual(self.client.get("/api/events/", {"school_code": "SKB"}).status_code, 403)
        self.assertEqual(self.client.get("/api/events/", {"school_code": "NOPE"}).status_code, 404)

    def test_bulk_status_update_and_delete(self) -> None:
        ids = list(models.Event.objects.filter(status="PUBLISHED").values_list("pk", flat=True))
        resp = self.client.post(
            "/api/events/bulk/",
            {
                "school_code": "SKA",
                "operation": "bulk_status_update",
                "event_ids": ids,
                "new_status": "IN_PROGRESS",
            },
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["result"], {"updated": 3})

        all_ids = list(models.Event.objects.values_list("pk", flat=True))
        resp = self.client.post(
            "/api/events/bulk/",
            {"school_code": "SKA", "operation": "bulk_delete", "event_ids": all_ids},
            format="json",
        )
        self.assertEqual(resp.json()["result"], {"deleted": 9, "skipped": 3})

    def test_bulk_rejects_unknown_operation(self) -> None:
        resp = self.client.post(
            "/api/events/bulk/",
            {"school_code": "SKA", "operation": "archive", "event_ids": [1]},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["operation"], ["Invalid operation"])


class EventCrudTests(EventAPITestCase):
    def payload(self, **overrides):
        data = {
            "school_code": "SKA",
            "name": "400m",
            "sport": self.ctx.athletics.pk,
            "season": self.ctx.season.pk,
            "age_classes": [self.ctx.l12.pk],
            "categories": ["L"],
            "date": "2026-06-01",
            "venue": "Padang",
            "type": "TRACK",
            "max_participants": 16,
        }
        data.update(overrides)
        return data

    def test_create_and_retrieve(self) -> None:
        resp = self.client.post("/api/events/", self.payload(), format="json")
        self.assertEqual(resp.status_code, 201, resp.content)
        body = resp.json()
        self.assertEqual(body["status"], "DRAFT")
        self.assertEqual(body["created_by"], self.ctx.admin.email)
        self.assertEqual(body["sport"]["name"], "Olahraga")

        detail = self.client.get(f"/api/events/{body['id']}/").json()
        self.assertEqual(detail["participants"], [])
        self.assertEqual(detail["rounds"], [])

    def test_create_validation(self) -> None:
        self.client.post("/api/events/", self.payload(), format="json")
        self.assertEqual(self.client.post("/api/events/", self.payload(), format="json").status_code, 400)
        resp = self.client.post("/api/events/", self.payload(name="x", categories=["L", "L"]), format="json")
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post("/api/events/", self.payload(name="y", max_participants=1001), format="json")
        self.assertEqual(resp.status_code, 400)
        other = build_school("SKB")
        resp = self.client.post("/api/events/", self.payload(name="z", sport=other.athletics.pk), format="json")
        self.assertEqual(resp.status_code, 400)

    def test_update_and_delete_guard(self) -> None:
        event = make_event(self.ctx)
        resp = self.client.patch(f"/api/events/{event.pk}/", {"status": "IN_PROGRESS"}, format="json")
        self.assertEqual(resp.status_code, 200)
        resp = self.client.delete(f"/api/events/{event.pk}/")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Only draft events can be deleted.")

        draft = make_event(self.ctx, name="200m")
        self.assertEqual(self.client.delete(f"/api/events/{draft.pk}/").status_code, 204)

    def test_other_tenant_event_is_404(self) -> None:
        other = build_school("SKB")
        event = make_event(other)
        self.assertEqual(self.client.get(f"/api/events/{event.pk}/").status_code, 404)
        self.assertEqual(self.client.get(f"/api/events/{event.pk}/statistics/").status_code, 404)


class ParticipantAPITests(EventAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.event = make_event(self.ctx)
        self.ali = make_athlete(self.ctx, "A0001")
        self.siti = make_athlete(self.ctx, "A0002", gender="P")
        self.url = f"/api/events/{self.event.pk}/participants/"

    def test_add_list_and_remove(self) -> None:
        resp = self.client.post(
            self.url,
            {"participants": [{"athlete": self.ali.pk, "lane": 3}, {"athlete": self.siti.pk, "number": "99"}]},
            format="json",
        )
        self.assertEqual(resp.status_code, 201, resp.content)
        self.assertEqual([p["number"] for p in resp.json()], ["A0001", "99"])

        listing = self.client.get(self.url).json()
        self.assertEqual(len(listing), 2)
        ids = [p["id"] for p in listing]

        resp = self.client.delete(self.url, {"participant_ids": ids[:1]}, format="json")
        self.assertEqual(resp.json(), {"removed": 1})

    def test_ineligible_entry_is_rejected(self) -> None:
        self.event.categories = ["L"]
        self.event.save()
        resp = self.client.post(self.url, {"participants": [{"athlete": self.siti.pk}]}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Category P", resp.json()["detail"])

    def test_update_status(self) -> None:
        entry = enter(self.event, self.ali)
        resp = self.client.patch(f"{self.url}{entry.pk}/", {"status": "SCRATCHED"}, format="json")
        self.assertEqual(resp.status_code, 200)
        entry.refresh_from_db()
        self.assertEqual(entry.status, "SCRATCHED")


class HeatRoundAPITests(EventAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.event = make_event(self.ctx, status=models.Event.Status.IN_PROGRESS)
        self.entries = [enter(self.event, make_athlete(self.ctx, f"A000{i}")) for i in range(1, 5)]
        self.base = f"/api/events/{self.event.pk}"

    def test_heats(self) -> None:
        a, b = self.entries[:2]
        resp = self.client.patch(
            f"{self.base}/heats/",
            {"heats": [{"number": 1, "start_time": at(8).isoformat(), "participant_ids": [a.pk, b.pk]}]},
            format="json",
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()[0]["participant_ids"], [a.pk, b.pk])
        resp = self.client.patch(
            f"{self.base}/heats/",
            {"heats": [{"number": 1, "start_time": at(8).isoformat(), "participant_ids": [99999]}]},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)

    def test_rounds_results_and_advance(self) -> None:
        ids = [p.pk for p in self.entries]
        resp = self.client.patch(
            f"{self.base}/rounds/",
            {
                "rounds": [
                    {"number": 1, "type": "QUALIFYING", "start_time": at(8).isoformat(), "qualified_participant_ids": ids},
                    {"number": 2, "type": "FINAL", "start_time": at(15).isoformat()},
                ]
            },
            format="json",
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual([r["type"] for r in resp.json()], ["QUALIFYING", "FINAL"])

        times = ["12.9", "12.2", "12.5", "13.4"]
        resp = self.client.patch(
            f"{self.base}/rounds/1/results/",
            {"results": [{"participant_id": pk, "time": t} for pk, t in zip(ids, times)], "auto_rank": True},
            format="json",
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual([row["participant_id"] for row in resp.json()][:2], [ids[1], ids[2]])

        resp = self.client.post(f"{self.base}/rounds/1/advance/", {"count": 2}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(sorted(resp.json()["qualified_participant_ids"]), [ids[1], ids[2]])

        resp = self.client.get(f"{self.base}/rounds/2/participants/")
        body = resp.json()
        self.assertEqual(len(body["participants"]), 2)
        self.assertEqual(body["metadata"]["round_type"], "FINAL")
        self.assertFalse(body["metadata"]["has_results"])

        resp = self.client.patch(
            f"{self.base}/rounds/2/participants/",
            {"participant_id": ids[2], "result": {"position": 1, "time": "12.1"}},
            format="json",
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        resp = self.client.patch(
            f"{self.base}/rounds/2/participants/",
            {"participant_id": ids[0], "result": {"position": 2}},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)

        results = self.client.get(f"{self.base}/results/").json()["results"]
        self.assertEqual([row["id"] for row in results], [ids[2]])

    def test_invalid_round_type_and_missing_round(self) -> None:
        resp = self.client.patch(
            f"{self.base}/rounds/",
            {"rounds": [{"number": 1, "type": "PLAYOFF", "start_time": at(8).isoformat()}]},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.client.get(f"{self.base}/rounds/7/participants/").status_code, 404)

    def test_invalid_time_format(self) -> None:
        resp = self.client.post(
            f"{self.base}/results/",
            {"results": [{"participant_id": self.entries[0].pk, "time": "12,5"}]},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)


class EventResultAPITests(EventAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.event = make_event(self.ctx, status=models.Event.Status.IN_PROGRESS)
        self.entries = [enter(self.event, make_athlete(self.ctx, f"A000{i}")) for i in range(1, 4)]
        self.url = f"/api/events/{self.event.pk}/results/"

    def test_post_without_ranking_and_put_merge(self) -> None:
        a, b, c = self.entries
        resp = self.client.post(
            self.url,
            {
                "results": [
                    {"participant_id": a.pk, "time": "12.8"},
                    {"participant_id": b.pk, "time": "12.3"},
                    {"participant_id": c.pk, "time": "12.6"},
                ]
            },
            format="json",
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["results"], [])

        resp = self.client.put(
            self.url,
            {"results": [{"participant_id": b.pk, "position": 1}, {"participant_id": c.pk, "position": 2}]},
            format="json",
        )
        ranked = resp.json()["results"]
        self.assertEqual([row["id"] for row in ranked], [b.pk, c.pk])
        self.assertEqual(ranked[0]["result"]["time"], "12.3")

    def test_post_auto_rank_orders_results(self) -> None:
        a, b, c = self.entries
        resp = self.client.post(
            self.url,
            {
                "auto_rank": True,
                "results": [
                    {"participant_id": a.pk, "time": "12.8"},
                    {"participant_id": b.pk, "time": "12.3"},
                    {"participant_id": c.pk, "time": "12.6"},
                ],
            },
            format="json",
        )
        self.assertEqual(resp.status_code, 200, resp.content)
        ranked = resp.json()["results"]
        self.assertEqual([row["id"] for row in ranked], [b.pk, c.pk, a.pk])
        self.assertEqual([row["result"]["position"] for row in ranked], [1, 2, 3])

    def test_post_requires_in_progress(self) -> None:
        self.event.status = models.Event.Status.COMPLETED
        self.event.save()
        resp = self.client.post(
            self.url, {"results": [{"participant_id": self.entries[0].pk, "time": "12.0"}]}, format="json"
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Results can only be recorded for events in progress")

    def test_statistics_and_schedule(self) -> None:
        models.Round.objects.create(event=self.event, number=1, type="FINAL", start_time=at(10))
        self.client.post(
            self.url,
            {"results": [{"participant_id": self.entries[0].pk, "time": "12.0", "position": 1, "points": 5}]},
            format="json",
        )
        stats = self.client.get(f"/api/events/{self.event.pk}/statistics/").json()
        self.assertEqual(stats["total_participants"], 3)
        self.assertEqual(stats["best_performance"], "12.0")
        self.assertEqual(stats["top_three"][0]["participant_id"], self.entries[0].pk)

        schedule = self.client.get("/api/events/rounds/", {"school_code": "SKA", "date": "2026-05-20"}).json()
        self.assertEqual(len(schedule), 1)
        self.assertEqual(schedule[0]["event_id"], self.event.pk)
        resp = self.client.get("/api/events/rounds/", {"school_code": "SKA", "date": "20-05-2026"})
        self.assertEqual(resp.status_code, 400)
