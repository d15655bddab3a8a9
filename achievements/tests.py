from datetime import date
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from rest_framework.test import APIClient

from achievements.models import Achievement
from achievements.services.evaluator import promote_final_medals
from competitions import models as competition_models
from competitions.services import record_round_results
from competitions.tests.helpers import at, enter, make_event
from roster.tests.helpers import build_school, make_athlete


def achievement_payload(ctx, **overrides):
    payload = {
        "title": "Kejohanan Daerah 100m",
        "date": "2026-04-02",
        "description": "",
        "season": ctx.season.pk,
        "sport": ctx.athletics.pk,
        "tournament": {
            "name": "MSSD Olahraga",
            "venue": "Stadium Daerah",
            "age_class": ctx.l12.pk,
            "level": "MSSD",
        },
        "result": {"position": 2, "medal": "SILVER", "points": "3.00", "remarks": ""},
    }
    payload.update(overrides)
    return payload


def award(athlete, ctx, medal, position=1):
    return Achievement.objects.create(
        athlete=athlete,
        title=f"{medal} award",
        date=date(2026, 4, 2),
        sport=ctx.athletics,
        tournament_name="Sukan Tahunan",
        tournament_age_class=athlete.age_class,
        tournament_level=Achievement.Level.SEKOLAH,
        position=position,
        medal=medal,
    )


class AthleteAchievementAPITests(TestCase):
    def setUp(self) -> None:
        self.ctx = build_school("SKA")
        self.athlete = make_athlete(self.ctx, "A0001")
        self.client = APIClient()
        self.client.force_authenticate(user=self.ctx.admin)
        self.url = f"/api/athletes/{self.athlete.pk}/achievements/"

    def test_create_and_list(self) -> None:
        resp = self.client.post(self.url, achievement_payload(self.ctx), format="json")
        self.assertEqual(resp.status_code, 201, resp.content)
        body = resp.json()
        self.assertEqual(body["tournament"]["level"], "MSSD")
        self.assertEqual(body["result"]["medal"], "SILVER")
        self.assertEqual(body["created_by"], self.ctx.admin.email)
        self.assertIsNone(body["source_event"])

        resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([row["id"] for row in resp.json()], [body["id"]])

    def test_position_must_be_positive(self) -> None:
        payload = achievement_payload(self.ctx, result={"position": 0})
        resp = self.client.post(self.url, payload, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_sport_from_other_school_rejected(self) -> None:
        other = build_school("SKB")
        resp = self.client.post(self.url, achievement_payload(self.ctx, sport=other.athletics.pk), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("sport", resp.json())

    def test_update_and_delete(self) -> None:
        achievement = award(self.athlete, self.ctx, Achievement.Medal.BRONZE, position=3)
        detail = f"{self.url}{achievement.pk}/"
        payload = achievement_payload(self.ctx, title="Updated")
        resp = self.client.put(detail, payload, format="json")
        self.assertEqual(resp.status_code, 200, resp.content)
        achievement.refresh_from_db()
        self.assertEqual(achievement.title, "Updated")
        self.assertEqual(achievement.medal, Achievement.Medal.SILVER)
        self.assertEqual(achievement.updated_by, self.ctx.admin.email)

        resp = self.client.delete(detail)
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(Achievement.objects.filter(pk=achievement.pk).exists())

    def test_other_tenant_gets_404(self) -> None:
        other = build_school("SKB")
        client = APIClient()
        client.force_authenticate(user=other.admin)
        self.assertEqual(client.get(self.url).status_code, 404)
        self.assertEqual(client.post(self.url, achievement_payload(self.ctx), format="json").status_code, 404)


class FinalizeResultsTests(TestCase):
    def setUp(self) -> None:
        self.ctx = build_school("SKA")
        self.event = make_event(self.ctx, status=competition_models.Event.Status.IN_PROGRESS)
        self.entries = [enter(self.event, make_athlete(self.ctx, f"A000{i}")) for i in range(1, 5)]
        self.final = competition_models.Round.objects.create(
            event=self.event, number=1, type=competition_models.Round.Type.FINAL, start_time=at(9)
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.ctx.admin)
        self.url = f"/api/events/{self.event.pk}/finalize-results/"

    def record_final(self) -> None:
        times = ["12.10", "12.40", "12.40", "13.05"]
        record_round_results(
            self.final,
            [{"participant_id": p.pk, "time": t} for p, t in zip(self.entries, times)],
            actor="tester",
            auto_rank=True,
        )

    def test_finalize_requires_final_results(self) -> None:
        resp = self.client.post(self.url)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Final round results not found")

    def test_finalize_creates_podium_achievements_once(self) -> None:
        self.record_final()
        resp = self.client.post(self.url)
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["created"], 3)

        gold = Achievement.objects.get(athlete=self.entries[0].athlete)
        self.assertEqual(gold.title, "100m - GOLD Medal")
        self.assertEqual(gold.source_event, self.event)
        self.assertEqual(gold.tournament_level, Achievement.Level.SEKOLAH)
        self.assertEqual(gold.created_by, self.ctx.admin.email)
        # tied second places both receive silver
        medals = sorted(Achievement.objects.values_list("medal", flat=True))
        self.assertEqual(medals, ["GOLD", "SILVER", "SILVER"])

        resp = self.client.post(self.url)
        self.assertEqual(resp.json()["created"], 0)
        self.assertEqual(Achievement.objects.count(), 3)
        self.assertTrue(
            competition_models.AuditLog.objects.filter(action="results_finalized").exists()
        )

    def test_service_returns_only_new_achievements(self) -> None:
        self.record_final()
        first = promote_final_medals(self.event)
        self.assertEqual(len(first), 3)
        self.assertEqual(first[0].created_by, "system")
        self.assertEqual(promote_final_medals(self.event), [])

    def test_management_command(self) -> None:
        self.record_final()
        call_command("finalize_event_results", str(self.event.pk), "--actor", "cli", stdout=StringIO())
        self.assertEqual(Achievement.objects.filter(created_by="cli").count(), 3)


class DashboardAPITests(TestCase):
    def setUp(self) -> None:
        self.ctx = build_school("SKA")
        self.client = APIClient()
        self.client.force_authenticate(user=self.ctx.admin)

        self.ali = make_athlete(self.ctx, "A0001", full_name="Ali", team=self.ctx.red)
        self.siti = make_athlete(self.ctx, "A0002", gender="P", full_name="Siti", team=self.ctx.blue)
        self.retired = make_athlete(self.ctx, "A0003", full_name="Retired", team=self.ctx.blue, is_active=False)
        award(self.ali, self.ctx, Achievement.Medal.GOLD)
        award(self.ali, self.ctx, Achievement.Medal.BRONZE, position=3)
        award(self.siti, self.ctx, Achievement.Medal.SILVER, position=2)
        award(self.retired, self.ctx, Achievement.Medal.GOLD)

    def test_team_medals(self) -> None:
        resp = self.client.get("/api/dashboard/team-medals/", {"school_code": "SKA"})
        self.assertEqual(resp.status_code, 200)
        rows = resp.json()
        self.assertEqual([row["name"] for row in rows], ["Merah", "Biru"])
        self.assertEqual(rows[0]["medals"], {"gold": 1, "silver": 0, "bronze": 1, "total": 2})
        self.assertEqual(rows[1]["medals"], {"gold": 0, "silver": 1, "bronze": 0, "total": 1})

    def test_team_medals_default_color_and_inactive_teams(self) -> None:
        self.ctx.red.color = ""
        self.ctx.red.save()
        self.ctx.blue.is_active = False
        self.ctx.blue.save()
        rows = self.client.get("/api/dashboard/team-medals/", {"school_code": "SKA"}).json()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["color"], "#cccccc")

    def test_top_athletes(self) -> None:
        resp = self.client.get("/api/dashboard/top-athletes/", {"school_code": "SKA"})
        self.assertEqual(resp.status_code, 200)
        rows = resp.json()
        self.assertEqual([row["full_name"] for row in rows], ["Ali", "Siti"])
        self.assertEqual(rows[0]["medals"]["total"], 2)
        self.assertEqual(rows[0]["team"]["name"], "Merah")
        self.assertEqual(rows[1]["age_class"], "P12")

        rows = self.client.get("/api/dashboard/top-athletes/", {"school_code": "SKA", "limit": 1}).json()
        self.assertEqual(len(rows), 1)

    def test_dashboard_requires_access(self) -> None:
        other = build_school("SKB")
        client = APIClient()
        client.force_authenticate(user=other.admin)
        self.assertEqual(client.get("/api/dashboard/team-medals/", {"school_code": "SKA"}).status_code, 403)
        self.assertEqual(self.client.get("/api/dashboard/top-athletes/").status_code, 400)
