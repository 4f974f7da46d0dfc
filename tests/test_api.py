from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from healthlog import main
from healthlog.core import db as db_module
from healthlog.core.config import settings
from healthlog.core.errors import ConfigurationError
from healthlog.main import create_app
from tests.factories import add_food_entries, add_health_entries


def test_health(client):
    r = client.get("/v1/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["db"] is True
    assert body["backup_storage"] == "memory"


class TestBackupsApi:
    def test_create_list_download_delete(self, client, db, user):
        add_health_entries(db, user.id, 2)

        r = client.post(f"/v1/users/{user.id}/backups", json={"backup_name": "before-trip"})
        assert r.status_code == 201
        created = r.json()
        assert created["backup_name"] == "before-trip"
        assert created["backup_type"] == "manual"
        assert created["record_counts"]["health_entries"] == 2

        listed = client.get(f"/v1/users/{user.id}/backups").json()
        assert [b["id"] for b in listed] == [created["id"]]

        r = client.get(f"/v1/users/{user.id}/backups/{created['id']}/download")
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("application/json")
        assert 'filename="before-trip.json"' in r.headers["content-disposition"]
        assert len(r.json()["data"]["health_entries"]) == 2

        r = client.delete(f"/v1/users/{user.id}/backups/{created['id']}")
        assert r.json() == {"status": "ok", "deleted": created["id"]}
        assert client.get(f"/v1/users/{user.id}/backups").json() == []

    def test_create_without_body_uses_generated_name(self, client, user):
        r = client.post(f"/v1/users/{user.id}/backups")
        assert r.status_code == 201
        assert r.json()["backup_name"] == "manual-backup-2024-03-15-09-30-00"

    def test_unknown_user(self, client):
        r = client.post("/v1/users/nobody/backups", json={})
        assert r.status_code == 404

    def test_restore_round_trip(self, client, db, user):
        add_health_entries(db, user.id, 3)
        backup_id = client.post(f"/v1/users/{user.id}/backups", json={}).json()["id"]

        r = client.post(f"/v1/users/{user.id}/backups/{backup_id}/restore")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "ok"
        assert body["restored"]["health_entries"] == 3
        assert body["total"] == sum(body["restored"].values())

    def test_restore_unknown_backup(self, client, user):
        r = client.post(f"/v1/users/{user.id}/backups/missing/restore")
        assert r.status_code == 404

    def test_import_rejects_garbage(self, client, user):
        r = client.post(f"/v1/users/{user.id}/backups/import", json={"hello": "world"})
        assert r.status_code == 400

    def test_import_downloaded_file(self, client, db, user):
        add_health_entries(db, user.id, 1)
        backup_id = client.post(f"/v1/users/{user.id}/backups", json={"backup_name": "export"}).json()["id"]
        exported = client.get(f"/v1/users/{user.id}/backups/{backup_id}/download").json()

        r = client.post(f"/v1/users/{user.id}/backups/import", json=exported)
        assert r.status_code == 201
        assert r.json()["id"] != backup_id
        assert len(client.get(f"/v1/users/{user.id}/backups").json()) == 2

    def test_automatic_backup_once_per_day(self, client, user):
        first = client.post(f"/v1/users/{user.id}/backups/automatic").json()
        assert first["status"] == "created"
        assert first["backup"]["backup_type"] == "automatic"

        second = client.post(f"/v1/users/{user.id}/backups/automatic").json()
        assert second == {"status": "skipped", "backup": None}

        r = client.post(f"/v1/users/{user.id}/backups/automatic", params={"today": "2024-03-16"})
        assert r.json()["status"] == "created"

    def test_auto_init_schedules_once(self, client, user):
        assert client.post(f"/v1/users/{user.id}/backups/auto-init").json() == {"scheduled": True}
        assert client.post(f"/v1/users/{user.id}/backups/auto-init").json() == {"scheduled": False}


class TestReportsApi:
    def test_templates(self, client, user):
        r = client.get(f"/v1/users/{user.id}/report-templates")
        assert r.status_code == 200
        templates = r.json()
        assert len(templates) == 3

        default = next(t for t in templates if t["is_default"])
        r = client.delete(f"/v1/users/{user.id}/report-templates/{default['id']}")
        assert r.status_code == 409

    def test_create_rename_delete_template(self, client, user):
        r = client.post(
            f"/v1/users/{user.id}/report-templates",
            json={"template_name": "Neuro", "report_type": "specialist", "sections": ["seizures"]},
        )
        assert r.status_code == 201
        template = r.json()
        assert template["sections"] == ["seizures"]

        r = client.patch(
            f"/v1/users/{user.id}/report-templates/{template['id']}", json={"template_name": "Neurology"}
        )
        assert r.json()["template_name"] == "Neurology"

        r = client.delete(f"/v1/users/{user.id}/report-templates/{template['id']}")
        assert r.status_code == 200
        r = client.patch(
            f"/v1/users/{user.id}/report-templates/{template['id']}", json={"template_name": "Gone"}
        )
        assert r.status_code == 404

    def test_unknown_report_type(self, client, user):
        r = client.post(
            f"/v1/users/{user.id}/report-templates",
            json={"template_name": "Odd", "report_type": "astrology"},
        )
        assert r.status_code == 400

    def test_generate_report(self, client, db, user):
        add_health_entries(db, user.id, 3)

        r = client.post(
            f"/v1/users/{user.id}/reports",
            json={"start": "2024-03-01", "end": "2024-03-14", "sections": ["health_summary"]},
        )
        assert r.status_code == 200
        body = r.json()
        assert body["filename"].startswith("health-report-jayne-")
        assert body["report"]["health"]["total_entries"] == 3
        assert "=== HEALTH SUMMARY ===" in body["text"]

    def test_bad_range(self, client, user):
        r = client.post(f"/v1/users/{user.id}/reports", json={"start": "2024-03-14", "end": "2024-03-01"})
        assert r.status_code == 400

    def test_download_report(self, client, user):
        r = client.post(
            f"/v1/users/{user.id}/reports/download",
            json={"start": "2024-03-01", "end": "2024-03-14", "doctor": {"name": "Dr. Tam"}},
        )
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/plain")
        assert 'filename="health-report-jayne-' in r.headers["content-disposition"]
        assert r.text.startswith("HEALTH REPORT FOR JAYNE")
        assert "Doctor: Dr. Tam" in r.text


class TestHeartburnApi:
    def test_episode_links_recent_food(self, client, db, user):
        [pizza] = add_food_entries(db, user.id, ["pizza"], day=date(2024, 3, 1), first_hour=19)

        r = client.post(
            f"/v1/users/{user.id}/heartburn",
            json={"date": "2024-03-01", "time": "21:00:00", "severity": 7},
        )
        assert r.status_code == 201
        [link] = r.json()["correlations"]
        assert link["food_entry_id"] == pizza.id
        assert link["time_between_hours"] == 2.0

    def test_severity_out_of_range(self, client, user):
        r = client.post(
            f"/v1/users/{user.id}/heartburn",
            json={"date": "2024-03-01", "time": "21:00:00", "severity": 11},
        )
        assert r.status_code == 422

    def test_triggers(self, client, db, user):
        for day in (1, 2):
            add_food_entries(db, user.id, ["coffee"], day=date(2024, 3, day), first_hour=8)
            client.post(
                f"/v1/users/{user.id}/heartburn",
                json={"date": f"2024-03-0{day}", "time": "09:00:00", "severity": 4},
            )

        r = client.get(f"/v1/users/{user.id}/heartburn/triggers")
        assert r.status_code == 200
        [trigger] = r.json()
        assert trigger["food_name"] == "coffee"
        assert trigger["episode_count"] == 2

        assert client.get(f"/v1/users/{user.id}/heartburn/triggers", params={"limit": 11}).status_code == 422


class TestNutritionApi:
    def test_recalculate(self, client, user):
        r = client.post(f"/v1/users/{user.id}/nutrition/daily/2024-03-01")
        assert r.status_code == 200
        assert r.json()["total_calories"] == 0

    def test_bad_date(self, client, user):
        r = client.post(f"/v1/users/{user.id}/nutrition/daily/yesterday")
        assert r.status_code == 400


class TestExportApi:
    def test_month_csv(self, client, db, user):
        add_health_entries(db, user.id, 2)

        r = client.get(f"/v1/users/{user.id}/exports/health.csv", params={"month": "2024-03"})

        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/csv")
        assert 'filename="health-data-2024-03.csv"' in r.headers["content-disposition"]
        lines = r.text.splitlines()
        assert lines[0].startswith("Date,Mood,Energy,Anxiety")
        assert [line[:10] for line in lines[1:]] == ["2024-03-01", "2024-03-02"]

    def test_bad_month(self, client, user):
        r = client.get(f"/v1/users/{user.id}/exports/health.csv", params={"month": "2024-13"})
        assert r.status_code == 400

    def test_unknown_user(self, client):
        r = client.get("/v1/users/nobody/exports/health.csv", params={"month": "2024-03"})
        assert r.status_code == 404


class TestStartup:
    def test_missing_database_fails_at_startup(self, monkeypatch):
        monkeypatch.setattr(db_module, "engine", None)
        monkeypatch.setattr(db_module, "SessionLocal", None)
        app = create_app()

        with pytest.raises(ConfigurationError):
            with TestClient(app):
                pass

    def test_run_serves_the_app(self, monkeypatch):
        calls = []
        monkeypatch.setattr(main.uvicorn, "run", lambda target, **kw: calls.append((target, kw)))

        main.run()

        assert calls == [("healthlog.main:app", {"host": settings.HOST, "port": settings.PORT})]
