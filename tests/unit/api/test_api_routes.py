"""Tests for the HTTP trigger and status routes using FastAPI's TestClient."""

from __future__ import annotations

import tempfile

import pytest
from fastapi.testclient import TestClient

from salaryslip.api.app import create_app
from salaryslip.core.config import AppSettings, RenderConfig, RetryConfig, SchedulerConfig, SourceConfig
from salaryslip.pipeline import create_pipeline
from tests.fakes import write_workbook

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture
def settings(tmp_path):
    return AppSettings(
        render=RenderConfig(output_dir=str(tmp_path / "output"), logo_path=""),
        retry=RetryConfig(delay_seconds=0),
        scheduler=SchedulerConfig(generate_on_startup=False),
    )


@pytest.fixture
def pipeline(settings, status_store, notifier):
    p = create_pipeline(settings, status_store=status_store, notifier=notifier)
    yield p
    p.close()


@pytest.fixture
def client(settings, pipeline):
    with TestClient(create_app(settings, pipeline)) as c:
        yield c


def _upload(path):
    return {"file": (path.name, path.read_bytes(), XLSX)}


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_ready(self, client):
        assert client.get("/ready").json() == {"status": "ready"}


class TestGenerate:
    def test_generates_slips(self, client, payroll_workbook):
        resp = client.post("/api/salary-slip/generate", files=_upload(payroll_workbook),
                           data={"sheetName": "June 2025"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["count"] == 3
        assert body["message"].startswith("Successfully generated 3 salary slips")

        status = client.get(f"/api/salary-slip/status/{body['batch_id']}")
        assert status.status_code == 200
        assert status.json()["state"] == "COMPLETED"

    def test_sheet_name_optional(self, client, payroll_workbook):
        resp = client.post("/api/salary-slip/generate", files=_upload(payroll_workbook))
        assert resp.status_code == 200
        assert resp.json()["count"] == 3

    def test_unreadable_upload_is_bad_request(self, client, tmp_path):
        bad = tmp_path / "bad.xlsx"
        bad.write_bytes(b"not a workbook")
        resp = client.post("/api/salary-slip/generate", files=_upload(bad))
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert resp.json()["message"].startswith("Error generating salary slips")

    def test_upload_is_removed_after_run(self, client, payroll_workbook, tmp_path, monkeypatch):
        uploads = tmp_path / "uploads"
        uploads.mkdir()
        monkeypatch.setattr(tempfile, "tempdir", str(uploads))
        client.post("/api/salary-slip/generate", files=_upload(payroll_workbook))
        assert list(uploads.iterdir()) == []


class TestSheets:
    def test_lists_sheet_names(self, client, tmp_path):
        path = write_workbook(tmp_path / "multi.xlsx", {"January 2025": [], "February 2025": []})
        resp = client.post("/api/salary-slip/sheets", files=_upload(path))
        assert resp.status_code == 200
        assert resp.json() == ["January 2025", "February 2025"]

    def test_unreadable_upload_is_bad_request(self, client, tmp_path):
        bad = tmp_path / "bad.xlsx"
        bad.write_bytes(b"not a workbook")
        resp = client.post("/api/salary-slip/sheets", files=_upload(bad))
        assert resp.status_code == 400
        assert resp.json()["message"].startswith("Error reading sheet names")


class TestStatus:
    def test_unknown_batch_is_404(self, client):
        assert client.get("/api/salary-slip/status/nope").status_code == 404

    def test_recent_newest_first(self, client, payroll_workbook):
        ids = [
            client.post("/api/salary-slip/generate", files=_upload(payroll_workbook)).json()["batch_id"]
            for _ in range(2)
        ]
        resp = client.get("/api/salary-slip/status", params={"limit": 2})
        assert [s["batch_id"] for s in resp.json()] == list(reversed(ids))

    def test_limit_validated(self, client):
        assert client.get("/api/salary-slip/status", params={"limit": 0}).status_code == 422


class TestCompany:
    def test_get_defaults(self, client):
        body = client.get("/api/company").json()
        assert body["name"] == "AVETA IVF"

    def test_put_replaces_details(self, client):
        details = {"name": "New Clinic", "address_line1": "L1", "address_line2": "L2", "cin": "", "level": ""}
        assert client.put("/api/company", json=details).json() == details
        assert client.get("/api/company").json()["name"] == "New Clinic"

    def test_patch_address_keeps_name(self, client):
        resp = client.patch("/api/company/address", params={"addressLine1": "12 Park Road"})
        body = resp.json()
        assert body["address_line1"] == "12 Park Road"
        assert body["name"] == "AVETA IVF"

    def test_patch_name(self, client):
        assert client.patch("/api/company/name", params={"name": "AVETA Fertility"}).json()["name"] == "AVETA Fertility"


class TestLifespan:
    def test_generate_on_startup(self, tmp_path, payroll_workbook, status_store, notifier):
        settings = AppSettings(
            source=SourceConfig(excel_path=str(payroll_workbook)),
            render=RenderConfig(output_dir=str(tmp_path / "output"), logo_path=""),
            scheduler=SchedulerConfig(enabled=True, generate_on_startup=True),
        )
        pipeline = create_pipeline(settings, status_store=status_store, notifier=notifier)
        app = create_app(settings, pipeline)
        try:
            with TestClient(app):
                app.state.startup_run.join(timeout=30)
                assert pipeline.list_recent(1)[0].processed_count == 3
        finally:
            pipeline.close()

    def test_disabled_scheduler_skips_startup_run(self, settings, pipeline):
        disabled = settings.model_copy(update={
            "scheduler": SchedulerConfig(enabled=False, generate_on_startup=True),
        })
        app = create_app(disabled, pipeline)
        with TestClient(app):
            assert app.state.startup_run is None
        assert pipeline.list_recent() == []
