import json
from datetime import datetime

from webaudit.reports.manager import ReportManager  # type: ignore[import]

from tests.helpers.webaudit_imports import AuditStore, Issue


def _store():
    return AuditStore(
        options={"target_url": "https://app"},
        sitemap={"https://app/b": 404, "https://app/a": 200},
        issues=[
            Issue(
                check="sql_errors",
                name="SQL Injection",
                url="https://app/a?id=1'",
                severity="high",
                parameter="id",
                proof="SQLSTATE[42000]",
            )
        ],
        plugins={"healthmap": {"total": 2}},
        start_datetime=datetime(2024, 1, 1, 10, 0, 0),
        finish_datetime=datetime(2024, 1, 1, 11, 2, 3),
    )


def test_audit_store_to_json_sorted_sitemap():
    data = json.loads(_store().to_json())

    assert list(data["sitemap"]) == ["https://app/a", "https://app/b"]
    assert data["issues"][0]["parameter"] == "id"
    assert data["delta_time"] == "01:02:03"


def test_audit_store_save_and_load(tmp_path):
    store = _store()
    path = tmp_path / "report.json"

    store.save(path)

    assert AuditStore.load(path) == store


def test_report_manager_writes_json_to_configured_outfile(tmp_path):
    outfile = tmp_path / "out.json"
    manager = ReportManager(default_options={"json": {"outfile": str(outfile)}})
    manager.load(["json"])

    manager.run(_store())

    assert json.loads(outfile.read_text(encoding="utf-8"))["plugins"] == {"healthmap": {"total": 2}}


def test_report_manager_isolates_failing_reports(tmp_path, capsys):
    unwritable = tmp_path / "missing" / "out.json"
    manager = ReportManager(default_options={"json": {"outfile": str(unwritable)}})
    manager.load(["json", "stdout"])

    manager.run(AuditStore(sitemap={"https://app": 200}))

    captured = capsys.readouterr().out
    assert "1 página(s) no sitemap" in captured
