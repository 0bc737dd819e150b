from __future__ import annotations

from typer.testing import CliRunner

from formsync import cli as cli_module
from formsync.document import Response
from formsync.errors import NotFound

runner = CliRunner()


def test_link_uses_public_host(monkeypatch):
    monkeypatch.setenv("PUBLIC_HOST", "forms.example.com")
    result = runner.invoke(cli_module.cli, ["link", "01ABC"])
    assert result.exit_code == 0
    assert result.output.strip() == "https://forms.example.com/01ABC/viewform"


def test_sidebar_flag_round_trip(tmp_path, monkeypatch):
    monkeypatch.setenv("PREFS_PATH", str(tmp_path / "prefs.json"))
    monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "app.db"))
    monkeypatch.setenv("JSON_PATH", str(tmp_path / "jsonstore.json"))

    assert runner.invoke(cli_module.cli, ["sidebar"]).output.strip() == "hidden"
    assert runner.invoke(cli_module.cli, ["sidebar", "--show"]).output.strip() == "shown"
    assert runner.invoke(cli_module.cli, ["sidebar", "--toggle"]).output.strip() == "hidden"


def test_responses_prints_table(monkeypatch):
    async def fake_fetch(base_url, form_id):
        return [Response(id="r1", form_id=form_id, created_time=0, data={"name": "Ada"})]

    monkeypatch.setattr(cli_module, "_fetch_responses", fake_fetch)
    result = runner.invoke(cli_module.cli, ["responses", "f1", "--csv"])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == "Date,name"
    assert lines[1].endswith(",Ada")


def test_responses_empty_state(monkeypatch):
    async def fake_fetch(base_url, form_id):
        return []

    monkeypatch.setattr(cli_module, "_fetch_responses", fake_fetch)
    result = runner.invoke(cli_module.cli, ["responses", "f1"])
    assert result.output.strip() == "There are no responses yet"


def test_responses_reports_errors(monkeypatch):
    async def fake_fetch(base_url, form_id):
        raise NotFound(form_id)

    monkeypatch.setattr(cli_module, "_fetch_responses", fake_fetch)
    result = runner.invoke(cli_module.cli, ["responses", "missing"])
    assert result.exit_code == 1
