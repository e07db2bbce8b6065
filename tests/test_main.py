# tests/test_main.py
from fastmcp import FastMCP

from taskgrid.config import Settings
from taskgrid_host.main import create_app, main


def test_create_app_builds_host():
    app = create_app(Settings(SERVER_NAME="TaskgridTest"))
    assert isinstance(app, FastMCP)
    assert app.name == "TaskgridTest"


def test_main_reports_bad_settings_instead_of_crashing(monkeypatch, caplog):
    monkeypatch.setenv("CONTEXT_MAX_FILES", "not-a-number")
    assert main() == 1
    assert "startup_failed" in caplog.text


def test_main_applies_log_level_from_env_file(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("LOG_LEVEL=DEBUG\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    levels = []
    ran = []

    class _Host:
        def run(self, transport):
            ran.append(transport)

    monkeypatch.setattr("taskgrid_host.main.configure_logging", lambda level=None: levels.append(level))
    monkeypatch.setattr("taskgrid_host.main.create_app", lambda settings: _Host())
    assert main() == 0
    assert levels == ["DEBUG"]
    assert ran == ["stdio"]
