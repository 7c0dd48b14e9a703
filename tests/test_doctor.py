from __future__ import annotations

from rich.console import Console

from docshift import doctor
from docshift.core.credentials import CREDENTIALS_FILENAME, FileCredentialStore


def _healthy():
    return (
        doctor.DependencyStatus("PIL", "pillow", "image transcoding", True, "10.0", None),
    )


def _missing():
    return (
        doctor.DependencyStatus(
            "weasyprint", "weasyprint", "PDF output", False, None, "no cairo"
        ),
    )


def test_report_without_workspace_does_not_create_it(workspace, monkeypatch):
    monkeypatch.setattr(doctor, "check_dependencies", _healthy)

    report = doctor.generate_report()

    assert report.workspace == workspace.home
    assert not workspace.home.exists()
    assert all(not present for _, _, present in report.directories)
    assert report.config_path == workspace.config_dir / "convert.toml"
    assert not report.config_exists
    assert report.key_source is None
    assert report.healthy


def test_report_sees_saved_key_and_config(workspace, monkeypatch):
    monkeypatch.setattr(doctor, "check_dependencies", _healthy)
    workspace.write_config("[ai]\n")
    saved = workspace.config_dir / CREDENTIALS_FILENAME
    FileCredentialStore(saved).set("OPENAI_API_KEY", "sk-saved")

    report = doctor.generate_report()

    assert report.config_exists
    assert report.key_source == str(saved)


def test_environment_key_wins(workspace, monkeypatch):
    monkeypatch.setattr(doctor, "check_dependencies", _healthy)

    report = doctor.generate_report(
        env={"DOCSHIFT_DATA_HOME": str(workspace.home), "OPENAI_API_KEY": "sk"}
    )

    assert report.key_source == "environment"


def test_config_env_override_is_reported(workspace, monkeypatch, tmp_path):
    monkeypatch.setattr(doctor, "check_dependencies", _healthy)
    alternate = tmp_path / "alt.toml"
    alternate.write_text("")

    report = doctor.generate_report(
        env={
            "DOCSHIFT_DATA_HOME": str(workspace.home),
            "DOCSHIFT_CONVERT_CONFIG": str(alternate),
        }
    )

    assert report.config_path == alternate
    assert report.config_exists


def test_check_dependencies_covers_every_capability():
    statuses = doctor.check_dependencies()

    packages = {status.package for status in statuses}
    assert {"pillow", "openpyxl", "python-docx", "python-pptx", "openai"} <= packages
    pillow = next(s for s in statuses if s.package == "pillow")
    assert pillow.available
    assert pillow.version


def test_render_report_lists_libraries(workspace, monkeypatch):
    monkeypatch.setattr(doctor, "check_dependencies", _missing)
    console = Console(record=True, width=160)

    report = doctor.generate_report()
    doctor.render_report(report, console)

    text = console.export_text()
    assert f"Workspace: {workspace.home}" in text
    assert "missing (run `docshift init`)" in text
    assert "API key: not configured" in text
    assert "weasyprint" in text
    assert "missing: no cairo" in text
    assert not report.healthy


def test_main_exit_codes(monkeypatch, capsys):
    monkeypatch.setattr(doctor, "check_dependencies", _healthy)
    assert doctor.main([]) == 0
    assert "Libraries" in capsys.readouterr().out

    monkeypatch.setattr(doctor, "check_dependencies", _missing)
    assert doctor.main([]) == 1
