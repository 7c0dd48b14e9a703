from __future__ import annotations

import json

import pytest

from docshift.convert import cli
from docshift.convert.config import CollisionPolicy
from docshift.core.credentials import CREDENTIALS_FILENAME, FileCredentialStore

from fixtures import FAKE_PDF

CSV_TEXT = "name,qty\nwidget,3\n"


def _read_log(workspace):
    log_path = workspace.home / "logs" / "convert.log"
    return [json.loads(line) for line in log_path.read_text().splitlines()]


def test_structured_conversion_writes_into_workspace(workspace, capsys):
    source = workspace.write_input("stock.csv", CSV_TEXT)

    code = cli.main([str(source), "--to", "json"])

    captured = capsys.readouterr()
    output = workspace.converted_dir / "stock.json"
    assert code == 0
    assert json.loads(output.read_text()) == [{"name": "widget", "qty": 3}]
    assert f"Converted stock.csv -> {output}" in captured.out
    messages = [entry["message"] for entry in _read_log(workspace)]
    assert "Dispatching conversion" in messages
    assert "Conversion written" in messages


def test_existing_output_is_versioned_by_default(workspace, capsys):
    source = workspace.write_input("stock.csv", CSV_TEXT)

    assert cli.main([str(source), "--to", "json"]) == 0
    assert cli.main([str(source), "--to", "json"]) == 0
    assert cli.main([str(source), "--to", "json"]) == 0

    names = sorted(path.name for path in workspace.converted_dir.iterdir())
    assert names == ["stock-01.json", "stock-02.json", "stock.json"]


def test_overwrite_flag_replaces_output(workspace, tmp_path):
    source = workspace.write_input("stock.csv", CSV_TEXT)
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    (out_dir / "stock.json").write_text("stale")

    code = cli.main(
        [str(source), "--to", ".json", "--output-dir", str(out_dir), "--overwrite"]
    )

    assert code == 0
    assert json.loads((out_dir / "stock.json").read_text())[0]["qty"] == 3
    assert sorted(p.name for p in out_dir.iterdir()) == ["stock.json"]


def test_skip_policy_leaves_existing_output(workspace, monkeypatch, capsys):
    monkeypatch.setenv("DOCSHIFT_CONVERT_COLLISION", "skip")
    source = workspace.write_input("stock.csv", CSV_TEXT)
    workspace.converted_dir.mkdir(parents=True)
    existing = workspace.converted_dir / "stock.json"
    existing.write_text("keep me")

    code = cli.main([str(source), "--to", "json"])

    captured = capsys.readouterr()
    assert code == 0
    assert "Skipped:" in captured.out
    assert existing.read_text() == "keep me"


def test_unlisted_pair_requires_force(workspace, capsys):
    source = workspace.write_input("data.json", '[{"a": 1}]')

    code = cli.main([str(source), "--to", "pdf"])

    captured = capsys.readouterr()
    assert code == 1
    assert "Cannot convert JSON to PDF" in captured.err
    assert "Supported targets: csv, xlsx" in captured.err
    assert "--force" in captured.err
    assert "log file:" in captured.err


def test_force_attempts_unlisted_pair(workspace, monkeypatch, chat, capabilities):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    chat.queue("a = 1")
    source = workspace.write_input("data.json", '[{"a": 1}]')

    code = cli.main(
        [str(source), "--to", "txt", "--force"],
        capabilities=capabilities,
        client_factory=chat,
    )

    assert code == 0
    assert (workspace.converted_dir / "data.txt").read_text() == "a = 1"


def test_ai_conversion_without_key_reports_error(workspace, chat, capabilities, capsys):
    source = workspace.write_input("notes.txt", "hello")

    code = cli.main(
        [str(source), "--to", "pdf"],
        capabilities=capabilities,
        client_factory=chat,
    )

    captured = capsys.readouterr()
    assert code == 1
    assert "error: API key required" in captured.err
    assert chat.clients == []
    failure = [e for e in _read_log(workspace) if e["message"] == "Conversion failed"]
    assert failure and failure[0]["extra"]["error"] == "AuthError"
    assert "exception" in failure[0]


def test_ai_conversion_uses_environment_key(
    workspace, monkeypatch, chat, capabilities, pdf_writer
):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    chat.queue("Summary line")
    source = workspace.write_input("notes.txt", "hello world")

    code = cli.main(
        [str(source), "--to", "pdf", "--model", "gpt-4.1"],
        capabilities=capabilities,
        client_factory=chat,
    )

    assert code == 0
    assert (workspace.converted_dir / "notes.pdf").read_bytes() == FAKE_PDF
    assert chat.last.api_key == "sk-env"
    assert chat.calls[0]["model"] == "gpt-4.1"
    assert "Summary line" in pdf_writer.last


def test_ai_conversion_uses_saved_key(workspace, chat, capabilities):
    FileCredentialStore(workspace.config_dir / CREDENTIALS_FILENAME).set(
        "OPENAI_API_KEY", "sk-saved"
    )
    chat.queue("<p>ok</p>")
    source = workspace.write_input("notes.md", "# Notes")

    code = cli.main(
        [str(source), "--to", "html"],
        capabilities=capabilities,
        client_factory=chat,
    )

    assert code == 0
    assert chat.last.api_key == "sk-saved"


def test_corrupt_saved_key_file_reports_error(workspace, chat, capabilities, capsys):
    saved = workspace.config_dir / CREDENTIALS_FILENAME
    saved.parent.mkdir(parents=True, exist_ok=True)
    saved.write_text("not = [valid toml\n", encoding="utf-8")
    source = workspace.write_input("notes.txt", "hello")

    code = cli.main(
        [str(source), "--to", "docx"],
        capabilities=capabilities,
        client_factory=chat,
    )

    assert code == 1
    assert "error: Could not read saved API key" in capsys.readouterr().err
    assert chat.clients == []


def test_missing_input_file(workspace, capsys):
    code = cli.main([str(workspace.root / "ghost.csv"), "--to", "json"])

    assert code == 1
    assert "Input file not found" in capsys.readouterr().err


def test_input_over_limit_is_refused(workspace, monkeypatch, capsys):
    monkeypatch.setenv("DOCSHIFT_CONVERT_MAX_INPUT_MB", "0.000001")
    source = workspace.write_input("stock.csv", CSV_TEXT)

    code = cli.main([str(source), "--to", "json"])

    assert code == 1
    assert "the limit is" in capsys.readouterr().err
    assert not (workspace.converted_dir / "stock.json").exists()


def test_unknown_target_format(workspace, capsys):
    source = workspace.write_input("stock.csv", CSV_TEXT)

    code = cli.main([str(source), "--to", "bmp"])

    assert code == 1
    assert "Unknown format 'bmp'" in capsys.readouterr().err


def test_missing_explicit_config_exits_with_usage_error(workspace, tmp_path):
    source = workspace.write_input("stock.csv", CSV_TEXT)

    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(source), "--to", "json", "--config", str(tmp_path / "x.toml")])

    assert excinfo.value.code == 2


def test_conflicting_collision_flags(workspace):
    source = workspace.write_input("stock.csv", CSV_TEXT)

    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(source), "--to", "json", "--overwrite", "--version-output"])

    assert excinfo.value.code == 2


def test_resolve_output_path(tmp_path):
    base = tmp_path / "report.pdf"
    assert cli.resolve_output_path(base, collision=CollisionPolicy.SKIP) == base

    base.write_bytes(b"x")
    (tmp_path / "report-01.pdf").write_bytes(b"x")

    assert cli.resolve_output_path(base, collision=CollisionPolicy.SKIP) is None
    assert cli.resolve_output_path(base, collision=CollisionPolicy.OVERWRITE) == base
    assert (
        cli.resolve_output_path(base, collision=CollisionPolicy.VERSION)
        == tmp_path / "report-02.pdf"
    )
