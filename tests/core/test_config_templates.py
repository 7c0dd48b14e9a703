from __future__ import annotations

import stat

import pytest

from docshift.core import config as core_config
from docshift.core import config_templates


def test_convert_template_is_valid_toml(tmp_path):
    template = config_templates.get_template("convert")

    written = template.write(tmp_path)

    assert written == tmp_path / "convert.toml"
    assert stat.S_IMODE(written.stat().st_mode) == 0o600
    parsed = core_config.load_toml(written)
    assert set(parsed) == {"paths", "execution", "ai", "logging"}
    assert parsed["ai"]["max_input_chars"] == 30000


def test_template_write_respects_overwrite(tmp_path):
    template = config_templates.get_template("convert")
    template.write(tmp_path)

    with pytest.raises(config_templates.ConfigTemplateError):
        template.write(tmp_path)

    (tmp_path / "convert.toml").write_text("# edited\n", encoding="utf-8")
    template.write(tmp_path, overwrite=True)
    assert "[execution]" in (tmp_path / "convert.toml").read_text("utf-8")


def test_unknown_template():
    with pytest.raises(config_templates.ConfigTemplateError):
        config_templates.get_template("documents")
    assert [t.name for t in config_templates.iter_templates()] == ["convert"]
