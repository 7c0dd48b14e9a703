from __future__ import annotations

import stat

import pytest

from docshift.core import config as core_config


def test_merge_defaults_rejects_unknown_keys():
    base = {"ai": {"model": "a"}}

    with pytest.raises(core_config.ConfigFileError, match="ai.mdl"):
        core_config.merge_defaults(base, {"ai": {"mdl": "b"}})


def test_merge_defaults_requires_tables():
    base = {"ai": {"model": "a"}}

    with pytest.raises(core_config.ConfigFileError, match="Expected table"):
        core_config.merge_defaults(base, {"ai": "gpt"})


def test_merge_defaults_overrides_nested_values():
    base = {"ai": {"model": "a", "temperature": 0.2}}

    core_config.merge_defaults(base, {"ai": {"model": "b"}})

    assert base == {"ai": {"model": "b", "temperature": 0.2}}


def test_load_toml_errors(tmp_path):
    with pytest.raises(core_config.ConfigFileError, match="not found"):
        core_config.load_toml(tmp_path / "missing.toml")

    broken = tmp_path / "broken.toml"
    broken.write_text("[ai\nmodel = 1", encoding="utf-8")
    with pytest.raises(core_config.ConfigFileError, match="Failed to parse"):
        core_config.load_toml(broken)


def test_dump_toml_table_round_trips_through_loader(tmp_path):
    text = core_config.dump_toml_table(
        "credentials", {"B": 'quote " and \\ slash', "A": "plain"}
    )
    path = core_config.write_private_text(tmp_path / "c.toml", text=text)

    loaded = core_config.load_toml(path)

    assert text.splitlines()[1].startswith("A = ")
    assert loaded["credentials"]["B"] == 'quote " and \\ slash'
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_write_private_text_refuses_to_clobber(tmp_path):
    path = core_config.write_private_text(tmp_path / "x.toml", text="a = 1\n")

    with pytest.raises(core_config.ConfigFileError, match="already exists"):
        core_config.write_private_text(path, text="a = 2\n")

    core_config.write_private_text(path, text="a = 2\n", overwrite=True)
    assert path.read_text(encoding="utf-8") == "a = 2\n"
