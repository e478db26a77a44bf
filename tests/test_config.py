import pytest

from kbdraft.utils.config import (
    DEFAULTS,
    debounce_seconds,
    load_config,
    resolve_required,
    resolve_theme,
    save_config,
)


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(str(tmp_path / "nope.toml")) == DEFAULTS


def test_profile_and_default_fallback(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        '[default]\nservice_url = "https://kb.example"\n\n[work]\ntheme = "dark"\ndebounce_ms = 250\n',
        encoding="utf-8",
    )
    work = load_config(str(path), "work")
    assert work["theme"] == "dark"
    assert work["debounce_ms"] == 250
    assert "service_url" not in work

    other = load_config(str(path), "missing")
    assert other["service_url"] == "https://kb.example"
    assert other["theme"] == "light"


def test_broken_toml_gives_defaults(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("this is = = not toml", encoding="utf-8")
    assert load_config(str(path)) == DEFAULTS


def test_save_then_load(tmp_path):
    path = tmp_path / "sub" / "config.toml"
    save_config(path, "default", {"service_url": "https://kb.example", "retries": 4})
    save_config(path, "default", {"theme": "dark"})
    cfg = load_config(str(path))
    assert cfg["service_url"] == "https://kb.example"
    assert cfg["retries"] == 4
    assert cfg["theme"] == "dark"


def test_resolve_required():
    assert resolve_required("token", "x", {}) == "x"
    assert resolve_required("token", None, {"token": "y"}) == "y"
    with pytest.raises(SystemExit):
        resolve_required("token", "", {"token": ""})


def test_resolve_theme():
    assert resolve_theme("dark", {"theme": "light"}) == "dark"
    assert resolve_theme(None, {"theme": "DARK"}) == "dark"
    assert resolve_theme(None, {"theme": "neon"}) == "light"
    assert resolve_theme(None, {}) == "light"


def test_debounce_seconds():
    assert debounce_seconds({}) == 0.5
    assert debounce_seconds({"debounce_ms": 250}) == 0.25
    assert debounce_seconds({"debounce_ms": "soon"}) == 0.5
