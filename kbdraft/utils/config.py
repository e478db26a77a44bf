from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict


CONFIG_DIR = Path.home() / ".config" / "kb-draft"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULTS: Dict[str, Any] = {
    "theme": "light",
    "debounce_ms": 500,
    "timeout": 15,
    "retries": 2,
}


def get_default_config_path() -> Path:
    return DEFAULT_CONFIG_PATH


def _toml_dump(data: Dict[str, Dict[str, Any]]) -> str:
    lines: list[str] = []
    for section, values in data.items():
        lines.append(f"[{section}]")
        for k, v in values.items():
            if isinstance(v, bool):
                sval = "true" if v else "false"
            elif isinstance(v, (int, float)):
                sval = str(v)
            elif v is None:
                sval = '""'
            else:
                sval = str(v).replace('"', '\\"')
                sval = f"\"{sval}\""
            lines.append(f"{k} = {sval}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def load_config(config_path: str | None, profile: str = "default") -> dict[str, Any]:
    """Profile values over DEFAULTS; a missing or unreadable file yields the defaults."""
    cfg: dict[str, Any] = dict(DEFAULTS)
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not path.exists():
        return cfg
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return cfg
    if profile in data:
        cfg.update(data.get(profile, {}))
    elif "default" in data:
        cfg.update(data.get("default", {}))
    return cfg


def save_config(config_path: str | Path, profile: str, updates: Dict[str, Any], *, replace_profile: bool = False) -> None:
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    existing: Dict[str, Dict[str, Any]] = {}
    if path.exists():
        try:
            existing = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError:
            existing = {}

    if replace_profile:
        existing[profile] = dict(updates)
    else:
        current = existing.get(profile, {})
        current.update(updates)
        existing[profile] = current

    if "default" not in existing:
        existing.setdefault("default", {})

    path.write_text(_toml_dump(existing), encoding="utf-8")


def resolve_required(key: str, value: Any, cfg: dict) -> Any:
    if value is not None and value != "":
        return value
    if key in cfg and cfg[key] not in (None, ""):
        return cfg[key]
    raise SystemExit(f"Missing required option: {key}")


def resolve_theme(theme: Any, cfg: dict) -> str:
    """Explicit --theme wins, then the profile's theme; anything else falls back to light."""
    value = theme if theme not in (None, "") else cfg.get("theme")
    value = str(value or "light").strip().lower()
    return value if value in ("light", "dark") else "light"


def debounce_seconds(cfg: dict) -> float:
    try:
        return max(0, int(cfg.get("debounce_ms", DEFAULTS["debounce_ms"]))) / 1000.0
    except (TypeError, ValueError):
        return DEFAULTS["debounce_ms"] / 1000.0
