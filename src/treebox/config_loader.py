"""Load TreeConfig from treebox.yaml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

from pathlib import Path

from treebox.config import TreeConfig

_KNOWN_KEYS = frozenset({
    "ignore", "tree_id", "cache_path", "concurrency", "rename_window",
    "debounce_ms", "step_ms", "rust_timeout_ms", "force_polling",
})


def load_config(root: Path | str, **overrides: object) -> TreeConfig:
    """Load TreeConfig for root, optionally merging treebox.yaml.

    Looks for treebox.yaml, treebox.yml, or treebox.toml in root. If found,
    loads and merges with overrides. Overrides take precedence; ``None``
    overrides are treated as "not given".
    """
    root = Path(root)
    file_config = _read_treebox_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    if "ignore" in merged:
        merged["ignore"] = _normalize_ignore(merged["ignore"])
    if "cache_path" in merged and not isinstance(merged["cache_path"], Path):
        merged["cache_path"] = Path(str(merged["cache_path"]))
    return TreeConfig(root=root, **merged)


def _normalize_ignore(value: object) -> tuple[str, ...]:
    """Accept a single pattern, a list, or nothing; drop empty entries."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value if v)
    return ()


def _read_treebox_config(root: Path) -> dict[str, object]:
    """Read treebox config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("treebox.yaml", "treebox.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "treebox.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    """Parse YAML config. Returns empty dict on error."""
    import yaml

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(data, dict):
        return {}
    return _flatten_treebox_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    """Parse TOML config. Returns empty dict on error."""
    import tomllib

    try:
        data = tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError):
        return {}
    return _flatten_treebox_section(data)


def _flatten_treebox_section(data: dict[str, object]) -> dict[str, object]:
    """Extract treebox.* keys into top-level config."""
    result: dict[str, object] = {}
    for k, v in data.items():
        if k != "treebox" and k in _KNOWN_KEYS:
            result[k] = v
    section = data.get("treebox")
    if isinstance(section, dict):
        for k, v in section.items():
            if k in _KNOWN_KEYS:
                result[k] = v
    return result
