from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path

import yaml

if sys.version_info >= (3, 11):
    import tomllib as toml
else:
    import tomli as toml

from .utils import BuildError, parse_int

DEFAULT_PORT = 1717
DEFAULT_COLLECTIONS = ("projects", "games")
DEFAULT_SINGLETONS = ("about", "contacts")


@dataclass(frozen=True)
class SiteConfig:
    content_dir: Path = Path("src/content")
    template_dir: Path = Path("src/templates")
    styles_dir: Path = Path("src/styles")
    assets_dir: Path = Path("src/assets")
    images_dir: Path = Path("src/images")
    output_dir: Path = Path("site")
    site_title: str = "Game Studio"
    host: str = "localhost"
    port: int = DEFAULT_PORT
    collections: tuple[str, ...] = field(default=DEFAULT_COLLECTIONS)
    singletons: tuple[str, ...] = field(default=DEFAULT_SINGLETONS)

    def with_overrides(self, **changes: object) -> "SiteConfig":
        return replace(self, **{key: value for key, value in changes.items() if value is not None})


PATH_KEYS = {
    "content": "content_dir",
    "templates": "template_dir",
    "styles": "styles_dir",
    "assets": "assets_dir",
    "images": "images_dir",
    "output": "output_dir",
}


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise BuildError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise BuildError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise BuildError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise BuildError(f"Config must be a mapping: {path}")
    return data


def config_from_mapping(data: dict, base_dir: Path | None = None) -> SiteConfig:
    """Turn a loaded config mapping into a ``SiteConfig``.

    Relative directories are resolved against ``base_dir`` (normally the
    directory holding the config file). Unknown keys are ignored.
    """
    defaults = SiteConfig()
    values: dict[str, object] = {}
    for key, attr in PATH_KEYS.items():
        raw = data.get(key)
        path = Path(str(raw)) if raw else getattr(defaults, attr)
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        values[attr] = path
    if data.get("site_title") is not None:
        values["site_title"] = str(data["site_title"])
    if data.get("host"):
        values["host"] = str(data["host"])
    values["port"] = parse_int(data.get("port"), DEFAULT_PORT)
    for key in ("collections", "singletons"):
        raw = data.get(key)
        if isinstance(raw, list):
            values[key] = tuple(str(item) for item in raw)
    return SiteConfig(**values)


def read_site_config(path: Path) -> SiteConfig:
    path = path.resolve()
    return config_from_mapping(load_config(path), path.parent)
