from __future__ import annotations

import sys

SORT_LAST = sys.maxsize


class BuildError(Exception):
    """A fatal build problem: a required source file is missing or unusable."""


class TemplateError(BuildError):
    pass


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, list):
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(str(item) for item in value)
    return str(value)


def as_list(value: object) -> list[str]:
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return [str(item) for item in value if str(item).strip()]
    return [str(value)]


def warn(message: str) -> None:
    print(f"Warning: {message}", file=sys.stderr)
