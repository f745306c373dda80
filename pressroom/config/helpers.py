"""Utility helpers shared by the pressroom configuration loader."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from pathlib import Path

from pressroom._constants import DEFAULT_OUT_FILE
from pressroom.errors import ConfigError

from .models import Entry

_T = typ.TypeVar("_T")


@typ.overload
def pick(*candidates: _T | None, default: _T) -> _T: ...


@typ.overload
def pick(*candidates: _T | None, default: None = None) -> _T | None: ...


def pick(*candidates: _T | None, default: _T | None = None) -> _T | None:
    """Return the first candidate that is not ``None``, else ``default``.

    Candidates are passed in precedence order (CLI flag, config file,
    package metadata), so an explicit ``False`` or ``0`` still wins over
    lower-precedence sources.

    Examples
    --------
    >>> pick(None, "config", "package", default="fallback")
    'config'
    >>> pick(False, True, default=True)
    False
    >>> pick(None, None, default=3000)
    3000
    """
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return default


def ctx_path(context: Path, location: str | Path | None) -> Path | None:
    """Resolve ``location`` against ``context``; ``None`` passes through."""
    if location is None or location == "":
        return None
    return (context / Path(location)).resolve()


def resolve_output_file(path: Path) -> Path:
    """Redirect an existing directory to ``<dir>/output.pdf``."""
    if path.is_dir():
        return path / DEFAULT_OUT_FILE
    return path


def normalize_entry(value: object) -> Entry:
    """Turn an authored entry into an :class:`Entry`.

    Bare strings become ``Entry(path=value)`` with no other field set;
    :class:`Entry` instances pass through unchanged; mappings must provide a
    ``path`` and may provide ``title`` and ``theme``.
    """
    match value:
        case Entry():
            return value
        case str() as path:
            return Entry(path=path)
        case cabc.Mapping():
            path = value.get("path")
            if not isinstance(path, str) or not path:
                msg = f"Entry {dict(value)!r} is missing a 'path'."
                raise ConfigError(msg)
            return Entry(
                path=path,
                title=_optional_str(value.get("title")),
                theme=_optional_str(value.get("theme")),
            )
        case _:
            msg = f"Unsupported entry {value!r}; expected a path or a mapping."
            raise ConfigError(msg)


def normalize_entries(value: object) -> list[Entry]:
    """Normalize a single entry or a list of entries, preserving order."""
    if value is None:
        return []
    if isinstance(value, list):
        return [normalize_entry(item) for item in value]
    return [normalize_entry(value)]


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_bool(key: str, value: object | None) -> bool | None:
    """Return ``value`` when it is a boolean; reject anything else."""
    if value is None or isinstance(value, bool):
        return value
    msg = f"Config key '{key}' must be true or false, got {value!r}."
    raise ConfigError(msg)


def _optional_int(key: str, value: object | None) -> int | None:
    """Return ``value`` when it is a non-negative integer."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        msg = f"Config key '{key}' must be a non-negative integer, got {value!r}."
        raise ConfigError(msg)
    return value


def _toc_value(value: object | None) -> bool | str | None:
    """Validate the ``toc`` key, which is a boolean or a document path."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip():
        return value.strip()
    msg = f"Config key 'toc' must be a boolean or a path, got {value!r}."
    raise ConfigError(msg)


__all__ = [
    "_optional_bool",
    "_optional_int",
    "_optional_str",
    "_toc_value",
    "ctx_path",
    "normalize_entries",
    "normalize_entry",
    "pick",
    "resolve_output_file",
]
