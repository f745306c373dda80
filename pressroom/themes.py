"""Resolve theme references into stylesheet records.

A theme reference is either an absolute HTTP(S) URL, a path to a stylesheet
or theme package directory, or the name of a package installed under
``node_modules``. Package themes name their stylesheet in ``package.json``.

Example
-------
>>> from pathlib import Path
>>> from pressroom.themes import resolve_theme
>>> resolve_theme("https://example.com/themes/print.css", base_dir=Path("."))
ThemeRecord(kind='remote-uri', name='print.css', location='https://example.com/themes/print.css')
>>> resolve_theme(None, base_dir=Path(".")) is None
True
"""

from __future__ import annotations

import dataclasses as dc
import json
import logging
import posixpath
import re
import typing as typ
from pathlib import Path
from urllib.parse import urlsplit

from pressroom._constants import STYLESHEET_SUFFIX
from pressroom.errors import ThemeResolutionError

logger = logging.getLogger(__name__)

REMOTE_THEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
THEME_FIELD_PATHS: tuple[tuple[str, ...], ...] = (
    ("pressroom", "theme", "style"),
    ("pressroom", "theme", "stylesheet"),
    ("style",),
    ("main",),
)

ThemeKind = typ.Literal["local-path", "remote-uri"]


@dc.dataclass(slots=True, frozen=True)
class ThemeRecord:
    """A concrete stylesheet applied to one or more entries.

    Attributes
    ----------
    kind : str
        ``"local-path"`` for files copied into the staging directory, or
        ``"remote-uri"`` for stylesheets fetched by the browser.
    name : str
        Identity key; also the staged filename of local themes.
    location : str
        Absolute filesystem path or URL of the stylesheet.
    """

    kind: ThemeKind
    name: str
    location: str

    @property
    def is_local(self) -> bool:
        """Return ``True`` when the stylesheet is copied into staging."""
        return self.kind == "local-path"


def resolve_theme(theme_ref: object, *, base_dir: Path) -> ThemeRecord | None:
    """Turn ``theme_ref`` into a :class:`ThemeRecord`.

    Parameters
    ----------
    theme_ref : object
        Theme reference; anything other than a string means "no theme".
    base_dir : Path
        Directory relative paths and ``node_modules`` lookups start from.

    Returns
    -------
    ThemeRecord or None
        The resolved record, or ``None`` when ``theme_ref`` is not a string.

    Raises
    ------
    ThemeResolutionError
        If the package cannot be found, or its descriptor names no
        stylesheet with a ``.css`` extension.
    """
    if not isinstance(theme_ref, str) or not theme_ref.strip():
        return None
    reference = theme_ref.strip()

    if REMOTE_THEME_PATTERN.match(reference):
        name = posixpath.basename(urlsplit(reference).path.rstrip("/")) or reference
        return ThemeRecord(kind="remote-uri", name=name, location=reference)

    package_root = _resolve_package_root(reference, base_dir)
    if package_root.name.endswith(STYLESHEET_SUFFIX):
        return ThemeRecord(
            kind="local-path", name=package_root.name, location=str(package_root)
        )

    descriptor = _read_descriptor(package_root)
    stylesheet = _find_stylesheet(descriptor)
    if not stylesheet or not stylesheet.endswith(STYLESHEET_SUFFIX):
        msg = f"Theme package '{reference}' names no stylesheet: {stylesheet!r}"
        raise ThemeResolutionError(msg)

    package_name = str(descriptor.get("name") or package_root.name)
    return ThemeRecord(
        kind="local-path",
        name=f"{package_name.replace('/', '-')}{STYLESHEET_SUFFIX}",
        location=str((package_root / stylesheet).resolve()),
    )


def _resolve_package_root(reference: str, base_dir: Path) -> Path:
    """Return the directory or stylesheet a package reference points at."""
    direct = (base_dir / reference).resolve()
    if direct.exists():
        return direct
    for directory in (base_dir.resolve(), *base_dir.resolve().parents):
        candidate = directory / "node_modules" / reference
        if candidate.exists():
            return candidate.resolve()
    msg = f"Theme package not found: {reference}"
    raise ThemeResolutionError(msg)


def _read_descriptor(package_root: Path) -> dict[str, typ.Any]:
    descriptor_path = package_root / "package.json"
    try:
        payload = json.loads(descriptor_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        msg = f"Theme package '{package_root}' has no package.json."
        raise ThemeResolutionError(msg) from exc
    except (OSError, ValueError) as exc:
        msg = f"Unable to read theme descriptor '{descriptor_path}': {exc}"
        raise ThemeResolutionError(msg) from exc
    if not isinstance(payload, dict):
        msg = f"Theme descriptor '{descriptor_path}' must be a JSON object."
        raise ThemeResolutionError(msg)
    return payload


def _find_stylesheet(descriptor: typ.Mapping[str, typ.Any]) -> str | None:
    """Return the first stylesheet reference found along ``THEME_FIELD_PATHS``."""
    for field_path in THEME_FIELD_PATHS:
        value: typ.Any = descriptor
        for key in field_path:
            value = value.get(key) if isinstance(value, dict) else None
        if isinstance(value, str) and value:
            return value
    return None


class ThemeSet:
    """Ordered, name-keyed collection of the themes used by a build.

    The first record registered under a name wins. A later record with the
    same name but another location is dropped with a warning, so two
    different files are never staged under one filename.
    """

    def __init__(self) -> None:
        self._records: dict[str, ThemeRecord] = {}

    def add(self, record: ThemeRecord | None) -> ThemeRecord | None:
        """Register ``record`` and return the record now active for its name."""
        if record is None:
            return None
        existing = self._records.get(record.name)
        if existing is None:
            self._records[record.name] = record
            return record
        if existing.location != record.location:
            logger.warning(
                "Theme '%s' from %s conflicts with %s; keeping the first.",
                record.name,
                record.location,
                existing.location,
            )
        return existing

    def __iter__(self) -> typ.Iterator[ThemeRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def first(self) -> ThemeRecord | None:
        """Return the earliest registered theme, if any."""
        return next(iter(self._records.values()), None)


__all__ = [
    "REMOTE_THEME_PATTERN",
    "ThemeKind",
    "ThemeRecord",
    "ThemeSet",
    "resolve_theme",
]
