"""Typed dataclasses describing pressroom build configuration structures."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path  # noqa: TC003 - used for runtime type metadata

from pressroom._constants import ARTIFACTS_DIRNAME

LoadMode = typ.Literal["book", "document"]
LOAD_MODES: tuple[str, ...] = ("book", "document")


@dc.dataclass(slots=True)
class BuildFlags:
    """Command-line surface of ``pressroom build``.

    Every field defaults to ``None`` so the resolver can tell an omitted flag
    apart from one explicitly set to a falsy value.
    """

    input: str | None = None
    config_path: Path | None = None
    out_file: Path | None = None
    root_dir: Path | None = None
    theme: str | None = None
    size: str | None = None
    title: str | None = None
    author: str | None = None
    language: str | None = None
    press_ready: bool | None = None
    verbose: bool | None = None
    timeout: int | None = None
    load_mode: str | None = None
    sandbox: bool | None = None
    executable_chromium: str | None = None


@dc.dataclass(slots=True)
class Entry:
    """One source document as authored by the user, in reading order."""

    path: str
    title: str | None = None
    theme: str | None = None


@dc.dataclass(slots=True)
class ConfigFile:
    """Values read from a ``pressroom.yaml`` file.

    Attributes
    ----------
    path : Path
        Location of the file that was parsed.
    base_dir : Path
        Directory relative paths inside the file resolve against.
    entries : list[Entry]
        Normalized ``entry`` values, in the order they were written.
    """

    path: Path
    base_dir: Path
    entries: list[Entry] = dc.field(default_factory=list)
    title: str | None = None
    author: str | None = None
    language: str | None = None
    theme: str | None = None
    out_dir: str | None = None
    out_file: str | None = None
    entry_context: str | None = None
    toc: bool | str | None = None
    size: str | None = None
    press_ready: bool | None = None
    timeout: int | None = None
    load_mode: str | None = None
    sandbox: bool | None = None
    executable_chromium: str | None = None


@dc.dataclass(slots=True, frozen=True)
class PackageMetadata:
    """Name and author discovered in the nearest package descriptor."""

    path: Path
    name: str | None = None
    author: str | None = None


@dc.dataclass(slots=True, frozen=True)
class EffectiveConfig:
    """Fully resolved build settings shared by every pipeline stage.

    Attributes
    ----------
    out_dir : Path
        Staging directory; cleared and recreated on every build.
    out_file : Path
        Final PDF path (an existing directory is already redirected to
        ``<dir>/output.pdf``).
    context_dir : Path
        Directory entry paths are resolved against.
    toc : bool or Path
        ``True`` to synthesize a table of contents, ``False`` to skip it, or
        the path of a user-supplied TOC document.
    timeout : int
        Pagination budget in milliseconds.
    theme : str or None
        Root theme reference, resolved against ``theme_base_dir``.
    """

    out_dir: Path
    out_file: Path
    context_dir: Path
    theme_base_dir: Path
    title: str | None = None
    author: str | None = None
    language: str = "en"
    theme: str | None = None
    toc: bool | Path = True
    size: str | None = None
    press_ready: bool = False
    verbose: bool = False
    timeout: int = 3000
    load_mode: LoadMode = "book"
    sandbox: bool = True
    executable_chromium: str | None = None

    @property
    def artifacts_dir(self) -> Path:
        """Return the directory staged entries are written below."""
        return self.out_dir / ARTIFACTS_DIRNAME


__all__ = [
    "LOAD_MODES",
    "BuildFlags",
    "ConfigFile",
    "EffectiveConfig",
    "Entry",
    "LoadMode",
    "PackageMetadata",
]
