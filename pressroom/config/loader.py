"""Merge CLI flags, ``pressroom.yaml``, and package metadata into one config."""

from __future__ import annotations

import json
import logging
import tomllib
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from pressroom._constants import (
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_LANGUAGE,
    DEFAULT_LOAD_MODE,
    DEFAULT_OUT_DIR,
    DEFAULT_OUT_FILE,
    DEFAULT_TIMEOUT_MS,
)
from pressroom.errors import ConfigError, NoEntryError

from .helpers import (
    _optional_bool,
    _optional_int,
    _optional_str,
    _toc_value,
    ctx_path,
    normalize_entries,
    normalize_entry,
    pick,
    resolve_output_file,
)
from .models import (
    LOAD_MODES,
    BuildFlags,
    ConfigFile,
    EffectiveConfig,
    Entry,
    LoadMode,
    PackageMetadata,
)

logger = logging.getLogger(__name__)

PACKAGE_DESCRIPTORS = ("package.json", "pyproject.toml")


def load_config_file(path: Path, *, explicit: bool = False) -> ConfigFile | None:
    """Load the YAML configuration describing a publication build.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML file (for example, ``pressroom.yaml``).
    explicit : bool, optional
        ``True`` when the user named the file; a missing file is then an
        error instead of meaning "no config file".

    Returns
    -------
    ConfigFile or None
        Parsed configuration, or ``None`` when an implicit default file does
        not exist.

    Raises
    ------
    ConfigError
        If an explicit file is missing, the YAML cannot be parsed, the
        top-level structure is not a mapping, or a value has the wrong type.

    Examples
    --------
    >>> from pathlib import Path
    >>> from pressroom.config import load_config_file
    >>> config = load_config_file(Path("pressroom.yaml"))  # doctest: +SKIP
    >>> [entry.path for entry in config.entries]  # doctest: +SKIP
    ['intro.md', 'chapter.md']
    """
    if not path.exists():
        if explicit:
            msg = f"Configuration file '{path}' not found."
            raise ConfigError(msg)
        return None

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except YAMLError as exc:
        msg = f"Unable to parse configuration file '{path}': {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise ConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    return ConfigFile(
        path=path.resolve(),
        base_dir=path.resolve().parent,
        entries=normalize_entries(raw.get("entry")),
        title=_optional_str(raw.get("title")),
        author=_optional_str(raw.get("author")),
        language=_optional_str(raw.get("language")),
        theme=_optional_str(raw.get("theme")),
        out_dir=_optional_str(raw.get("out_dir")),
        out_file=_optional_str(raw.get("out_file")),
        entry_context=_optional_str(raw.get("entry_context")),
        toc=_toc_value(raw.get("toc")),
        size=_optional_str(raw.get("size")),
        press_ready=_optional_bool("press_ready", raw.get("press_ready")),
        timeout=_optional_int("timeout", raw.get("timeout")),
        load_mode=_optional_str(raw.get("load_mode")),
        sandbox=_optional_bool("sandbox", raw.get("sandbox")),
        executable_chromium=_optional_str(raw.get("executable_chromium")),
    )


def find_package_metadata(start: Path) -> PackageMetadata | None:
    """Return name/author from the nearest ``package.json`` or ``pyproject.toml``.

    The search walks from ``start`` towards the filesystem root; within one
    directory ``package.json`` is preferred. Unreadable descriptors are
    skipped with a debug log so a broken neighbour never fails the build.
    """
    for directory in (start, *start.parents):
        for name in PACKAGE_DESCRIPTORS:
            candidate = directory / name
            if not candidate.is_file():
                continue
            try:
                if name == "package.json":
                    return _read_package_json(candidate)
                return _read_pyproject(candidate)
            except (OSError, ValueError) as exc:
                logger.debug("Ignoring unreadable %s: %s", candidate, exc)
    return None


def _read_package_json(path: Path) -> PackageMetadata:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        return PackageMetadata(path=path)
    author = payload.get("author")
    if isinstance(author, dict):
        author = author.get("name")
    return PackageMetadata(
        path=path,
        name=_optional_str(payload.get("name")),
        author=_optional_str(author),
    )


def _read_pyproject(path: Path) -> PackageMetadata:
    with path.open("rb") as handle:
        payload = tomllib.load(handle)
    project = payload.get("project") or {}
    names = [
        str(author["name"]).strip()
        for author in project.get("authors") or []
        if isinstance(author, dict) and author.get("name")
    ]
    return PackageMetadata(
        path=path,
        name=_optional_str(project.get("name")),
        author=", ".join(names) or None,
    )


def resolve_build_config(
    flags: BuildFlags, *, cwd: Path | None = None
) -> tuple[EffectiveConfig, list[Entry]]:
    """Resolve the effective configuration and the ordered entry list.

    Each field is taken from the first source that sets it: CLI flag, then
    config file, then package metadata, then the built-in default. Paths from
    the config file are relative to the file's directory; CLI paths are
    relative to ``cwd``.

    Parameters
    ----------
    flags : BuildFlags
        Parsed command-line flags; unset flags are ``None``.
    cwd : Path, optional
        Working directory; defaults to :meth:`Path.cwd`.

    Returns
    -------
    tuple[EffectiveConfig, list[Entry]]
        The immutable effective configuration and the normalized entries in
        reading order.

    Raises
    ------
    ConfigError
        If an explicitly named config file is missing or a value is invalid.
    NoEntryError
        If neither the CLI nor the config file provides any entry.
    """
    workdir = (cwd or Path.cwd()).resolve()
    explicit = flags.config_path is not None
    config_path = (
        workdir / flags.config_path
        if flags.config_path is not None
        else workdir / DEFAULT_CONFIG_FILENAME
    )
    config = load_config_file(config_path, explicit=explicit) or ConfigFile(
        path=config_path, base_dir=workdir
    )
    package = find_package_metadata(workdir) or PackageMetadata(path=workdir)
    base_dir = config.base_dir

    load_mode = pick(flags.load_mode, config.load_mode, default=DEFAULT_LOAD_MODE)
    if load_mode not in LOAD_MODES:
        msg = f"Unknown load mode '{load_mode}'; expected one of {LOAD_MODES}."
        raise ConfigError(msg)

    context_dir = pick(
        ctx_path(workdir, flags.root_dir),
        ctx_path(base_dir, config.entry_context),
        default=workdir,
    )
    toc = pick(config.toc, default=True)
    effective = EffectiveConfig(
        out_dir=pick(
            ctx_path(base_dir, config.out_dir), default=workdir / DEFAULT_OUT_DIR
        ),
        out_file=resolve_output_file(
            pick(
                ctx_path(workdir, flags.out_file),
                ctx_path(base_dir, config.out_file),
                default=workdir / DEFAULT_OUT_FILE,
            )
        ),
        context_dir=context_dir,
        theme_base_dir=workdir if flags.theme is not None else base_dir,
        title=pick(flags.title, config.title, package.name),
        author=pick(flags.author, config.author, package.author),
        language=pick(flags.language, config.language, default=DEFAULT_LANGUAGE),
        theme=pick(flags.theme, config.theme),
        toc=(context_dir / toc).resolve() if isinstance(toc, str) else toc,
        size=pick(flags.size, config.size),
        press_ready=pick(flags.press_ready, config.press_ready, default=False),
        verbose=pick(flags.verbose, default=False),
        timeout=pick(flags.timeout, config.timeout, default=DEFAULT_TIMEOUT_MS),
        load_mode=typ.cast("LoadMode", load_mode),
        sandbox=pick(flags.sandbox, config.sandbox, default=True),
        executable_chromium=pick(
            flags.executable_chromium, config.executable_chromium
        ),
    )

    entries = [normalize_entry(flags.input)] if flags.input else list(config.entries)
    if not entries:
        msg = "No entry found; pass an input file or set 'entry' in the config."
        raise NoEntryError(msg)
    return effective, entries


__all__ = ["find_package_metadata", "load_config_file", "resolve_build_config"]
