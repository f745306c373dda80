"""Resolve authored entries into staged document descriptions.

Each :class:`~pressroom.config.Entry` is located relative to the context
directory, mapped to a unique target path below the staging artifacts
directory, and given a title and theme. Titles and themes come from the
entry itself, then from the source document (front matter, first heading,
``<title>``, stylesheet link), then from the root configuration.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

from bs4 import BeautifulSoup

from pressroom._constants import HTML_SUFFIX, MARKDOWN_SUFFIX
from pressroom.errors import ConfigError

from .markdown_parser import parse_document
from .themes import ThemeRecord, ThemeSet, resolve_theme

if typ.TYPE_CHECKING:
    from .config import EffectiveConfig, Entry

logger = logging.getLogger(__name__)

DocumentType = typ.Literal["markdown", "html"]
HTML_SUFFIXES = (HTML_SUFFIX, ".htm", ".xhtml")


@dc.dataclass(slots=True, frozen=True)
class ResolvedEntry:
    """An entry with concrete source and target locations.

    Attributes
    ----------
    document_type : str
        ``"html"`` entries are copied verbatim; ``"markdown"`` entries are
        rendered.
    target_path : Path
        Staged location below ``<out_dir>/artifacts``; Markdown sources get
        an ``.html`` extension.
    title : str or None
        Resolved title; ``None`` when no source provided one.
    theme : ThemeRecord or None
        Active theme record for the entry.
    """

    document_type: DocumentType
    source_path: Path
    source_dir: Path
    target_path: Path
    target_dir: Path
    title: str | None = None
    theme: ThemeRecord | None = None


@dc.dataclass(slots=True)
class EntryBundle:
    """Resolved entries in reading order together with the active themes."""

    entries: list[ResolvedEntry]
    themes: ThemeSet


def resolve_entries(config: EffectiveConfig, entries: list[Entry]) -> EntryBundle:
    """Resolve ``entries`` against ``config``.

    Parameters
    ----------
    config : EffectiveConfig
        Effective build configuration.
    entries : list[Entry]
        Normalized entries in reading order.

    Returns
    -------
    EntryBundle
        Resolved entries (same order as ``entries``) and the deduplicated
        theme set, root theme first.

    Raises
    ------
    ConfigError
        If an entry cannot be found or read, lies outside the context
        directory, or maps to the same target path as an earlier entry.
    ThemeResolutionError
        If any theme reference cannot be resolved.
    """
    themes = ThemeSet()
    root_theme = themes.add(
        resolve_theme(config.theme, base_dir=config.theme_base_dir)
    )
    context_dir = config.context_dir.resolve()
    resolved: list[ResolvedEntry] = []
    targets: dict[Path, Path] = {}

    for entry in entries:
        source_path = (context_dir / entry.path).resolve()
        if not source_path.is_file():
            msg = f"Entry '{entry.path}' not found in {context_dir}."
            raise ConfigError(msg)
        try:
            relative = source_path.relative_to(context_dir)
        except ValueError as exc:
            msg = f"Entry '{entry.path}' lies outside the context directory {context_dir}."
            raise ConfigError(msg) from exc

        document_type: DocumentType = (
            "html" if source_path.suffix.lower() in HTML_SUFFIXES else "markdown"
        )
        if source_path.suffix.lower() == MARKDOWN_SUFFIX:
            relative = relative.with_suffix(HTML_SUFFIX)
        target_path = config.artifacts_dir / relative
        if target_path in targets:
            msg = (
                f"Entries '{targets[target_path]}' and '{source_path}' "
                f"both stage to '{target_path}'."
            )
            raise ConfigError(msg)
        targets[target_path] = source_path

        discovered_title, discovered_theme = _discover_metadata(
            document_type, source_path
        )
        theme = (
            resolve_theme(entry.theme, base_dir=context_dir)
            or resolve_theme(discovered_theme, base_dir=source_path.parent)
            or root_theme
        )
        resolved.append(
            ResolvedEntry(
                document_type=document_type,
                source_path=source_path,
                source_dir=source_path.parent,
                target_path=target_path,
                target_dir=target_path.parent,
                title=entry.title or discovered_title or config.title,
                theme=themes.add(theme),
            )
        )

    logger.debug("Resolved entries: %s", resolved)
    logger.debug("Active themes: %s", list(themes))
    return EntryBundle(entries=resolved, themes=themes)


def _discover_metadata(
    document_type: DocumentType, source_path: Path
) -> tuple[str | None, str | None]:
    """Return the title and theme reference declared inside a source file.

    HTML is handed to BeautifulSoup as bytes so a declared ``<meta charset>``
    is honoured. Markdown must be UTF-8.
    """
    try:
        if document_type == "markdown":
            document = parse_document(source_path.read_text(encoding="utf-8"))
            return document.title, document.theme
        soup = BeautifulSoup(source_path.read_bytes(), "html.parser")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Entry '{source_path}' could not be read: {exc}"
        raise ConfigError(msg) from exc

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else None
    link = soup.select_one('link[rel~="stylesheet"][href]')
    href = link.get("href") if link else None
    return title or None, href if isinstance(href, str) else None


__all__ = ["DocumentType", "EntryBundle", "ResolvedEntry", "resolve_entries"]
