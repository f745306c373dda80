"""Materialize resolved entries as a web publication on disk.

:class:`ArtifactStager` clears the staging directory, renders or copies each
entry below ``<out_dir>/artifacts``, copies local theme stylesheets into the
staging root, writes ``toc.html`` when a table of contents is requested, and
finally writes ``manifest.json``. The manifest is the entry point handed to
the render orchestrator.

Example
-------
>>> from pressroom.config import BuildFlags, resolve_build_config
>>> from pressroom.entries import resolve_entries
>>> from pressroom.stager import ArtifactStager
>>> config, raw = resolve_build_config(BuildFlags(input="intro.md"))  # doctest: +SKIP
>>> bundle = resolve_entries(config, raw)  # doctest: +SKIP
>>> ArtifactStager(config, bundle).run()  # doctest: +SKIP
PosixPath('/work/.pressroom/manifest.json')
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import os
import shutil
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from pressroom._constants import (
    MANIFEST_CONTEXT,
    MANIFEST_FILENAME,
    MANIFEST_TYPE,
    TOC_FILENAME,
    TOC_TITLE,
)
from pressroom.errors import StagingError

from .renderer import TEMPLATES_DIR, HtmlContentRenderer

if typ.TYPE_CHECKING:
    from .config import EffectiveConfig
    from .entries import EntryBundle, ResolvedEntry

logger = logging.getLogger(__name__)


def relative_href(target: Path, start: Path) -> str:
    """Return a POSIX href to ``target`` relative to the directory ``start``."""
    return Path(os.path.relpath(target, start)).as_posix()


class ArtifactStager:
    """Stage entries, themes, TOC, and manifest into the output directory."""

    def __init__(
        self,
        config: EffectiveConfig,
        bundle: EntryBundle,
        *,
        renderer: HtmlContentRenderer | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the stager.

        Parameters
        ----------
        config : EffectiveConfig
            Effective build configuration (output and context directories,
            TOC setting, manifest metadata).
        bundle : EntryBundle
            Resolved entries and the active theme set.
        renderer : HtmlContentRenderer, optional
            Markdown renderer; defaults to one using ``config.language``.
        templates_dir : Path, optional
            Directory containing ``toc.jinja``.
        """
        self.config = config
        self.bundle = bundle
        self.renderer = renderer or HtmlContentRenderer(language=config.language)
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    @property
    def manifest_path(self) -> Path:
        """Return the path ``manifest.json`` is written to."""
        return self.config.out_dir / MANIFEST_FILENAME

    @property
    def toc_path(self) -> Path:
        """Return the path ``toc.html`` is written to."""
        return self.config.out_dir / TOC_FILENAME

    def run(self) -> Path:
        """Stage the publication and return the manifest path.

        Raises
        ------
        StagingError
            If any entry, theme, or TOC document cannot be written. Staging
            stops at the first failure.
        """
        self._reset_output_dir()
        for entry in self.bundle.entries:
            self._stage_entry(entry)
        self._copy_themes()
        if self.config.toc:
            self._write_toc()
        self._write_manifest()
        return self.manifest_path

    def _reset_output_dir(self) -> None:
        out_dir = self.config.out_dir
        context_dir = self.config.context_dir.resolve()
        if out_dir.resolve() in (context_dir, *context_dir.parents):
            msg = f"Staging directory '{out_dir}' must not contain the sources."
            raise StagingError(msg)
        try:
            if out_dir.exists():
                shutil.rmtree(out_dir)
            self.config.artifacts_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Unable to prepare staging directory '{out_dir}': {exc}"
            raise StagingError(msg) from exc

    def _stage_entry(self, entry: ResolvedEntry) -> None:
        """Copy an HTML entry or render a Markdown entry to its target path."""
        try:
            entry.target_dir.mkdir(parents=True, exist_ok=True)
            if entry.document_type == "html":
                shutil.copyfile(entry.source_path, entry.target_path)
                return
            html = self.renderer.render_document(
                entry.source_path.read_text(encoding="utf-8"),
                stylesheet=self._stylesheet_href(entry),
                title=entry.title,
            )
            entry.target_path.write_text(html, encoding="utf-8")
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            msg = f"Unable to stage '{entry.source_path}': {exc}"
            raise StagingError(msg) from exc
        logger.debug("Staged %s -> %s", entry.source_path, entry.target_path)

    def _stylesheet_href(self, entry: ResolvedEntry) -> str | None:
        """Return the stylesheet href injected into a rendered entry."""
        theme = entry.theme
        if theme is None:
            return None
        if not theme.is_local:
            return theme.location
        return relative_href(self.config.out_dir / theme.name, entry.target_dir)

    def _copy_themes(self) -> None:
        """Copy local theme stylesheets into the staging root."""
        for theme in self.bundle.themes:
            if not theme.is_local:
                continue
            try:
                shutil.copyfile(theme.location, self.config.out_dir / theme.name)
            except OSError as exc:
                msg = f"Unable to copy theme '{theme.location}': {exc}"
                raise StagingError(msg) from exc

    def _write_toc(self) -> None:
        """Copy the user TOC document or synthesize one from the entries."""
        toc = self.config.toc
        try:
            if isinstance(toc, Path):
                shutil.copyfile(toc, self.toc_path)
                return
            self.toc_path.write_text(self.render_toc(), encoding="utf-8")
        except OSError as exc:
            msg = f"Unable to write table of contents: {exc}"
            raise StagingError(msg) from exc

    def render_toc(self) -> str:
        """Render the synthesized table-of-contents document."""
        items = [
            {
                "href": relative_href(entry.target_path, self.config.out_dir),
                "label": entry.title or entry.target_path.stem,
            }
            for entry in self.bundle.entries
        ]
        template = self.env.get_template("toc.jinja")
        return template.render(
            language=self.config.language, title=TOC_TITLE, items=items
        )

    def build_manifest(self, modified: dt.datetime | None = None) -> dict[str, typ.Any]:
        """Return the publication manifest as a JSON-ready mapping."""
        timestamp = modified or dt.datetime.now(dt.UTC)
        manifest: dict[str, typ.Any] = {
            "@context": MANIFEST_CONTEXT,
            "metadata": {
                "@type": MANIFEST_TYPE,
                "title": self.config.title,
                "author": self.config.author,
                "language": self.config.language,
                "modified": timestamp.isoformat().replace("+00:00", "Z"),
            },
            "links": [],
            "readingOrder": [
                {
                    "href": relative_href(entry.target_path, self.config.out_dir),
                    "type": "text/html",
                    "title": entry.title,
                }
                for entry in self.bundle.entries
            ],
        }
        if self.config.toc:
            manifest["resources"] = [
                {
                    "href": TOC_FILENAME,
                    "rel": "contents",
                    "type": "text/html",
                    "title": TOC_TITLE,
                }
            ]
        return manifest

    def _write_manifest(self) -> None:
        try:
            self.manifest_path.write_text(
                json.dumps(self.build_manifest(), indent=2), encoding="utf-8"
            )
        except OSError as exc:
            msg = f"Unable to write manifest '{self.manifest_path}': {exc}"
            raise StagingError(msg) from exc


__all__ = ["ArtifactStager", "relative_href"]
