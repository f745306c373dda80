"""Finalize the captured PDF: metadata, outline, and optional press-ready pass.

The browser's print output carries neither document metadata nor bookmarks.
:class:`PostProcessor` copies the engine-reported metadata into the document
information dictionary and catalog, turns the engine TOC into a nested
outline through the PDF's named destinations, and writes the result. When a
press-ready file is requested the PDF is rewritten by Ghostscript as PDF/X
with CMYK colour.

Example
-------
>>> processor = PostProcessor.load(result.pdf)  # doctest: +SKIP
>>> processor.apply_metadata(result.metadata)  # doctest: +SKIP
>>> processor.apply_toc(result.toc)  # doctest: +SKIP
>>> processor.save(Path("output.pdf"))  # doctest: +SKIP
"""

from __future__ import annotations

import datetime as dt
import io
import logging
import os
import shutil
import subprocess
import tempfile
import typing as typ
from pathlib import Path
from urllib.parse import quote

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError, PyPdfError
from pypdf.generic import NameObject, TextStringObject

from pressroom._constants import VERSION
from pressroom.errors import PostProcessError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pypdf.generic import IndirectObject

logger = logging.getLogger(__name__)

DC_TERMS = "http://purl.org/dc/terms/"
TITLE_TERM = f"{DC_TERMS}title"
CREATOR_TERM = f"{DC_TERMS}creator"
DESCRIPTION_TERM = f"{DC_TERMS}description"
SUBJECT_TERM = f"{DC_TERMS}subject"
LANGUAGE_TERM = f"{DC_TERMS}language"
CREATED_TERM = f"{DC_TERMS}created"
DATE_TERM = f"{DC_TERMS}date"

GHOSTSCRIPT = "gs"
PRESS_READY_ARGS = (
    "-dPDFX",
    "-dBATCH",
    "-dNOPAUSE",
    "-dSAFER",
    "-dQUIET",
    "-sDEVICE=pdfwrite",
    "-sColorConversionStrategy=CMYK",
    "-sProcessColorModel=DeviceCMYK",
    "-dHaveTransparency=false",
)


def metadata_values(metadata: cabc.Mapping[str, typ.Any], term: str) -> list[str]:
    """Return the non-empty string values recorded for ``term``."""
    items = metadata.get(term) or []
    values = []
    for item in items:
        value = item.get("v") if isinstance(item, dict) else item
        if isinstance(value, str) and value.strip():
            values.append(value.strip())
    return values


def pdf_date(value: str) -> str | None:
    """Convert an ISO 8601 string to a PDF date string, or ``None``.

    Examples
    --------
    >>> pdf_date("2024-05-01T12:30:00Z")
    "D:20240501123000+00'00'"
    >>> pdf_date("not a date") is None
    True
    """
    try:
        parsed = dt.datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.UTC)
    parsed = parsed.astimezone(dt.UTC)
    return parsed.strftime("D:%Y%m%d%H%M%S+00'00'")


class PostProcessor:
    """Mutate a captured PDF and write it to its final location."""

    def __init__(self, reader: PdfReader) -> None:
        self.reader = reader
        self.writer = PdfWriter(clone_from=reader)

    @classmethod
    def load(cls, pdf: bytes) -> PostProcessor:
        """Parse ``pdf`` into a new post-processor.

        Raises
        ------
        PostProcessError
            If the bytes are not a readable PDF.
        """
        try:
            reader = PdfReader(io.BytesIO(pdf))
        except PdfReadError as exc:
            msg = f"Captured PDF could not be read: {exc}"
            raise PostProcessError(msg) from exc
        return cls(reader)

    def apply_metadata(self, metadata: cabc.Mapping[str, typ.Any]) -> None:
        """Write document information and the catalog ``/Lang`` entry."""
        info: dict[str, str] = {"/Creator": f"pressroom {VERSION}"}
        if titles := metadata_values(metadata, TITLE_TERM):
            info["/Title"] = titles[0]
        if creators := metadata_values(metadata, CREATOR_TERM):
            info["/Author"] = "; ".join(creators)
        if descriptions := metadata_values(metadata, DESCRIPTION_TERM):
            info["/Subject"] = descriptions[0]
        if subjects := metadata_values(metadata, SUBJECT_TERM):
            info["/Keywords"] = ", ".join(subjects)
        for term, key in ((CREATED_TERM, "/CreationDate"), (DATE_TERM, "/ModDate")):
            for value in metadata_values(metadata, term)[:1]:
                if (converted := pdf_date(value)) is None:
                    logger.warning("Ignoring unparseable date %r for %s", value, key)
                    continue
                info[key] = converted
        self.writer.add_metadata(info)

        if languages := metadata_values(metadata, LANGUAGE_TERM):
            self.writer.root_object[NameObject("/Lang")] = TextStringObject(
                languages[0]
            )

    def apply_toc(self, items: cabc.Sequence[cabc.Mapping[str, typ.Any]]) -> None:
        """Add a nested outline for ``items``.

        Items whose ``id`` matches no named destination are skipped; their
        children attach to the nearest resolved ancestor.
        """
        if not items:
            return
        destinations = self._destination_pages()
        self._add_outline_items(items, None, destinations)

    def _destination_pages(self) -> dict[str, int]:
        pages: dict[str, int] = {}
        for name, destination in self.reader.named_destinations.items():
            page_number = self.reader.get_destination_page_number(destination)
            if page_number is not None and page_number >= 0:
                pages[str(name)] = page_number
        return pages

    def _add_outline_items(
        self,
        items: cabc.Sequence[cabc.Mapping[str, typ.Any]],
        parent: IndirectObject | None,
        destinations: dict[str, int],
    ) -> None:
        for item in items:
            item_id = str(item.get("id") or "")
            page_number = destinations.get(item_id)
            if page_number is None:
                page_number = destinations.get(quote(item_id, safe=""))
            node = parent
            if page_number is None:
                logger.debug("No destination for TOC item %r", item_id)
            else:
                title = str(item.get("title") or "").strip() or item_id
                node = self.writer.add_outline_item(title, page_number, parent=parent)
            self._add_outline_items(item.get("children") or [], node, destinations)

    def save(self, path: Path, *, press_ready: bool = False) -> Path:
        """Write the PDF to ``path``, through Ghostscript when ``press_ready``.

        The file is assembled beside ``path`` and moved into place once
        complete; a failed save leaves no file at ``path``.

        Raises
        ------
        PostProcessError
            If the file cannot be written, or Ghostscript is missing or fails.
        """
        ghostscript = _find_ghostscript() if press_ready else None
        scratch: list[Path] = []
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            captured = _scratch_file(path, scratch)
            with captured.open("wb") as handle:
                self.writer.write(handle)
            final = captured
            if ghostscript is not None:
                final = _scratch_file(path, scratch)
                _run_ghostscript(ghostscript, source=captured, target=final)
            final.replace(path)
        except PyPdfError as exc:
            msg = f"Unable to serialize the PDF: {exc}"
            raise PostProcessError(msg) from exc
        except OSError as exc:
            msg = f"Unable to write '{path}': {exc}"
            raise PostProcessError(msg) from exc
        finally:
            for leftover in scratch:
                leftover.unlink(missing_ok=True)
        return path


def _find_ghostscript() -> str:
    ghostscript = shutil.which(GHOSTSCRIPT)
    if ghostscript is None:
        msg = "Ghostscript ('gs') is required for --press-ready but was not found."
        raise PostProcessError(msg)
    return ghostscript


def _scratch_file(path: Path, scratch: list[Path]) -> Path:
    """Create an empty temporary file next to ``path`` and track it."""
    fd, name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.stem}-", suffix=path.suffix or ".pdf"
    )
    os.close(fd)
    scratch.append(Path(name))
    return scratch[-1]


def _run_ghostscript(ghostscript: str, *, source: Path, target: Path) -> None:
    try:
        subprocess.run(  # noqa: S603 - arguments are fixed, not shell-parsed
            [ghostscript, *PRESS_READY_ARGS, f"-sOutputFile={target}", str(source)],
            check=True,
            capture_output=True,
            text=True,
        )
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or exc.stdout or "").strip()
        msg = f"Ghostscript failed with exit code {exc.returncode}: {detail}"
        raise PostProcessError(msg) from exc


__all__ = ["PostProcessor", "metadata_values", "pdf_date"]
