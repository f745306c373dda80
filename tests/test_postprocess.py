"""Tests for PDF post-processing."""

from __future__ import annotations

import subprocess
import typing as typ
from pathlib import Path
from types import SimpleNamespace

import pytest
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from pressroom.errors import PostProcessError
from pressroom.postprocess import PostProcessor, metadata_values, pdf_date

PdfFactory = typ.Callable[..., bytes]

DC = "http://purl.org/dc/terms/"


def _outline_titles(outline: list[typ.Any]) -> list[typ.Any]:
    """Flatten pypdf's outline into titles, nesting children as lists."""
    result: list[typ.Any] = []
    for item in outline:
        if isinstance(item, list):
            result.append(_outline_titles(item))
        else:
            result.append(item.title)
    return result


def test_metadata_values_skips_blank_items() -> None:
    metadata = {f"{DC}creator": [{"v": " Ada "}, {"v": ""}, {"x": "?"}, {"v": "Grace"}]}

    assert metadata_values(metadata, f"{DC}creator") == ["Ada", "Grace"]
    assert metadata_values(metadata, f"{DC}title") == []


def test_pdf_date_normalizes_to_utc() -> None:
    assert pdf_date("2024-05-01T12:30:00+02:00") == "D:20240501103000+00'00'"
    assert pdf_date("2024-05-01") == "D:20240501000000+00'00'"
    assert pdf_date("yesterday") is None


def test_load_rejects_non_pdf_bytes() -> None:
    with pytest.raises(PostProcessError, match="could not be read"):
        PostProcessor.load(b"")


def test_metadata_is_written_to_info_and_catalog(
    tmp_path: Path, pdf_bytes: PdfFactory
) -> None:
    processor = PostProcessor.load(pdf_bytes())
    processor.apply_metadata(
        {
            f"{DC}title": [{"v": "Field Notes"}],
            f"{DC}creator": [{"v": "Ada"}, {"v": "Grace"}],
            f"{DC}description": [{"v": "Observations"}],
            f"{DC}subject": [{"v": "birds"}, {"v": "weather"}],
            f"{DC}language": [{"v": "en-GB"}],
            f"{DC}created": [{"v": "2024-05-01T09:00:00Z"}],
            f"{DC}date": [{"v": "not a date"}],
        }
    )
    output = processor.save(tmp_path / "out" / "book.pdf")

    reader = PdfReader(output)
    info = reader.metadata
    assert info is not None
    assert info.title == "Field Notes"
    assert info.author == "Ada; Grace"
    assert info.subject == "Observations"
    assert info["/Keywords"] == "birds, weather"
    assert info["/Creator"].startswith("pressroom ")
    assert info["/CreationDate"] == "D:20240501090000+00'00'"
    assert reader.trailer["/Root"]["/Lang"] == "en-GB"


def test_toc_becomes_nested_outline(tmp_path: Path, pdf_bytes: PdfFactory) -> None:
    pdf = pdf_bytes(pages=3, destinations={"part-1": 0, "ch-1": 1, "ch-2": 2})
    processor = PostProcessor.load(pdf)
    processor.apply_toc(
        [
            {
                "id": "part-1",
                "href": "a.html#part-1",
                "title": "Part One",
                "children": [
                    {"id": "ch-1", "href": "a.html#ch-1", "title": "Chapter 1", "children": []},
                    {"id": "ch-2", "href": "a.html#ch-2", "title": "Chapter 2", "children": []},
                ],
            }
        ]
    )
    output = processor.save(tmp_path / "book.pdf")

    reader = PdfReader(output)
    assert _outline_titles(reader.outline) == ["Part One", ["Chapter 1", "Chapter 2"]]
    chapter_two = reader.outline[1][1]
    assert reader.get_destination_page_number(chapter_two) == 2


def test_unresolved_toc_items_lift_their_children(
    tmp_path: Path, pdf_bytes: PdfFactory
) -> None:
    pdf = pdf_bytes(pages=2, destinations={"ch-1": 0, "ch-2": 1})
    processor = PostProcessor.load(pdf)
    processor.apply_toc(
        [
            {
                "id": "missing",
                "title": "Unanchored Part",
                "children": [
                    {"id": "ch-1", "title": "Chapter 1", "children": []},
                    {"id": "ch-2", "title": "Chapter 2", "children": []},
                ],
            }
        ]
    )
    output = processor.save(tmp_path / "book.pdf")

    assert _outline_titles(PdfReader(output).outline) == ["Chapter 1", "Chapter 2"]


def test_empty_toc_adds_no_outline(tmp_path: Path, pdf_bytes: PdfFactory) -> None:
    processor = PostProcessor.load(pdf_bytes(pages=1))
    processor.apply_toc([])
    output = processor.save(tmp_path / "book.pdf")

    assert PdfReader(output).outline == []


def test_press_ready_requires_ghostscript(
    tmp_path: Path, pdf_bytes: PdfFactory, mocker: typ.Any
) -> None:
    mocker.patch("pressroom.postprocess.shutil.which", return_value=None)
    processor = PostProcessor.load(pdf_bytes(pages=1))

    with pytest.raises(PostProcessError, match="Ghostscript"):
        processor.save(tmp_path / "book.pdf", press_ready=True)

    assert not (tmp_path / "book.pdf").exists()


def test_press_ready_rewrites_through_ghostscript(
    tmp_path: Path, pdf_bytes: PdfFactory, mocker: typ.Any
) -> None:
    mocker.patch("pressroom.postprocess.shutil.which", return_value="/usr/bin/gs")
    seen: dict[str, typ.Any] = {}

    def fake_run(cmd: list[str], **kwargs: typ.Any) -> SimpleNamespace:
        seen["cmd"] = cmd
        seen["input_exists"] = Path(cmd[-1]).exists()
        output = Path(cmd[-2].removeprefix("-sOutputFile="))
        output.write_bytes(b"%PDF-1.4 press ready")
        return SimpleNamespace(returncode=0, stdout="", stderr="")

    mocker.patch("pressroom.postprocess.subprocess.run", side_effect=fake_run)
    target = tmp_path / "book.pdf"

    PostProcessor.load(pdf_bytes(pages=1)).save(target, press_ready=True)

    cmd = seen["cmd"]
    assert cmd[0] == "/usr/bin/gs"
    assert "-dPDFX" in cmd
    assert "-sColorConversionStrategy=CMYK" in cmd
    assert cmd[-2].startswith(f"-sOutputFile={tmp_path}"), "gs writes beside the target"
    assert seen["input_exists"], "intermediate PDF must exist while gs runs"
    assert target.read_bytes() == b"%PDF-1.4 press ready"
    assert [entry.name for entry in tmp_path.iterdir()] == ["book.pdf"], (
        "intermediate files are removed afterwards"
    )


def test_ghostscript_failure_is_reported(
    tmp_path: Path, pdf_bytes: PdfFactory, mocker: typ.Any
) -> None:
    mocker.patch("pressroom.postprocess.shutil.which", return_value="/usr/bin/gs")
    mocker.patch(
        "pressroom.postprocess.subprocess.run",
        side_effect=subprocess.CalledProcessError(1, ["gs"], stderr="bad icc"),
    )

    with pytest.raises(PostProcessError, match="bad icc"):
        PostProcessor.load(pdf_bytes(pages=1)).save(tmp_path / "x.pdf", press_ready=True)

    assert list(tmp_path.iterdir()) == []


def test_failed_write_keeps_previous_output_intact(
    tmp_path: Path, pdf_bytes: PdfFactory, mocker: typ.Any
) -> None:
    target = tmp_path / "book.pdf"
    target.write_bytes(b"previous build")
    processor = PostProcessor.load(pdf_bytes(pages=1))

    def broken_write(stream: typ.BinaryIO) -> None:
        stream.write(b"%PDF-1.7 partial")
        msg = "cannot serialize object"
        raise PyPdfError(msg)

    mocker.patch.object(processor.writer, "write", side_effect=broken_write)

    with pytest.raises(PostProcessError, match="serialize"):
        processor.save(target)

    assert target.read_bytes() == b"previous build"
    assert [entry.name for entry in tmp_path.iterdir()] == ["book.pdf"]
