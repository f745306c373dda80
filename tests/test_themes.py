"""Tests for theme resolution and deduplication."""

from __future__ import annotations

import json
import logging
import typing as typ
from pathlib import Path

import pytest

from pressroom.errors import ThemeResolutionError
from pressroom.themes import ThemeRecord, ThemeSet, resolve_theme

WriteFile = typ.Callable[[Path, str, str], Path]


def test_remote_theme_uses_url_basename(tmp_path: Path) -> None:
    record = resolve_theme("https://cdn.example.com/t/print.css?v=2", base_dir=tmp_path)

    assert record == ThemeRecord(
        kind="remote-uri",
        name="print.css",
        location="https://cdn.example.com/t/print.css?v=2",
    )
    assert not record.is_local


@pytest.mark.parametrize("value", [None, 7, "", "   "])
def test_non_string_or_blank_theme_means_no_theme(
    tmp_path: Path, value: object
) -> None:
    assert resolve_theme(value, base_dir=tmp_path) is None


def test_stylesheet_path_is_used_directly(
    tmp_path: Path, write_file: WriteFile
) -> None:
    sheet = write_file(tmp_path, "styles/book.css", "body { margin: 0 }")

    record = resolve_theme("styles/book.css", base_dir=tmp_path)

    assert record is not None
    assert record.kind == "local-path"
    assert record.name == "book.css"
    assert Path(record.location) == sheet.resolve()


def test_package_theme_reads_descriptor(tmp_path: Path, write_file: WriteFile) -> None:
    write_file(
        tmp_path,
        "node_modules/@press/theme-serif/package.json",
        json.dumps({"name": "@press/theme-serif", "pressroom": {"theme": {"style": "dist/theme.css"}}}),
    )
    write_file(tmp_path, "node_modules/@press/theme-serif/dist/theme.css", "")
    nested = tmp_path / "chapters"
    nested.mkdir()

    record = resolve_theme("@press/theme-serif", base_dir=nested)

    assert record is not None
    assert record.name == "@press-theme-serif.css"
    assert record.location.endswith("dist/theme.css")


def test_package_theme_falls_back_to_main_field(
    tmp_path: Path, write_file: WriteFile
) -> None:
    write_file(
        tmp_path, "themes/plain/package.json", json.dumps({"name": "plain", "main": "plain.css"})
    )

    record = resolve_theme("themes/plain", base_dir=tmp_path)

    assert record is not None
    assert record.name == "plain.css"


def test_package_without_stylesheet_is_rejected(
    tmp_path: Path, write_file: WriteFile
) -> None:
    write_file(
        tmp_path, "themes/broken/package.json", json.dumps({"name": "broken", "main": "index.js"})
    )

    with pytest.raises(ThemeResolutionError, match="names no stylesheet"):
        resolve_theme("themes/broken", base_dir=tmp_path)


def test_unknown_package_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ThemeResolutionError, match="not found"):
        resolve_theme("does-not-exist", base_dir=tmp_path)


def test_theme_set_keeps_first_record_per_name(
    caplog: pytest.LogCaptureFixture,
) -> None:
    themes = ThemeSet()
    first = ThemeRecord(kind="local-path", name="book.css", location="/a/book.css")
    clash = ThemeRecord(kind="local-path", name="book.css", location="/b/book.css")

    assert themes.add(first) is first
    with caplog.at_level(logging.WARNING, logger="pressroom.themes"):
        assert themes.add(clash) is first, "first registration must win"

    assert list(themes) == [first]
    assert "book.css" in themes
    assert "conflicts" in caplog.text


def test_theme_set_ignores_missing_record() -> None:
    themes = ThemeSet()

    assert themes.add(None) is None
    assert len(themes) == 0
    assert themes.first() is None
