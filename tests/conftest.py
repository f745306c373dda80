"""Shared fixtures for pressroom tests."""

from __future__ import annotations

import io
import logging
import typing as typ
from pathlib import Path

import pytest
from pypdf import PdfWriter

from pressroom.config import EffectiveConfig


@pytest.fixture(autouse=True)
def _reset_pressroom_logger() -> typ.Iterator[None]:
    """Undo CLI logging setup so caplog sees every record."""
    yield
    logger = logging.getLogger("pressroom")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Return an empty publication directory that is also the cwd."""
    root = tmp_path / "book"
    root.mkdir()
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def write_file() -> typ.Callable[[Path, str, str], Path]:
    """Return a helper writing UTF-8 text below a root, creating parents."""

    def _write(root: Path, relative: str, text: str) -> Path:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def effective_config(project_dir: Path) -> typ.Callable[..., EffectiveConfig]:
    """Return a factory for configs rooted at ``project_dir``."""

    def _make(**overrides: typ.Any) -> EffectiveConfig:
        values: dict[str, typ.Any] = {
            "out_dir": project_dir / ".pressroom",
            "out_file": project_dir / "output.pdf",
            "context_dir": project_dir,
            "theme_base_dir": project_dir,
            "title": "Field Notes",
            "author": "A. Writer",
        }
        values.update(overrides)
        return EffectiveConfig(**values)

    return _make


@pytest.fixture
def pdf_bytes() -> typ.Callable[..., bytes]:
    """Return a factory for small PDFs with optional named destinations."""

    def _make(pages: int = 3, destinations: dict[str, int] | None = None) -> bytes:
        writer = PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=420, height=595)
        for name, page_number in (destinations or {}).items():
            writer.add_named_destination(name, page_number)
        buffer = io.BytesIO()
        writer.write(buffer)
        return buffer.getvalue()

    return _make
