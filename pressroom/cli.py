"""Cyclopts CLI entrypoint for building PDFs from Markdown and HTML sources.

The ``pressroom`` console script stages the given entries as a web
publication, paginates it in headless Chromium, and writes a PDF with
metadata and bookmarks. Every option can also be supplied through a
``PRESSROOM_``-prefixed environment variable.

Examples
--------
Build a single Markdown file at A5:

>>> from pressroom.cli import app
>>> app.run(["build", "manuscript.md", "--size", "A5"])  # doctest: +SKIP

Build every entry listed in ``pressroom.yaml``:

>>> from pressroom.cli import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .build import build
from .config import BuildFlags
from .errors import PressroomError
from .log import configure_logging

logger = logging.getLogger("pressroom")

app = App(name="pressroom", config=cyclopts.config.Env("PRESSROOM_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


@app.command(name="build", help="Build a PDF from Markdown or HTML entries.")
def build_command(
    input: typ.Annotated[  # noqa: A002
        str | None, Parameter(help="Entry file; overrides the config entries")
    ] = None,
    /,
    *,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to pressroom.yaml")
    ] = None,
    out_file: typ.Annotated[
        Path | None, Parameter(help="Output PDF file or directory")
    ] = None,
    root_dir: typ.Annotated[
        Path | None, Parameter(help="Directory entries are resolved against")
    ] = None,
    theme: typ.Annotated[
        str | None, Parameter(help="Theme stylesheet, package path, or URL")
    ] = None,
    size: typ.Annotated[
        str | None, Parameter(help="Page size: 'A4', 'letter', or 'width,height'")
    ] = None,
    title: typ.Annotated[str | None, Parameter(help="Document title")] = None,
    author: typ.Annotated[str | None, Parameter(help="Document author")] = None,
    language: typ.Annotated[str | None, Parameter(help="Document language")] = None,
    press_ready: typ.Annotated[
        bool | None, Parameter(help="Rewrite the PDF as PDF/X with Ghostscript")
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Show debug output")] = False,
    timeout: typ.Annotated[
        int | None, Parameter(help="Pagination timeout in milliseconds")
    ] = None,
    load_mode: typ.Annotated[
        str | None, Parameter(help="Load as a 'book' or a single 'document'")
    ] = None,
    sandbox: typ.Annotated[
        bool | None, Parameter(help="Run Chromium with its sandbox")
    ] = None,
    executable_chromium: typ.Annotated[
        str | None, Parameter(help="Chromium executable to launch")
    ] = None,
) -> None:
    """Build a PDF and report where it was written.

    Parameters
    ----------
    input : str or None, optional
        Entry file. When given, the entries listed in the config file are
        ignored.
    config : Path or None, optional
        Explicit config file; a missing explicit file is an error.
    verbose : bool, optional
        Emit debug logging and browser console output.

    Other options override the matching config-file keys; see
    :class:`~pressroom.config.BuildFlags`.

    Raises
    ------
    SystemExit
        With status 1 when the build fails.
    """
    configure_logging(verbose=verbose)
    flags = BuildFlags(
        input=input,
        config_path=config,
        out_file=out_file,
        root_dir=root_dir,
        theme=theme,
        size=size,
        title=title,
        author=author,
        language=language,
        press_ready=press_ready,
        verbose=verbose,
        timeout=timeout,
        load_mode=load_mode,
        sandbox=sandbox,
        executable_chromium=executable_chromium,
    )
    try:
        output = build(flags)
    except PressroomError as exc:
        logger.error("%s", exc)  # noqa: TRY400
        sys.exit(1)
    print(f"wrote {_format_path(output)}")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``pressroom`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
