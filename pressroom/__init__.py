"""Build paginated PDF publications from Markdown and HTML sources.

The package stages a set of documents as a web publication (manifest, table
of contents, themes), renders it inside headless Chromium through a
paginating viewer, and post-processes the captured PDF.

Exports
-------
- ``app``: Cyclopts application exposing the ``build`` command.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``build``: Programmatic entry point running the whole pipeline.

Examples
--------
>>> from pressroom import build
>>> from pressroom.config import BuildFlags
>>> build(BuildFlags(input="manuscript.md"))  # doctest: +SKIP
PosixPath('/work/output.pdf')
"""

from __future__ import annotations

from ._constants import VERSION as __version__
from .build import build
from .cli import app, main

__all__ = ["__version__", "app", "build", "main"]
