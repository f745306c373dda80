"""Page-size parsing and broker navigation URLs.

The broker page reads everything it needs from its query string: where the
publication lives, how to load it, and which page size to impose.

Examples
--------
>>> parse_page_size("210mm,297mm")
PageSize(format=None, width='210mm', height='297mm')
>>> parse_page_size("A4")
PageSize(format='A4', width=None, height=None)
>>> build_navigation_url(
...     source_port=8001,
...     source_index="manifest.json",
...     broker_port=8002,
...     load_mode="book",
...     page_size=PageSize(format="A4"),
... )
'http://127.0.0.1:8002/index.html?render=http%3A%2F%2F127.0.0.1%3A8001%2Fmanifest.json&loadMode=book&format=A4'
"""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path
from urllib.parse import quote, urlencode

from pressroom._constants import DEFAULT_PAGE_FORMAT
from pressroom.errors import SizeParseError

from .servers import LOOPBACK_HOST

BROKER_DIR = Path(__file__).resolve().parent / "broker"
BROKER_INDEX = "index.html"


@dc.dataclass(slots=True, frozen=True)
class PageSize:
    """Either a named page format or an explicit width/height pair."""

    format: str | None = None
    width: str | None = None
    height: str | None = None

    def as_query(self) -> dict[str, str]:
        """Return the query parameters describing this size."""
        if self.width and self.height:
            return {"width": self.width, "height": self.height}
        return {"format": self.format or DEFAULT_PAGE_FORMAT}


def parse_page_size(size: str | int | None) -> PageSize:
    """Parse a ``"width,height"`` pair or a format keyword such as ``"A4"``.

    Raises
    ------
    SizeParseError
        If the value has more than two comma-separated components, or a
        two-component value has an empty side.
    """
    text = "" if size is None else str(size).strip()
    parts = [part.strip() for part in text.split(",")] if text else []
    if len(parts) > 2:
        msg = f"Cannot parse size: {size}"
        raise SizeParseError(msg)
    if len(parts) == 2:
        width, height = parts
        if not width or not height:
            msg = f"Cannot parse size: {size}"
            raise SizeParseError(msg)
        return PageSize(width=width, height=height)
    return PageSize(format=(parts[0] if parts else "") or DEFAULT_PAGE_FORMAT)


def build_navigation_url(
    *,
    source_port: int,
    source_index: str,
    broker_port: int,
    load_mode: str,
    page_size: PageSize | None = None,
    host: str = LOOPBACK_HOST,
) -> str:
    """Return the broker URL that makes the viewer render ``source_index``."""
    source_url = f"http://{host}:{source_port}/{quote(source_index.lstrip('/'))}"
    query: dict[str, str] = {"render": source_url, "loadMode": load_mode}
    if page_size is not None:
        query.update(page_size.as_query())
    return f"http://{host}:{broker_port}/{BROKER_INDEX}?{urlencode(query)}"


__all__ = [
    "BROKER_DIR",
    "BROKER_INDEX",
    "PageSize",
    "build_navigation_url",
    "parse_page_size",
]
