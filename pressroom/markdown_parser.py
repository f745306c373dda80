r"""Split Markdown sources into front matter and body.

Entries may open with a YAML front-matter block delimited by ``---`` lines.
Its ``title`` and ``theme`` keys feed entry resolution; when no title is set
the first level-one heading is used instead.

Example
-------
>>> from pressroom.markdown_parser import parse_document
>>> doc = parse_document("---\ntitle: Intro\n---\n# Heading\nBody\n")
>>> doc.title
'Intro'
>>> parse_document("# Heading\nBody\n").title
'Heading'
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

FRONT_MATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)??(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)", re.DOTALL
)
H1_PATTERN = re.compile(r"^#[ \t]+(.+?)[ \t]*#*[ \t]*$", re.MULTILINE)


@dc.dataclass(slots=True)
class MarkdownDocument:
    """Markdown source with its front matter separated out.

    Attributes
    ----------
    body : str
        Markdown following the front-matter block.
    metadata : dict[str, Any]
        Parsed front-matter mapping; empty when the source has none.
    """

    body: str
    metadata: dict[str, typ.Any] = dc.field(default_factory=dict)

    @property
    def title(self) -> str | None:
        """Return the front-matter title, else the first ``#`` heading."""
        value = self.metadata.get("title")
        if isinstance(value, str) and value.strip():
            return value.strip()
        match = H1_PATTERN.search(self.body)
        return match.group(1).strip() if match else None

    @property
    def theme(self) -> str | None:
        """Return the front-matter theme reference, if any."""
        value = self.metadata.get("theme")
        return value.strip() if isinstance(value, str) and value.strip() else None


def parse_document(text: str) -> MarkdownDocument:
    """Separate an optional YAML front-matter block from ``text``.

    A block that is not valid YAML, or does not hold a mapping, is left in
    the body untouched so that a leading thematic break is not swallowed.
    An empty block is removed and yields no metadata.
    """
    match = FRONT_MATTER_PATTERN.match(text)
    if not match:
        return MarkdownDocument(body=text)
    loader = YAML(typ="safe")
    try:
        loaded = loader.load(match.group(1) or "")
    except YAMLError:
        return MarkdownDocument(body=text)
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        return MarkdownDocument(body=text)
    return MarkdownDocument(body=text[match.end() :], metadata=dict(loaded))


__all__ = ["FRONT_MATTER_PATTERN", "MarkdownDocument", "parse_document"]
