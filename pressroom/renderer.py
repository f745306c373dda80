"""Render Markdown entries into standalone HTML documents.

The renderer converts the Markdown body with Python-Markdown, highlights
fenced code with Pygments, and wraps the result in the ``document.jinja``
page shell, which links the entry's theme stylesheet when one is given.
"""

from __future__ import annotations

import re
import typing as typ
from html import escape
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from .markdown_parser import parse_document

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class HtmlContentRenderer:
    """Render Markdown into themed, syntax-highlighted HTML documents."""

    def __init__(
        self,
        pygments_style: str = "default",
        *,
        language: str = "en",
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize a renderer.

        Parameters
        ----------
        pygments_style : str, optional
            Pygments style used for highlighted code blocks.
        language : str, optional
            Value of the ``lang`` attribute on rendered documents.
        templates_dir : Path, optional
            Directory containing ``document.jinja``; defaults to the package
            templates.
        """
        self.pygments_style = pygments_style
        self.language = language
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template("document.jinja")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def render_document(
        self,
        text: str,
        *,
        stylesheet: str | None = None,
        title: str | None = None,
    ) -> str:
        """Render a Markdown source (front matter included) into a full page.

        Parameters
        ----------
        text : str
            Markdown source, optionally starting with YAML front matter.
        stylesheet : str, optional
            Href of the theme stylesheet linked from the page head.
        title : str, optional
            Document title; defaults to the title found in the source.

        Returns
        -------
        str
            A complete HTML document.
        """
        document = parse_document(text)
        return self.template.render(
            language=self.language,
            title=title or document.title or "",
            stylesheet=stylesheet,
            pygments_css=self.stylesheet,
            body_html=self.markdown(document.body),
        )

    def markdown(self, text: str) -> str:
        """Render markdown into an HTML fragment."""
        normalized = self._normalize_fenced_blocks(text)
        if not normalized.strip():
            return ""
        extensions: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
            "footnotes",
            "attr_list",
            "toc",
        ]
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
        )
        html = md.convert(normalized)
        return self._annotate_codehilite(html, normalized)

    def _annotate_codehilite(self, html: str, source_markdown: str) -> str:
        """Attach language metadata to each highlighted block in converted markdown."""
        languages = [
            match.group(1) or "text"
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        ]
        if not languages:
            return html
        lang_iter = iter(languages)

        def _repl(match: re.Match[str]) -> str:
            lang = next(lang_iter, "text")
            return (
                f'<div class="codehilite" data-language="{escape(lang, quote=True)}">'
            )

        return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            label = language or ""
            return f"{fence}{label}"

        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


__all__ = ["CODE_BLOCK_PATTERN", "TEMPLATES_DIR", "HtmlContentRenderer"]
