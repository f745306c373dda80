"""Common literal values used across pressroom.

These constants keep staging filenames and defaults centralized so the
stager, the orchestrator, and tests import the same values without drifting.

Examples
--------
>>> from pressroom import _constants
>>> _constants.ARTIFACTS_DIRNAME
'artifacts'
>>> _constants.DEFAULT_CONFIG_FILENAME.endswith(".yaml")
True
"""

VERSION = "0.1.0"

DEFAULT_CONFIG_FILENAME = "pressroom.yaml"
DEFAULT_OUT_DIR = ".pressroom"
DEFAULT_OUT_FILE = "output.pdf"
DEFAULT_LANGUAGE = "en"
DEFAULT_TIMEOUT_MS = 3000
DEFAULT_LOAD_MODE = "book"
DEFAULT_PAGE_FORMAT = "Letter"

ARTIFACTS_DIRNAME = "artifacts"
MANIFEST_FILENAME = "manifest.json"
TOC_FILENAME = "toc.html"
TOC_TITLE = "Table of Contents"

MARKDOWN_SUFFIX = ".md"
HTML_SUFFIX = ".html"
STYLESHEET_SUFFIX = ".css"

MANIFEST_CONTEXT = "https://readium.org/webpub-manifest/context.jsonld"
MANIFEST_TYPE = "http://schema.org/Book"
