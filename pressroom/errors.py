"""Exception hierarchy shared by every pressroom build stage.

Each stage raises its own subclass so callers can tell configuration
problems apart from rendering failures, while ``PressroomError`` lets the CLI
report any build failure uniformly.
"""

from __future__ import annotations


class PressroomError(Exception):
    """Base class for errors that abort a build."""


class ConfigError(PressroomError, ValueError):
    """Raised when the build configuration is invalid or incomplete."""


class NoEntryError(ConfigError):
    """Raised when no entries remain after normalization."""


class ThemeResolutionError(PressroomError, ValueError):
    """Raised when a theme reference cannot be turned into a stylesheet."""


class SizeParseError(PressroomError, ValueError):
    """Raised when a page-size shorthand cannot be parsed."""


class StagingError(PressroomError, RuntimeError):
    """Raised when an entry, theme, or TOC cannot be staged."""


class BrowserProcessError(PressroomError, RuntimeError):
    """Raised when the browser cannot be launched or cannot navigate."""


class RenderTimeoutError(PressroomError, TimeoutError):
    """Raised when pagination does not complete within the timeout."""


class PostProcessError(PressroomError, RuntimeError):
    """Raised when the captured PDF cannot be finalized."""


__all__ = [
    "BrowserProcessError",
    "ConfigError",
    "NoEntryError",
    "PostProcessError",
    "PressroomError",
    "RenderTimeoutError",
    "SizeParseError",
    "StagingError",
    "ThemeResolutionError",
]
