"""Resolve build configuration for pressroom publications.

This subpackage parses an optional ``pressroom.yaml`` file, reads the nearest
package descriptor for fallback metadata, and merges both with command-line
flags into an immutable :class:`EffectiveConfig` plus the ordered list of
:class:`Entry` values to publish. The primary entry point is
:func:`resolve_build_config`.

Examples
--------
>>> from pressroom.config import BuildFlags, resolve_build_config
>>> config, entries = resolve_build_config(BuildFlags(input="intro.md"))  # doctest: +SKIP
>>> entries[0].path  # doctest: +SKIP
'intro.md'
"""

from pressroom.errors import ConfigError, NoEntryError

from .helpers import normalize_entry, pick, resolve_output_file
from .loader import find_package_metadata, load_config_file, resolve_build_config
from .models import (
    LOAD_MODES,
    BuildFlags,
    ConfigFile,
    EffectiveConfig,
    Entry,
    LoadMode,
    PackageMetadata,
)

__all__ = [
    "LOAD_MODES",
    "BuildFlags",
    "ConfigError",
    "ConfigFile",
    "EffectiveConfig",
    "Entry",
    "LoadMode",
    "NoEntryError",
    "PackageMetadata",
    "find_package_metadata",
    "load_config_file",
    "normalize_entry",
    "pick",
    "resolve_build_config",
    "resolve_output_file",
]
