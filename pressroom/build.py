"""End-to-end build pipeline: configure, stage, render, post-process.

Examples
--------
>>> from pressroom.build import build
>>> from pressroom.config import BuildFlags
>>> build(BuildFlags(input="manuscript.md", size="A5"))  # doctest: +SKIP
PosixPath('/work/output.pdf')
"""

from __future__ import annotations

import logging
import typing as typ

from .config import resolve_build_config
from .entries import resolve_entries
from .postprocess import PostProcessor
from .render import RenderOrchestrator
from .stager import ArtifactStager

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .config import BuildFlags, EffectiveConfig
    from .render import RenderResult

    class Renderer(typ.Protocol):
        def run(self) -> RenderResult: ...


logger = logging.getLogger(__name__)


def build(
    flags: BuildFlags,
    *,
    cwd: Path | None = None,
    renderer_factory: typ.Callable[..., Renderer] = RenderOrchestrator,
) -> Path:
    """Build a PDF from ``flags`` and return the written output path.

    Parameters
    ----------
    flags : BuildFlags
        Command-line values; ``None`` fields fall back to the config file,
        package metadata, and built-in defaults.
    cwd : Path, optional
        Directory relative flags resolve against; defaults to the process
        working directory.
    renderer_factory : callable, optional
        Called as ``renderer_factory(config, source_index=...)``; the result
        must provide ``run() -> RenderResult``.

    Returns
    -------
    Path
        The final PDF. It is written only after post-processing succeeds.

    Raises
    ------
    PressroomError
        Any stage failure aborts the build. The staging directory is left in
        place for inspection.
    """
    logger.info("Configuring...")
    config, raw_entries = resolve_build_config(flags, cwd=cwd)
    _log_config(config)
    bundle = resolve_entries(config, raw_entries)

    manifest_path = ArtifactStager(config, bundle).run()
    source_index = manifest_path.relative_to(config.out_dir).as_posix()

    result = renderer_factory(config, source_index=source_index).run()

    logger.info("Processing PDF...")
    processor = PostProcessor.load(result.pdf)
    processor.apply_metadata(result.metadata)
    processor.apply_toc(result.toc)
    output = processor.save(config.out_file, press_ready=config.press_ready)

    logger.info("Done")
    return output


def _log_config(config: EffectiveConfig) -> None:
    logger.debug("Context directory: %s", config.context_dir)
    logger.debug("Staging directory: %s", config.out_dir)
    logger.debug("Output file: %s", config.out_file)
    logger.debug(
        "Page size: %s, load mode: %s, timeout: %d ms",
        config.size or "default",
        config.load_mode,
        config.timeout,
    )


__all__ = ["build"]
