"""Logging setup for the pressroom console command."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(*, verbose: bool = False) -> None:
    """Install a single stderr handler on the ``pressroom`` logger.

    Parameters
    ----------
    verbose : bool, optional
        Emit DEBUG records (resolved entries, navigation URL, browser console
        output) when ``True``; INFO and above otherwise.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger("pressroom")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.propagate = False

    logging.getLogger("playwright").setLevel(logging.WARNING)


__all__ = ["LOG_FORMAT", "configure_logging"]
