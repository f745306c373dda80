"""State carried through one render run."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

if typ.TYPE_CHECKING:
    from playwright.sync_api import Browser, Page

    from .servers import ContentServer


class RenderPhase(enum.StrEnum):
    """Phases of a render run, in the order they are reached."""

    STARTED = "started"
    SERVERS_UP = "servers-up"
    BROWSER_READY = "browser-ready"
    VIEWER_READY = "viewer-ready"
    PAGINATION_COMPLETE = "pagination-complete"
    CAPTURED = "captured"
    FAILED = "failed"


PHASE_ORDER: tuple[RenderPhase, ...] = (
    RenderPhase.STARTED,
    RenderPhase.SERVERS_UP,
    RenderPhase.BROWSER_READY,
    RenderPhase.VIEWER_READY,
    RenderPhase.PAGINATION_COMPLETE,
    RenderPhase.CAPTURED,
)


@dc.dataclass(slots=True)
class RenderSession:
    """Servers, browser, and page owned by a single orchestrator run."""

    source_server: ContentServer | None = None
    broker_server: ContentServer | None = None
    browser: Browser | None = None
    page: Page | None = None
    navigation_url: str | None = None
    phase: RenderPhase = RenderPhase.STARTED

    @property
    def source_port(self) -> int | None:
        """Return the port serving the staged publication."""
        return self.source_server.port if self.source_server else None

    @property
    def broker_port(self) -> int | None:
        """Return the port serving the broker page."""
        return self.broker_server.port if self.broker_server else None

    def advance(self, phase: RenderPhase) -> None:
        """Move to ``phase``, which must directly follow the current phase.

        Raises
        ------
        RuntimeError
            If ``phase`` skips ahead, goes backwards, or the session failed.
        """
        if self.phase is RenderPhase.FAILED or self.phase is RenderPhase.CAPTURED:
            msg = f"Render session already finished ({self.phase})."
            raise RuntimeError(msg)
        expected = PHASE_ORDER[PHASE_ORDER.index(self.phase) + 1]
        if phase is not expected:
            msg = f"Cannot move from {self.phase} to {phase}; expected {expected}."
            raise RuntimeError(msg)
        self.phase = phase

    def fail(self) -> None:
        """Mark the session as aborted."""
        self.phase = RenderPhase.FAILED


@dc.dataclass(slots=True, frozen=True)
class RenderResult:
    """What a successful render hands to post-processing.

    Attributes
    ----------
    metadata : dict
        Metadata keyed by term URI; each value is a list of ``{"v": str}``.
    toc : list
        TOC items of the form ``{"id", "href", "title", "children"}``.
    pdf : bytes
        The captured PDF document.
    """

    metadata: dict[str, typ.Any]
    toc: list[dict[str, typ.Any]]
    pdf: bytes


__all__ = ["PHASE_ORDER", "RenderPhase", "RenderResult", "RenderSession"]
