"""Thin wrapper over the in-page ``window.coreViewer`` object."""

from __future__ import annotations

import typing as typ

from pressroom.errors import RenderTimeoutError

if typ.TYPE_CHECKING:
    from playwright.sync_api import Page

VIEWER_AVAILABLE_SCRIPT = "() => Boolean(window.coreViewer)"
READY_STATE_SCRIPT = "(state) => window.coreViewer.readyState === state"
TOC_ACTION = "toc"

# Resolves with the viewer's TOC once a "done" event for ``action`` fires;
# events for other actions are ignored. Resolves null on timeout.
LOAD_TOC_SCRIPT = """
({action, timeoutMs}) => new Promise((resolve) => {
  const viewer = window.coreViewer;
  let timer = null;
  const listener = (payload) => {
    if (!payload || payload.a !== action) {
      return;
    }
    clearTimeout(timer);
    viewer.removeListener("done", listener);
    viewer.showTOC(false);
    resolve(viewer.getTOC() || []);
  };
  timer = setTimeout(() => {
    viewer.removeListener("done", listener);
    resolve(null);
  }, timeoutMs);
  viewer.addListener("done", listener);
  viewer.showTOC(true);
})
"""


class CoreViewerHandle:
    """Query the rendering engine running inside ``page``."""

    def __init__(self, page: Page) -> None:
        self.page = page

    def wait_until_available(self, *, timeout_ms: int) -> None:
        """Block until the broker page has exposed ``window.coreViewer``."""
        self.page.wait_for_function(VIEWER_AVAILABLE_SCRIPT, timeout=timeout_ms)

    @property
    def ready_state(self) -> str:
        """Return the engine's current ``readyState``."""
        return self.page.evaluate("() => window.coreViewer.readyState")

    def get_metadata(self) -> dict[str, typ.Any]:
        """Return document metadata keyed by term URI."""
        return self.page.evaluate("() => window.coreViewer.getMetadata() || {}")

    def get_toc(self) -> list[dict[str, typ.Any]]:
        """Return the TOC tree the engine currently knows about."""
        return self.page.evaluate("() => window.coreViewer.getTOC() || []")

    def set_toc_visible(self, visible: bool) -> None:  # noqa: FBT001
        """Show or hide the engine's TOC panel."""
        self.page.evaluate("(visible) => window.coreViewer.showTOC(visible)", visible)

    def load_toc(self, *, timeout_ms: int) -> list[dict[str, typ.Any]]:
        """Ask the engine to load its TOC and wait for the matching event.

        Raises
        ------
        RenderTimeoutError
            If the engine does not report the TOC within ``timeout_ms``.
        """
        toc = self.page.evaluate(
            LOAD_TOC_SCRIPT, {"action": TOC_ACTION, "timeoutMs": timeout_ms}
        )
        if toc is None:
            msg = f"Table of contents was not loaded within {timeout_ms} ms."
            raise RenderTimeoutError(msg)
        return toc

    def wait_for_ready_state(
        self, state: str, *, timeout_ms: int, polling_ms: int = 1000
    ) -> None:
        """Poll until ``readyState`` equals ``state``."""
        self.page.wait_for_function(
            READY_STATE_SCRIPT, arg=state, polling=polling_ms, timeout=timeout_ms
        )


__all__ = ["TOC_ACTION", "CoreViewerHandle"]
