"""Run the TOC round trip against a scripted engine in headless Chromium."""

from __future__ import annotations

import typing as typ

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from pressroom.errors import RenderTimeoutError
from pressroom.render import CoreViewerHandle

if typ.TYPE_CHECKING:
    from playwright.sync_api import Browser, Page

TOC = [{"id": "one", "href": "artifacts/one.html#one", "title": "One", "children": []}]

# A stand-in for the engine: ``showTOC(true)`` emits a "load" done event
# first, then (when ``emitToc`` is set) the "toc" one. ``getTOC`` only
# answers once the TOC event has fired.
SCRIPTED_VIEWER = """
({toc, emitToc}) => {
  const listeners = [];
  const log = [];
  let tocLoaded = false;
  const emit = (payload) => {
    log.push(`done:${payload.a}`);
    for (const listener of [...listeners]) {
      listener(payload);
    }
  };
  window.viewerLog = log;
  window.coreViewer = {
    readyState: "loading",
    addListener: (type, listener) => {
      if (type === "done") {
        listeners.push(listener);
      }
    },
    removeListener: (type, listener) => {
      const index = listeners.indexOf(listener);
      if (type === "done" && index >= 0) {
        listeners.splice(index, 1);
      }
    },
    listenerCount: () => listeners.length,
    showTOC: (visible) => {
      log.push(`showTOC:${visible}`);
      if (!visible) {
        return;
      }
      setTimeout(() => emit({a: "load"}), 10);
      if (emitToc) {
        setTimeout(() => {
          tocLoaded = true;
          emit({a: "toc"});
        }, 50);
      }
    },
    getTOC: () => (tocLoaded ? toc : null),
  };
}
"""


@pytest.fixture(scope="module")
def browser() -> typ.Iterator[Browser]:
    with sync_playwright() as playwright:
        try:
            chromium = playwright.chromium.launch(headless=True)
        except PlaywrightError as exc:
            pytest.skip(f"Chromium is not available: {exc}")
        yield chromium
        chromium.close()


@pytest.fixture
def page(browser: Browser) -> typ.Iterator[Page]:
    page = browser.new_page()
    yield page
    page.close()


def test_toc_resolves_only_on_the_toc_done_event(page: Page) -> None:
    page.evaluate(SCRIPTED_VIEWER, {"toc": TOC, "emitToc": True})

    toc = CoreViewerHandle(page).load_toc(timeout_ms=5000)

    assert toc == TOC, "a 'load' done event must not resolve the wait"
    assert page.evaluate("() => window.viewerLog") == [
        "showTOC:true",
        "done:load",
        "done:toc",
        "showTOC:false",
    ]
    assert page.evaluate("() => window.coreViewer.listenerCount()") == 0


def test_toc_wait_times_out_without_a_toc_event(page: Page) -> None:
    page.evaluate(SCRIPTED_VIEWER, {"toc": TOC, "emitToc": False})

    with pytest.raises(RenderTimeoutError, match="300 ms"):
        CoreViewerHandle(page).load_toc(timeout_ms=300)

    assert page.evaluate("() => window.viewerLog") == ["showTOC:true", "done:load"]
    assert page.evaluate("() => window.coreViewer.listenerCount()") == 0
