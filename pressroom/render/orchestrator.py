"""Drive headless Chromium through the rendering engine to capture a PDF.

The orchestrator serves the staged publication and the broker page from two
loopback servers, opens the broker in Chromium, waits for the engine to
paginate, reads metadata and the table of contents, and prints the result
with the CSS page size. Servers are shut down and the browser is closed on
every exit path.
"""

from __future__ import annotations

import contextlib
import logging
import typing as typ

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from pressroom._constants import MANIFEST_FILENAME
from pressroom.errors import BrowserProcessError, RenderTimeoutError

from .broker import BROKER_DIR, build_navigation_url, parse_page_size
from .servers import ContentServer
from .session import RenderPhase, RenderResult, RenderSession
from .viewer import CoreViewerHandle

if typ.TYPE_CHECKING:
    from pathlib import Path

    from playwright.sync_api import ConsoleMessage, Page, Playwright, Response

    from pressroom.config import EffectiveConfig

logger = logging.getLogger(__name__)

VIEWER_LOAD_TIMEOUT_MS = 30_000
READY_STATE_POLLING_MS = 1000
COMPLETE_STATE = "complete"
IGNORED_CONSOLE_PATTERN = "time slice"
PDF_MARGIN = {"top": "0", "right": "0", "bottom": "0", "left": "0"}


class RenderOrchestrator:
    """Render the staged publication in ``config.out_dir`` to PDF bytes.

    Examples
    --------
    >>> result = RenderOrchestrator(config).run()  # doctest: +SKIP
    >>> result.pdf[:5]  # doctest: +SKIP
    b'%PDF-'
    """

    def __init__(
        self,
        config: EffectiveConfig,
        *,
        source_index: str = MANIFEST_FILENAME,
        playwright_factory: typ.Callable[
            [], contextlib.AbstractContextManager[Playwright]
        ] = sync_playwright,
        server_factory: typ.Callable[[Path], ContentServer] = ContentServer,
        broker_dir: Path = BROKER_DIR,
    ) -> None:
        """Initialize the orchestrator.

        Parameters
        ----------
        config : EffectiveConfig
            Effective build configuration.
        source_index : str, optional
            Path of the publication entry point relative to ``out_dir``.
        playwright_factory : callable, optional
            Returns a Playwright context manager.
        server_factory : callable, optional
            Builds a server for a directory.
        broker_dir : Path, optional
            Directory holding the broker page.
        """
        self.config = config
        self.source_index = source_index
        self.playwright_factory = playwright_factory
        self.server_factory = server_factory
        self.broker_dir = broker_dir

    def run(self) -> RenderResult:
        """Render and return the captured PDF with its metadata and TOC.

        Raises
        ------
        SizeParseError
            If the configured page size is malformed.
        BrowserProcessError
            If Chromium cannot be launched, cannot navigate, or fails to
            print.
        RenderTimeoutError
            If pagination or TOC loading exceeds ``config.timeout``.
        """
        page_size = parse_page_size(self.config.size) if self.config.size else None
        session = RenderSession()
        try:
            self._start_servers(session)
            session.navigation_url = build_navigation_url(
                source_port=typ.cast("int", session.source_port),
                source_index=self.source_index,
                broker_port=typ.cast("int", session.broker_port),
                load_mode=self.config.load_mode,
                page_size=page_size,
            )
            logger.debug("Navigation URL: %s", session.navigation_url)
            with self.playwright_factory() as playwright:
                try:
                    return self._render(session, playwright)
                finally:
                    self._close_browser(session)
        except BaseException:
            session.fail()
            raise
        finally:
            self._stop_servers(session)

    def _render(self, session: RenderSession, playwright: Playwright) -> RenderResult:
        page = self._launch(session, playwright)
        viewer = CoreViewerHandle(page)

        logger.info("Building pages...")
        try:
            page.goto(typ.cast("str", session.navigation_url), wait_until="networkidle")
            viewer.wait_until_available(
                timeout_ms=max(self.config.timeout, VIEWER_LOAD_TIMEOUT_MS)
            )
            metadata = viewer.get_metadata()
            toc = viewer.load_toc(timeout_ms=self.config.timeout)
        except PlaywrightError as exc:
            msg = f"Unable to load the rendering engine: {exc}"
            raise BrowserProcessError(msg) from exc
        session.advance(RenderPhase.VIEWER_READY)

        try:
            page.emulate_media(media="print")
            viewer.wait_for_ready_state(
                COMPLETE_STATE,
                timeout_ms=self.config.timeout,
                polling_ms=READY_STATE_POLLING_MS,
            )
        except PlaywrightTimeoutError as exc:
            msg = (
                f"Pagination did not complete within {self.config.timeout} ms; "
                "try a larger --timeout."
            )
            raise RenderTimeoutError(msg) from exc
        except PlaywrightError as exc:
            msg = f"Rendering failed: {exc}"
            raise BrowserProcessError(msg) from exc
        session.advance(RenderPhase.PAGINATION_COMPLETE)

        logger.info("Generating PDF...")
        try:
            pdf = page.pdf(
                margin=PDF_MARGIN, print_background=True, prefer_css_page_size=True
            )
        except PlaywrightError as exc:
            msg = f"Unable to print PDF: {exc}"
            raise BrowserProcessError(msg) from exc
        session.advance(RenderPhase.CAPTURED)
        return RenderResult(metadata=metadata, toc=toc, pdf=pdf)

    def _start_servers(self, session: RenderSession) -> None:
        session.source_server = self.server_factory(self.config.out_dir)
        session.source_server.start()
        session.broker_server = self.server_factory(self.broker_dir)
        session.broker_server.start()
        session.advance(RenderPhase.SERVERS_UP)

    def _launch(self, session: RenderSession, playwright: Playwright) -> Page:
        executable = self.config.executable_chromium or None
        try:
            session.browser = playwright.chromium.launch(
                headless=True,
                executable_path=executable,
                chromium_sandbox=self.config.sandbox,
                args=[] if self.config.sandbox else ["--no-sandbox"],
            )
            logger.debug(
                "Launched Chromium %s (%s)",
                session.browser.version,
                executable or "bundled",
            )
            session.page = session.browser.new_page()
        except PlaywrightError as exc:
            msg = f"Unable to launch Chromium: {exc}"
            raise BrowserProcessError(msg) from exc
        self._attach_hooks(session.page)
        session.advance(RenderPhase.BROWSER_READY)
        return session.page

    def _attach_hooks(self, page: Page) -> None:
        page.on("pageerror", _log_page_error)
        page.on("response", _log_response)
        if self.config.verbose:
            page.on("console", _log_console)

    @staticmethod
    def _close_browser(session: RenderSession) -> None:
        if session.browser is None:
            return
        try:
            session.browser.close()
        except PlaywrightError as exc:
            logger.warning("Unable to close Chromium cleanly: %s", exc)
        session.browser = None
        session.page = None

    @staticmethod
    def _stop_servers(session: RenderSession) -> None:
        for server in (session.source_server, session.broker_server):
            if server is not None:
                server.stop()


def _log_page_error(error: PlaywrightError) -> None:
    logger.warning("Page error: %s", error.message)


def _log_response(response: Response) -> None:
    if not 200 <= response.status < 300:
        logger.warning("%s %s", response.status, response.url)


def _log_console(message: ConsoleMessage) -> None:
    if IGNORED_CONSOLE_PATTERN in message.text:
        return
    logger.info("console.%s: %s", message.type, message.text)


__all__ = ["RenderOrchestrator"]
