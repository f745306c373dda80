"""Local HTTP servers exposing the staged publication and the broker page."""

from __future__ import annotations

import functools
import logging
import threading
import typing as typ
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer

if typ.TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

logger = logging.getLogger(__name__)

LOOPBACK_HOST = "127.0.0.1"


class _ContentRequestHandler(SimpleHTTPRequestHandler):
    """Serve files with permissive CORS and no client caching.

    The broker page and the publication live on different ports, so the
    viewer's fetches of the manifest and entries are cross-origin.
    """

    def end_headers(self) -> None:
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Cache-Control", "no-store")
        super().end_headers()

    def log_message(self, format: str, *args: typ.Any) -> None:  # noqa: A002
        logger.debug("%s %s", self.address_string(), format % args)


class ContentServer:
    """Serve one directory over HTTP on an ephemeral loopback port.

    Examples
    --------
    >>> from pathlib import Path
    >>> with ContentServer(Path(".")) as server:  # doctest: +SKIP
    ...     server.url("manifest.json")
    'http://127.0.0.1:49152/manifest.json'
    """

    def __init__(self, root: Path, *, host: str = LOOPBACK_HOST) -> None:
        self.root = root
        self.host = host
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def port(self) -> int:
        """Return the bound port; the server must be running."""
        if self._server is None:
            msg = "Server is not running."
            raise RuntimeError(msg)
        return self._server.server_address[1]

    def url(self, path: str = "") -> str:
        """Return the absolute URL of ``path`` on this server."""
        return f"http://{self.host}:{self.port}/{path.lstrip('/')}"

    def start(self) -> int:
        """Bind, start serving on a daemon thread, and return the port."""
        handler = functools.partial(_ContentRequestHandler, directory=str(self.root))
        self._server = ThreadingHTTPServer((self.host, 0), handler)
        self._server.daemon_threads = True
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name=f"pressroom-server-{self.port}",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Serving %s at %s", self.root, self.url())
        return self.port

    def stop(self) -> None:
        """Stop serving and release the socket; a no-op when not running."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)
        self._server = None
        self._thread = None

    def __enter__(self) -> ContentServer:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()


__all__ = ["LOOPBACK_HOST", "ContentServer"]
