"""Headless rendering of a staged publication into PDF bytes."""

from .broker import BROKER_DIR, PageSize, build_navigation_url, parse_page_size
from .orchestrator import RenderOrchestrator
from .servers import ContentServer
from .session import RenderPhase, RenderResult, RenderSession
from .viewer import CoreViewerHandle

__all__ = [
    "BROKER_DIR",
    "ContentServer",
    "CoreViewerHandle",
    "PageSize",
    "RenderOrchestrator",
    "RenderPhase",
    "RenderResult",
    "RenderSession",
    "build_navigation_url",
    "parse_page_size",
]
