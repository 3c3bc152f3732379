"""
Browser engine interfaces.

The lifecycle manager and the renderer only talk to these two abstractions,
so a deterministic double can stand in for a real browser in tests.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class BrowsingContext(ABC):
    """An isolated, single-page browser session (a private tab)."""

    @abstractmethod
    async def navigate(self, url: str, timeout_ms: int) -> Optional[int]:
        """
        Load url and wait for the network to go idle.

        Returns:
            HTTP status of the main document, or None if the engine had none

        Raises:
            NavigationTimeoutError: load did not settle within timeout_ms
            NavigationError: the page could not be loaded
        """
        ...

    @abstractmethod
    async def wait_for_fonts(self) -> str:
        """
        Wait for document.fonts.ready and return the FontFaceSet status.

        Raises:
            FontLoadError: the readiness check itself failed
        """
        ...

    @abstractmethod
    async def export_pdf(self, options: Dict[str, Any]) -> bytes:
        """
        Print the current page to PDF.

        Raises:
            ExportError: the engine failed to produce a document
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Destroy the context and every page it owns."""
        ...


class BrowserEngine(ABC):
    """A long-lived browser process able to spawn browsing contexts."""

    @abstractmethod
    async def launch(self) -> None:
        """Start the browser process."""
        ...

    @abstractmethod
    async def new_context(self, viewport_width: int, viewport_height: int) -> BrowsingContext:
        """Create a fresh isolated context with the given viewport."""
        ...

    @abstractmethod
    async def shutdown(self) -> None:
        """Terminate the browser process."""
        ...

    @property
    @abstractmethod
    def is_alive(self) -> bool:
        """Whether the browser process is launched and still connected."""
        ...
