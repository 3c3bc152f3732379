"""
Browser Lifecycle Manager.

Owns the single shared browser for the lifetime of the service. Launching a
browser is the most expensive thing this service does, so one instance is
shared by every request and isolation comes from per-request browsing
contexts instead.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from ..config import settings
from ..errors import EngineLaunchError, ServiceUnavailableError
from ..models import EngineState
from .engine import BrowserEngine, BrowsingContext
from .playwright_engine import PlaywrightEngine

logger = logging.getLogger("pdf_renderer.browser_manager")


class BrowserManager:
    """
    Holds at most one live BrowserEngine.

    Launch is single-flight: callers arriving while a launch is in progress
    await the same task and get the same engine. A failed launch leaves the
    manager empty so a later call can try again.
    """

    def __init__(
        self,
        engine_factory: Callable[[], BrowserEngine],
        shutdown_grace_seconds: float = 10.0,
        close_timeout_seconds: float = 5.0,
    ):
        self.engine_factory = engine_factory
        self.shutdown_grace_seconds = shutdown_grace_seconds
        self.close_timeout_seconds = close_timeout_seconds
        self._engine: Optional[BrowserEngine] = None
        self._launching: Optional["asyncio.Future[BrowserEngine]"] = None
        self._active_contexts: int = 0
        self._launch_count: int = 0

    async def ensure_ready(self) -> BrowserEngine:
        """
        Return the shared engine, launching it first if needed.

        Raises:
            EngineLaunchError: the browser could not be started
        """
        engine = self._engine
        if engine is not None and engine.is_alive:
            return engine

        # No await between the check and the assignment, so only one task is
        # ever created per launch.
        if self._launching is None:
            self._launching = asyncio.ensure_future(self._launch(stale=engine))

        return await asyncio.shield(self._launching)

    async def _launch(self, stale: Optional[BrowserEngine]) -> BrowserEngine:
        try:
            if stale is not None:
                logger.warning("Browser is no longer connected, relaunching")
                self._engine = None
                try:
                    await asyncio.wait_for(stale.shutdown(), timeout=self.shutdown_grace_seconds)
                except asyncio.TimeoutError:
                    logger.warning(
                        f"Disconnected browser did not shut down within {self.shutdown_grace_seconds}s, abandoning it"
                    )
                except Exception as e:
                    logger.warning(f"Error discarding disconnected browser: {e}")

            engine = self.engine_factory()
            self._launch_count += 1
            logger.info(f"Launching browser engine (attempt {self._launch_count})")

            try:
                await engine.launch()
            except Exception as e:
                logger.error(f"Browser launch failed: {e}")
                raise EngineLaunchError(f"Failed to launch browser: {e}", cause=str(e)) from e

            self._engine = engine
            logger.info("Browser engine ready")
            return engine
        finally:
            self._launching = None

    async def shutdown(self) -> None:
        """Terminate the live engine, if any. Safe to call repeatedly."""
        launching = self._launching
        if launching is not None:
            try:
                await asyncio.shield(launching)
            except EngineLaunchError:
                logger.debug("Launch in progress at shutdown failed, nothing to close")

        engine, self._engine = self._engine, None
        if engine is None:
            return

        logger.info("Shutting down browser engine")
        try:
            await asyncio.wait_for(engine.shutdown(), timeout=self.shutdown_grace_seconds)
        except asyncio.TimeoutError:
            logger.error(
                f"Browser did not shut down within {self.shutdown_grace_seconds}s, abandoning it"
            )
        except Exception as e:
            logger.warning(f"Error shutting down browser: {e}")
        else:
            logger.info("Browser engine shut down")

    @asynccontextmanager
    async def browsing_context(
        self,
        viewport_width: int,
        viewport_height: int,
    ) -> AsyncIterator[BrowsingContext]:
        """
        Borrow a fresh browsing context from the shared engine.

        The context is closed when the block exits, whatever the outcome.

        Raises:
            EngineLaunchError: the browser could not be started
            ServiceUnavailableError: the browser refused to open a context
        """
        engine = await self.ensure_ready()

        try:
            context = await engine.new_context(viewport_width, viewport_height)
        except Exception as e:
            logger.error(f"Could not open browsing context: {e}")
            raise ServiceUnavailableError(f"Could not open browsing context: {e}", cause=str(e)) from e

        self._active_contexts += 1
        try:
            yield context
        finally:
            await self._release(context)

    async def _release(self, context: BrowsingContext) -> None:
        try:
            await asyncio.wait_for(context.close(), timeout=self.close_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                f"Browsing context did not close within {self.close_timeout_seconds}s, abandoning it"
            )
        except Exception as e:
            logger.warning(f"Error closing browsing context: {e}")
        finally:
            self._active_contexts = max(0, self._active_contexts - 1)

    @property
    def state(self) -> EngineState:
        """
        Lifecycle state, read without touching the engine process.

        A disconnected browser reports ABSENT until the next request relaunches it.
        """
        if self._launching is not None:
            return EngineState.STARTING
        if self._engine is not None and self._engine.is_alive:
            return EngineState.READY
        return EngineState.ABSENT

    @property
    def active_contexts(self) -> int:
        """Number of currently open browsing contexts."""
        return self._active_contexts

    @property
    def launch_count(self) -> int:
        """Number of launch attempts since the manager was created."""
        return self._launch_count


def _playwright_engine() -> BrowserEngine:
    return PlaywrightEngine(
        headless=settings.browser_headless,
        args=settings.browser_args,
    )


# Singleton instance
browser_manager = BrowserManager(
    engine_factory=_playwright_engine,
    shutdown_grace_seconds=settings.shutdown_grace_seconds,
    close_timeout_seconds=settings.context_close_timeout_ms / 1000,
)
