"""
Browser Lifecycle Manager tests.

Covers single-flight launch, retry after a failed launch, idempotent
shutdown, relaunch of a crashed browser and scoped context cleanup.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from pdf_renderer.errors import EngineLaunchError, ServiceUnavailableError
from pdf_renderer.models import EngineState
from pdf_renderer.services.browser_manager import BrowserManager, browser_manager

from .fakes import FakeEngine


def make_manager(engine: FakeEngine, grace: float = 1.0) -> BrowserManager:
    return BrowserManager(engine_factory=lambda: engine, shutdown_grace_seconds=grace)


class TestEnsureReady:
    @pytest.mark.asyncio
    async def test_launches_once_and_reuses(self):
        engine = FakeEngine()
        manager = make_manager(engine)

        first = await manager.ensure_ready()
        second = await manager.ensure_ready()

        assert first is second is engine
        assert engine.launch_calls == 1
        assert manager.state == EngineState.READY

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_launch(self):
        engine = FakeEngine(launch_delay=0.05)
        manager = make_manager(engine)

        handles = await asyncio.gather(*(manager.ensure_ready() for _ in range(10)))

        assert all(h is engine for h in handles)
        assert engine.launch_calls == 1
        assert manager.launch_count == 1

    @pytest.mark.asyncio
    async def test_state_is_starting_during_launch(self):
        engine = FakeEngine(launch_delay=0.1)
        manager = make_manager(engine)
        assert manager.state == EngineState.ABSENT

        task = asyncio.create_task(manager.ensure_ready())
        await asyncio.sleep(0.02)
        assert manager.state == EngineState.STARTING

        await task
        assert manager.state == EngineState.READY

    @pytest.mark.asyncio
    async def test_failed_launch_reaches_all_waiters_then_allows_retry(self):
        engine = FakeEngine(launch_delay=0.05, launch_failures=1)
        manager = make_manager(engine)

        results = await asyncio.gather(
            *(manager.ensure_ready() for _ in range(3)),
            return_exceptions=True,
        )

        assert all(isinstance(r, EngineLaunchError) for r in results)
        assert "Executable doesn't exist" in results[0].message
        assert engine.launch_calls == 1
        assert manager.state == EngineState.ABSENT

        assert await manager.ensure_ready() is engine
        assert engine.launch_calls == 2
        assert manager.state == EngineState.READY

    @pytest.mark.asyncio
    async def test_disconnected_browser_is_relaunched(self):
        engine = FakeEngine()
        manager = make_manager(engine)
        await manager.ensure_ready()

        # Simulate a crashed browser process
        engine.alive = False

        assert await manager.ensure_ready() is engine
        assert engine.launch_calls == 2
        assert engine.shutdown_calls == 1

    @pytest.mark.asyncio
    async def test_hung_disconnected_browser_does_not_block_relaunch(self):
        engine = FakeEngine()
        manager = make_manager(engine, grace=0.05)
        await manager.ensure_ready()

        engine.alive = False
        engine.shutdown_delay = 3600

        assert await asyncio.wait_for(manager.ensure_ready(), timeout=1) is engine
        assert engine.launch_calls == 2

    @pytest.mark.asyncio
    async def test_state_reports_absent_after_disconnect(self):
        engine = FakeEngine()
        manager = make_manager(engine)
        await manager.ensure_ready()
        assert manager.state == EngineState.READY

        engine.alive = False

        assert manager.state == EngineState.ABSENT
        assert engine.launch_calls == 1


class TestShutdown:
    @pytest.mark.asyncio
    async def test_shutdown_closes_engine(self):
        engine = FakeEngine()
        manager = make_manager(engine)
        await manager.ensure_ready()

        await manager.shutdown()

        assert engine.shutdown_calls == 1
        assert not engine.alive
        assert manager.state == EngineState.ABSENT

    @pytest.mark.asyncio
    async def test_shutdown_twice_is_noop(self):
        engine = FakeEngine()
        manager = make_manager(engine)
        await manager.ensure_ready()

        await manager.shutdown()
        await manager.shutdown()

        assert engine.shutdown_calls == 1

    @pytest.mark.asyncio
    async def test_shutdown_without_launch_is_noop(self):
        engine = FakeEngine()
        manager = make_manager(engine)

        await manager.shutdown()

        assert engine.launch_calls == 0
        assert engine.shutdown_calls == 0

    @pytest.mark.asyncio
    async def test_shutdown_waits_for_inflight_launch(self):
        engine = FakeEngine(launch_delay=0.05)
        manager = make_manager(engine)

        launch = asyncio.create_task(manager.ensure_ready())
        await asyncio.sleep(0)
        await manager.shutdown()
        await launch

        assert engine.shutdown_calls == 1
        assert manager.state == EngineState.ABSENT

    @pytest.mark.asyncio
    async def test_shutdown_after_failed_launch_is_quiet(self):
        engine = FakeEngine(launch_delay=0.05, launch_failures=1)
        manager = make_manager(engine)

        launch = asyncio.create_task(manager.ensure_ready())
        await asyncio.sleep(0)
        await manager.shutdown()

        with pytest.raises(EngineLaunchError):
            await launch
        assert engine.shutdown_calls == 0

    @pytest.mark.asyncio
    async def test_shutdown_grace_period_is_bounded(self):
        engine = FakeEngine(shutdown_delay=5)
        manager = make_manager(engine, grace=0.05)
        await manager.ensure_ready()

        await asyncio.wait_for(manager.shutdown(), timeout=1)

        assert manager.state == EngineState.ABSENT


class TestBrowsingContext:
    @pytest.mark.asyncio
    async def test_context_closed_after_block(self):
        engine = FakeEngine()
        manager = make_manager(engine)

        async with manager.browsing_context(1200, 1600) as context:
            assert manager.active_contexts == 1
            assert context.viewport == (1200, 1600)

        assert context.closed
        assert manager.active_contexts == 0

    @pytest.mark.asyncio
    async def test_context_closed_when_block_raises(self):
        engine = FakeEngine()
        manager = make_manager(engine)

        with pytest.raises(ValueError):
            async with manager.browsing_context(1200, 1600):
                raise ValueError("boom")

        assert engine.open_contexts == []
        assert manager.active_contexts == 0

    @pytest.mark.asyncio
    async def test_close_error_does_not_mask_result(self):
        engine = FakeEngine()
        engine.close_error = "Target page, context or browser has been closed"
        manager = make_manager(engine)

        async with manager.browsing_context(1200, 1600) as context:
            pass

        assert context.closed
        assert manager.active_contexts == 0

    @pytest.mark.asyncio
    async def test_hung_close_is_abandoned_after_timeout(self):
        engine = FakeEngine()
        engine.close_delay = 3600
        manager = BrowserManager(engine_factory=lambda: engine, close_timeout_seconds=0.05)

        async def use_context():
            async with manager.browsing_context(1200, 1600):
                pass

        await asyncio.wait_for(use_context(), timeout=1)

        assert manager.active_contexts == 0

    @pytest.mark.asyncio
    async def test_each_block_gets_its_own_context(self):
        engine = FakeEngine()
        manager = make_manager(engine)

        async with manager.browsing_context(1200, 1600) as a:
            async with manager.browsing_context(1200, 1600) as b:
                assert a is not b
                assert manager.active_contexts == 2

        assert engine.launch_calls == 1

    @pytest.mark.asyncio
    async def test_context_creation_failure_is_service_unavailable(self):
        engine = FakeEngine()
        manager = make_manager(engine)
        await manager.ensure_ready()

        async def refuse(width, height):
            raise RuntimeError("Browser has been closed")

        engine.new_context = refuse

        with pytest.raises(ServiceUnavailableError):
            async with manager.browsing_context(1200, 1600):
                pass
        assert manager.active_contexts == 0


class TestAppLifespan:
    def test_startup_launches_and_shutdown_closes(self, fake_engine):
        from pdf_renderer.main import app

        with TestClient(app):
            assert fake_engine.launch_calls == 1
            assert browser_manager.state == EngineState.READY

        assert fake_engine.shutdown_calls == 1
        assert browser_manager.state == EngineState.ABSENT

    def test_startup_launch_failure_aborts(self, fake_engine):
        from pdf_renderer.main import app

        fake_engine.launch_failures = 1

        with pytest.raises(EngineLaunchError):
            with TestClient(app):
                pass
