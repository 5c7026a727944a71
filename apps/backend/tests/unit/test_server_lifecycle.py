"""
Name: Server Lifecycle Tests

Responsibilities:
  - start()/stop() transitions and their idempotence
  - Startup failures surface as ServerStartError and leave the lifecycle STOPPED
  - main() exit codes

Notes:
  - uvicorn.Server is replaced by an in-process double (no sockets opened)
"""

import asyncio

import pytest
from app import server as server_module
from app.server import LifecycleState, ServerLifecycle, ServerStartError

pytestmark = pytest.mark.unit


class FakeServer:
    instances: list["FakeServer"] = []

    def __init__(self, config):
        self.config = config
        self.started = False
        self.should_exit = False
        FakeServer.instances.append(self)

    async def serve(self):
        self.started = True
        while not self.should_exit:
            await asyncio.sleep(0.01)


class BindFailureServer(FakeServer):
    async def serve(self):
        raise OSError("address already in use")


class SilentExitServer(FakeServer):
    async def serve(self):
        return None


def _lifecycle(factory=FakeServer) -> ServerLifecycle:
    return ServerLifecycle(object(), host="127.0.0.1", port=3999, server_factory=factory)


async def test_start_then_stop():
    lifecycle = _lifecycle()

    assert await lifecycle.start() is True
    assert lifecycle.state is LifecycleState.LISTENING
    assert lifecycle.is_listening

    assert await lifecycle.stop() is True
    assert lifecycle.state is LifecycleState.STOPPED


async def test_second_start_is_a_noop():
    FakeServer.instances.clear()
    lifecycle = _lifecycle()
    await lifecycle.start()

    assert await lifecycle.start() is False
    assert len(FakeServer.instances) == 1

    await lifecycle.stop()


async def test_stop_when_not_listening_is_a_noop():
    lifecycle = _lifecycle()

    assert await lifecycle.stop() is False
    assert lifecycle.state is LifecycleState.STOPPED


async def test_can_restart_after_stop():
    lifecycle = _lifecycle()
    await lifecycle.start()
    await lifecycle.stop()

    assert await lifecycle.start() is True
    await lifecycle.stop()


async def test_config_uses_host_port_and_lifespan():
    FakeServer.instances.clear()
    lifecycle = ServerLifecycle(
        object(), host="0.0.0.0", port=4000, log_level="DEBUG", server_factory=FakeServer
    )
    await lifecycle.start()

    config = FakeServer.instances[-1].config
    assert (config.host, config.port, config.lifespan) == ("0.0.0.0", 4000, "on")
    assert config.log_level == "debug"

    await lifecycle.stop()


@pytest.mark.parametrize("factory", [BindFailureServer, SilentExitServer])
async def test_failed_startup_raises_and_resets(factory):
    lifecycle = _lifecycle(factory)

    with pytest.raises(ServerStartError, match="127.0.0.1:3999"):
        await lifecycle.start()

    assert lifecycle.state is LifecycleState.STOPPED


async def test_wait_closed_returns_when_server_exits():
    FakeServer.instances.clear()
    lifecycle = _lifecycle()
    await lifecycle.start()

    FakeServer.instances[-1].should_exit = True
    await asyncio.wait_for(lifecycle.wait_closed(), timeout=1)

    assert lifecycle.state is LifecycleState.STOPPED


async def test_wait_closed_without_start_returns_immediately():
    await asyncio.wait_for(_lifecycle().wait_closed(), timeout=1)


def test_main_returns_1_on_startup_failure(monkeypatch):
    monkeypatch.setattr(
        server_module, "build_lifecycle", lambda: _lifecycle(BindFailureServer)
    )

    assert server_module.main() == 1


def test_main_returns_0_after_clean_exit(monkeypatch):
    class StopsItselfServer(FakeServer):
        async def serve(self):
            self.started = True
            await asyncio.sleep(0.02)

    monkeypatch.setattr(
        server_module, "build_lifecycle", lambda: _lifecycle(StopsItselfServer)
    )

    assert server_module.main() == 0
