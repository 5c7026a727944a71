"""
===============================================================================
TARJETA CRC — app/server.py (Ciclo de vida del proceso)
===============================================================================

Responsabilidades:
  - Ser el entry point del proceso (`python -m app.server` / console script).
  - Ser dueño del `uvicorn.Server` mediante un objeto explícito de ciclo de vida.
  - Garantizar start()/stop() idempotentes con una máquina de estados:
      STOPPED -> STARTING -> LISTENING -> STOPPING -> STOPPED
    Las transiciones ilegales son no-ops y se loguean como warning.

Colaboradores:
  - app.api.main.app (armada una sola vez por create_app, antes de arrancar)
  - crosscutting.config.get_settings (HOST / PORT / LOG_LEVEL)
  - uvicorn.Config / uvicorn.Server
===============================================================================
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable

import uvicorn

from .crosscutting.config import get_settings
from .crosscutting.logger import logger

_STARTUP_POLL_SECONDS = 0.05


class LifecycleState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    LISTENING = "listening"
    STOPPING = "stopping"


class ServerStartError(RuntimeError):
    """uvicorn terminó antes de quedar escuchando (bind o lifespan fallidos)."""


class ServerLifecycle:
    """
    Envuelve un `uvicorn.Server` con estados explícitos.

    `server_factory` permite inyectar un doble en tests (por defecto
    `uvicorn.Server`).
    """

    def __init__(
        self,
        app,
        *,
        host: str,
        port: int,
        log_level: str = "info",
        server_factory: Callable[[uvicorn.Config], uvicorn.Server] = uvicorn.Server,
    ) -> None:
        self._config = uvicorn.Config(
            app,
            host=host,
            port=port,
            log_level=log_level.lower(),
            lifespan="on",
        )
        self._server_factory = server_factory
        self._server: uvicorn.Server | None = None
        self._serve_task: asyncio.Task | None = None
        self._state = LifecycleState.STOPPED

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_listening(self) -> bool:
        return self._state is LifecycleState.LISTENING

    def _reject(self, action: str) -> bool:
        logger.warning(
            "Server lifecycle: transición ignorada",
            extra={"action": action, "state": self._state.value},
        )
        return False

    async def start(self) -> bool:
        """Arranca y espera a que uvicorn quede escuchando. False si no aplica."""
        if self._state is not LifecycleState.STOPPED:
            return self._reject("start")

        self._state = LifecycleState.STARTING
        server = self._server_factory(self._config)
        task = asyncio.create_task(server.serve())
        self._server = server
        self._serve_task = task

        while not server.started:
            if task.done():
                self._state = LifecycleState.STOPPED
                self._server = None
                self._serve_task = None
                exc = task.exception()
                raise ServerStartError(
                    f"Server failed to start on {self._config.host}:{self._config.port}"
                ) from exc
            await asyncio.sleep(_STARTUP_POLL_SECONDS)

        self._state = LifecycleState.LISTENING
        logger.info(
            "Server listening",
            extra={
                "host": self._config.host,
                "port": self._config.port,
                "docs": f"http://{self._config.host}:{self._config.port}/docs",
            },
        )
        return True

    async def stop(self) -> bool:
        """Pide a uvicorn que cierre y espera el shutdown. False si no aplica."""
        if self._state is not LifecycleState.LISTENING:
            return self._reject("stop")

        self._state = LifecycleState.STOPPING
        assert self._server is not None and self._serve_task is not None
        self._server.should_exit = True
        try:
            await self._serve_task
        finally:
            self._server = None
            self._serve_task = None
            self._state = LifecycleState.STOPPED
            logger.info("Server stopped")
        return True

    async def wait_closed(self) -> None:
        """Bloquea hasta que el server termine (p. ej. por SIGINT/SIGTERM)."""
        task = self._serve_task
        if task is None:
            return
        try:
            await task
        finally:
            if self._serve_task is task:
                self._server = None
                self._serve_task = None
                self._state = LifecycleState.STOPPED
                logger.info("Server stopped")

    async def run(self) -> None:
        await self.start()
        await self.wait_closed()


def build_lifecycle() -> ServerLifecycle:
    from .api.main import app

    settings = get_settings()
    return ServerLifecycle(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


def main() -> int:
    lifecycle = build_lifecycle()
    try:
        asyncio.run(lifecycle.run())
    except KeyboardInterrupt:
        logger.info("Server interrupted")
    except ServerStartError as exc:
        logger.error("Startup failed", extra={"error": str(exc)})
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
