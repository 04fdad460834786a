"""Run orchestration: resolve, fetch, persist, finish."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from pathlib import Path

from dockmqtt._interfaces import resolve_dock_mac
from dockmqtt._mqtt import VehicleIdentitySubscriber
from dockmqtt.config import DockConfig
from dockmqtt.models import FetchStatus, VehicleIdentity
from dockmqtt.sink import persist

_logger = logging.getLogger(__name__)


def describe_error(exc: BaseException) -> str:
    """Short ``ClassName: message`` description stored in the result."""
    return f"{type(exc).__name__}: {exc}"


class DockRunner:
    """Single-shot run of the dock identity lookup.

    The network part blocks for up to the configured timeouts, so callers
    on an event loop or UI thread should use :meth:`run_async` or
    :meth:`start` rather than :meth:`run`.
    """

    def __init__(
        self,
        config: DockConfig,
        *,
        resolve_mac: Callable[[], str] = resolve_dock_mac,
        subscriber: VehicleIdentitySubscriber | None = None,
        persist_result: Callable[[VehicleIdentity, Path], object] = persist,
        on_finished: Callable[[VehicleIdentity], None] | None = None,
    ) -> None:
        self._config = config
        self._resolve_mac = resolve_mac
        self._subscriber = subscriber if subscriber is not None else VehicleIdentitySubscriber(config)
        self._persist = persist_result
        self._on_finished = on_finished

    def run(self) -> VehicleIdentity:
        identity = VehicleIdentity()
        identity.dock_mac = self._resolve_mac()

        try:
            self._subscriber.fetch(identity)
        except Exception as exc:
            _logger.debug("MQTT fetch failed", exc_info=True)
            identity.status = FetchStatus.MQTT_ERROR
            identity.error = describe_error(exc)

        self._persist(identity, self._config.output_dir)
        _logger.info(
            "Run finished status=%s dock_mac=%s vin=%s vehicle_id=%s",
            identity.status,
            identity.dock_mac,
            identity.vin,
            identity.vehicle_id,
        )

        if self._on_finished is not None:
            self._on_finished(identity)
        return identity

    async def run_async(self) -> VehicleIdentity:
        """Run on the loop's default executor so the loop stays responsive."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.run)

    def start(self) -> threading.Thread:
        """Run on a dedicated worker thread and return it."""
        worker = threading.Thread(target=self.run, name="dockmqtt-runner")
        worker.start()
        return worker
