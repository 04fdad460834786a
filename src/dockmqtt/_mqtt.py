"""One-shot MQTT subscribe protocol for retained vehicle identity values."""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, cast

import paho.mqtt.client as mqtt

from dockmqtt.config import DockConfig
from dockmqtt.exceptions import DockConnectionError, DockProtocolError
from dockmqtt.models import FetchStatus, VehicleIdentity

_logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], mqtt.Client]


class SessionState(StrEnum):
    INIT = "init"
    CONNECTING = "connecting"
    SUBSCRIBED = "subscribed"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"
    CLOSED = "closed"


def _is_success(reason_code: Any) -> bool:
    """Paho result/reason code helper (0 is success)."""
    return getattr(reason_code, "value", reason_code) == 0


def build_client_id(prefix: str) -> str:
    """Random client identifier so repeated runs never share a broker session."""
    return f"{prefix}-{uuid.uuid4()}"


def build_client(client_id: str) -> mqtt.Client:
    """Clean-session MQTT 3.1.1 client that never reconnects on its own."""
    return mqtt.Client(
        callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
        client_id=client_id,
        clean_session=True,
        protocol=mqtt.MQTTv311,
        reconnect_on_failure=False,
    )


@dataclass
class SubscriptionSession:
    """Connection handle plus the one-shot completion signal of a fetch."""

    client: mqtt.Client
    client_id: str
    done: threading.Event = field(default_factory=threading.Event)
    connected: threading.Event = field(default_factory=threading.Event)
    closing: threading.Event = field(default_factory=threading.Event)
    lock: threading.Lock = field(default_factory=threading.Lock)
    connack: Any = None
    state: SessionState = SessionState.INIT


class VehicleIdentitySubscriber:
    """Collect retained VIN / vehicle ID messages within a bounded wait.

    Usage::

        identity = VehicleIdentity()
        VehicleIdentitySubscriber(config).fetch(identity)
    """

    def __init__(
        self,
        config: DockConfig,
        *,
        client_factory: ClientFactory = build_client,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory
        self._logger = logger or _logger
        self._session: SubscriptionSession | None = None

    @property
    def state(self) -> SessionState:
        """State of the most recent session, ``INIT`` before the first fetch."""
        session = self._session
        return session.state if session is not None else SessionState.INIT

    def handle_message(
        self,
        session: SubscriptionSession,
        identity: VehicleIdentity,
        topic: str,
        payload: bytes,
    ) -> None:
        """Apply one delivered message and signal completion once a vehicle ID is known.

        Deliveries after the wait has returned are dropped so the outcome
        never changes under the caller.
        """
        value = payload.decode("utf-8", errors="replace").strip()
        with session.lock:
            if session.closing.is_set():
                self._logger.debug("Dropping late message topic=%s", topic)
                return
            if topic == self._config.vin_topic:
                identity.vin = value
            elif topic == self._config.vehicle_id_topic:
                identity.vehicle_id = value
            else:
                self._logger.debug("Ignoring message on unexpected topic=%s", topic)
                return
            self._logger.debug("Received topic=%s value=%s", topic, value)

            if identity.has_vehicle_id:
                session.done.set()

    def fetch(self, identity: VehicleIdentity) -> FetchStatus:
        """Run connect, subscribe, bounded wait and teardown for *identity*.

        Sets ``identity.status`` to ``OK`` or ``TIMEOUT`` and returns it.

        Raises
        ------
        DockConnectionError
            The broker could not be reached or refused the connection.
        DockProtocolError
            A subscription request failed.
        """
        client_id = build_client_id(self._config.client_id_prefix)
        session = SubscriptionSession(client=self._client_factory(client_id), client_id=client_id)
        self._session = session
        try:
            self._connect(session, identity)
            self._subscribe(session)

            session.done.wait(self._config.wait_seconds)
            with session.lock:
                session.closing.set()
                signaled = session.done.is_set()
            if signaled and identity.has_vehicle_id:
                identity.status = FetchStatus.OK
                session.state = SessionState.COMPLETED
            else:
                identity.status = FetchStatus.TIMEOUT
                session.state = SessionState.TIMED_OUT
            self._logger.debug(
                "MQTT fetch finished status=%s vin=%s vehicle_id=%s",
                identity.status,
                identity.vin,
                identity.vehicle_id,
            )
            return identity.status
        except Exception:
            session.state = SessionState.ERRORED
            raise
        finally:
            self._close(session)

    def _connect(self, session: SubscriptionSession, identity: VehicleIdentity) -> None:
        config = self._config
        client = session.client
        session.state = SessionState.CONNECTING
        self._logger.debug(
            "MQTT connect requested broker=%s client_id=%s",
            config.broker_url,
            session.client_id,
        )

        def on_connect(
            _client: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            session.connack = reason_code
            session.connected.set()

        def on_message(_client: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            self.handle_message(session, identity, msg.topic, msg.payload)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if session.state == SessionState.CONNECTING:
                session.connack = f"disconnected before CONNACK ({reason_code})"
                session.connected.set()
                return
            # The bounded wait expires on its own; nothing to recover here.
            if session.state == SessionState.SUBSCRIBED:
                self._logger.debug("MQTT connection lost during wait: %s", reason_code)

        client.enable_logger(self._logger)
        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        try:
            client.connect(config.broker_host, config.broker_port, keepalive=config.keepalive)
        except OSError as exc:
            raise DockConnectionError(
                f"Could not connect to {config.broker_url}: {exc}",
                host=config.broker_host,
                port=config.broker_port,
            ) from exc
        client.loop_start()

        if not session.connected.wait(config.connect_timeout):
            raise DockConnectionError(
                f"No CONNACK from {config.broker_url} within {config.connect_timeout}s",
                host=config.broker_host,
                port=config.broker_port,
            )
        if not _is_success(session.connack):
            raise DockConnectionError(
                f"Broker {config.broker_url} refused connection: {session.connack}",
                host=config.broker_host,
                port=config.broker_port,
            )
        self._logger.debug("MQTT connected reason=%s", session.connack)

    def _subscribe(self, session: SubscriptionSession) -> None:
        for topic in (self._config.vin_topic, self._config.vehicle_id_topic):
            self._logger.debug("MQTT subscribing topic=%s", topic)
            rc, _mid = session.client.subscribe(topic, qos=0)
            if not _is_success(rc):
                raise DockProtocolError(f"Subscribe to {topic} failed: rc={rc}", topic=topic, rc=int(rc))
        session.state = SessionState.SUBSCRIBED

    def _close(self, session: SubscriptionSession) -> None:
        with session.lock:
            session.closing.set()
        client = session.client
        try:
            client.disconnect()
        except Exception:
            self._logger.debug("MQTT disconnect failed", exc_info=True)
        try:
            client.loop_stop()
        except Exception:
            self._logger.debug("MQTT loop stop failed", exc_info=True)
        session.state = SessionState.CLOSED
        self._logger.debug("MQTT session closed client_id=%s", session.client_id)
