"""Run configuration for dockmqtt."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dockmqtt.exceptions import DockConfigError

DEFAULT_BROKER_PORT = 1883


def _default_output_dir() -> Path:
    return Path.home() / ".dockmqtt"


def parse_broker(raw_broker: str) -> tuple[str, int]:
    """Split ``tcp://host:port``, ``host:port`` or ``host`` into host and port."""
    value = raw_broker.strip()
    if not value:
        raise DockConfigError("Broker value is empty")

    if "://" in value:
        value = value.split("://", 1)[1]
    if "/" in value:
        value = value.split("/", 1)[0]

    host, _, maybe_port = value.rpartition(":")
    if host and maybe_port.isdigit():
        return host, int(maybe_port)
    return value, DEFAULT_BROKER_PORT


def _env_number(env: Mapping[str, str], key: str, kind: type) -> Any:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return kind(raw.strip())
    except ValueError as exc:
        raise DockConfigError(f"{key} must be a {kind.__name__}, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class DockConfig:
    """Run configuration.

    Parameters
    ----------
    broker_host : str
        MQTT broker host name or address.
    broker_port : int
        MQTT broker TCP port.
    vin_topic : str
        Topic carrying the retained VIN.
    vehicle_id_topic : str
        Topic carrying the retained vehicle unique ID. A non-empty value
        on this topic completes the fetch.
    wait_seconds : float
        Upper bound on the wait for retained messages after subscribing.
    connect_timeout : float
        Upper bound on the wait for the broker's CONNACK.
    keepalive : int
        MQTT keepalive in seconds.
    client_id_prefix : str
        Prefix for the per-run random client identifier.
    output_dir : Path
        Directory that receives the result files.
    """

    broker_host: str = "192.168.130.11"
    broker_port: int = DEFAULT_BROKER_PORT
    vin_topic: str = "DB/vehicle/VIN"
    vehicle_id_topic: str = "DB/vehicle/UniqueId"
    wait_seconds: float = 10.0
    connect_timeout: float = 30.0
    keepalive: int = 60
    client_id_prefix: str = "dockmqtt"
    output_dir: Path = dataclasses.field(default_factory=_default_output_dir)

    @property
    def broker_url(self) -> str:
        return f"tcp://{self.broker_host}:{self.broker_port}"

    @classmethod
    def from_env(cls, **overrides: Any) -> DockConfig:
        """Create configuration from environment variables.

        Reads optional ``DOCKMQTT_*`` variables. ``DOCKMQTT_BROKER`` accepts
        a ``tcp://host:port`` URL and is applied before the more specific
        ``DOCKMQTT_BROKER_HOST`` / ``DOCKMQTT_BROKER_PORT``. Explicit keyword
        arguments override environment values.

        Raises
        ------
        DockConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        broker_env = env.get("DOCKMQTT_BROKER")
        if broker_env is not None:
            config_kwargs["broker_host"], config_kwargs["broker_port"] = parse_broker(broker_env)

        _ENV_STR_MAP = {
            "DOCKMQTT_BROKER_HOST": "broker_host",
            "DOCKMQTT_VIN_TOPIC": "vin_topic",
            "DOCKMQTT_VEHICLE_ID_TOPIC": "vehicle_id_topic",
            "DOCKMQTT_CLIENT_ID_PREFIX": "client_id_prefix",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMBER_MAP = {
            "DOCKMQTT_BROKER_PORT": ("broker_port", int),
            "DOCKMQTT_WAIT_SECONDS": ("wait_seconds", float),
            "DOCKMQTT_CONNECT_TIMEOUT": ("connect_timeout", float),
            "DOCKMQTT_KEEPALIVE": ("keepalive", int),
        }
        for env_key, (field_name, kind) in _ENV_NUMBER_MAP.items():
            if field_name in overrides:
                continue
            val = _env_number(env, env_key, kind)
            if val is not None:
                config_kwargs[field_name] = val

        output_env = env.get("DOCKMQTT_OUTPUT_DIR")
        if output_env:
            config_kwargs["output_dir"] = Path(output_env).expanduser()

        # Overrides coming from the CLI may carry the output directory as str
        output_override = overrides.pop("output_dir", None)
        if output_override is not None:
            config_kwargs["output_dir"] = Path(output_override).expanduser()

        config_kwargs.update(overrides)

        if config_kwargs.get("wait_seconds", cls.wait_seconds) <= 0:
            raise DockConfigError("wait_seconds must be positive")
        if config_kwargs.get("connect_timeout", cls.connect_timeout) <= 0:
            raise DockConfigError("connect_timeout must be positive")
        if config_kwargs.get("keepalive", cls.keepalive) < 0:
            raise DockConfigError("keepalive must not be negative")

        return cls(**config_kwargs)
