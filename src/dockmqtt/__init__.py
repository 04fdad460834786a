"""dockmqtt - Resolve dock and vehicle identity over MQTT and persist it."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dockmqtt")
except PackageNotFoundError:
    __version__ = "0+local"
from dockmqtt._interfaces import list_hardware_addresses, resolve_dock_mac
from dockmqtt._mqtt import SessionState, VehicleIdentitySubscriber
from dockmqtt.config import DockConfig
from dockmqtt.exceptions import (
    DockConfigError,
    DockConnectionError,
    DockError,
    DockProtocolError,
    InterfaceEnumerationError,
)
from dockmqtt.models import FetchStatus, VehicleIdentity, VehicleInfoRecord
from dockmqtt.runner import DockRunner
from dockmqtt.sink import persist

__all__ = [
    "__version__",
    "DockConfig",
    "DockConfigError",
    "DockConnectionError",
    "DockError",
    "DockProtocolError",
    "DockRunner",
    "FetchStatus",
    "InterfaceEnumerationError",
    "SessionState",
    "VehicleIdentity",
    "VehicleIdentitySubscriber",
    "VehicleInfoRecord",
    "list_hardware_addresses",
    "persist",
    "resolve_dock_mac",
]
