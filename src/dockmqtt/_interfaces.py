"""Dock MAC address lookup over local network interfaces."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import psutil

from dockmqtt.exceptions import InterfaceEnumerationError

_logger = logging.getLogger(__name__)

#: Interfaces that carry the dock's wired/USB link, in preference order.
PREFERRED_INTERFACES: tuple[str, ...] = ("eth0", "usb0", "rndis0")

MAC_NOT_FOUND = "NOT_FOUND"
MAC_ERROR = "ERROR"

InterfaceList = list[tuple[str, str | None]]


def format_mac(value: str | bytes | None) -> str | None:
    """Normalize a hardware address to ``AA:BB:CC:DD:EE:FF``.

    Returns ``None`` for missing, empty, malformed or all-zero addresses
    (loopback and most virtual interfaces report the latter).
    """
    if value is None:
        return None
    if isinstance(value, bytes):
        octets = [f"{b:02X}" for b in value]
    else:
        text = value.strip().replace("-", ":")
        if not text:
            return None
        try:
            octets = [f"{int(part, 16):02X}" for part in text.split(":")]
        except ValueError:
            return None
    if not octets or all(octet == "00" for octet in octets):
        return None
    return ":".join(octets)


def list_hardware_addresses() -> InterfaceList:
    """Return ``(name, mac)`` for every local interface, in enumeration order.

    ``mac`` is ``None`` when the interface has no usable link-layer address.
    """
    try:
        addresses = psutil.net_if_addrs()
    except Exception as exc:
        raise InterfaceEnumerationError(f"Could not list network interfaces: {exc}") from exc

    interfaces: InterfaceList = []
    for name, entries in addresses.items():
        mac: str | None = None
        for entry in entries:
            if entry.family == psutil.AF_LINK:
                mac = format_mac(entry.address)
                if mac is not None:
                    break
        interfaces.append((name, mac))
    return interfaces


def resolve_dock_mac(
    enumerate_interfaces: Callable[[], InterfaceList] = list_hardware_addresses,
    preferred: Sequence[str] = PREFERRED_INTERFACES,
) -> str:
    """Pick the dock MAC address.

    Preferred interface names win over enumeration order; otherwise the
    first interface with a usable address is taken. Never raises: returns
    ``"NOT_FOUND"`` when nothing qualifies and ``"ERROR"`` when the
    interfaces could not be listed.
    """
    try:
        interfaces = enumerate_interfaces()
    except Exception:
        _logger.debug("Interface enumeration failed", exc_info=True)
        return MAC_ERROR

    for wanted in preferred:
        for name, mac in interfaces:
            if mac is not None and name.lower() == wanted.lower():
                _logger.debug("Dock MAC from preferred interface %s: %s", name, mac)
                return mac

    for name, mac in interfaces:
        if mac is not None:
            _logger.debug("Dock MAC from first available interface %s: %s", name, mac)
            return mac

    _logger.debug("No interface with a hardware address among %s", [name for name, _ in interfaces])
    return MAC_NOT_FOUND
