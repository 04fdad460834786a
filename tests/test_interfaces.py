from __future__ import annotations

from collections import namedtuple

import psutil
import pytest

from dockmqtt._interfaces import (
    MAC_ERROR,
    MAC_NOT_FOUND,
    format_mac,
    list_hardware_addresses,
    resolve_dock_mac,
)
from dockmqtt.exceptions import InterfaceEnumerationError

_Addr = namedtuple("_Addr", ["family", "address", "netmask", "broadcast", "ptp"])


def _link(mac: str) -> _Addr:
    return _Addr(psutil.AF_LINK, mac, None, None, None)


def _inet(ip: str) -> _Addr:
    return _Addr(2, ip, "255.255.255.0", None, None)


def test_preferred_interface_wins_over_enumeration_order() -> None:
    interfaces = [
        ("lo", None),
        ("wlan0", "11:22:33:44:55:66"),
        ("eth0", "AA:BB:CC:DD:EE:01"),
    ]
    assert resolve_dock_mac(lambda: interfaces) == "AA:BB:CC:DD:EE:01"


def test_preferred_order_is_respected() -> None:
    interfaces = [
        ("rndis0", "02:00:00:00:00:03"),
        ("usb0", "02:00:00:00:00:02"),
    ]
    assert resolve_dock_mac(lambda: interfaces) == "02:00:00:00:00:02"


def test_preferred_name_match_is_case_insensitive() -> None:
    interfaces = [("wlan0", "11:22:33:44:55:66"), ("ETH0", "AA:BB:CC:DD:EE:01")]
    assert resolve_dock_mac(lambda: interfaces) == "AA:BB:CC:DD:EE:01"


def test_preferred_interface_without_mac_is_skipped() -> None:
    interfaces = [("eth0", None), ("wlan0", "11:22:33:44:55:66")]
    assert resolve_dock_mac(lambda: interfaces) == "11:22:33:44:55:66"


def test_falls_back_to_first_available() -> None:
    assert resolve_dock_mac(lambda: [("wlan0", "11:22:33:44:55:66")]) == "11:22:33:44:55:66"


def test_no_hardware_address_reports_not_found() -> None:
    assert resolve_dock_mac(lambda: [("lo", None)]) == MAC_NOT_FOUND
    assert resolve_dock_mac(lambda: []) == MAC_NOT_FOUND


def test_enumeration_failure_reports_error() -> None:
    def _boom() -> list[tuple[str, str | None]]:
        raise InterfaceEnumerationError("no netlink")

    assert resolve_dock_mac(_boom) == MAC_ERROR


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("aa:bb:cc:dd:ee:01", "AA:BB:CC:DD:EE:01"),
        ("AA-BB-CC-DD-EE-01", "AA:BB:CC:DD:EE:01"),
        ("a:b:c:d:e:f", "0A:0B:0C:0D:0E:0F"),
        (b"\xaa\xbb\xcc\xdd\xee\x01", "AA:BB:CC:DD:EE:01"),
        ("00:00:00:00:00:00", None),
        ("", None),
        (b"", None),
        ("not-a-mac", None),
        (None, None),
    ],
)
def test_format_mac(raw: str | bytes | None, expected: str | None) -> None:
    assert format_mac(raw) == expected


def test_list_hardware_addresses_reads_link_layer_entries(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "dockmqtt._interfaces.psutil.net_if_addrs",
        lambda: {
            "lo": [_link("00:00:00:00:00:00"), _inet("127.0.0.1")],
            "eth0": [_inet("192.168.130.20"), _link("aa:bb:cc:dd:ee:01")],
            "tun0": [_inet("10.8.0.1")],
        },
    )

    assert list_hardware_addresses() == [
        ("lo", None),
        ("eth0", "AA:BB:CC:DD:EE:01"),
        ("tun0", None),
    ]


def test_list_hardware_addresses_wraps_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail() -> dict[str, list[_Addr]]:
        raise OSError("permission denied")

    monkeypatch.setattr("dockmqtt._interfaces.psutil.net_if_addrs", _fail)

    with pytest.raises(InterfaceEnumerationError):
        list_hardware_addresses()
    assert resolve_dock_mac() == MAC_ERROR
