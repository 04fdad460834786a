"""Persist a finished run to the output directory."""

from __future__ import annotations

import logging
from pathlib import Path

from dockmqtt.models import VehicleIdentity, VehicleInfoRecord

_logger = logging.getLogger(__name__)

DOCK_MAC_FILE = "dock_mac.txt"
VIN_FILE = "vin.txt"
VEHICLE_ID_FILE = "vehicle_id.txt"
VEHICLE_INFO_FILE = "vehicle_info.json"


def _write_text(path: Path, content: str) -> bool:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError:
        _logger.warning("Could not write %s", path, exc_info=True)
        return False
    return True


def persist(identity: VehicleIdentity, output_dir: Path) -> list[Path]:
    """Write the three value files and ``vehicle_info.json``, replacing earlier output.

    Every file is written independently; a failed write is logged and the
    remaining files are still attempted. Returns the paths written.
    """
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        _logger.warning("Could not create output directory %s", output_dir, exc_info=True)
        return []

    record = VehicleInfoRecord.from_identity(identity)
    artifacts = {
        DOCK_MAC_FILE: f"{record.dock_mac}\n",
        VIN_FILE: f"{record.vin}\n",
        VEHICLE_ID_FILE: f"{record.vehicle_id}\n",
        VEHICLE_INFO_FILE: f"{record.to_json()}\n",
    }

    written: list[Path] = []
    for filename, content in artifacts.items():
        path = output_dir / filename
        if _write_text(path, content):
            written.append(path)
    _logger.debug("Persisted %d of %d files to %s", len(written), len(artifacts), output_dir)
    return written
