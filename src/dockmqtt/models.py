"""Vehicle identity result and its persisted record.

:class:`VehicleIdentity` is the mutable aggregate shared between the run
orchestrator and the MQTT message handler. :class:`VehicleInfoRecord` is
the frozen, string-only view written to ``vehicle_info.json``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class FetchStatus(StrEnum):
    INIT = "INIT"
    OK = "OK"
    TIMEOUT = "TIMEOUT"
    MQTT_ERROR = "MQTT_ERROR"


@dataclass
class VehicleIdentity:
    """Facts collected during a single run.

    ``vin`` and ``vehicle_id`` are written by the MQTT message handler
    until completion is signaled; ``status`` and ``error`` are written
    once by the fetch owner after the wait returns.
    """

    dock_mac: str | None = None
    vin: str | None = None
    vehicle_id: str | None = None
    status: FetchStatus = FetchStatus.INIT
    error: str = ""

    @property
    def has_vehicle_id(self) -> bool:
        return bool(self.vehicle_id)


class VehicleInfoRecord(BaseModel):
    """Flat string-keyed record written to ``vehicle_info.json``.

    Absent values are stored as empty strings, never ``null``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    dock_mac: str = ""
    vin: str = ""
    vehicle_id: str = ""
    status: str = ""
    error: str = ""

    @classmethod
    def from_identity(cls, identity: VehicleIdentity) -> VehicleInfoRecord:
        return cls(
            dock_mac=identity.dock_mac or "",
            vin=identity.vin or "",
            vehicle_id=identity.vehicle_id or "",
            status=str(identity.status),
            error=identity.error or "",
        )

    def to_json(self) -> str:
        """Compact JSON with standard string escaping."""
        return self.model_dump_json()
