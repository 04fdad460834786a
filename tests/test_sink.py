from __future__ import annotations

import json
from pathlib import Path

import pytest

from dockmqtt.models import FetchStatus, VehicleIdentity, VehicleInfoRecord
from dockmqtt.sink import persist


def test_record_round_trip() -> None:
    identity = VehicleIdentity(
        dock_mac="AA:BB:CC:DD:EE:01",
        vin="WVW1234",
        vehicle_id="VID-9",
        status=FetchStatus.OK,
        error="",
    )

    decoded = json.loads(VehicleInfoRecord.from_identity(identity).to_json())

    assert decoded == {
        "dock_mac": "AA:BB:CC:DD:EE:01",
        "vin": "WVW1234",
        "vehicle_id": "VID-9",
        "status": "OK",
        "error": "",
    }


def test_record_escapes_control_characters() -> None:
    identity = VehicleIdentity(vin='say "hi"\nnext\tline\r\\end', status=FetchStatus.MQTT_ERROR)

    text = VehicleInfoRecord.from_identity(identity).to_json()

    assert "\n" not in text
    assert "\t" not in text
    assert '\\"hi\\"' in text
    assert "\\n" in text
    assert "\\\\end" in text
    assert json.loads(text)["vin"] == 'say "hi"\nnext\tline\r\\end'


def test_missing_values_serialize_as_empty_strings() -> None:
    decoded = json.loads(VehicleInfoRecord.from_identity(VehicleIdentity()).to_json())

    assert decoded == {"dock_mac": "", "vin": "", "vehicle_id": "", "status": "INIT", "error": ""}


def test_persist_writes_all_artifacts(tmp_path: Path) -> None:
    output_dir = tmp_path / "nested" / "out"
    identity = VehicleIdentity(
        dock_mac="AA:BB:CC:DD:EE:01",
        vin="WVW1234",
        vehicle_id="VID-9",
        status=FetchStatus.OK,
    )

    written = persist(identity, output_dir)

    assert len(written) == 4
    assert (output_dir / "dock_mac.txt").read_text(encoding="utf-8") == "AA:BB:CC:DD:EE:01\n"
    assert (output_dir / "vin.txt").read_text(encoding="utf-8") == "WVW1234\n"
    assert (output_dir / "vehicle_id.txt").read_text(encoding="utf-8") == "VID-9\n"
    info = (output_dir / "vehicle_info.json").read_text(encoding="utf-8")
    assert info.endswith("}\n")
    assert json.loads(info)["status"] == "OK"


def test_persist_overwrites_previous_run(tmp_path: Path) -> None:
    persist(VehicleIdentity(vin="OLD-VIN-WITH-LONGER-TEXT", status=FetchStatus.OK), tmp_path)
    persist(VehicleIdentity(status=FetchStatus.TIMEOUT), tmp_path)

    assert (tmp_path / "vin.txt").read_text(encoding="utf-8") == "\n"
    assert json.loads((tmp_path / "vehicle_info.json").read_text(encoding="utf-8"))["status"] == "TIMEOUT"


def test_persist_continues_after_single_file_failure(tmp_path: Path) -> None:
    # A directory in place of vin.txt makes only that write fail.
    (tmp_path / "vin.txt").mkdir()

    written = persist(VehicleIdentity(vin="WVW1234", vehicle_id="VID-9", status=FetchStatus.OK), tmp_path)

    assert [path.name for path in written] == ["dock_mac.txt", "vehicle_id.txt", "vehicle_info.json"]
    assert (tmp_path / "vehicle_id.txt").read_text(encoding="utf-8") == "VID-9\n"


def test_persist_gives_up_when_directory_cannot_be_created(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    assert persist(VehicleIdentity(), blocker / "out") == []


@pytest.mark.parametrize("status", list(FetchStatus))
def test_status_serializes_as_plain_name(status: FetchStatus) -> None:
    decoded = json.loads(VehicleInfoRecord.from_identity(VehicleIdentity(status=status)).to_json())
    assert decoded["status"] == status.value
