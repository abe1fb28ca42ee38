"""Block storage records: disks, partitions and their classification."""

from __future__ import annotations

import enum
import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from hwinfo.context import Context, new_context
from hwinfo.marshal import safe_json, safe_yaml
from hwinfo.paths import UNKNOWN


class DriveType(enum.IntEnum):
    """General category of a drive device."""

    UNKNOWN = 0
    HDD = 1
    FDD = 2
    ODD = 3
    SSD = 4

    def __str__(self) -> str:
        return _DRIVE_TYPE_LABELS[self]

    def to_json(self) -> str:
        return str(self).lower()


_DRIVE_TYPE_LABELS = {
    DriveType.UNKNOWN: "Unknown",
    DriveType.HDD: "HDD",
    DriveType.FDD: "FDD",
    DriveType.ODD: "ODD",
    DriveType.SSD: "SSD",
}


class StorageController(enum.IntEnum):
    """Physical interface class of a block storage controller."""

    UNKNOWN = 0
    IDE = 1
    SCSI = 2
    NVME = 3
    VIRTIO = 4
    MMC = 5

    def __str__(self) -> str:
        return _STORAGE_CONTROLLER_LABELS[self]

    def to_json(self) -> str:
        return str(self).lower()


_STORAGE_CONTROLLER_LABELS = {
    StorageController.UNKNOWN: "Unknown",
    StorageController.IDE: "IDE",
    StorageController.SCSI: "SCSI",
    StorageController.NVME: "NVMe",
    StorageController.VIRTIO: "virtio",
    StorageController.MMC: "MMC",
}

_DRIVE_TYPES_BY_NAME = {dt.to_json(): dt for dt in DriveType}
_STORAGE_CONTROLLERS_BY_NAME = {sc.to_json(): sc for sc in StorageController}


def _lookup(value: Any, table: Dict[str, Any], what: str) -> Any:
    if not isinstance(value, str):
        raise TypeError(f"{what} must be a string, not {type(value).__name__}")
    key = value.lower()
    try:
        return table[key]
    except KeyError:
        raise ValueError(f"unknown {what}: {json.dumps(key)}") from None


def drive_type_from_json(value: Any) -> DriveType:
    """Parse a serialized drive type, case-insensitively."""
    return _lookup(value, _DRIVE_TYPES_BY_NAME, "drive type")


def storage_controller_from_json(value: Any) -> StorageController:
    """Parse a serialized storage controller, case-insensitively."""
    return _lookup(value, _STORAGE_CONTROLLERS_BY_NAME, "storage controller")


_UNITS: Tuple[Tuple[int, str], ...] = (
    (1024**6, "EB"),
    (1024**5, "PB"),
    (1024**4, "TB"),
    (1024**3, "GB"),
    (1024**2, "MB"),
    (1024, "KB"),
)


def _size_string(amount: int) -> str:
    if amount <= 0:
        return UNKNOWN
    unit, suffix = next(((u, s) for u, s in _UNITS if amount >= u), (1, "B"))
    return f"{math.ceil(amount / unit)}{suffix}"


@dataclass
class Partition:
    """A logical division of a disk."""

    name: str = ""
    label: str = ""
    mount_point: str = ""
    size_bytes: int = 0
    type: str = ""
    is_read_only: bool = False
    uuid: str = ""
    disk: Optional["Disk"] = field(default=None, repr=False, compare=False)

    def __str__(self) -> str:
        type_str = f"[{self.type}]" if self.type else ""
        mount_str = f" mounted@{self.mount_point}" if self.mount_point else ""
        return f"{self.name} ({_size_string(self.size_bytes)}) {type_str}{mount_str}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "mount_point": self.mount_point,
            "size_bytes": self.size_bytes,
            "type": self.type,
            "read_only": self.is_read_only,
            "uuid": self.uuid,
        }


@dataclass
class Disk:
    """A single disk drive providing raw block storage."""

    name: str = ""
    size_bytes: int = 0
    physical_block_size_bytes: int = 0
    drive_type: DriveType = DriveType.UNKNOWN
    is_removable: bool = False
    storage_controller: StorageController = StorageController.UNKNOWN
    bus_path: str = ""
    numa_node_id: int = -1
    vendor: str = ""
    model: str = ""
    serial_number: str = ""
    wwn: str = ""
    partitions: List[Partition] = field(default_factory=list)

    def __str__(self) -> str:
        at_node = f" (node #{self.numa_node_id})" if self.numa_node_id >= 0 else ""
        vendor = f" vendor={self.vendor}" if self.vendor else ""
        model = f" model={self.model}" if self.model != UNKNOWN else ""
        serial = f" serial={self.serial_number}" if self.serial_number != UNKNOWN else ""
        wwn = f" WWN={self.wwn}" if self.wwn != UNKNOWN else ""
        removable = " removable=true" if self.is_removable else ""
        return (
            f"{self.name} {self.drive_type} ({_size_string(self.size_bytes)}) "
            f"{self.storage_controller} [@{self.bus_path}{at_node}]"
            f"{vendor}{model}{serial}{wwn}{removable}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "size_bytes": self.size_bytes,
            "physical_block_size_bytes": self.physical_block_size_bytes,
            "drive_type": self.drive_type.to_json(),
            "removable": self.is_removable,
            "storage_controller": self.storage_controller.to_json(),
            "bus_path": self.bus_path,
            "vendor": self.vendor,
            "model": self.model,
            "serial_number": self.serial_number,
            "wwn": self.wwn,
            "partitions": [p.to_dict() for p in self.partitions],
        }


@dataclass
class BlockInfo:
    """All disk drives and partitions in the host system."""

    ctx: Optional[Context] = field(default=None, repr=False, compare=False)
    total_physical_bytes: int = 0
    disks: List[Disk] = field(default_factory=list)
    partitions: List[Partition] = field(default_factory=list)

    def __str__(self) -> str:
        plural = "disk" if len(self.disks) == 1 else "disks"
        return (
            f"block storage ({len(self.disks)} {plural}, "
            f"{_size_string(self.total_physical_bytes)} physical storage)"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_size_bytes": self.total_physical_bytes,
            "disks": [d.to_dict() for d in self.disks],
        }

    def _context(self) -> Context:
        return self.ctx if self.ctx is not None else new_context()

    def yaml_string(self) -> str:
        """Return the information as YAML under a top-level ``block`` key."""
        return safe_yaml(self._context(), {"block": self})

    def json_string(self, indent: bool) -> str:
        """Return the information as JSON under a top-level ``block`` key."""
        return safe_json(self._context(), {"block": self}, indent)


def _partition_from_dict(data: Dict[str, Any]) -> Partition:
    return Partition(
        name=data.get("name", ""),
        label=data.get("label", ""),
        mount_point=data.get("mount_point", ""),
        size_bytes=int(data.get("size_bytes", 0)),
        type=data.get("type", ""),
        is_read_only=bool(data.get("read_only", False)),
        uuid=data.get("uuid", ""),
    )


def _disk_from_dict(data: Dict[str, Any]) -> Disk:
    disk = Disk(
        name=data.get("name", ""),
        size_bytes=int(data.get("size_bytes", 0)),
        physical_block_size_bytes=int(data.get("physical_block_size_bytes", 0)),
        drive_type=drive_type_from_json(data.get("drive_type", "unknown")),
        is_removable=bool(data.get("removable", False)),
        storage_controller=storage_controller_from_json(
            data.get("storage_controller", "unknown")
        ),
        bus_path=data.get("bus_path", ""),
        vendor=data.get("vendor", ""),
        model=data.get("model", ""),
        serial_number=data.get("serial_number", ""),
        wwn=data.get("wwn", ""),
        partitions=[_partition_from_dict(p) for p in data.get("partitions") or []],
    )
    for part in disk.partitions:
        part.disk = disk
    return disk


def block_info_from_dict(data: Dict[str, Any]) -> BlockInfo:
    """Rebuild a BlockInfo from its serialized (``to_dict``) form."""
    return BlockInfo(
        total_physical_bytes=int(data.get("total_size_bytes", 0)),
        disks=[_disk_from_dict(d) for d in data.get("disks") or []],
    )