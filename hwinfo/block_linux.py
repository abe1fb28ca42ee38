"""Block storage discovery from sysfs, udev and the mount table."""

from __future__ import annotations

import os
import re
import subprocess
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from hwinfo.block import BlockInfo, Disk, DriveType, Partition, StorageController
from hwinfo.context import Context
from hwinfo.paths import UNKNOWN, Paths, new_paths, safe_int_from_file

SECTOR_SIZE = 512

_MOUNT_ESCAPES = {"011": "\t", "012": "\n", "040": " ", "\\": "\\"}
_MOUNT_ESCAPE_RE = re.compile(r"\\(011|012|040|\\)")

# Device name prefixes, checked in order, and what they imply.
_NAME_PREFIXES: Tuple[Tuple[str, DriveType, StorageController], ...] = (
    ("fd", DriveType.FDD, StorageController.UNKNOWN),
    ("sd", DriveType.HDD, StorageController.SCSI),
    ("hd", DriveType.HDD, StorageController.IDE),
    ("vd", DriveType.HDD, StorageController.VIRTIO),
    ("nvme", DriveType.SSD, StorageController.NVME),
    ("sr", DriveType.ODD, StorageController.SCSI),
    ("xvd", DriveType.HDD, StorageController.SCSI),
    ("mmc", DriveType.SSD, StorageController.MMC),
)


@dataclass
class MountEntry:
    """One line of the mount table."""

    partition: str
    mountpoint: str
    filesystem_type: str
    options: List[str] = field(default_factory=list)


def parse_mount_entry(line: str) -> Optional[MountEntry]:
    """Parse a mount table line, or return None if it is not a device mount."""
    if not line.startswith("/"):
        return None
    fields_ = line.split()
    if len(fields_) < 4:
        return None
    mountpoint = _MOUNT_ESCAPE_RE.sub(lambda m: _MOUNT_ESCAPES[m.group(1)], fields_[1])
    return MountEntry(
        partition=fields_[0],
        mountpoint=mountpoint,
        filesystem_type=fields_[2],
        options=fields_[3].split(","),
    )


def disk_types(name: str) -> Tuple[DriveType, StorageController]:
    """Guess drive type and storage controller from a device name."""
    for prefix, drive_type, controller in _NAME_PREFIXES:
        if name.startswith(prefix):
            return drive_type, controller
    return DriveType.UNKNOWN, StorageController.UNKNOWN


def _read_text(path: str) -> Optional[str]:
    try:
        with open(path, "rb") as handle:
            return handle.read().decode("utf-8", "replace")
    except OSError:
        return None


def _read_uint(path: str) -> Optional[int]:
    text = _read_text(path)
    if text is None:
        return None
    text = text.strip()
    if not text.isdigit():
        return None
    return int(text)


def _disk_physical_block_size_bytes(paths: Paths, disk: str) -> int:
    value = _read_uint(os.path.join(paths.sys_block, disk, "queue", "physical_block_size"))
    return value if value is not None else 0


def _disk_size_bytes(paths: Paths, disk: str) -> int:
    value = _read_uint(os.path.join(paths.sys_block, disk, "size"))
    return value * SECTOR_SIZE if value is not None else 0


def _disk_numa_node_id(paths: Paths, disk: str) -> int:
    try:
        link = os.readlink(os.path.join(paths.sys_block, disk))
    except OSError:
        return -1
    if not link.startswith("../devices/"):
        return -1
    text = _read_text(os.path.join(paths.sys_block, link, "numa_node"))
    if text is None:
        return -1
    try:
        return int(text.strip())
    except ValueError:
        return -1


def _disk_vendor(paths: Paths, disk: str) -> str:
    text = _read_text(os.path.join(paths.sys_block, disk, "device", "vendor"))
    return text.strip() if text is not None else UNKNOWN


def _udev_info(paths: Paths, disk: str) -> Optional[Dict[str, str]]:
    dev_no = _read_text(os.path.join(paths.sys_block, disk, "dev"))
    if dev_no is None:
        return None
    data = _read_text(os.path.join(paths.run_udev_data, "b" + dev_no.strip()))
    if data is None:
        return None
    info: Dict[str, str] = {}
    for line in data.split("\n"):
        if line.startswith("E:"):
            key, sep, value = line[2:].partition("=")
            if sep:
                info[key] = value
    return info


def _first_udev_value(paths: Paths, disk: str, *keys: str) -> str:
    info = _udev_info(paths, disk)
    if info is None:
        return UNKNOWN
    return next((info[k] for k in keys if k in info), UNKNOWN)


def _disk_part_uuid(ctx: Context, part: str) -> str:
    if not ctx.enable_tools:
        ctx.warn("EnableTools=false disables partition UUID detection.")
        return ""
    if not part.startswith("/dev"):
        part = "/dev/" + part
    try:
        result = subprocess.run(
            ["blkid", "-s", "PARTUUID", part],
            capture_output=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        ctx.warn("failed to read disk partuuid of %s : %s\n", part, exc)
        return ""
    out = result.stdout.decode("utf-8", "replace")
    if not out:
        return ""
    pieces = out.split("PARTUUID=")
    if len(pieces) != 2:
        ctx.warn("failed to parse the partuuid of %s\n", part)
        return ""
    return pieces[1].strip().replace('"', "")


def _disk_is_removable(paths: Paths, disk: str) -> bool:
    text = _read_text(os.path.join(paths.sys_block, disk, "removable"))
    return text is not None and text.strip() == "1"


def _disk_is_rotational(ctx: Context, paths: Paths, disk: str) -> bool:
    path = os.path.join(paths.sys_block, disk, "queue", "rotational")
    return safe_int_from_file(ctx, path) == 1


def _partition_size_bytes(paths: Paths, disk: str, part: str) -> int:
    value = _read_uint(os.path.join(paths.sys_block, disk, part, "size"))
    return value * SECTOR_SIZE if value is not None else 0


def partition_info(paths: Paths, part: str) -> Tuple[str, str, bool]:
    """Return (mount point, filesystem type, read-only) for a partition."""
    if not part.startswith("/dev"):
        part = "/dev/" + part
    try:
        with open(paths.proc_mounts, encoding="utf-8", errors="replace") as handle:
            for line in handle:
                entry = parse_mount_entry(line.rstrip("\n"))
                if entry is None or entry.partition != part:
                    continue
                return entry.mountpoint, entry.filesystem_type, "rw" not in entry.options
    except OSError:
        pass
    return "", "", True


def _disk_partitions(ctx: Context, paths: Paths, disk: str) -> List[Partition]:
    try:
        names = sorted(os.listdir(os.path.join(paths.sys_block, disk)))
    except OSError as exc:
        ctx.warn("failed to read disk partitions: %s\n", exc)
        return []
    parts: List[Partition] = []
    for name in names:
        if not name.startswith(disk):
            continue
        mount_point, part_type, read_only = partition_info(paths, name)
        parts.append(
            Partition(
                name=name,
                size_bytes=_partition_size_bytes(paths, disk, name),
                mount_point=mount_point,
                type=part_type,
                is_read_only=read_only,
                uuid=_disk_part_uuid(ctx, name),
            )
        )
    return parts


def disks(ctx: Context, paths: Paths) -> List[Disk]:
    """List the disks found under the sysfs block directory."""
    try:
        names = sorted(os.listdir(paths.sys_block))
    except OSError:
        return []
    result: List[Disk] = []
    for name in names:
        if name.startswith("loop"):
            continue
        drive_type, controller = disk_types(name)
        if not _disk_is_rotational(ctx, paths, name):
            drive_type = DriveType.SSD
        disk = Disk(
            name=name,
            size_bytes=_disk_size_bytes(paths, name),
            physical_block_size_bytes=_disk_physical_block_size_bytes(paths, name),
            drive_type=drive_type,
            is_removable=_disk_is_removable(paths, name),
            storage_controller=controller,
            bus_path=_first_udev_value(paths, name, "ID_PATH"),
            numa_node_id=_disk_numa_node_id(paths, name),
            vendor=_disk_vendor(paths, name),
            model=_first_udev_value(paths, name, "ID_MODEL"),
            serial_number=_first_udev_value(paths, name, "ID_SERIAL_SHORT", "ID_SERIAL"),
            wwn=_first_udev_value(paths, name, "ID_WWN_WITH_EXTENSION", "ID_WWN"),
        )
        disk.partitions = _disk_partitions(ctx, paths, name)
        for part in disk.partitions:
            part.disk = disk
        result.append(disk)
    return result


def load(ctx: Context) -> BlockInfo:
    """Describe the block storage visible through the context's filesystem."""
    found = disks(ctx, new_paths(ctx))
    return BlockInfo(
        ctx=ctx,
        total_physical_bytes=sum(d.size_bytes for d in found),
        disks=found,
    )