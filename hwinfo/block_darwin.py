"""Block storage discovery through the ``diskutil`` and ``ioreg`` tools."""

from __future__ import annotations

import plistlib
import posixpath
import subprocess
import sys
from typing import Any, Dict, List, Optional

from hwinfo.block import BlockInfo, Disk, DriveType, Partition, StorageController
from hwinfo.context import Context

_IOREG_MODEL = "Model Number"
_IOREG_SERIAL = "Serial Number"
_IOREG_VENDOR = "Vendor Name"


def _run(args: List[str]) -> bytes:
    return subprocess.run(args, capture_output=True, check=True).stdout


def _parse_plist(data: bytes) -> Any:
    try:
        return plistlib.loads(data)
    except (plistlib.InvalidFileException, ValueError) as exc:
        raise ValueError(str(exc)) from exc


def _diskutil_list() -> Dict[str, Any]:
    try:
        out = _run(["diskutil", "list", "-plist"])
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"diskutil list failed: {exc}") from exc
    try:
        data = _parse_plist(out)
    except ValueError as exc:
        raise RuntimeError(f"diskutil list plist unmarshal failed: {exc}") from exc
    if not isinstance(data, dict):
        raise RuntimeError("diskutil list plist unmarshal failed: expected a dictionary")
    return data


def _diskutil_info(device: str) -> Dict[str, Any]:
    try:
        out = _run(["diskutil", "info", "-plist", device])
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"diskutil info for {device!r} failed: {exc}") from exc
    try:
        data = _parse_plist(out)
    except ValueError as exc:
        raise RuntimeError(
            f"diskutil info plist unmarshal for {device!r} failed: {exc}"
        ) from exc
    if not isinstance(data, dict):
        raise RuntimeError(
            f"diskutil info plist unmarshal for {device!r} failed: expected a dictionary"
        )
    return data


def _ioreg(device_tree_path: str) -> Optional[Dict[str, Any]]:
    name = posixpath.basename(device_tree_path.rstrip("/")) or "."
    args = ["ioreg", "-a", "-d", "1", "-r", "-n", name]
    try:
        out = _run(args)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"ioreg query for {device_tree_path!r} failed: {exc}") from exc
    if not out:
        return None
    try:
        data = _parse_plist(out)
    except ValueError as exc:
        raise RuntimeError(f"ioreg unmarshal for {device_tree_path!r} failed: {exc}") from exc
    if not isinstance(data, list):
        raise RuntimeError(
            f"ioreg unmarshal for {device_tree_path!r} failed: expected an array"
        )
    if len(data) != 1:
        raise RuntimeError(
            f"ioreg unmarshal resulted in {len(data)} I/O device tree nodes (expected 1)"
        )
    return data[0]


def _make_partition(node: Dict[str, Any], is_apfs: bool) -> Partition:
    size = int(node.get("Size", 0))
    ident = node.get("DeviceIdentifier", "")
    if size < 0:
        raise ValueError(f"invalid size {size} of partition {ident!r}")
    info = _diskutil_info(ident)
    return Partition(
        name=ident,
        label=node.get("VolumeName", ""),
        mount_point=node.get("MountPoint", ""),
        size_bytes=size,
        type="APFS Volume" if is_apfs else node.get("Content", ""),
        is_read_only=not info.get("WritableVolume", False),
        uuid=node.get("VolumeUUID", ""),
    )


def drive_type_from_plist(info: Dict[str, Any]) -> DriveType:
    """Determine the drive type from a ``diskutil info`` property list."""
    return DriveType.SSD if info.get("SolidState", False) else DriveType.HDD


def storage_controller_from_plist(info: Dict[str, Any]) -> StorageController:
    """Determine the storage controller from a ``diskutil info`` property list."""
    if info.get("DeviceTreePath", "").endswith("IONVMeController"):
        return StorageController.NVME
    return StorageController.SCSI


def load(ctx: Context) -> BlockInfo:
    """Describe the block storage reported by the system tools."""
    if not ctx.enable_tools:
        raise RuntimeError("EnableTools=false on darwin disables block support entirely.")
    try:
        listing = _diskutil_list()
    except RuntimeError as exc:
        print(exc, file=sys.stderr)
        raise

    info = BlockInfo(ctx=ctx)
    for node in listing.get("AllDisksAndPartitions") or []:
        ident = node.get("DeviceIdentifier", "")
        size = int(node.get("Size", 0))
        if size < 0:
            raise ValueError(f"invalid size {size} of disk {ident!r}")

        disk_info = _diskutil_info(ident)
        block_size = int(disk_info.get("DeviceBlockSize", 0))
        if block_size < 0:
            raise ValueError(f"invalid block size {block_size} of disk {ident!r}")

        tree_path = disk_info.get("DeviceTreePath", "")
        bus_path = tree_path[len("IODeviceTree:"):] if tree_path.startswith(
            "IODeviceTree:"
        ) else tree_path

        ioreg = _ioreg(tree_path)
        if ioreg is None:
            continue

        disk = Disk(
            name=ident,
            size_bytes=size,
            physical_block_size_bytes=block_size,
            drive_type=drive_type_from_plist(disk_info),
            is_removable=bool(disk_info.get("Removable", False)),
            storage_controller=storage_controller_from_plist(disk_info),
            bus_path=bus_path,
            numa_node_id=-1,
            vendor=ioreg.get(_IOREG_VENDOR, ""),
            model=ioreg.get(_IOREG_MODEL, ""),
            serial_number=ioreg.get(_IOREG_SERIAL, ""),
            wwn="",
        )
        disk.partitions = [
            _make_partition(p, False) for p in node.get("Partitions") or []
        ] + [_make_partition(v, True) for v in node.get("APFSVolumes") or []]
        for part in disk.partitions:
            part.disk = disk

        info.total_physical_bytes += size
        info.disks.append(disk)
        info.partitions.extend(disk.partitions)
    return info