import pytest

from hwinfo.block import DriveType, StorageController
from hwinfo.block_linux import (
    MountEntry,
    disk_types,
    disks,
    load,
    parse_mount_entry,
    partition_info,
)
from hwinfo.context import (
    new_context,
    with_alerter,
    with_chroot,
    with_disable_tools,
    with_null_alerter,
)
from hwinfo.paths import UNKNOWN, new_paths


@pytest.mark.parametrize(
    "line, expected",
    [
        (
            "/dev/sda6 / ext4 rw,relatime,errors=remount-ro,data=ordered 0 0",
            MountEntry("/dev/sda6", "/", "ext4",
                       ["rw", "relatime", "errors=remount-ro", "data=ordered"]),
        ),
        (
            "/dev/sda8 /home/Name\\040with\\040spaces ext4 ro 0 0",
            MountEntry("/dev/sda8", "/home/Name with spaces", "ext4", ["ro"]),
        ),
        (
            "/dev/sda8 /home/Name\\011with\\012tab&newline ext4 ro 0 0",
            MountEntry("/dev/sda8", "/home/Name\twith\ntab&newline", "ext4", ["ro"]),
        ),
        (
            "/dev/sda1 /home/Name\\\\withslash ext4 ro 0 0",
            MountEntry("/dev/sda1", "/home/Name\\withslash", "ext4", ["ro"]),
        ),
        ("Indy, bad dates", None),
        ("", None),
        ("/dev/sda1 /mnt", None),
    ],
)
def test_parse_mount_entry(line, expected):
    assert parse_mount_entry(line) == expected


@pytest.mark.parametrize(
    "name, drive_type, controller",
    [
        ("sda6", DriveType.HDD, StorageController.SCSI),
        ("nvme0n1", DriveType.SSD, StorageController.NVME),
        ("vda1", DriveType.HDD, StorageController.VIRTIO),
        ("xvda1", DriveType.HDD, StorageController.SCSI),
        ("fda1", DriveType.FDD, StorageController.UNKNOWN),
        ("sr0", DriveType.ODD, StorageController.SCSI),
        ("mmcblk0", DriveType.SSD, StorageController.MMC),
        ("hdb", DriveType.HDD, StorageController.IDE),
        ("Indy, bad dates", DriveType.UNKNOWN, StorageController.UNKNOWN),
    ],
)
def test_disk_types(name, drive_type, controller):
    assert disk_types(name) == (drive_type, controller)


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


@pytest.fixture
def fake_root(tmp_path):
    sda = tmp_path / "sys" / "block" / "sda"
    _write(sda / "size", "100\n")
    _write(sda / "queue" / "physical_block_size", "4096\n")
    _write(sda / "queue" / "rotational", "1\n")
    _write(sda / "removable", "0\n")
    _write(sda / "device" / "vendor", "ACME    \n")
    _write(sda / "dev", "8:0\n")
    _write(sda / "sda1" / "size", "10\n")
    _write(sda / "sda2" / "size", "20\n")
    _write(sda / "queue" / "other", "x")

    nvme = tmp_path / "sys" / "block" / "nvme0n1"
    _write(nvme / "size", "8\n")
    _write(nvme / "queue" / "rotational", "0\n")
    _write(nvme / "removable", "1\n")

    _write(tmp_path / "sys" / "block" / "loop0" / "size", "999\n")

    _write(
        tmp_path / "run" / "udev" / "data" / "b8:0",
        "S:disk/by-id/example\n"
        "E:ID_MODEL=ExampleDisk\n"
        "E:ID_SERIAL=ExampleDisk_SERIAL0000\n"
        "E:ID_SERIAL_SHORT=SERIAL0000\n"
        "E:ID_PATH=pci-0000:00:1f.2-ata-1\n"
        "E:ID_WWN=0x5000000000000000\n",
    )
    _write(
        tmp_path / "proc" / "self" / "mounts",
        "proc /proc proc rw 0 0\n"
        "/dev/sda1 /boot ext4 rw,relatime 0 0\n"
        "/dev/sda2 /data\\040dir xfs ro 0 0\n",
    )
    return tmp_path


def _ctx(root):
    return new_context(with_chroot(str(root)), with_disable_tools(), with_null_alerter())


def test_partition_info_mounted_rw(fake_root):
    paths = new_paths(_ctx(fake_root))
    assert partition_info(paths, "sda1") == ("/boot", "ext4", False)
    assert partition_info(paths, "/dev/sda2") == ("/data dir", "xfs", True)


def test_partition_info_unmounted(fake_root):
    paths = new_paths(_ctx(fake_root))
    assert partition_info(paths, "sdz9") == ("", "", True)


def test_partition_info_missing_mount_table(tmp_path):
    paths = new_paths(_ctx(tmp_path))
    assert partition_info(paths, "sda1") == ("", "", True)


def test_disks_from_fake_sysfs(fake_root):
    ctx = _ctx(fake_root)
    found = disks(ctx, new_paths(ctx))
    assert [d.name for d in found] == ["nvme0n1", "sda"]

    nvme, sda = found
    assert sda.size_bytes == 51200
    assert sda.physical_block_size_bytes == 4096
    assert sda.drive_type == DriveType.HDD
    assert sda.storage_controller == StorageController.SCSI
    assert sda.is_removable is False
    assert sda.vendor == "ACME"
    assert sda.model == "ExampleDisk"
    assert sda.serial_number == "SERIAL0000"
    assert sda.bus_path == "pci-0000:00:1f.2-ata-1"
    assert sda.wwn == "0x5000000000000000"
    assert sda.numa_node_id == -1

    assert [p.name for p in sda.partitions] == ["sda1", "sda2"]
    first, second = sda.partitions
    assert first.size_bytes == 5120
    assert first.mount_point == "/boot"
    assert first.type == "ext4"
    assert first.is_read_only is False
    assert first.uuid == ""
    assert second.is_read_only is True
    assert all(p.disk is sda for p in sda.partitions)

    assert nvme.drive_type == DriveType.SSD
    assert nvme.storage_controller == StorageController.NVME
    assert nvme.is_removable is True
    assert nvme.model == UNKNOWN
    assert nvme.serial_number == UNKNOWN
    assert nvme.vendor == UNKNOWN
    assert nvme.physical_block_size_bytes == 0
    assert nvme.partitions == []


def test_non_rotational_disk_is_ssd(fake_root):
    (fake_root / "sys" / "block" / "sda" / "queue" / "rotational").write_text("0\n")
    ctx = _ctx(fake_root)
    sda = next(d for d in disks(ctx, new_paths(ctx)) if d.name == "sda")
    assert sda.drive_type == DriveType.SSD


def test_disks_without_sysfs(tmp_path):
    ctx = _ctx(tmp_path)
    assert disks(ctx, new_paths(ctx)) == []


def test_load_totals(fake_root):
    ctx = _ctx(fake_root)
    info = load(ctx)
    assert info.total_physical_bytes == 51200 + 4096
    assert len(info.disks) == 2
    assert str(info) == "block storage (2 disks, 55KB physical storage)"


def test_disabled_tools_warn_about_uuid(fake_root):
    messages = []
    ctx = new_context(
        with_chroot(str(fake_root)), with_disable_tools(), with_alerter(messages.append)
    )
    found = disks(ctx, new_paths(ctx))
    sda = next(d for d in found if d.name == "sda")
    assert [p.uuid for p in sda.partitions] == ["", ""]
    uuid_warnings = [m for m in messages if "partition UUID detection" in m]
    assert len(uuid_warnings) == 2