# hwinfo

Discover hardware information about the host system: block storage, CPUs,
graphics cards, chassis, BIOS and baseboard.

On Linux the data is read from `/proc`, `/sys` and the udev runtime database
(`/run/udev/data`); partition UUIDs are looked up with `blkid` when external
tools are allowed. On macOS only block storage is supported, read with
`diskutil` and `ioreg`. Every other component raises `OSError` on platforms
other than Linux.

## Installation

```
pip install .
```

## Command line

```
hwinfo                 # summary of block, cpu, gpu, chassis, bios and baseboard
hwinfo block           # disks and partitions
hwinfo cpu             # CPU packages, cores and capabilities
hwinfo gpu             # graphics cards
hwinfo chassis
hwinfo bios
hwinfo baseboard
hwinfo version
```

Output can be `human` (the default), `json` or `yaml`, chosen with
`-f`/`--format`. `--pretty` indents JSON output by two spaces:

```
hwinfo --format json --pretty
hwinfo block -f yaml
```

Without a subcommand and with `json` or `yaml`, everything is gathered into
one document with the keys `block`, `cpu`, `gpu`, `chassis`, `bios` and
`baseboard`. An unrecognised format given without a subcommand is reported
as an error and the command exits with status 1, as it does when gathering
information fails.

## Library

Each component module has a `new(*options)` function returning a record with
a readable `str()`, a `to_dict()` method, and `json_string(indent)` /
`yaml_string()` methods that wrap the record under a top-level key named
after the component.

```python
from hwinfo import chassis, cpu, gpu
from hwinfo.host import block, host
from hwinfo.context import with_chroot, with_path_overrides

info = cpu.new()
print(info)
for proc in info.processors:
    print(" ", proc, proc.has_capability("sse4_2"))
    for core in proc.cores:
        print("   ", core)

storage = block()
for disk in storage.disks:
    print(disk)
    for part in disk.partitions:
        print("  ", part)

# Inspect a different root filesystem, or point at relocated /proc and /sys
cards = gpu.new(with_chroot("/mnt/target"))
cpus = cpu.new(with_path_overrides({"/proc": "/host-proc", "/sys": "/host-sys"}))

print(chassis.new().json_string(True))

# Everything at once, serialised
everything = host()
print(everything.json_string(True))
print(everything.yaml_string())
```

Serialised block information can be read back:

```python
import json
from hwinfo.block import block_info_from_dict

data = json.loads(storage.json_string(False))
again = block_info_from_dict(data["block"])
```

Smaller helpers are public as well: `hwinfo.cpu.processors_from_cpuinfo(text)`
parses `/proc/cpuinfo` content, `hwinfo.cpu.cores_for_node(ctx, node_id)`
lists the cores of a NUMA node, and `hwinfo.block_linux.parse_mount_entry(line)`
and `hwinfo.block_linux.disk_types(name)` parse mount table lines and classify
device names.

### Options

Options from `hwinfo.context` are passed positionally to any discovery
function; later options override earlier ones.

- `with_chroot(path)`: read system files relative to `path`.
- `with_snapshot(SnapshotOptions(path, root=None, exclusive=False))`: unpack a
  tar archive and read from it. Without `root` it goes into a temporary
  directory that is removed afterwards; with `root` it is unpacked there and
  left in place (with `exclusive=True`, a non-empty `root` is used as it is).
  Combining a snapshot with a chroot other than `/` is an error.
- `with_path_overrides(mapping)`: relocate `/etc`, `/proc`, `/run`, `/sys` or `/var`.
- `with_alerter(callable)` / `with_null_alerter()`: route or silence warnings
  (by default they go to standard error).
- `with_disable_tools()`: never start external programs such as `blkid`,
  `diskutil` or `ioreg`.
- `with_context(ctx)`: reuse a `Context` built with `new_context(...)`.

Defaults come from the environment: `GHW_CHROOT` sets the root,
`GHW_DISABLE_WARNINGS` silences warnings, `GHW_DISABLE_TOOLS` forbids
external tools, and `GHW_SNAPSHOT_PATH`, `GHW_SNAPSHOT_ROOT` and
`GHW_SNAPSHOT_EXCLUSIVE` describe a snapshot.

Values that cannot be read are reported as `unknown`.

## What it does not do

- It does not report memory, network interfaces, NUMA topology, PCI devices
  or product (system) information; `host()` covers only the six components
  above.
- Graphics cards carry their PCI address, index and NUMA node, but no PCI
  vendor or product details: `GraphicsCard.device_info` stays `None`.
- It has no command for creating snapshot archives; it only reads them.
- Windows is not supported.