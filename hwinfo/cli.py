"""Command-line interface that reports hardware information."""

from __future__ import annotations

import argparse
import json
import math
import platform
import sys
from typing import Callable, Dict, List, Optional, Sequence

from hwinfo import baseboard as _baseboard
from hwinfo import bios as _bios
from hwinfo import chassis as _chassis
from hwinfo import cpu as _cpu
from hwinfo import gpu as _gpu
from hwinfo import host as _host

OUTPUT_FORMAT_HUMAN = "human"
OUTPUT_FORMAT_JSON = "json"
OUTPUT_FORMAT_YAML = "yaml"
OUTPUT_FORMATS = (OUTPUT_FORMAT_HUMAN, OUTPUT_FORMAT_JSON, OUTPUT_FORMAT_YAML)

VERSION = "(Unknown Version)"
BUILD_HASH = "No Git-hash Provided."
BUILD_DATE = "No Build Date Provided."

_USAGE_OUTPUT_FORMAT = "Output format. Choices are 'json','yaml', and 'human'."

_DEBUG_HEADER = """
Date: {date}
Build: {build}
Version: {version}
Git Hash: {git_hash}
"""

_BANNER = r"""
          __
 .-----. |  |--. .--.--.--.
 |  _  | |     | |  |  |  |
 |___  | |__|__| |________|
 |_____|

Discover hardware information.
"""

_GATHER_ERRORS = (OSError, RuntimeError, ValueError, TypeError)


class CommandError(RuntimeError):
    """A command failed and should end the program with an error status."""


def format_capabilities(capabilities: Sequence[str]) -> List[str]:
    """Lay out processor capabilities in rows of six, as printed by ``cpu``."""
    caps = list(capabilities)
    rows = math.ceil(len(caps) / 6)
    lines: List[str] = []
    for row in range(1, rows):
        start = row * 6 - 1
        end = min(start + 6, len(caps))
        text = " ".join(caps[start:end])
        if row == 1:
            lines.append(f"  capabilities: [{text}")
        elif end < len(caps):
            lines.append(f"                 {text}")
        else:
            lines.append(f"                 {text}]")
    return lines


def _gather(what: str, fn: Callable[[], object]):
    try:
        return fn()
    except _GATHER_ERRORS as exc:
        raise CommandError(f"error getting {what} info: {exc}") from exc


def _print_info(info, opts: argparse.Namespace, details: Callable[[], None] = None) -> None:
    if opts.format == OUTPUT_FORMAT_HUMAN:
        print(f"{info}")
        if details is not None:
            details()
    elif opts.format == OUTPUT_FORMAT_JSON:
        print(info.json_string(opts.pretty))
    elif opts.format == OUTPUT_FORMAT_YAML:
        print(info.yaml_string(), end="")


def show_baseboard(opts: argparse.Namespace) -> None:
    _print_info(_gather("baseboard", _baseboard.new), opts)


def show_bios(opts: argparse.Namespace) -> None:
    _print_info(_gather("BIOS", _bios.new), opts)


def show_chassis(opts: argparse.Namespace) -> None:
    _print_info(_gather("chassis", _chassis.new), opts)


def show_block(opts: argparse.Namespace) -> None:
    info = _gather("block device", _host.block)

    def details() -> None:
        for disk in info.disks:
            print(f" {disk}")
            for part in disk.partitions:
                print(f"  {part}")

    _print_info(info, opts, details)


def show_cpu(opts: argparse.Namespace) -> None:
    info = _gather("CPU", _cpu.new)

    def details() -> None:
        for proc in info.processors:
            print(f" {proc}")
            for core in proc.cores:
                print(f"  {core}")
            for line in format_capabilities(proc.capabilities):
                print(line)

    _print_info(info, opts, details)


def show_gpu(opts: argparse.Namespace) -> None:
    info = _gather("GPU", _gpu.new)

    def details() -> None:
        for card in info.graphics_cards:
            print(f" {card}")

    _print_info(info, opts, details)


def show_version(opts: argparse.Namespace) -> None:
    del opts
    build = (
        f"{platform.python_implementation()} {platform.python_version()} "
        f"{sys.platform}/{platform.machine()}"
    )
    print(
        _DEBUG_HEADER.format(
            date=BUILD_DATE, build=build, version=VERSION, git_hash=BUILD_HASH
        ),
        end="",
    )


def show_all(opts: argparse.Namespace) -> None:
    if opts.format not in OUTPUT_FORMATS:
        raise CommandError(f"invalid output format {json.dumps(opts.format)}")
    if opts.format == OUTPUT_FORMAT_HUMAN:
        for show in (show_block, show_cpu, show_gpu, show_chassis, show_bios, show_baseboard):
            show(opts)
        return
    info = _gather("host", _host.host)
    if opts.format == OUTPUT_FORMAT_JSON:
        print(info.json_string(opts.pretty))
    else:
        print(info.yaml_string(), end="")


_COMMANDS: Dict[str, tuple] = {
    "baseboard": ("Show baseboard information for the host system", show_baseboard),
    "bios": ("Show BIOS information for the host system", show_bios),
    "block": ("Show block storage information for the host system", show_block),
    "chassis": ("Show chassis information for the host system", show_chassis),
    "cpu": ("Show CPU information for the host system", show_cpu),
    "gpu": ("Show graphics/GPU information for the host system", show_gpu),
    "version": ("Display the version", show_version),
}


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--debug", action="store_true", default=argparse.SUPPRESS,
        help="Enable or disable debug mode",
    )
    common.add_argument(
        "-f", "--format", default=argparse.SUPPRESS, help=_USAGE_OUTPUT_FORMAT
    )
    common.add_argument(
        "--pretty", action="store_true", default=argparse.SUPPRESS,
        help="When outputting JSON, use indentation",
    )
    parser = argparse.ArgumentParser(
        prog="hwinfo",
        description=_BANNER,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        parents=[common],
    )
    parser.set_defaults(format=OUTPUT_FORMAT_HUMAN, pretty=False, debug=False, handler=show_all)
    sub = parser.add_subparsers(dest="command")
    for name, (help_text, handler) in _COMMANDS.items():
        cmd = sub.add_parser(name, help=help_text, parents=[common])
        cmd.set_defaults(handler=handler)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line; return the process exit status."""
    opts = _build_parser().parse_args(argv)
    try:
        opts.handler(opts)
    except CommandError as exc:
        print(exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())