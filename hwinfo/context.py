"""Execution context shared by the hardware discovery functions."""

from __future__ import annotations

import os
import shutil
import sys
import tarfile
import tempfile
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, Optional

Alerter = Callable[[str], None]

DEFAULT_CHROOT = "/"

_ENV_CHROOT = "GHW_CHROOT"
_ENV_DISABLE_WARNINGS = "GHW_DISABLE_WARNINGS"
_ENV_DISABLE_TOOLS = "GHW_DISABLE_TOOLS"
_ENV_SNAPSHOT_PATH = "GHW_SNAPSHOT_PATH"
_ENV_SNAPSHOT_ROOT = "GHW_SNAPSHOT_ROOT"
_ENV_SNAPSHOT_EXCLUSIVE = "GHW_SNAPSHOT_EXCLUSIVE"


def _stderr_alerter(message: str) -> None:
    if not message.endswith("\n"):
        message += "\n"
    sys.stderr.write(message)


def _null_alerter(message: str) -> None:
    del message


def _env_alerter() -> Alerter:
    if _ENV_DISABLE_WARNINGS in os.environ:
        return _null_alerter
    return _stderr_alerter


def _env_chroot() -> str:
    return os.environ.get(_ENV_CHROOT, DEFAULT_CHROOT)


def _env_tools() -> bool:
    return _ENV_DISABLE_TOOLS not in os.environ


def _env_snapshot_path() -> str:
    return os.environ.get(_ENV_SNAPSHOT_PATH, "")


def _env_snapshot_root() -> str:
    return os.environ.get(_ENV_SNAPSHOT_ROOT, "")


def _env_snapshot_exclusive() -> bool:
    return _ENV_SNAPSHOT_EXCLUSIVE in os.environ


@dataclass(frozen=True)
class SnapshotOptions:
    """Where a snapshot archive lives and where to unpack it."""

    path: str
    root: Optional[str] = None
    exclusive: bool = False


@dataclass
class Option:
    """A set of configuration switches; unset fields are None."""

    chroot: Optional[str] = None
    snapshot: Optional[SnapshotOptions] = None
    alerter: Optional[Alerter] = None
    enable_tools: Optional[bool] = None
    path_overrides: Optional[Dict[str, str]] = None
    context: Optional["Context"] = None


def with_chroot(path: str) -> Option:
    """Read system information relative to ``path``."""
    return Option(chroot=path)


def with_snapshot(snapshot: SnapshotOptions) -> Option:
    """Read system information from an unpacked snapshot archive."""
    return Option(snapshot=snapshot)


def with_alerter(alerter: Alerter) -> Option:
    """Send warnings to ``alerter``."""
    return Option(alerter=alerter)


def with_null_alerter() -> Option:
    """Silence all warnings."""
    return Option(alerter=_null_alerter)


def with_disable_tools() -> Option:
    """Forbid running external tools."""
    return Option(enable_tools=False)


def with_path_overrides(overrides: Dict[str, str]) -> Option:
    """Replace standard root directories such as ``/proc`` or ``/sys``."""
    return Option(path_overrides=dict(overrides))


def with_context(ctx: "Context") -> Option:
    """Reuse an already prepared context."""
    return Option(context=ctx)


def merge(*args: Option) -> Option:
    """Combine options; later values win, defaults come from the environment."""
    merged = Option()
    for opt in args:
        if opt is None:
            continue
        for f in fields(Option):
            value = getattr(opt, f.name)
            if value is not None:
                setattr(merged, f.name, value)
    if merged.chroot is None:
        merged.chroot = _env_chroot()
    if merged.enable_tools is None:
        merged.enable_tools = _env_tools()
    if merged.alerter is None:
        merged.alerter = _env_alerter()
    if merged.snapshot is None:
        snap_path = _env_snapshot_path()
        if snap_path:
            merged.snapshot = SnapshotOptions(
                path=snap_path,
                root=_env_snapshot_root() or None,
                exclusive=_env_snapshot_exclusive(),
            )
    return merged


def _safe_members(archive: tarfile.TarFile, target: Path):
    base = target.resolve()
    for member in archive.getmembers():
        dest = (base / member.name).resolve()
        if member.name.startswith("/") or (dest != base and base not in dest.parents):
            raise ValueError(f"unsafe path in snapshot archive: {member.name!r}")
        yield member


def _unpack_into(archive_path: str, target: str) -> None:
    os.makedirs(target, exist_ok=True)
    with tarfile.open(archive_path, "r:*") as archive:
        archive.extractall(target, members=_safe_members(archive, Path(target)))


@dataclass
class Context:
    """Merged configuration used while discovering hardware."""

    chroot: str = DEFAULT_CHROOT
    enable_tools: bool = True
    snapshot_path: str = ""
    snapshot_root: str = ""
    snapshot_exclusive: bool = False
    path_overrides: Dict[str, str] = field(default_factory=dict)
    alert: Alerter = field(default=_stderr_alerter, repr=False)
    _snapshot_unpacked_path: str = field(default="", repr=False)
    _error: Optional[Exception] = field(default=None, repr=False)

    def do(self, fn: Callable[[], Any]) -> Any:
        """Run ``fn`` between setup and teardown and return its result."""
        self.setup()
        try:
            return fn()
        finally:
            try:
                self.teardown()
            except OSError as exc:
                self.warn("teardown error: %s", exc)

    def __enter__(self) -> "Context":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.teardown()
        except OSError as err:
            self.warn("teardown error: %s", err)

    def setup(self) -> None:
        """Prepare optional resources such as an unpacked snapshot."""
        if self._error is not None:
            raise self._error
        if not self.snapshot_path:
            return
        root = self.snapshot_root
        if not root:
            root = tempfile.mkdtemp(prefix="ghw-snapshot")
            try:
                _unpack_into(self.snapshot_path, root)
            except BaseException:
                shutil.rmtree(root, ignore_errors=True)
                raise
            self._snapshot_unpacked_path = root
        else:
            already_populated = os.path.isdir(root) and any(os.scandir(root))
            if not (self.snapshot_exclusive and already_populated):
                _unpack_into(self.snapshot_path, root)
        self.chroot = root

    def teardown(self) -> None:
        """Release whatever setup acquired."""
        if not self._snapshot_unpacked_path:
            return
        path = self._snapshot_unpacked_path
        self._snapshot_unpacked_path = ""
        shutil.rmtree(path)

    def warn(self, msg: str, *args: Any) -> None:
        """Emit a warning through the configured alerter."""
        text = msg % args if args else msg
        self.alert("WARNING: " + text)


def new_context(*args: Option) -> Context:
    """Build a context from the given options."""
    merged = merge(*args)
    if merged.context is not None:
        if not isinstance(merged.context, Context):
            raise TypeError("with_context() requires a Context instance")
        return merged.context
    ctx = Context(
        chroot=merged.chroot,
        enable_tools=bool(merged.enable_tools),
        alert=merged.alerter,
    )
    if merged.snapshot is not None:
        ctx.snapshot_path = merged.snapshot.path
        if merged.snapshot.root is not None:
            ctx.snapshot_root = merged.snapshot.root
        ctx.snapshot_exclusive = merged.snapshot.exclusive
    if merged.path_overrides is not None:
        ctx.path_overrides = dict(merged.path_overrides)
    if ctx.snapshot_path and ctx.chroot != DEFAULT_CHROOT:
        ctx._error = ValueError(
            f"Conflicting options: chroot {ctx.chroot!r} and snapshot path {ctx.snapshot_path!r}"
        )
    return ctx


def context_from_env() -> Context:
    """Build a context purely from environment variables and defaults."""
    return Context(
        chroot=_env_chroot(),
        enable_tools=_env_tools(),
        snapshot_path=_env_snapshot_path(),
        snapshot_root=_env_snapshot_root(),
        snapshot_exclusive=_env_snapshot_exclusive(),
        alert=_env_alerter(),
    )