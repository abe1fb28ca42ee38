import io
import os
import tarfile

import pytest

from hwinfo.context import (
    Option,
    SnapshotOptions,
    context_from_env,
    merge,
    new_context,
    with_alerter,
    with_chroot,
    with_context,
    with_disable_tools,
    with_null_alerter,
    with_path_overrides,
    with_snapshot,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith("GHW_"):
            monkeypatch.delenv(name)


def _add_file(archive, name, data):
    info = tarfile.TarInfo(name)
    info.size = len(data)
    archive.addfile(info, io.BytesIO(data))


@pytest.fixture
def snapshot_archive(tmp_path):
    path = tmp_path / "testdata.tar.gz"
    with tarfile.open(path, "w:gz") as archive:
        _add_file(archive, "proc/cpuinfo", b"processor : 0\n")
    return str(path)


def test_snapshot_context_unpacks_and_cleans_up(snapshot_archive):
    ctx = new_context(with_snapshot(SnapshotOptions(path=snapshot_archive)))
    seen = []

    def fn():
        seen.append(ctx.chroot)
        seen.append(os.path.isfile(os.path.join(ctx.chroot, "proc", "cpuinfo")))
        return "done"

    assert ctx.do(fn) == "done"
    assert seen[0] != ""
    assert seen[1] is True
    assert not os.path.exists(seen[0])


def test_snapshot_with_root_is_kept(snapshot_archive, tmp_path):
    root = tmp_path / "root"
    ctx = new_context(with_snapshot(SnapshotOptions(path=snapshot_archive, root=str(root))))
    ctx.do(lambda: None)
    assert ctx.chroot == str(root)
    assert (root / "proc" / "cpuinfo").read_bytes() == b"processor : 0\n"


def test_unsafe_archive_rejected(tmp_path):
    path = tmp_path / "bad.tar.gz"
    with tarfile.open(path, "w:gz") as archive:
        _add_file(archive, "../escape", b"x")
    ctx = new_context(with_snapshot(SnapshotOptions(path=str(path))))
    with pytest.raises(ValueError):
        ctx.setup()


def test_conflicting_chroot_and_snapshot(snapshot_archive):
    ctx = new_context(
        with_chroot("/elsewhere"),
        with_snapshot(SnapshotOptions(path=snapshot_archive)),
    )
    with pytest.raises(ValueError, match="Conflicting options"):
        ctx.do(lambda: None)


def test_setup_without_snapshot_keeps_chroot():
    ctx = new_context(with_chroot("/host"))
    ctx.setup()
    assert ctx.chroot == "/host"
    ctx.teardown()
    assert ctx.chroot == "/host"


def test_with_context_returns_same_object():
    ctx = new_context(with_chroot("/a"))
    assert new_context(with_context(ctx)) is ctx


def test_with_context_rejects_other_types():
    with pytest.raises(TypeError):
        new_context(Option(context="not a context"))


def test_merge_later_options_win():
    merged = merge(with_chroot("/a"), with_chroot("/b"), with_disable_tools())
    assert merged.chroot == "/b"
    assert merged.enable_tools is False


def test_merge_defaults():
    merged = merge()
    assert merged.chroot == "/"
    assert merged.enable_tools is True
    assert merged.snapshot is None


def test_warn_goes_to_alerter():
    messages = []
    ctx = new_context(with_alerter(messages.append))
    ctx.warn("value %s of %d", "x", 3)
    ctx.warn("plain")
    assert messages == ["WARNING: value x of 3", "WARNING: plain"]


def test_null_alerter_is_silent(capsys):
    ctx = new_context(with_null_alerter())
    ctx.warn("hidden")
    assert capsys.readouterr().err == ""


def test_default_alerter_writes_stderr(capsys):
    ctx = new_context()
    ctx.warn("shown")
    assert capsys.readouterr().err == "WARNING: shown\n"


def test_path_overrides_copied():
    overrides = {"/proc": "/host-proc"}
    ctx = new_context(with_path_overrides(overrides))
    overrides["/sys"] = "/host-sys"
    assert ctx.path_overrides == {"/proc": "/host-proc"}


def test_context_from_env(monkeypatch):
    monkeypatch.setenv("GHW_CHROOT", "/host")
    monkeypatch.setenv("GHW_DISABLE_TOOLS", "1")
    monkeypatch.setenv("GHW_SNAPSHOT_PATH", "/tmp/snap.tar.gz")
    ctx = context_from_env()
    assert ctx.chroot == "/host"
    assert ctx.enable_tools is False
    assert ctx.snapshot_path == "/tmp/snap.tar.gz"
    assert ctx.snapshot_exclusive is False


def test_context_manager_cleans_up(snapshot_archive):
    ctx = new_context(with_snapshot(SnapshotOptions(path=snapshot_archive)))
    with ctx as active:
        assert active is ctx
        unpacked = active.chroot
        with open(os.path.join(unpacked, "proc", "cpuinfo"), "rb") as handle:
            assert handle.read() == b"processor : 0\n"
    assert not os.path.exists(unpacked)