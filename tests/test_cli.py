import json
import sys

import pytest
import yaml

from hwinfo.cli import format_capabilities, main

CPUINFO = (
    "processor\t: 0\n"
    "vendor_id\t: GenuineTest\n"
    "physical id\t: 0\n"
    "siblings\t: 1\n"
    "core id\t\t: 0\n"
    "cpu cores\t: 1\n"
    "model name\t: Test CPU\n"
    "flags\t\t: fpu vme\n"
    "\n"
)


@pytest.fixture
def fake_root(tmp_path, monkeypatch):
    dmi = tmp_path / "sys" / "class" / "dmi" / "id"
    dmi.mkdir(parents=True)
    values = {
        "bios_vendor": "Acme",
        "bios_version": "1.0",
        "bios_date": "2020-01-01",
        "board_vendor": "BoardCo",
        "board_name": "B1",
        "board_version": "v2",
        "board_serial": "SERIAL-PLACEHOLDER",
        "board_asset_tag": "tag",
        "chassis_type": "3",
        "chassis_vendor": "CaseCo",
        "chassis_version": "c1",
        "chassis_serial": "unknown",
        "chassis_asset_tag": "tag",
    }
    for name, value in values.items():
        (dmi / name).write_text(value + "\n")
    (tmp_path / "sys" / "block").mkdir(parents=True)
    (tmp_path / "proc").mkdir()
    (tmp_path / "proc" / "cpuinfo").write_text(CPUINFO)
    monkeypatch.setenv("GHW_CHROOT", str(tmp_path))
    monkeypatch.setenv("GHW_DISABLE_WARNINGS", "1")
    monkeypatch.delenv("GHW_SNAPSHOT_PATH", raising=False)
    monkeypatch.setattr(sys, "platform", "linux")
    return tmp_path


def test_format_capabilities_short_list_has_no_rows():
    assert format_capabilities(["a", "b", "c", "d", "e", "f"]) == []


def test_format_capabilities_rows():
    caps = [f"c{i}" for i in range(20)]
    lines = format_capabilities(caps)
    assert lines == [
        "  capabilities: [" + " ".join(caps[5:11]),
        "                 " + " ".join(caps[11:17]),
        "                 " + " ".join(caps[17:20]) + "]",
    ]


def test_bios_human(fake_root, capsys):
    assert main(["bios"]) == 0
    assert capsys.readouterr().out == "bios vendor=Acme version=1.0 date=2020-01-01\n"


def test_bios_json(fake_root, capsys):
    assert main(["bios", "-f", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data == {"bios": {"vendor": "Acme", "version": "1.0", "date": "2020-01-01"}}


def test_format_flag_before_subcommand_yaml(fake_root, capsys):
    assert main(["--format", "yaml", "baseboard"]) == 0
    data = yaml.safe_load(capsys.readouterr().out)
    assert data["baseboard"]["vendor"] == "BoardCo"
    assert data["baseboard"]["product"] == "B1"


def test_pretty_json_is_indented(fake_root, capsys):
    assert main(["chassis", "-f", "json", "--pretty"]) == 0
    out = capsys.readouterr().out
    assert "\n  " in out
    assert json.loads(out)["chassis"]["type_description"] == "Desktop"


def test_cpu_human(fake_root, capsys):
    assert main(["cpu"]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "cpu (1 physical package, 1 core, 1 hardware thread)",
        " physical package #0 (1 core, 1 hardware thread)",
        "  processor core #0 (1 threads), logical processors [0]",
    ]


def test_block_and_gpu_empty(fake_root, capsys):
    assert main(["block"]) == 0
    assert main(["gpu"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "block storage (0 disks, unknown physical storage)"
    assert lines[1] == "gpu (0 graphics cards)"


def test_all_human_order(fake_root, capsys):
    assert main([]) == 0
    lines = capsys.readouterr().out.splitlines()
    heads = [ln.split(" ")[0] for ln in lines if not ln.startswith(" ")]
    assert heads == ["block", "cpu", "gpu", "chassis", "bios", "baseboard"]


def test_all_json_has_every_component(fake_root, capsys):
    assert main(["-f", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert set(data) == {"block", "cpu", "gpu", "chassis", "bios", "baseboard"}
    assert data["cpu"]["total_cores"] == 1


def test_invalid_format_on_root(fake_root, capsys):
    assert main(["-f", "xml"]) == 1
    assert capsys.readouterr().out.strip() == 'invalid output format "xml"'


def test_unsupported_platform_reports_error(fake_root, monkeypatch, capsys):
    monkeypatch.setattr(sys, "platform", "win32")
    assert main(["bios"]) == 1
    assert capsys.readouterr().out.startswith("error getting BIOS info:")


def test_version(capsys):
    assert main(["version"]) == 0
    out = capsys.readouterr().out
    assert "Version: (Unknown Version)" in out
    assert "Git Hash: No Git-hash Provided." in out
    assert "Date: No Build Date Provided." in out