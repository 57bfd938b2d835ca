import json

import pytest

from saltrace.cli import create_parser, format_time, main
from saltrace.core import keccak256

SALT0_ADDRESS = "4d1a2e2bb4f88f0250f26ffff098b0b30b26bf38"
FACTORY_ARGS = [
    "--deployer", "0x" + "00" * 20,
    "--init-code-hash", "0x" + keccak256(b"\x00").hex(),
]


def test_pattern_is_required():
    with pytest.raises(SystemExit):
        create_parser().parse_args([])


def test_invalid_pattern_returns_error(capsys):
    assert main(["--suffix", "zz"]) == 1
    assert "non-hex" in capsys.readouterr().err


def test_invalid_deployer_returns_error(capsys):
    assert main(["--suffix", "d3ad", "--deployer", "0x12"]) == 1
    assert "deployer" in capsys.readouterr().err


def test_negative_max_returns_error():
    assert main(["--suffix", "d3ad", "--max", "-1"]) == 1


def test_dry_run_prints_estimate(capsys):
    assert main(["--suffix", "d3ad", "--dry-run", "--workers", "2"]) == 0
    out = capsys.readouterr().out
    assert "suffix='d3ad'" in out
    assert "65,536" in out


def test_quiet_search_prints_salt(capsys):
    argv = ["--prefix", SALT0_ADDRESS, "--max", "6", "--workers", "2", "--quiet", *FACTORY_ARGS]
    assert main(argv) == 0
    assert capsys.readouterr().out.strip() == "0"


def test_search_writes_output_files(tmp_path, capsys):
    prefix = str(tmp_path / "found")
    argv = ["--prefix", SALT0_ADDRESS, "--max", "4", "--workers", "2", "--output", prefix, *FACTORY_ARGS]
    assert main(argv) == 0

    out = capsys.readouterr().out
    assert "MATCH FOUND" in out
    assert "Address: PASS" in out
    data = json.loads((tmp_path / "found.json").read_text())
    assert data["salt"] == 0
    assert data["address"] == "0x" + SALT0_ADDRESS
    assert (tmp_path / "found.txt").exists()


def test_no_match_returns_one(capsys):
    argv = ["--prefix", "00" * 20, "--max", "8", "--workers", "2", *FACTORY_ARGS]
    assert main(argv) == 1
    assert "No result found" in capsys.readouterr().err


def test_formatting_helpers():
    assert format_time(0.25) == "250ms"
    assert format_time(12.34) == "12.3s"
    assert format_time(90) == "1.5m"
    assert format_time(7200) == "2.0h"


@pytest.fixture
def no_search(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("search must not start for invalid input")
    monkeypatch.setattr("saltrace.cli.run_search_result", fail)


def test_empty_hex_pattern_is_rejected_before_search(no_search, capsys):
    assert main(["--suffix", "", "--max", "4", "--workers", "2"]) == 1
    err = capsys.readouterr().err
    assert "Error: Pattern cannot be empty." in err


def test_invalid_regex_is_rejected_before_search(no_search, capsys):
    assert main(["--regex", "(", "--max", "4", "--workers", "2"]) == 1
    assert "Error: Invalid regex" in capsys.readouterr().err


def test_checksum_search(capsys):
    argv = [
        "--prefix", "4D1A2e", "--checksum", "--max", "4", "--workers", "2",
        "--quiet", *FACTORY_ARGS,
    ]
    assert main(argv) == 0
    assert capsys.readouterr().out.strip() == "0"
