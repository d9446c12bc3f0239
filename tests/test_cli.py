"""
coffsum Command-Line Tests
==========================

Runs the click commands in-process with CliRunner.
"""

import pytest
from click.testing import CliRunner

from coff_analyzer import __version__
from coff_analyzer.cli.coffsum import main
from coff_analyzer.cli.errors import ExitCode, handle_cli_exception
from coff_analyzer.errors import TruncatedFileError
from coff_analyzer.flash import crc32

from conftest import make_coff_image


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def c1_path(sample_c1_image: bytes, tmp_path):
    path = tmp_path / "firmware.out"
    path.write_bytes(sample_c1_image)
    return path


@pytest.fixture
def c2_path(sample_c2_image: bytes, tmp_path):
    path = tmp_path / "firmware2.out"
    path.write_bytes(sample_c2_image)
    return path


class TestMainGroup:
    """Tests for the top-level command group."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "checksum" in result.output
        assert "export" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestInfoAndList:
    """Tests for the info and list commands."""

    def test_info(self, runner, c1_path):
        result = runner.invoke(main, ["info", str(c1_path)])

        assert result.exit_code == 0
        assert "Target ID:   0x009D" in result.output
        assert "EXEC CODE ADDR: 2000" in result.output
        assert "BUILD DATE: 1970-01-02 00:00:00" in result.output

    def test_list(self, runner, c1_path):
        result = runner.invoke(main, ["list", str(c1_path)])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].split() == ["Name", "Address", "Size", "Page"]
        assert lines[2].split() == [".text", "2000", "4", "0"]
        assert lines[4].split() == [".data", "200", "2", "1"]

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["list", str(tmp_path / "nope.out")])
        assert result.exit_code == 2

    def test_garbage_file(self, runner, tmp_path):
        path = tmp_path / "junk.out"
        path.write_bytes(b"\x00\x01" * 40)

        result = runner.invoke(main, ["info", str(path)])

        assert result.exit_code == ExitCode.ANALYSIS_ERROR
        assert "Wrong COFF file version" in result.output


class TestChecksumCommand:
    """Tests for the checksum command."""

    def test_named_sections(self, runner, c1_path):
        result = runner.invoke(main, ["checksum", str(c1_path), ".text", ".cinit"])

        image = bytearray(b"\xFF" * 65536)
        image[0x2000:0x2004] = bytes([0xDE, 0xAD, 0xBE, 0xEF])
        image[0x3000:0x3002] = bytes([0x01, 0x02])

        assert result.exit_code == 0
        assert f"CRC32: 0x{crc32(bytes(image)):08X}" in result.output

    def test_all_sections_by_default(self, runner, c1_path):
        named = runner.invoke(main, ["checksum", str(c1_path), ".text", ".cinit", ".data"])
        default = runner.invoke(main, ["checksum", str(c1_path)])

        assert default.exit_code == 0
        assert default.output == named.output

    def test_unknown_section(self, runner, c1_path):
        result = runner.invoke(main, ["checksum", str(c1_path), ".text", ".bogus"])

        assert result.exit_code == ExitCode.ANALYSIS_ERROR
        assert "Checksum error" in result.output
        assert ".bogus" in result.output


class TestExportCommand:
    """Tests for the export command."""

    def test_export(self, runner, c1_path, tmp_path):
        output = tmp_path / "out.s19"

        result = runner.invoke(
            main, ["export", "-o", str(output), str(c1_path), ".text", ".data"]
        )

        assert result.exit_code == 0
        assert "Warning: Section .data skipped (not text area)" in result.output
        assert "Created" in result.output
        assert "1 sections, 3 records" in result.output
        assert output.read_bytes().startswith(b"S0060000000000F9\r\n")

    def test_line_ending_option(self, runner, c1_path, tmp_path):
        output = tmp_path / "out.s19"

        result = runner.invoke(
            main,
            ["export", "-o", str(output), "--line-ending", "lf", str(c1_path), ".text"],
        )

        assert result.exit_code == 0
        assert b"\r" not in output.read_bytes()

    def test_c2_rejected(self, runner, c2_path, tmp_path):
        output = tmp_path / "out.s19"

        result = runner.invoke(main, ["export", "-o", str(output), str(c2_path), ".text"])

        assert result.exit_code == ExitCode.ANALYSIS_ERROR
        assert "not supported" in result.output
        assert not output.exists()

    def test_requires_sections(self, runner, c1_path, tmp_path):
        result = runner.invoke(main, ["export", "-o", str(tmp_path / "x.s19"), str(c1_path)])
        assert result.exit_code == 2


class TestErrorHandling:
    """Tests for exit codes and error messages."""

    def test_no_sections_in_file(self, runner, tmp_path):
        path = tmp_path / "empty.out"
        path.write_bytes(make_coff_image())

        result = runner.invoke(main, ["checksum", str(path), ".text"])

        assert result.exit_code == ExitCode.ANALYSIS_ERROR
        assert "contains no sections" in result.output

    def test_coff_error_code(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(TruncatedFileError("file header", 0, 22, 4), error_type="Export")

        assert exc_info.value.code == ExitCode.ANALYSIS_ERROR
        assert capsys.readouterr().err.startswith("Export error: ")

    def test_os_error_code(self):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(PermissionError("out.s19"))
        assert exc_info.value.code == ExitCode.INVALID_ARGS

    def test_unexpected_error_code(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(RuntimeError("boom"))

        assert exc_info.value.code == ExitCode.INTERNAL_ERROR
        assert "Internal error: boom" in capsys.readouterr().err
