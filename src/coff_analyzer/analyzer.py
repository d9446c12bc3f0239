"""
COFF Analyzer Operations
========================

The operations a front end (command line or GUI) performs on a COFF file:

- decode_file: Decode a file from disk
- list_sections: Listing rows for every section
- describe_file: Info text (code address, code size, build date)
- validate_section_names: Strict check that names exist in the file
- compute_checksums: Assemble a flash image and checksum it
- export_motorola: Write chosen sections as an S-record file

Example:
    >>> coff = decode_file("firmware.out")
    >>> result = compute_checksums(coff, [".text", ".cinit"])
    >>> print(result.format())
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union
import logging

from coff_analyzer.errors import SectionNotFoundError, UnsupportedTargetError
from coff_analyzer.config import AnalyzerConfig, get_default_config
from coff_analyzer.coff import (
    CoffFile,
    CoffVersion,
    SectionSummary,
    parse_coff_file,
)
from coff_analyzer.flash import (
    ChecksumResult,
    assemble_flash_image,
    calculate_checksums,
)
from coff_analyzer.srec import SRecordBuilder

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """
    Outcome of a Motorola export.

    Attributes:
        output_path: File that was written
        sections: Names of the sections written, in order
        warnings: Advisory messages for sections that were skipped
        record_count: Number of records in the file, S0 and S9 included
        bytes_written: Size of the file in bytes
    """
    output_path: Path
    sections: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    record_count: int = 0
    bytes_written: int = 0


def decode_file(path: Union[str, Path]) -> CoffFile:
    """
    Decode a COFF file from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        CoffFormatError: If the file cannot be decoded
    """
    logger.info(f"Opening {path}")
    return parse_coff_file(path)


def list_sections(coff: CoffFile) -> list[SectionSummary]:
    """Listing rows (name, address, size, page) for every section."""
    return coff.list_sections()


def describe_file(coff: CoffFile) -> str:
    """
    Info text for a decoded file.

    Reports the executable code address and size from the optional header
    (zero when there is none) and the build date.
    """
    info = coff.get_info()
    return "\n".join([
        f"EXEC CODE ADDR: {info['exec_code_address']:04X}",
        f"EXEC CODE SIZE: {info['exec_code_size']}",
        f"BUILD DATE: {coff.header.timestamp:%Y-%m-%d %H:%M:%S}",
    ])


def validate_section_names(coff: CoffFile, section_names: Iterable[str]) -> None:
    """
    Check that every name refers to a section of the file.

    Raises:
        SectionNotFoundError: Listing all missing names
    """
    missing = [name for name in section_names if coff.get_section(name) is None]
    if missing:
        raise SectionNotFoundError(missing, available=coff.section_names())


def compute_checksums(
    coff: CoffFile,
    section_names: Iterable[str],
    config: Optional[AnalyzerConfig] = None,
) -> ChecksumResult:
    """
    Assemble the flash image for the named sections and checksum it.

    Unknown names are skipped; call validate_section_names() first for
    strict behaviour.
    """
    image = assemble_flash_image(coff, section_names, config)
    return calculate_checksums(bytes(image))


def export_motorola(
    coff: CoffFile,
    section_names: Iterable[str],
    output_path: Union[str, Path],
    config: Optional[AnalyzerConfig] = None,
) -> ExportResult:
    """
    Write the named sections to an S-record file.

    Only 0x00C1 files can be exported. Sections outside memory page 0 are
    not flashable; they are skipped with a warning and the export goes on.
    Unknown names are skipped.

    Raises:
        UnsupportedTargetError: If the file is not a 0x00C1 file. No output
            file is created.
        OSError: If the output file cannot be written
    """
    if coff.version is not CoffVersion.C1:
        raise UnsupportedTargetError(
            f"Sorry, Motorola export is not supported for this COFF object "
            f"file ({coff.version.get_description()})"
        )

    config = config or get_default_config()
    result = ExportResult(output_path=Path(output_path))
    builder = SRecordBuilder(
        entry_point=coff.entry_point_address,
        max_data_bytes=config.record_data_bytes,
        line_terminator=config.line_terminator,
    )

    for name in section_names:
        section = coff.get_section(name)
        if section is None:
            logger.debug(f"Section '{name}' not in file, skipped")
            continue

        if not section.is_flashable:
            message = f"Section {name} skipped (not text area)"
            logger.warning(message)
            result.warnings.append(message)
            continue

        builder.add_section(section)
        result.sections.append(name)

    result.bytes_written = builder.build_to_file(result.output_path)
    result.record_count = len(builder.records)
    logger.info(
        f"Wrote {result.record_count} records to {result.output_path}"
    )
    return result
