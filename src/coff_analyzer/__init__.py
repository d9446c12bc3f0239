"""
COFF Analyzer - Object File Inspection and Flash Export
=======================================================

This package reads target COFF object files, rebuilds the flash image
from chosen sections, checksums it, and exports sections as Motorola
S-records for device programmers.

Two COFF versions are recognized: 0x00C1 (word addressed, 64KB flash)
and 0x00C2 (byte addressed, 128KB flash).

Main Components
---------------
- **coff**: COFF decoding (CoffParser, CoffFile, Section)
- **flash**: Flash image assembly and checksums (CRC-32, word-sum)
- **srec**: Motorola S-record export (SRecordBuilder)
- **analyzer**: Operations used by front ends
- **cli**: The coffsum command-line tool

Quick Start
-----------
Decode a file and list its sections:
    >>> from coff_analyzer import decode_file, list_sections
    >>> coff = decode_file("firmware.out")
    >>> for row in list_sections(coff):
    ...     print(row.name, hex(row.physical_address), row.size)

Checksum the flash image for chosen sections:
    >>> from coff_analyzer import compute_checksums
    >>> print(compute_checksums(coff, [".text", ".cinit"]).format())

Export to S19:
    >>> from coff_analyzer import export_motorola
    >>> export_motorola(coff, [".text"], "firmware.s19")

Or use the command-line tool:
    $ coffsum list firmware.out
    $ coffsum checksum firmware.out .text .cinit
    $ coffsum export -o firmware.s19 firmware.out .text
"""

__version__ = "1.0.0"

from coff_analyzer.errors import (
    CoffError,
    CoffFormatError,
    UnsupportedVersionError,
    MalformedOptionalHeaderError,
    TruncatedFileError,
    InvalidInputError,
    UnsupportedTargetError,
    SectionNotFoundError,
)

from coff_analyzer.config import (
    AnalyzerConfig,
    get_default_config,
    set_default_config,
)

from coff_analyzer.coff import (
    CoffFile,
    CoffParser,
    CoffVersion,
    Section,
    SectionSummary,
    parse_coff,
    parse_coff_file,
)

from coff_analyzer.flash import (
    ChecksumResult,
    assemble_flash_image,
    calculate_checksums,
    crc32,
    word_sum_checksum,
)

from coff_analyzer.srec import SRecordBuilder

from coff_analyzer.analyzer import (
    ExportResult,
    compute_checksums,
    decode_file,
    describe_file,
    export_motorola,
    list_sections,
    validate_section_names,
)

__all__ = [
    "__version__",
    # Errors
    "CoffError",
    "CoffFormatError",
    "UnsupportedVersionError",
    "MalformedOptionalHeaderError",
    "TruncatedFileError",
    "InvalidInputError",
    "UnsupportedTargetError",
    "SectionNotFoundError",
    # Configuration
    "AnalyzerConfig",
    "get_default_config",
    "set_default_config",
    # COFF
    "CoffFile",
    "CoffParser",
    "CoffVersion",
    "Section",
    "SectionSummary",
    "parse_coff",
    "parse_coff_file",
    # Flash
    "ChecksumResult",
    "assemble_flash_image",
    "calculate_checksums",
    "crc32",
    "word_sum_checksum",
    # S-records
    "SRecordBuilder",
    # Operations
    "ExportResult",
    "compute_checksums",
    "decode_file",
    "describe_file",
    "export_motorola",
    "list_sections",
    "validate_section_names",
]
