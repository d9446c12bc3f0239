"""
COFF Object File Handling
=========================

This package decodes target COFF object files into immutable records.

- **CoffParser**: Decode a COFF file from a stream, bytes or path
- **CoffFile**: The decoded file (headers plus name-keyed sections)
- **Record types**: FileHeader, OptionalHeader, SectionHeader, Section

Quick Start
-----------
    >>> from coff_analyzer.coff import parse_coff_file
    >>> coff = parse_coff_file("firmware.out")
    >>> print(coff.version.get_description())
    >>> for row in coff.list_sections():
    ...     print(row.name, hex(row.physical_address), row.size, row.memory_page)
"""

from coff_analyzer.coff.records import (
    CoffVersion,
    FileHeader,
    OptionalHeader,
    SectionHeader,
    Section,
    SectionSummary,
    CoffFile,
    decode_section_name,
    FILE_HEADER_SIZE,
    OPTIONAL_HEADER_SIZE,
    OPTIONAL_HEADER_MAGIC,
)

from coff_analyzer.coff.parser import (
    CoffParser,
    parse_coff,
    parse_coff_file,
)

__all__ = [
    # Records
    "CoffVersion",
    "FileHeader",
    "OptionalHeader",
    "SectionHeader",
    "Section",
    "SectionSummary",
    "CoffFile",
    "decode_section_name",
    "FILE_HEADER_SIZE",
    "OPTIONAL_HEADER_SIZE",
    "OPTIONAL_HEADER_MAGIC",
    # Parser
    "CoffParser",
    "parse_coff",
    "parse_coff_file",
]
