"""
COFF File Parser
================

This module provides the decoder for target COFF object files.

CoffParser
----------
The CoffParser class reads a COFF file from a binary stream and produces
an immutable CoffFile holding the file header, the optional header and
every section with its raw data.

Decoding runs in two passes:
1. Headers: the file header, the optional header (if declared) and all
   section header records, read sequentially.
2. Raw data: for each section, seek to its raw data pointer and read
   exactly ``size`` bytes.

Decoding is all-or-nothing. Any failure raises a CoffFormatError subclass
and no partially decoded file is returned.

Usage Examples
--------------
Reading a COFF file:
    >>> from coff_analyzer.coff import CoffParser
    >>> coff = CoffParser.from_file("firmware.out").parse()
    >>> for section in coff.list_sections():
    ...     print(f"{section.name} {section.physical_address:04X} {section.size}")
"""

from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional, Union
import logging

from coff_analyzer.errors import (
    CoffFormatError,
    MalformedOptionalHeaderError,
    TruncatedFileError,
    UnsupportedVersionError,
)
from coff_analyzer.coff.records import (
    CoffFile,
    CoffVersion,
    FileHeader,
    OptionalHeader,
    Section,
    SectionHeader,
    FILE_HEADER_SIZE,
    OPTIONAL_HEADER_MAGIC,
    OPTIONAL_HEADER_SIZE,
)

# Logger for this module
logger = logging.getLogger(__name__)


class CoffParser:
    """
    Decoder for COFF object files.

    The parser reads from any seekable binary stream. It holds no decoded
    state itself; each call to parse() returns a new CoffFile.

    Example:
        >>> with open("firmware.out", "rb") as f:
        ...     coff = CoffParser(f).parse()
        >>> print(coff.header.timestamp)
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    @classmethod
    def from_bytes(cls, data: bytes) -> "CoffParser":
        """Create a parser over an in-memory file image."""
        return cls(BytesIO(data))

    @classmethod
    def from_file(cls, filepath: Union[str, Path]) -> "CoffParser":
        """
        Create a parser over the full contents of a file.

        The file is read into memory so the parser does not keep it open.

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        return cls.from_bytes(Path(filepath).read_bytes())

    def parse(self) -> CoffFile:
        """
        Decode the stream into a CoffFile.

        Raises:
            UnsupportedVersionError: Unknown version tag
            MalformedOptionalHeaderError: Optional header magic is not 0x0108
            TruncatedFileError: The stream ends inside a declared region
            CoffFormatError: Other structural problems
        """
        try:
            header = self._parse_file_header()
            version = self._get_version(header)
            optional_header = self._parse_optional_header(header, version)
            section_headers = self._parse_section_headers(header, version)
            sections = self._load_raw_data(section_headers)
        except CoffFormatError as e:
            logger.error(f"Failed to parse COFF: {e}")
            raise
        except (ValueError, OSError) as e:
            logger.error(f"Unexpected error parsing COFF: {e}")
            raise CoffFormatError(f"Failed to parse COFF: {e}") from e

        logger.debug(
            f"Decoded {version.name} file with {len(sections)} sections"
        )
        return CoffFile(
            header=header,
            optional_header=optional_header,
            sections=sections,
        )

    # =========================================================================
    # Stream Helpers
    # =========================================================================

    def _read_exact(self, size: int, region: str) -> bytes:
        """Read exactly size bytes or raise TruncatedFileError."""
        offset = self.stream.tell()
        data = self.stream.read(size)
        if len(data) < size:
            raise TruncatedFileError(region, offset, size, len(data))
        return data

    # =========================================================================
    # Pass 1: Headers
    # =========================================================================

    def _parse_file_header(self) -> FileHeader:
        """Parse the 22-byte file header."""
        data = self._read_exact(FILE_HEADER_SIZE, "file header")
        header = FileHeader.from_bytes(data)
        logger.debug(header.get_description())
        return header

    def _get_version(self, header: FileHeader) -> CoffVersion:
        """Map the version tag to a CoffVersion."""
        try:
            return CoffVersion(header.version_id)
        except ValueError:
            raise UnsupportedVersionError(header.version_id) from None

    def _parse_optional_header(
        self, header: FileHeader, version: CoffVersion
    ) -> Optional[OptionalHeader]:
        """
        Parse the optional header if the file header declares one.

        A size of 28 is a real optional header. Any other non-zero size is
        consumed as an opaque region so the section headers stay aligned.
        """
        size = header.optional_header_size
        if size == 0:
            return None

        if size != OPTIONAL_HEADER_SIZE:
            self._read_exact(size, "optional header")
            logger.warning(
                f"Skipped {size}-byte optional header (only "
                f"{OPTIONAL_HEADER_SIZE} bytes is understood)"
            )
            return None

        data = self._read_exact(OPTIONAL_HEADER_SIZE, "optional header")
        optional_header = OptionalHeader.from_bytes(data, version)
        if optional_header.magic != OPTIONAL_HEADER_MAGIC:
            raise MalformedOptionalHeaderError(optional_header.magic)

        logger.debug(optional_header.get_description())
        return optional_header

    def _parse_section_headers(
        self, header: FileHeader, version: CoffVersion
    ) -> dict[str, SectionHeader]:
        """
        Parse all section header records.

        For 0x00C2 files the first record is a placeholder: it is read,
        discarded and not counted.
        """
        width = version.section_header_size
        count = header.section_count

        if version.skips_first_section and count > 0:
            self._read_exact(width, "placeholder section header")
            count -= 1

        section_headers: dict[str, SectionHeader] = {}
        for index in range(count):
            data = self._read_exact(width, f"section header {index}")
            section_header = SectionHeader.from_bytes(data, version)

            if section_header.size < 0 or section_header.raw_data_offset < 0:
                raise CoffFormatError(
                    f"Section '{section_header.name}' has invalid size "
                    f"{section_header.size} or raw data pointer "
                    f"{section_header.raw_data_offset}"
                )

            if section_header.name in section_headers:
                logger.debug(f"Section '{section_header.name}' redefined, keeping last")
            section_headers[section_header.name] = section_header

        return section_headers

    # =========================================================================
    # Pass 2: Raw Data
    # =========================================================================

    def _load_raw_data(
        self, section_headers: dict[str, SectionHeader]
    ) -> dict[str, Section]:
        """Read each section's raw data and build the final Sections."""
        sections: dict[str, Section] = {}
        for name, section_header in section_headers.items():
            self.stream.seek(section_header.raw_data_offset)
            raw_data = self._read_exact(section_header.size, f"section {name}")
            section = section_header.with_data(raw_data)
            logger.debug(section.get_description())
            sections[name] = section
        return sections


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_coff(data: bytes) -> CoffFile:
    """
    Decode a COFF file from bytes.

    Raises:
        CoffFormatError: If the data is not a valid COFF file
    """
    return CoffParser.from_bytes(data).parse()


def parse_coff_file(filepath: Union[str, Path]) -> CoffFile:
    """
    Decode a COFF file from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        CoffFormatError: If the file is not a valid COFF file
    """
    return CoffParser.from_file(filepath).parse()
