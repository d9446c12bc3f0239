"""
COFF Record Definitions
=======================

This module defines the data structures decoded from a target COFF object
file. The records are plain immutable values; the parser in
``coff_analyzer.coff.parser`` creates them from the on-disk layout.

File Structure Overview
-----------------------
A COFF file contains:
1. File Header (22 bytes): version, section count, timestamp, symbol table
   pointers, optional header size, flags, target id
2. Optional File Header (28 bytes, only if the file header says so)
3. Section Headers (40 or 48 bytes each, depending on the version)
4. Raw section data, located by each section header's file pointer

All integers are little-endian.

Versions
--------
Two structural versions are recognized:

- **0x00C1**: section headers are 40 bytes; addresses and sizes are stored
  as 16-bit word counts and are doubled to obtain byte values; the memory
  page is one byte at offset 39. Targets have a 64KB flash.
- **0x00C2**: section headers are 48 bytes; values are already byte counts;
  the memory page is a 16-bit word at offset 46. The first section header
  is a placeholder that is skipped. Targets have a 128KB flash.

Section Header Layout
---------------------
    Offset  Size    Description
    ------  ----    -----------
    0       8       Name, NUL padded
    8       4       Physical address
    12      4       Virtual address
    16      4       Size
    20      4       File pointer to raw data
    24      4       File pointer to relocation entries
    39      1       Memory page (0x00C1)
    46      2       Memory page (0x00C2)
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping, Optional
import struct


# =============================================================================
# Layout Constants
# =============================================================================

FILE_HEADER_SIZE = 22
OPTIONAL_HEADER_SIZE = 28
OPTIONAL_HEADER_MAGIC = 0x0108

_FILE_HEADER_FORMAT = "<HHiiiHHH"
_OPTIONAL_HEADER_FORMAT = "<Hhiiiiii"
_SECTION_FIELDS_FORMAT = "<8siiiii"

_EPOCH = datetime(1970, 1, 1)


# =============================================================================
# Version Enum
# =============================================================================

class CoffVersion(IntEnum):
    """
    Recognized COFF version tags.

    The version decides the section header width, whether stored values
    are word counts, and the flash size of the target family.
    """
    C1 = 0x00C1
    C2 = 0x00C2

    @property
    def section_header_size(self) -> int:
        """Width of one section header record in bytes."""
        return 40 if self is CoffVersion.C1 else 48

    @property
    def is_word_addressed(self) -> bool:
        """True if stored addresses and sizes count 16-bit words."""
        return self is CoffVersion.C1

    @property
    def flash_size(self) -> int:
        """Size of the target flash address space in bytes."""
        return 0x10000 if self is CoffVersion.C1 else 0x20000

    @property
    def skips_first_section(self) -> bool:
        """True if the first section header is a placeholder to discard."""
        return self is CoffVersion.C2

    def to_bytes_count(self, value: int) -> int:
        """Convert a stored address/size field to a byte value."""
        return value * 2 if self.is_word_addressed else value

    def get_description(self) -> str:
        """Get a human-readable description of the version."""
        descriptions = {
            CoffVersion.C1: "COFF1 (0x00C1, word addressed, 64KB flash)",
            CoffVersion.C2: "COFF2 (0x00C2, byte addressed, 128KB flash)",
        }
        return descriptions[self]


# =============================================================================
# File Header
# =============================================================================

@dataclass(frozen=True)
class FileHeader:
    """
    COFF file header (22 bytes at offset 0).

    Structure:
        Offset  Size    Description
        ------  ----    -----------
        0       2       Version id
        2       2       Number of section headers
        4       4       Timestamp, signed seconds since 1970-01-01
        8       4       Symbol table file pointer
        12      4       Number of symbol table entries
        16      2       Optional header size in bytes (0 or 28)
        18      2       Flags
        20      2       Target id
    """
    version_id: int
    section_count: int
    timestamp: datetime
    symbol_table_offset: int = 0
    symbol_entry_count: int = 0
    optional_header_size: int = 0
    flags: int = 0
    target_id: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "FileHeader":
        """Deserialize a file header from its 22-byte layout."""
        if len(data) < FILE_HEADER_SIZE:
            raise ValueError(
                f"File header too short: need {FILE_HEADER_SIZE} bytes, got {len(data)}"
            )

        (version_id, section_count, seconds, symbol_table_offset,
         symbol_entry_count, optional_header_size, flags,
         target_id) = struct.unpack_from(_FILE_HEADER_FORMAT, data)

        return cls(
            version_id=version_id,
            section_count=section_count,
            timestamp=_EPOCH + timedelta(seconds=seconds),
            symbol_table_offset=symbol_table_offset,
            symbol_entry_count=symbol_entry_count,
            optional_header_size=optional_header_size,
            flags=flags,
            target_id=target_id,
        )

    def get_description(self) -> str:
        """One-line summary of the header."""
        return (
            f"Version: {self.version_id:04X}, TargetID: {self.target_id:04X}, "
            f"OptionalHeaderNumBytes: {self.optional_header_size}"
        )


# =============================================================================
# Optional File Header
# =============================================================================

@dataclass(frozen=True)
class OptionalHeader:
    """
    Optional file header (28 bytes, follows the file header).

    Sizes and addresses are held in bytes. For 0x00C1 files the stored
    word counts are doubled on decode.

    Structure:
        Offset  Size    Description
        ------  ----    -----------
        0       2       Magic (0x0108)
        2       2       Version stamp
        4       4       Size of executable code
        8       4       Size of initialized data
        12      4       Size of uninitialized data
        16      4       Entry point
        20      4       Beginning address of executable code
        24      4       Beginning address of initialized data
    """
    magic: int = OPTIONAL_HEADER_MAGIC
    version: int = 0
    exec_code_size: int = 0
    initialized_data_size: int = 0
    uninitialized_data_size: int = 0
    entry_point_address: int = 0
    exec_code_address: int = 0
    init_data_address: int = 0

    @classmethod
    def from_bytes(cls, data: bytes, version: CoffVersion) -> "OptionalHeader":
        """
        Deserialize an optional header.

        The magic is not checked here; the parser verifies it so the
        failure is reported as a decode error.
        """
        if len(data) < OPTIONAL_HEADER_SIZE:
            raise ValueError(
                f"Optional header too short: need {OPTIONAL_HEADER_SIZE} bytes, "
                f"got {len(data)}"
            )

        (magic, stamp, code_size, init_size, uninit_size, entry,
         code_addr, data_addr) = struct.unpack_from(_OPTIONAL_HEADER_FORMAT, data)

        convert = version.to_bytes_count
        return cls(
            magic=magic,
            version=stamp,
            exec_code_size=convert(code_size),
            initialized_data_size=convert(init_size),
            uninitialized_data_size=convert(uninit_size),
            entry_point_address=convert(entry),
            exec_code_address=convert(code_addr),
            init_data_address=convert(data_addr),
        )

    def get_description(self) -> str:
        """One-line summary of the optional header."""
        return (
            f"Version: {self.version}, ExecCodeAddress: {self.exec_code_address:04X} "
            f"ExecCodeSize: {self.exec_code_size}"
        )


# =============================================================================
# Sections
# =============================================================================

@dataclass(frozen=True)
class SectionHeader:
    """
    Section metadata decoded from one section header record.

    Raw data is attached in a second step with with_data(), which returns
    a Section. Addresses and size are in bytes.
    """
    name: str
    physical_address: int
    virtual_address: int
    size: int
    raw_data_offset: int
    relocation_offset: int
    memory_page: int

    @classmethod
    def from_bytes(cls, data: bytes, version: CoffVersion) -> "SectionHeader":
        """
        Deserialize a section header record of the version's width.

        Always returns a SectionHeader, also when called on Section; raw
        data is attached afterwards with with_data().
        """
        width = version.section_header_size
        if len(data) < width:
            raise ValueError(
                f"Section header too short: need {width} bytes, got {len(data)}"
            )

        (raw_name, physical, virtual, size, raw_ptr,
         reloc_ptr) = struct.unpack_from(_SECTION_FIELDS_FORMAT, data)

        if version.is_word_addressed:
            memory_page = data[39]
        else:
            (memory_page,) = struct.unpack_from("<H", data, 46)

        convert = version.to_bytes_count
        return SectionHeader(
            name=decode_section_name(raw_name),
            physical_address=convert(physical),
            virtual_address=convert(virtual),
            size=convert(size),
            raw_data_offset=raw_ptr,
            relocation_offset=reloc_ptr,
            memory_page=memory_page,
        )

    def with_data(self, raw_data: bytes) -> "Section":
        """Attach raw data, producing the final immutable Section."""
        return Section(
            name=self.name,
            physical_address=self.physical_address,
            virtual_address=self.virtual_address,
            size=self.size,
            raw_data_offset=self.raw_data_offset,
            relocation_offset=self.relocation_offset,
            memory_page=self.memory_page,
            raw_data=bytes(raw_data),
        )


@dataclass(frozen=True)
class Section(SectionHeader):
    """
    A named region of code or data with its raw bytes.

    raw_data always holds exactly ``size`` bytes.
    """
    raw_data: bytes = field(default=b"", repr=False)

    def __post_init__(self) -> None:
        if len(self.raw_data) != self.size:
            raise ValueError(
                f"Section '{self.name}': raw data is {len(self.raw_data)} bytes, "
                f"size is {self.size}"
            )

    @property
    def is_flashable(self) -> bool:
        """True for page 0 sections, the only ones written to flash."""
        return self.memory_page == 0

    def get_summary(self) -> "SectionSummary":
        """Get the listing row for this section."""
        return SectionSummary(
            name=self.name,
            physical_address=self.physical_address,
            size=self.size,
            memory_page=self.memory_page,
        )

    def get_description(self) -> str:
        """One-line summary of the section."""
        return (
            f"Section {self.name}: raw data at 0x{self.raw_data_offset:04X}, "
            f"{self.size} bytes, page {self.memory_page}"
        )


@dataclass(frozen=True)
class SectionSummary:
    """Listing row for a section: name, address, size and memory page."""
    name: str
    physical_address: int
    size: int
    memory_page: int


def decode_section_name(raw: bytes) -> str:
    """Decode an 8-byte name field, dropping trailing NUL fill."""
    return raw.decode("ascii", errors="replace").rstrip("\0")


# =============================================================================
# Decoded File
# =============================================================================

@dataclass(frozen=True)
class CoffFile:
    """
    A fully decoded COFF object file.

    Sections are kept in a read-only mapping keyed by name, in the order
    their headers were decoded. A later header with the same name replaces
    the earlier one.

    Attributes:
        header: The file header
        optional_header: The optional header, or None if the file has none
        sections: Read-only mapping of section name to Section
    """
    header: FileHeader
    optional_header: Optional[OptionalHeader] = None
    sections: Mapping[str, Section] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Copy so later changes to the caller's dict cannot leak in
        object.__setattr__(self, "sections", MappingProxyType(dict(self.sections)))

    @property
    def version(self) -> CoffVersion:
        """The file's version as a CoffVersion."""
        return CoffVersion(self.header.version_id)

    @property
    def flash_size(self) -> int:
        """Flash address space size of the target family, in bytes."""
        return self.version.flash_size

    @property
    def entry_point_address(self) -> int:
        """Entry point from the optional header, 0 if absent."""
        if self.optional_header is None:
            return 0
        return self.optional_header.entry_point_address

    def get_section(self, name: str) -> Optional[Section]:
        """Get a section by exact name, or None."""
        return self.sections.get(name)

    def section_names(self) -> list[str]:
        """Names of all sections in decode order."""
        return list(self.sections)

    def list_sections(self) -> list[SectionSummary]:
        """Listing rows for all sections in decode order."""
        return [section.get_summary() for section in self.sections.values()]

    def get_info(self) -> dict:
        """
        Get summary information about the file.

        Returns:
            Dictionary with file information
        """
        optional = self.optional_header
        return {
            "version": self.version.get_description(),
            "target_id": f"0x{self.header.target_id:04X}",
            "timestamp": self.header.timestamp.isoformat(),
            "flags": f"0x{self.header.flags:04X}",
            "section_count": len(self.sections),
            "has_optional_header": optional is not None,
            "exec_code_address": optional.exec_code_address if optional else 0,
            "exec_code_size": optional.exec_code_size if optional else 0,
            "entry_point_address": self.entry_point_address,
            "flash_size": self.flash_size,
        }
