"""
Motorola S-Record Builder
=========================

This module provides the SRecordBuilder class for exporting COFF sections
as Motorola S-record ("S19") text, the format consumed by device
programmers.

Record Format
-------------
Each record is one line of uppercase hex, with no separators:

    S <type> <length> <payload...> <checksum>

- type: one digit (0 header, 1 data with 16-bit address, 9 end with
  16-bit entry point)
- length: payload byte count + 1 (the checksum byte), two hex digits
- payload: address bytes followed by data, two hex digits per byte
- checksum: one's complement of the 8-bit sum of length and payload

Output Structure
----------------
1. One S0 header record with five zero bytes
2. S1 data records, at most 30 data bytes each, for every added section
3. One S9 record carrying the entry point

Only 16-bit addressing is produced. Addresses of sections above 0xFFFF
wrap modulo 65536.

Usage
-----
    >>> from coff_analyzer.srec import SRecordBuilder
    >>> builder = SRecordBuilder(entry_point=0x0000)
    >>> builder.add_section(section)
    >>> text = builder.build()
    >>> builder.build_to_file("firmware.s19")
"""

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Union
import logging

from coff_analyzer.errors import CoffError, UnsupportedTargetError
from coff_analyzer.coff.records import Section

# Logger for this module
logger = logging.getLogger(__name__)

SUPPORTED_ADDRESS_BITS = 16

# Length byte counts address + data + checksum and cannot exceed 0xFF
MAX_RECORD_DATA_BYTES = 0xFF - 2 - 1


class SRecordType(IntEnum):
    """S-record types produced by the builder."""
    HEADER = 0
    DATA_16 = 1
    END_16 = 9


@dataclass(frozen=True)
class SRecord:
    """
    One S-record: a type and its payload (address bytes plus data).

    Example:
        >>> SRecord(SRecordType.DATA_16, bytes([0x10, 0x00, 0xAA, 0xBB, 0xCC])).to_line()
        'S1061000AABBCCB8'
    """
    record_type: SRecordType
    payload: bytes

    @property
    def length(self) -> int:
        """The length byte: payload bytes plus the checksum byte."""
        return len(self.payload) + 1

    @property
    def checksum(self) -> int:
        """One's complement of the 8-bit sum of length and payload."""
        return ~(self.length + sum(self.payload)) & 0xFF

    def to_line(self) -> str:
        """Format the record as text, without a line terminator."""
        return (
            f"S{self.record_type:d}{self.length:02X}"
            f"{self.payload.hex().upper()}{self.checksum:02X}"
        )


def _address_bytes(address: int) -> bytes:
    """Low 16 bits of an address, big-endian."""
    address &= 0xFFFF
    return bytes([address >> 8, address & 0xFF])


@dataclass
class SRecordBuilder:
    """
    Builds S-record text from COFF sections.

    Records are kept as an append-only list and only turned into text by
    build(). The first build() appends the S9 record and closes the
    builder.

    Attributes:
        address_bits: Address width; only 16 is supported
        entry_point: Entry point written to the S9 record
        max_data_bytes: Maximum data bytes per S1 record
        line_terminator: Text after each record line

    Example:
        >>> builder = SRecordBuilder(entry_point=0x8000)
        >>> builder.add_section(text_section).add_section(const_section)
        >>> builder.build_to_file("out.s19")
    """
    address_bits: int = SUPPORTED_ADDRESS_BITS
    entry_point: int = 0
    max_data_bytes: int = 30
    line_terminator: str = "\r\n"

    _records: list[SRecord] = field(default_factory=list, init=False, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate parameters and emit the header record."""
        if self.address_bits != SUPPORTED_ADDRESS_BITS:
            raise UnsupportedTargetError(
                f"{self.address_bits}-bit S-record addresses are not supported "
                f"(only {SUPPORTED_ADDRESS_BITS}-bit)"
            )
        if not 1 <= self.max_data_bytes <= MAX_RECORD_DATA_BYTES:
            raise ValueError(
                f"max_data_bytes must be 1-{MAX_RECORD_DATA_BYTES}, "
                f"got {self.max_data_bytes}"
            )

        self._records.append(SRecord(SRecordType.HEADER, bytes(5)))

    @property
    def records(self) -> tuple[SRecord, ...]:
        """Records emitted so far."""
        return tuple(self._records)

    def add_section(self, section: Section) -> "SRecordBuilder":
        """
        Append S1 records for a section's raw data.

        The memory page is not checked here; callers only pass flashable
        sections.

        Returns:
            Self for method chaining

        Raises:
            CoffError: If build() has already been called
        """
        if self._closed:
            raise CoffError("S-record output already built, cannot add sections")

        data = section.raw_data
        for offset in range(0, len(data), self.max_data_bytes):
            chunk = data[offset:offset + self.max_data_bytes]
            address = _address_bytes(section.physical_address + offset)
            self._records.append(SRecord(SRecordType.DATA_16, address + chunk))

        logger.debug(
            f"Added section '{section.name}' ({len(data)} bytes at "
            f"0x{section.physical_address & 0xFFFF:04X})"
        )
        return self

    def build(self) -> str:
        """
        Close the output with the S9 record and return the full text.

        Calling build() again returns the same text.
        """
        if not self._closed:
            self._records.append(
                SRecord(SRecordType.END_16, _address_bytes(self.entry_point))
            )
            self._closed = True

        return "".join(
            record.to_line() + self.line_terminator for record in self._records
        )

    def build_to_file(self, filepath: Union[str, Path]) -> int:
        """
        Build and write the S-record file to disk.

        Returns:
            Number of bytes written
        """
        data = self.build().encode("ascii")
        Path(filepath).write_bytes(data)
        return len(data)
