"""
Flash Image Checksums
=====================

This module implements the two checksums reported for an assembled flash
image. Both always run over the assembled buffer, never over raw section
bytes.

Word-Sum Checksum ("Checksum32")
--------------------------------
- Input consumed as 16-bit little-endian unsigned words
- 32-bit accumulator, initial value 0, wraps modulo 2^32
- Input length must be even

CRC-32
------
The standard reflected CRC-32 (IEEE 802.3, CRC-32/ISO-HDLC):
- Polynomial: 0x04C11DB7 (reflected 0xEDB88320), as computed by zlib.crc32
- Initial value: 0xFFFFFFFF
- Final XOR: 0xFFFFFFFF

Known Values
------------
    crc32(b"")          = 0x00000000
    crc32(b"123456789") = 0xCBF43926
    word_sum_checksum(bytes([0x34, 0x12])) = 0x1234

Usage
-----
    from coff_analyzer.flash.checksum import calculate_checksums

    result = calculate_checksums(image)
    print(result.format())   # CRC32: 0x..., Checksum32: 0x...
"""

from dataclasses import dataclass
from typing import Final
import struct
import zlib

from coff_analyzer.errors import InvalidInputError

# Mask for 32-bit values
CHECKSUM_MASK: Final[int] = 0xFFFFFFFF


# =============================================================================
# Checksum Functions
# =============================================================================

def crc32(data: bytes, initial: int = 0) -> int:
    """
    Calculate the CRC-32 of data.

    Args:
        data: Input bytes
        initial: A previous crc32() result, to continue a calculation over
                 data processed in chunks. Default 0 starts a new CRC.

    Returns:
        32-bit CRC value (0x00000000 to 0xFFFFFFFF).

    Example:
        >>> hex(crc32(b"123456789"))
        '0xcbf43926'
        >>> crc32(b"6789", crc32(b"12345")) == crc32(b"123456789")
        True
    """
    return zlib.crc32(data, initial) & CHECKSUM_MASK


def word_sum_checksum(data: bytes, initial: int = 0) -> int:
    """
    Sum the little-endian 16-bit words of data into a 32-bit value.

    Args:
        data: Input bytes; length must be even
        initial: Starting accumulator value, for chunked calculation

    Returns:
        32-bit sum (0x00000000 to 0xFFFFFFFF).

    Raises:
        InvalidInputError: If data has an odd length

    Example:
        >>> hex(word_sum_checksum(bytes([0x34, 0x12])))
        '0x1234'
    """
    if len(data) % 2:
        raise InvalidInputError(
            f"Word-sum checksum needs an even number of bytes, got {len(data)}"
        )

    words = struct.unpack(f"<{len(data) // 2}H", data)
    return (initial + sum(words)) & CHECKSUM_MASK


# =============================================================================
# Combined Result
# =============================================================================

@dataclass(frozen=True)
class ChecksumResult:
    """
    Both checksums of one flash image.

    Attributes:
        crc32: CRC-32 of the image
        word_sum: Word-sum checksum of the image
    """
    crc32: int
    word_sum: int

    def format(self) -> str:
        """Format as the status line shown to the user."""
        return f"CRC32: 0x{self.crc32:08X}, Checksum32: 0x{self.word_sum:08X}"

    def __str__(self) -> str:
        return self.format()


def calculate_checksums(data: bytes) -> ChecksumResult:
    """
    Calculate both checksums over data.

    Raises:
        InvalidInputError: If data has an odd length
    """
    # Check the word sum first so an odd buffer fails before the CRC pass
    word_sum = word_sum_checksum(data)
    return ChecksumResult(crc32=crc32(data), word_sum=word_sum)
