"""
Flash Image and Checksums
=========================

- **assemble_flash_image**: Place chosen sections into a flash-sized buffer
- **calculate_checksums**: CRC-32 and word-sum over an assembled image
"""

from coff_analyzer.flash.image import (
    assemble_flash_image,
    ADDRESS_MASK,
)

from coff_analyzer.flash.checksum import (
    crc32,
    word_sum_checksum,
    calculate_checksums,
    ChecksumResult,
)

__all__ = [
    "assemble_flash_image",
    "ADDRESS_MASK",
    "crc32",
    "word_sum_checksum",
    "calculate_checksums",
    "ChecksumResult",
]
