"""
COFF Analyzer Error Hierarchy
=============================

This module defines the exception hierarchy for the COFF analyzer.
All exceptions inherit from CoffError, allowing callers to catch every
analyzer-related error with a single except clause if desired.

Exception Hierarchy
-------------------
CoffError (base)
├── CoffFormatError - object file cannot be decoded
│   ├── UnsupportedVersionError - unknown version tag
│   ├── MalformedOptionalHeaderError - bad optional header magic
│   └── TruncatedFileError - file ends before a declared region
├── InvalidInputError - checksum input has an odd length
├── UnsupportedTargetError - export not representable for the target
└── SectionNotFoundError - section name absent from the decoded file

Decode errors are all-or-nothing: when one is raised, no partially
decoded file is returned to the caller.
"""

from typing import Iterable, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class CoffError(Exception):
    """
    Base exception for all COFF analyzer errors.

    Example:
        try:
            coff = decode_file("firmware.out")
        except CoffError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Decoder Exceptions
# =============================================================================

class CoffFormatError(CoffError):
    """
    The object file cannot be decoded.

    Raised directly for structural problems that have no more specific
    class (for example a negative section size), and used as the base
    for the specific decode failures below.
    """
    pass


class UnsupportedVersionError(CoffFormatError):
    """
    The file header carries a version tag the decoder does not know.

    Only the two target variants (0x00C1 and 0x00C2) are recognized.
    """

    def __init__(self, version_id: int, message: str = ""):
        self.version_id = version_id
        if not message:
            message = f"Wrong COFF file version, found {version_id:04X}"
        super().__init__(message)


class MalformedOptionalHeaderError(CoffFormatError):
    """
    The optional file header does not start with the 0x0108 magic.
    """

    def __init__(self, magic: int, message: str = ""):
        self.magic = magic
        if not message:
            message = (
                f"Wrong COFF file format (optional header signature "
                f"0x{magic:04X}, expected 0x0108)"
            )
        super().__init__(message)


class TruncatedFileError(CoffFormatError):
    """
    The file ends before a region it declares.

    Attributes:
        region: What was being read (e.g. "file header", "section .text")
        offset: File offset where the read started
        expected: Number of bytes required
        actual: Number of bytes available
    """

    def __init__(self, region: str, offset: int, expected: int, actual: int):
        self.region = region
        self.offset = offset
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Truncated COFF file: {region} at offset 0x{offset:X} needs "
            f"{expected} bytes, only {actual} available"
        )


# =============================================================================
# Checksum / Export Exceptions
# =============================================================================

class InvalidInputError(CoffError):
    """
    Invalid input to a checksum calculation.

    The word-sum checksum consumes 16-bit units, so its input must have
    an even length.
    """
    pass


class UnsupportedTargetError(CoffError):
    """
    The requested export cannot be represented for this target.

    Raised when Motorola export is requested for a 0x00C2 file, or when
    an S-record builder is asked for an address width other than 16 bits.
    """
    pass


class SectionNotFoundError(CoffError):
    """
    One or more section names are absent from the decoded file.

    Attributes:
        names: The missing section names, in the order they were requested
        available: Section names present in the file
    """

    def __init__(self, names: Iterable[str], available: Optional[Iterable[str]] = None):
        self.names = list(names)
        self.available = list(available or [])
        missing = ", ".join(f"'{n}'" for n in self.names)
        message = f"section not found: {missing}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)
