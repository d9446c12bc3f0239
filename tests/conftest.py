"""
Shared fixtures for the COFF analyzer tests.

COFF images are built byte by byte here so the tests do not depend on
files produced by a real toolchain.
"""

import struct
from datetime import datetime
from typing import Optional

import pytest

from coff_analyzer.config import set_default_config
from coff_analyzer.coff import (
    CoffFile,
    CoffVersion,
    FileHeader,
    OptionalHeader,
    Section,
)


def make_section_record(
    version: int,
    name: bytes,
    physical: int,
    size: int,
    raw_ptr: int,
    page: int = 0,
    virtual: Optional[int] = None,
    reloc_ptr: int = 0,
) -> bytes:
    """
    Encode one section header record with stored (on-disk) values.

    0x00C1 records are 40 bytes with the page at offset 39, 0x00C2 records
    are 48 bytes with a 16-bit page at offset 46.
    """
    if virtual is None:
        virtual = physical
    fields = struct.pack(
        "<8siiiii", name.ljust(8, b"\0"), physical, virtual, size, raw_ptr, reloc_ptr
    )
    if version == 0x00C1:
        tail = bytearray(12)
        tail[11] = page
    else:
        tail = bytearray(20)
        tail[18:20] = struct.pack("<H", page)
    return fields + bytes(tail)


def make_optional_header(
    magic: int = 0x0108,
    version: int = 1,
    exec_code_size: int = 0,
    initialized_data_size: int = 0,
    uninitialized_data_size: int = 0,
    entry_point_address: int = 0,
    exec_code_address: int = 0,
    init_data_address: int = 0,
) -> bytes:
    """Encode a 28-byte optional header with stored values."""
    return struct.pack(
        "<Hhiiiiii", magic, version, exec_code_size, initialized_data_size,
        uninitialized_data_size, entry_point_address, exec_code_address,
        init_data_address,
    )


def make_coff_image(
    version: int = 0x00C1,
    sections: Optional[list] = None,
    optional_header: Optional[bytes] = None,
    timestamp: int = 0,
    target_id: int = 0x009D,
    flags: int = 0,
    section_count: Optional[int] = None,
) -> bytes:
    """
    Build a complete COFF file image.

    Args:
        version: Version tag written to the file header
        sections: List of (name, stored_physical_address, data, page) tuples.
            For 0x00C1 the stored size is len(data) // 2 (word count).
        optional_header: Raw optional header bytes; its length is written
            as the optional header size
        timestamp: Stored timestamp seconds
        section_count: Override the declared section count (defaults to
            the number of records written, placeholder included)

    Returns:
        The file bytes. For 0x00C2 a placeholder section record named
        "skipme" is written first.
    """
    sections = sections or []
    optional_header = optional_header or b""
    record_size = 40 if version == 0x00C1 else 48
    placeholder = version == 0x00C2
    record_count = len(sections) + (1 if placeholder else 0)

    data_offset = 22 + len(optional_header) + record_count * record_size
    records = bytearray()
    raw = bytearray()

    if placeholder:
        records += make_section_record(version, b"skipme", 0, 0, 0)

    for name, physical, data, page in sections:
        stored_size = len(data) // 2 if version == 0x00C1 else len(data)
        records += make_section_record(
            version, name, physical, stored_size, data_offset + len(raw), page
        )
        raw += data

    if section_count is None:
        section_count = record_count

    header = struct.pack(
        "<HHiiiHHH", version, section_count, timestamp, 0, 0,
        len(optional_header), flags, target_id,
    )
    return header + optional_header + bytes(records) + bytes(raw)


def make_section(
    name: str,
    address: int,
    data: bytes,
    page: int = 0,
) -> Section:
    """Build a Section value directly, bypassing the parser."""
    return Section(
        name=name,
        physical_address=address,
        virtual_address=address,
        size=len(data),
        raw_data_offset=0,
        relocation_offset=0,
        memory_page=page,
        raw_data=bytes(data),
    )


def make_coff_file(
    version: CoffVersion = CoffVersion.C1,
    sections: Optional[list[Section]] = None,
    entry_point: Optional[int] = None,
) -> CoffFile:
    """Build a CoffFile directly from Sections."""
    sections = sections or []
    optional = None
    if entry_point is not None:
        optional = OptionalHeader(entry_point_address=entry_point)
    header = FileHeader(
        version_id=int(version),
        section_count=len(sections),
        timestamp=datetime(1970, 1, 1),
        optional_header_size=28 if optional else 0,
    )
    return CoffFile(
        header=header,
        optional_header=optional,
        sections={section.name: section for section in sections},
    )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_default_config():
    """Make every test start from the built-in configuration."""
    set_default_config(None)
    yield
    set_default_config(None)


@pytest.fixture
def build_coff():
    """Factory for COFF file images (see make_coff_image)."""
    return make_coff_image


@pytest.fixture
def section_factory():
    """Factory for Section values (see make_section)."""
    return make_section


@pytest.fixture
def coff_factory():
    """Factory for CoffFile values (see make_coff_file)."""
    return make_coff_file


@pytest.fixture
def sample_c1_image() -> bytes:
    """
    A 0x00C1 file with an optional header and three sections.

    Stored values are word counts:
        .text   at 0x1000 words (0x2000 bytes), 4 bytes, page 0
        .cinit  at 0x1800 words (0x3000 bytes), 2 bytes, page 0
        .data   at 0x0100 words (0x0200 bytes), 2 bytes, page 1
    """
    return make_coff_image(
        version=0x00C1,
        optional_header=make_optional_header(
            exec_code_size=0x0002,
            entry_point_address=0x1000,
            exec_code_address=0x1000,
        ),
        timestamp=86400,
        sections=[
            (b".text", 0x1000, bytes([0xDE, 0xAD, 0xBE, 0xEF]), 0),
            (b".cinit", 0x1800, bytes([0x01, 0x02]), 0),
            (b".data", 0x0100, bytes([0x55, 0xAA]), 1),
        ],
    )


@pytest.fixture
def sample_c2_image() -> bytes:
    """A 0x00C2 file with an optional header and two sections."""
    return make_coff_image(
        version=0x00C2,
        optional_header=make_optional_header(
            exec_code_size=0x0010,
            entry_point_address=0x4000,
            exec_code_address=0x4000,
        ),
        sections=[
            (b".text", 0x4000, bytes([0x11, 0x22, 0x33]), 0),
            (b".const", 0x5000, bytes([0x44]), 0),
        ],
    )
