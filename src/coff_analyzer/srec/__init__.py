"""
Motorola S-Record Export
========================

- **SRecordBuilder**: Accumulates S0/S1/S9 records for chosen sections
- **SRecord**: A single record and its text form
"""

from coff_analyzer.srec.builder import (
    SRecordBuilder,
    SRecord,
    SRecordType,
    SUPPORTED_ADDRESS_BITS,
    MAX_RECORD_DATA_BYTES,
)

__all__ = [
    "SRecordBuilder",
    "SRecord",
    "SRecordType",
    "SUPPORTED_ADDRESS_BITS",
    "MAX_RECORD_DATA_BYTES",
]
