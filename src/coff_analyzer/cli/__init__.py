"""
COFF Analyzer Command-Line Interface
====================================

- **coffsum**: inspect, checksum and export COFF object files

Implemented as a Click-based CLI application with help and error
reporting.
"""

__all__ = ["coffsum"]
