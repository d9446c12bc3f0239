"""
COFF Analyzer - Configuration
=============================

Settings shared by the export path and the command-line tool.
Configuration can come from:
- Default values (defined here)
- Environment variables

Environment variables (all optional):
    COFF_ANALYZER_RECORD_BYTES: Data bytes per S1 record (1-252)
    COFF_ANALYZER_LINE_ENDING: "crlf" or "lf"
"""

from dataclasses import dataclass
from typing import Optional
import logging
import os

logger = logging.getLogger(__name__)

LINE_ENDINGS = {
    "crlf": "\r\n",
    "lf": "\n",
}


@dataclass
class AnalyzerConfig:
    """
    Configuration for flash image assembly and S-record export.

    Attributes:
        record_data_bytes: Maximum data bytes per S1 record (default: 30)
        line_terminator: Text appended to each S-record line (default: CRLF)
        erase_value: Fill byte for unwritten flash (default: 0xFF)
    """

    record_data_bytes: int = 30
    line_terminator: str = "\r\n"
    erase_value: int = 0xFF

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        """
        Create AnalyzerConfig from environment variables.

        Invalid values are logged and ignored.
        """
        config = cls()

        if record_bytes := os.environ.get("COFF_ANALYZER_RECORD_BYTES"):
            try:
                value = int(record_bytes, 0)
            except ValueError:
                value = 0
            # Length byte is payload + 1 and the payload carries 2 address bytes
            if 1 <= value <= 252:
                config.record_data_bytes = value
            else:
                logger.warning(f"Ignoring COFF_ANALYZER_RECORD_BYTES={record_bytes!r}")

        if line_ending := os.environ.get("COFF_ANALYZER_LINE_ENDING"):
            terminator = LINE_ENDINGS.get(line_ending.lower())
            if terminator is not None:
                config.line_terminator = terminator
            else:
                logger.warning(f"Ignoring COFF_ANALYZER_LINE_ENDING={line_ending!r}")

        return config


# Global default configuration
_default_config: Optional[AnalyzerConfig] = None


def get_default_config() -> AnalyzerConfig:
    """
    Get the default configuration.

    Creates from environment variables on first access.
    Can be overridden by calling set_default_config().
    """
    global _default_config
    if _default_config is None:
        _default_config = AnalyzerConfig.from_env()
    return _default_config


def set_default_config(config: Optional[AnalyzerConfig]) -> None:
    """
    Set the default configuration.

    Passing None resets it so the next access re-reads the environment.
    """
    global _default_config
    _default_config = config
