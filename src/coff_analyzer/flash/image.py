"""
Flash Image Assembly
====================

Recombines chosen sections of a decoded COFF file into one buffer that
mirrors the target flash.

- Buffer size comes from the file version: 64KB for 0x00C1 targets,
  128KB for 0x00C2 targets.
- Unwritten bytes hold the erased-flash value 0xFF.
- Each section lands at its physical address masked to 16 bits, so
  addresses above 0xFFFF alias into the low 64KB.
- Sections are copied in the order given; later ones overwrite earlier
  ones where they overlap.
- Names that are not in the file are skipped.
"""

from typing import Iterable, Optional
import logging

from coff_analyzer.coff.records import CoffFile
from coff_analyzer.config import AnalyzerConfig, get_default_config

logger = logging.getLogger(__name__)

ADDRESS_MASK = 0xFFFF


def assemble_flash_image(
    coff: CoffFile,
    section_names: Iterable[str],
    config: Optional[AnalyzerConfig] = None,
) -> bytearray:
    """
    Build the flash image for the named sections.

    Data that would extend past the end of the buffer is clipped and a
    warning is logged.

    Args:
        coff: The decoded file
        section_names: Sections to place, in copy order
        config: Settings (erase value); defaults to get_default_config()

    Returns:
        A new bytearray of coff.flash_size bytes
    """
    config = config or get_default_config()
    image = bytearray([config.erase_value]) * coff.flash_size

    for name in section_names:
        section = coff.get_section(name)
        if section is None:
            logger.debug(f"Section '{name}' not in file, skipped")
            continue

        start = section.physical_address & ADDRESS_MASK
        end = min(start + section.size, len(image))
        if end - start < section.size:
            logger.warning(
                f"Section '{name}' runs past the end of the "
                f"{len(image)}-byte flash image, clipped to {end - start} bytes"
            )

        image[start:end] = section.raw_data[:end - start]

    return image
