"""3D LUT decoding and the session LUT registry.

Example:
    >>> from photograde.lut import LutRegistry, parse_cube
    >>> registry = LutRegistry()
    >>> lut = registry.add_text("Portra", cube_text)
"""

from photograde.lut.cube import Lut, identity_lut, load_cube, new_lut_id, parse_cube
from photograde.lut.registry import LutRegistry

__all__ = [
    "Lut",
    "LutRegistry",
    "identity_lut",
    "load_cube",
    "new_lut_id",
    "parse_cube",
]
