"""
photograde - Non-destructive photo color grading

Deterministic per-pixel grading of RGBA buffers for export, live preview and
thumbnails.

Features:
- Exposure, S-curve contrast and luma-preserving saturation
- 3D LUTs from .cube files, nearest-grid sampling with intensity blend
- Skin-tone selective hue/saturation/luminance edits
- Numba-parallel kernel; input buffers are never modified
- Immutable settings records with partial-update patches and undo history

Example:
    >>> from photograde import DEFAULT_SETTINGS, PixelBuffer, SettingsPatch, process
    >>> from photograde import parse_cube
    >>>
    >>> lut = parse_cube("film", cube_text)
    >>> settings = DEFAULT_SETTINGS + SettingsPatch(exposure=15.0, lut_id=lut.id)
    >>> graded = process(PixelBuffer.from_array(rgba), settings, lut)

Example - Session rendering:
    >>> from photograde import GradingProcessor, LutRegistry
    >>>
    >>> registry = LutRegistry()
    >>> lut = registry.add_text("film", cube_text)
    >>> processor = GradingProcessor(registry)
    >>> preview = processor.render(source, settings.with_lut(lut.id))
"""

__version__ = "0.1.0"

from photograde.buffer import PixelBuffer
from photograde.color.apply import process, skin_mask
from photograde.config.loaders import patch_from_dict, settings_from_dict, suggestion_from_text
from photograde.config.values import DEFAULT_SETTINGS, CropRect, EditSettings, SettingsPatch
from photograde.history import EditHistory
from photograde.lut.cube import Lut, identity_lut, load_cube, parse_cube
from photograde.lut.registry import LutRegistry
from photograde.processing import GradingProcessor

__all__ = [
    # Version
    "__version__",
    # Data structures
    "PixelBuffer",
    "Lut",
    # Settings
    "EditSettings",
    "SettingsPatch",
    "CropRect",
    "DEFAULT_SETTINGS",
    "patch_from_dict",
    "settings_from_dict",
    "suggestion_from_text",
    # Grading
    "process",
    "skin_mask",
    "GradingProcessor",
    # LUTs
    "parse_cube",
    "load_cube",
    "identity_lut",
    "LutRegistry",
    # History
    "EditHistory",
]
