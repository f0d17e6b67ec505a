"""
Color grading module - per-pixel exposure, contrast, saturation, LUT and skin edits.

Example:
    >>> from photograde.color import process
    >>> graded = process(buffer, settings, lut)

Color-space helpers (Numba-compiled, callable from Python):
    >>> from photograde.color import rgb_to_hsl, hsl_to_rgb
    >>> h, s, l = rgb_to_hsl(200.0, 150.0, 100.0)
"""

from photograde.color.apply import (
    contrast_factor,
    exposure_multiplier,
    process,
    skin_mask,
    skin_target_hue,
)
from photograde.color.kernels import hsl_to_rgb, rgb_to_hsl, skin_mask_weight

__all__ = [
    "process",
    "skin_mask",
    "contrast_factor",
    "exposure_multiplier",
    "skin_target_hue",
    "rgb_to_hsl",
    "hsl_to_rgb",
    "skin_mask_weight",
]
