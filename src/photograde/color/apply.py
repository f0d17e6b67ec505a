"""Apply edit settings (and an optional LUT) to an RGBA pixel buffer.

Pipeline per pixel, in order:

1. Exposure: channels *= 2 ** (exposure / 50)
2. Contrast: channel = f * (channel - 128) + 128,
   f = 259 (contrast + 255) / (255 (259 - contrast))
3. Saturation: blend away from Rec. 601 luma by 1 + saturation / 100
4. LUT: nearest grid sample, blended by lutIntensity / 100
5. Skin: hue/saturation/lightness edit inside a feathered skin-tone mask
6. Round and clamp to bytes; alpha is copied unchanged

The same function serves export, preview and thumbnails: it is resolution
agnostic and never mutates its input.
"""

from __future__ import annotations

import logging

import numpy as np

from photograde.buffer import PixelBuffer
from photograde.config.values import DEFAULT_SETTINGS, EditSettings
from photograde.constants import (
    EXPOSURE_MAX_STOPS,
    LUT_MAX_SIZE,
    SKIN_HUE_BAND,
    SKIN_MAX_RANGE,
)
from photograde.lut.cube import Lut

logger = logging.getLogger(__name__)

_NO_LUT = np.zeros(0, dtype=np.float32)


def exposure_multiplier(exposure: float) -> float:
    """Channel gain 2 ** (exposure / 50), finite for any finite or infinite input."""
    stops = min(max(exposure / 50.0, -EXPOSURE_MAX_STOPS), EXPOSURE_MAX_STOPS)
    return 2.0**stops


def contrast_factor(contrast: float) -> float:
    """S-curve factor for a contrast slider value.

    :raises ZeroDivisionError: For contrast == 259 (outside the valid domain)
    """
    return (259.0 * (contrast + 255.0)) / (255.0 * (259.0 - contrast))


def skin_hue_range(settings: EditSettings) -> float:
    """Half-width of the skin hue window in normalized hue units."""
    return (settings.skin_detection_range / 100.0) * SKIN_MAX_RANGE


def skin_target_hue(settings: EditSettings) -> float:
    """Target hue (normalized) for the skinHue slider, within 0-60 degrees."""
    return (settings.skin_hue / 100.0) * SKIN_HUE_BAND


def lut_is_active(settings: EditSettings, lut: Lut | None) -> bool:
    if lut is None or not settings.lut_intensity > 0:
        return False
    if not 0 <= lut.size <= LUT_MAX_SIZE:
        logger.warning("[Engine] Skipping LUT %s with unsupported size %d", lut.id, lut.size)
        return False
    return True


def process(
    buffer: PixelBuffer,
    settings: EditSettings = DEFAULT_SETTINGS,
    lut: Lut | None = None,
) -> PixelBuffer:
    """Grade a pixel buffer.

    :param buffer: Source RGBA buffer (not modified)
    :param settings: Adjustment values; contrast must not be +/-259
    :param lut: Active LUT, or None. Degraded LUTs are safe: samples outside
        the LUT data are skipped per pixel.
    :returns: New buffer with identical dimensions
    """
    use_lut = lut_is_active(settings, lut)
    if settings.is_neutral() and not use_lut:
        return buffer.copy()

    from photograde.color.kernels import grade_rgba_numba

    src = buffer.data
    dst = np.empty_like(src)

    grade_rgba_numba(
        src,
        dst,
        exposure_multiplier(settings.exposure),
        contrast_factor(settings.contrast),
        1.0 + settings.saturation / 100.0,
        lut.data if use_lut else _NO_LUT,
        lut.size if use_lut else 0,
        settings.lut_intensity / 100.0 if use_lut else 0.0,
        use_lut,
        not settings.skin_is_neutral(),
        skin_hue_range(settings),
        skin_target_hue(settings),
        settings.skin_saturation / 100.0,
        settings.skin_luminance / 200.0,
    )

    logger.debug(
        "[Engine] Graded %dx%d (lut=%s, skin=%s)",
        buffer.width,
        buffer.height,
        lut.id if use_lut else None,
        not settings.skin_is_neutral(),
    )
    return PixelBuffer(buffer.width, buffer.height, dst)


def skin_mask(buffer: PixelBuffer, settings: EditSettings = DEFAULT_SETTINGS) -> np.ndarray:
    """Skin-tone weights of a buffer's pixels as an (H, W) float32 array.

    Weights at or below the mask threshold are reported as 0, matching the
    pixels the skin step leaves untouched. The mask is computed on the
    buffer's own colors, i.e. before any exposure/contrast/LUT changes.

    :param buffer: RGBA buffer
    :param settings: Supplies skin_detection_range
    :returns: Weight per pixel in [0, 1]
    """
    from photograde.color.kernels import skin_mask_numba

    out = np.empty(buffer.width * buffer.height, dtype=np.float32)
    skin_mask_numba(buffer.data, out, skin_hue_range(settings))
    return out.reshape(buffer.height, buffer.width)
