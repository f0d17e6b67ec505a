"""Numba kernels for the per-pixel grading pipeline.

All channel math runs in float64 on 0-255 values. Pixels are independent, so
the main kernel is a ``prange`` loop over pixels; there is no cross-pixel
accumulation and the result does not depend on the thread count.

``fastmath`` is left off: the output is rounded to bytes and must be
bit-identical between preview, thumbnail and export renders.
"""

from __future__ import annotations

import math

import numpy as np
from numba import njit, prange
from numpy.typing import NDArray

from photograde.constants import (
    LUMA_B,
    LUMA_G,
    LUMA_R,
    SKIN_LUM_CENTER,
    SKIN_LUM_SPREAD,
    SKIN_MASK_THRESHOLD,
    SKIN_REFERENCE_HUE,
    SKIN_SAT_CENTER,
    SKIN_SAT_SPREAD,
)

# =============================================================================
# Scalar helpers
# =============================================================================


@njit(cache=True, nogil=True, error_model="numpy")
def rgb_to_hsl(r: float, g: float, b: float) -> tuple[float, float, float]:
    """Convert 0-255 RGB to HSL, each component in [0, 1].

    Hue and saturation are 0 for achromatic input (max == min).
    """
    r = r / 255.0
    g = g / 255.0
    b = b / 255.0
    mx = max(r, g, b)
    mn = min(r, g, b)
    h = 0.0
    s = 0.0
    l = (mx + mn) / 2.0
    if mx != mn:
        d = mx - mn
        if l > 0.5:
            s = d / (2.0 - mx - mn)
        else:
            s = d / (mx + mn)
        if mx == r:
            h = (g - b) / d + (6.0 if g < b else 0.0)
        elif mx == g:
            h = (b - r) / d + 2.0
        else:
            h = (r - g) / d + 4.0
        h /= 6.0
    return h, s, l


@njit(cache=True, nogil=True)
def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0.0:
        t += 1.0
    if t > 1.0:
        t -= 1.0
    if t < 1.0 / 6.0:
        return p + (q - p) * 6.0 * t
    if t < 0.5:
        return q
    if t < 2.0 / 3.0:
        return p + (q - p) * (2.0 / 3.0 - t) * 6.0
    return p


@njit(cache=True, nogil=True)
def hsl_to_rgb(h: float, s: float, l: float) -> tuple[float, float, float]:
    """Convert HSL in [0, 1] back to 0-255 RGB (unrounded)."""
    if s == 0.0:
        return l * 255.0, l * 255.0, l * 255.0
    q = l * (1.0 + s) if l < 0.5 else l + s - l * s
    p = 2.0 * l - q
    r = _hue_to_channel(p, q, h + 1.0 / 3.0)
    g = _hue_to_channel(p, q, h)
    b = _hue_to_channel(p, q, h - 1.0 / 3.0)
    return r * 255.0, g * 255.0, b * 255.0


@njit(cache=True, nogil=True, error_model="numpy")
def skin_mask_weight(h: float, s: float, l: float, hue_range: float) -> float:
    """Feathered skin-tone membership of an HSL color.

    Only a positive ``hue_range`` opens a hue window. A zero range matches the
    reference hue exactly; a negative range (out-of-domain detection range)
    matches nothing, so the weight always stays within [0, 1].

    :param h: Hue in [0, 1]
    :param s: Saturation in [0, 1]
    :param l: Lightness in [0, 1]
    :param hue_range: Half-width of the hue window in normalized hue units
    :returns: Weight in [0, 1]; NaN-free for finite input
    """
    diff = abs(h - SKIN_REFERENCE_HUE)
    h_dist = min(diff, 1.0 - diff)
    if hue_range > 0.0:
        weight = max(0.0, 1.0 - h_dist / hue_range)
    elif hue_range == 0.0 and h_dist == 0.0:
        weight = 1.0
    else:
        weight = 0.0
    s_weight = max(0.0, 1.0 - abs(s - SKIN_SAT_CENTER) / SKIN_SAT_SPREAD)
    l_weight = max(0.0, 1.0 - abs(l - SKIN_LUM_CENTER) / SKIN_LUM_SPREAD)
    return weight * s_weight * l_weight


@njit(cache=True, nogil=True)
def to_byte(v: float) -> int:
    """Clamp to [0, 255] and round half to even (NaN -> 0)."""
    if not v > 0.0:
        return 0
    if v >= 255.0:
        return 255
    f = math.floor(v)
    frac = v - f
    if frac > 0.5 or (frac == 0.5 and f % 2.0 == 1.0):
        f += 1.0
    return int(f)


@njit(cache=True, nogil=True)
def _lut_index(r: float, g: float, b: float, size: int) -> int:
    # Nearest grid point, Math.round semantics (half up) on non-negative input
    scale = size - 1
    ri = int(math.floor(min(max(r, 0.0), 255.0) / 255.0 * scale + 0.5))
    gi = int(math.floor(min(max(g, 0.0), 255.0) / 255.0 * scale + 0.5))
    bi = int(math.floor(min(max(b, 0.0), 255.0) / 255.0 * scale + 0.5))
    return (ri + gi * size + bi * size * size) * 3


# =============================================================================
# Pixel kernels
# =============================================================================


@njit(parallel=True, cache=True, nogil=True, error_model="numpy")
def grade_rgba_numba(
    src: NDArray[np.uint8],
    dst: NDArray[np.uint8],
    exposure_mul: float,
    contrast_factor: float,
    saturation_factor: float,
    lut_data: NDArray[np.float32],
    lut_size: int,
    lut_mix: float,
    apply_lut: bool,
    apply_skin: bool,
    hue_range: float,
    target_hue: float,
    skin_sat_gain: float,
    skin_lum_gain: float,
) -> None:
    """Run the full grading pipeline over an interleaved RGBA buffer.

    :param src: Input RGBA bytes [W*H*4]
    :param dst: Output RGBA bytes [W*H*4]
    :param exposure_mul: 2 ** (exposure / 50)
    :param contrast_factor: 259 (c + 255) / (255 (259 - c))
    :param saturation_factor: 1 + saturation / 100
    :param lut_data: Flat LUT samples (may be empty)
    :param lut_size: LUT grid edge length
    :param lut_mix: lutIntensity / 100
    :param apply_lut: Run the LUT step
    :param apply_skin: Run the skin step
    :param hue_range: skinDetectionRange / 100 * 0.15
    :param target_hue: skinHue / 100 * 60 / 360
    :param skin_sat_gain: skinSaturation / 100
    :param skin_lum_gain: skinLuminance / 200
    """
    n_pixels = src.shape[0] // 4
    lut_len = lut_data.shape[0]

    for p in prange(n_pixels):
        i = p * 4
        r = float(src[i]) * exposure_mul
        g = float(src[i + 1]) * exposure_mul
        b = float(src[i + 2]) * exposure_mul

        r = contrast_factor * (r - 128.0) + 128.0
        g = contrast_factor * (g - 128.0) + 128.0
        b = contrast_factor * (b - 128.0) + 128.0

        gray = LUMA_R * r + LUMA_G * g + LUMA_B * b
        r = gray + (r - gray) * saturation_factor
        g = gray + (g - gray) * saturation_factor
        b = gray + (b - gray) * saturation_factor

        if apply_lut:
            idx = _lut_index(r, g, b, lut_size)
            # Out-of-range lookups (degraded LUTs) leave the pixel as-is
            if idx >= 0 and idx + 2 < lut_len:
                keep = 1.0 - lut_mix
                r = r * keep + lut_data[idx] * 255.0 * lut_mix
                g = g * keep + lut_data[idx + 1] * 255.0 * lut_mix
                b = b * keep + lut_data[idx + 2] * 255.0 * lut_mix

        if apply_skin:
            h, s, l = rgb_to_hsl(r, g, b)
            weight = skin_mask_weight(h, s, l, hue_range)
            if weight > SKIN_MASK_THRESHOLD:
                h = h * (1.0 - weight) + target_hue * weight
                s = s * (1.0 + skin_sat_gain * weight)
                l = l * (1.0 + skin_lum_gain * weight)
                s = min(max(s, 0.0), 1.0)
                l = min(max(l, 0.0), 1.0)
                r, g, b = hsl_to_rgb(h % 1.0, s, l)

        dst[i] = to_byte(r)
        dst[i + 1] = to_byte(g)
        dst[i + 2] = to_byte(b)
        dst[i + 3] = src[i + 3]


@njit(parallel=True, cache=True, nogil=True, error_model="numpy")
def skin_mask_numba(
    src: NDArray[np.uint8],
    out: NDArray[np.float32],
    hue_range: float,
) -> None:
    """Per-pixel skin weight of an RGBA buffer, zeroed at or below the threshold.

    :param src: Input RGBA bytes [W*H*4]
    :param out: Output weights [W*H]
    :param hue_range: skinDetectionRange / 100 * 0.15
    """
    n_pixels = src.shape[0] // 4
    for p in prange(n_pixels):
        i = p * 4
        h, s, l = rgb_to_hsl(float(src[i]), float(src[i + 1]), float(src[i + 2]))
        weight = skin_mask_weight(h, s, l, hue_range)
        out[p] = weight if weight > SKIN_MASK_THRESHOLD else 0.0
