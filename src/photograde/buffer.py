"""RGBA pixel buffer container.

Interleaved 8-bit RGBA, row-major, no padding: the layout of a canvas
``ImageData`` or a PIL ``"RGBA"`` image. The grading engine never resizes a
buffer; it only rewrites channel values into a new one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

if TYPE_CHECKING:
    from photograde.config.values import CropRect

CHANNELS = 4


def _to_uint8(values: ArrayLike) -> NDArray[np.uint8]:
    arr = np.asarray(values)
    if arr.dtype == np.uint8:
        return np.ascontiguousarray(arr.reshape(-1))
    if np.issubdtype(arr.dtype, np.floating):
        arr = np.rint(arr)
    return np.ascontiguousarray(np.clip(arr, 0, 255).astype(np.uint8).reshape(-1))


@dataclass(eq=False)
class PixelBuffer:
    """Width x height RGBA image stored as a flat uint8 array.

    :param width: Width in pixels
    :param height: Height in pixels
    :param data: Flat channel data of length width * height * 4
    :raises ValueError: If the data length does not match the dimensions
    """

    width: int
    height: int
    data: NDArray[np.uint8]

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Invalid dimensions {self.width}x{self.height}")
        self.data = _to_uint8(self.data)
        expected = self.width * self.height * CHANNELS
        if self.data.size != expected:
            raise ValueError(
                f"Buffer length {self.data.size} does not match "
                f"{self.width}x{self.height}x{CHANNELS}={expected}"
            )

    @classmethod
    def from_array(cls, image: ArrayLike) -> PixelBuffer:
        """Create from an (H, W, 4) array.

        :param image: RGBA image array
        :returns: PixelBuffer holding a copy of the data
        """
        arr = np.asarray(image)
        if arr.ndim != 3 or arr.shape[2] != CHANNELS:
            raise ValueError(f"Expected an (H, W, 4) array, got shape {arr.shape}")
        height, width = arr.shape[:2]
        return cls(width, height, _to_uint8(arr).copy())

    @classmethod
    def from_rgb(cls, image: ArrayLike, alpha: int = 255) -> PixelBuffer:
        """Create from an (H, W, 3) array with a constant alpha."""
        arr = np.asarray(image)
        if arr.ndim != 3 or arr.shape[2] != 3:
            raise ValueError(f"Expected an (H, W, 3) array, got shape {arr.shape}")
        height, width = arr.shape[:2]
        rgba = np.empty((height, width, CHANNELS), dtype=np.uint8)
        rgba[..., :3] = _to_uint8(arr).reshape(height, width, 3)
        rgba[..., 3] = alpha
        return cls(width, height, rgba.reshape(-1))

    @classmethod
    def filled(cls, width: int, height: int, rgba: tuple[int, int, int, int]) -> PixelBuffer:
        """Create a buffer where every pixel has the same value."""
        data = np.tile(np.asarray(rgba, dtype=np.uint8), width * height)
        return cls(width, height, data)

    @property
    def shape(self) -> tuple[int, int]:
        """(height, width)"""
        return self.height, self.width

    def __len__(self) -> int:
        return self.data.size

    def as_array(self) -> NDArray[np.uint8]:
        """View the data as an (H, W, 4) array (no copy)."""
        return self.data.reshape(self.height, self.width, CHANNELS)

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        offset = (y * self.width + x) * CHANNELS
        return tuple(int(v) for v in self.data[offset : offset + CHANNELS])

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.width, self.height, self.data.copy())

    def crop(self, rect: CropRect | None) -> PixelBuffer:
        """Copy out the sub-rectangle selected by a normalized crop.

        No resampling happens here; scaling the result to a preview or
        thumbnail size is the caller's job.

        :param rect: Crop in [0, 1] image-fraction coordinates, or None
        :returns: New PixelBuffer (a full copy when rect is None)
        """
        if rect is None or self.width == 0 or self.height == 0:
            return self.copy()
        left, top, right, bottom = rect.pixel_bounds(self.width, self.height)
        region = self.as_array()[top:bottom, left:right]
        return PixelBuffer(right - left, bottom - top, np.ascontiguousarray(region).reshape(-1))

    def equals(self, other: PixelBuffer) -> bool:
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.data, other.data)
        )
