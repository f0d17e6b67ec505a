"""Decoder for the Adobe/Iridas ``.cube`` 3D LUT text format.

Supported subset:

    # comment
    TITLE "Film Look"
    LUT_3D_SIZE 33
    0.0 0.0 0.0
    ...            (N^3 lines, red varying fastest)

The decoder is best-effort: unknown directives and malformed lines are
skipped, a missing size is inferred from the number of samples, and a
size/sample mismatch still yields a ``Lut`` (with a logged warning). It never
raises for any input text.
"""

from __future__ import annotations

import logging
import math
import re
import secrets
import string
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from photograde.constants import LUT_ID_LENGTH, LUT_MAX_SIZE

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase
_TITLE = re.compile(r'"([^"]+)"')
_LEADING_INT = re.compile(r"[+-]?\d+")


def new_lut_id() -> str:
    """Random 9-character base-36 identifier."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(LUT_ID_LENGTH))


def _readonly(values: NDArray[np.float32]) -> NDArray[np.float32]:
    values = np.ascontiguousarray(values, dtype=np.float32).reshape(-1)
    values.flags.writeable = False
    return values


@dataclass(frozen=True, eq=False)
class Lut:
    """Decoded 3D lookup table.

    ``data`` is a flat, read-only float32 array where the sample for grid
    coordinate (r, g, b) starts at ``(r + g*size + b*size*size) * 3``.
    A degraded LUT (``is_complete`` False) is still usable: the engine skips
    lookups that fall outside ``data``.
    """

    size: int
    data: NDArray[np.float32]
    name: str = ""
    id: str = field(default_factory=new_lut_id)

    def __post_init__(self):
        object.__setattr__(self, "data", _readonly(self.data))

    @property
    def expected_length(self) -> int:
        return self.size**3 * 3

    @property
    def is_complete(self) -> bool:
        """True if data holds exactly size^3 RGB samples."""
        return self.data.size == self.expected_length

    @property
    def num_samples(self) -> int:
        return self.data.size // 3

    def sample(self, r: int, g: int, b: int) -> tuple[float, float, float] | None:
        """RGB sample at a grid coordinate, or None if outside the data."""
        idx = (r + g * self.size + b * self.size * self.size) * 3
        if idx < 0 or idx + 2 >= self.data.size:
            return None
        return float(self.data[idx]), float(self.data[idx + 1]), float(self.data[idx + 2])

    def __repr__(self) -> str:
        return (
            f"Lut(id={self.id!r}, name={self.name!r}, size={self.size}, "
            f"samples={self.num_samples}, complete={self.is_complete})"
        )


def identity_lut(size: int, name: str = "Identity") -> Lut:
    """Build a LUT that maps every grid point to itself.

    :param size: Grid edge length (>= 2)
    :param name: Display name
    :returns: Complete Lut of size^3 samples
    """
    if size < 2:
        raise ValueError(f"size={size} must be at least 2")
    axis = np.linspace(0.0, 1.0, size, dtype=np.float32)
    # Red varies fastest
    b, g, r = np.meshgrid(axis, axis, axis, indexing="ij")
    data = np.stack([r, g, b], axis=-1).reshape(-1)
    return Lut(size=size, data=data, name=name)


def _parse_triple(parts: list[str]) -> tuple[float, float, float] | None:
    try:
        values = (float(parts[0]), float(parts[1]), float(parts[2]))
    except ValueError:
        return None
    if not all(math.isfinite(v) for v in values):
        return None
    return values


def parse_cube(name: str, text: str) -> Lut:
    """Decode ``.cube`` text into a Lut.

    :param name: Default display name (usually the file name without extension),
        replaced by a ``TITLE`` directive if present
    :param text: File contents
    :returns: Lut; possibly degraded or empty (size 0) but never an exception
    """
    size = 0
    title = name
    values: list[float] = []
    skipped = 0

    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("TITLE"):
            match = _TITLE.search(line)
            if match:
                title = match.group(1)
            continue

        if line.startswith("LUT_3D_SIZE"):
            parts = line.split()
            match = _LEADING_INT.match(parts[1]) if len(parts) > 1 else None
            if match and 0 <= int(match.group(0)) <= LUT_MAX_SIZE:
                size = int(match.group(0))
            else:
                logger.debug("[LutDecoder] Ignoring malformed size line: %r", line)
            continue

        parts = line.split()
        triple = _parse_triple(parts) if len(parts) == 3 else None
        if triple is None:
            skipped += 1
            continue
        values.extend(triple)

    num_samples = len(values) // 3
    if size == 0 and num_samples > 0:
        size = int(round(num_samples ** (1.0 / 3.0)))
        logger.debug("[LutDecoder] No LUT_3D_SIZE in %r, inferred size=%d", title, size)

    expected = size**3 * 3
    if len(values) != expected:
        logger.warning(
            "[LutDecoder] LUT data size mismatch for %s. Expected %d, got %d. "
            "Processing may be inaccurate.",
            title,
            expected,
            len(values),
        )

    lut = Lut(size=size, data=np.asarray(values, dtype=np.float32), name=title)
    logger.debug(
        "[LutDecoder] Decoded %r: size=%d samples=%d skipped_lines=%d",
        title,
        size,
        num_samples,
        skipped,
    )
    return lut


def load_cube(path: str | Path) -> Lut:
    """Read a ``.cube`` file and decode it.

    :param path: File path; its stem is the default display name
    :returns: Decoded Lut
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8", errors="replace")
    return parse_cube(path.stem, text)
