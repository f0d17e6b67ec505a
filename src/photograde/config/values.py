"""Edit settings value objects with partial-update (merge) support.

``EditSettings`` is the full record the grading engine consumes. It is frozen:
every change produces a new record, so snapshots can be shared between the
preview path, the export path and the undo history without copying.

``SettingsPatch`` carries a subset of fields (``None`` means "leave as-is") and
is merged into a full record with ``settings + patch``. This is how slider
changes and assistant suggestions are applied.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace

from photograde.constants import SKIN_NEUTRAL_HUE

# Limit used by clamp(); the contrast factor has a pole at +/-259
CONTRAST_LIMIT = 254.0

# Python field name -> interchange (camelCase) key
FIELD_KEYS: dict[str, str] = {
    "exposure": "exposure",
    "contrast": "contrast",
    "highlights": "highlights",
    "shadows": "shadows",
    "saturation": "saturation",
    "temperature": "temperature",
    "tint": "tint",
    "lut_id": "lutId",
    "lut_intensity": "lutIntensity",
    "skin_hue": "skinHue",
    "skin_saturation": "skinSaturation",
    "skin_luminance": "skinLuminance",
    "skin_texture": "skinTexture",
    "skin_clarity": "skinClarity",
    "skin_detection_range": "skinDetectionRange",
    "crop": "crop",
}


def _clip(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


@dataclass(frozen=True)
class CropRect:
    """Crop rectangle in normalized [0, 1] image-fraction coordinates."""

    x: float = 0.0
    y: float = 0.0
    width: float = 1.0
    height: float = 1.0

    def pixel_bounds(self, image_width: int, image_height: int) -> tuple[int, int, int, int]:
        """Convert to integer pixel bounds clipped to the image.

        :param image_width: Source width in pixels
        :param image_height: Source height in pixels
        :returns: (left, top, right, bottom), right/bottom exclusive, at least 1x1
        """
        left = min(max(int(self.x * image_width), 0), max(image_width - 1, 0))
        top = min(max(int(self.y * image_height), 0), max(image_height - 1, 0))
        right = min(left + max(int(self.width * image_width), 1), image_width)
        bottom = min(top + max(int(self.height * image_height), 1), image_height)
        return left, top, right, bottom

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class SettingsPatch:
    """Partial settings update.

    Every field defaults to ``None`` (unchanged). Because ``crop=None`` cannot
    mean "remove the crop", clearing is requested with ``clear_crop=True``.

    Example:
        >>> patch = SettingsPatch(exposure=10.0, saturation=-20.0)
        >>> settings = DEFAULT_SETTINGS + patch
    """

    exposure: float | None = None
    contrast: float | None = None
    highlights: float | None = None
    shadows: float | None = None
    saturation: float | None = None
    temperature: float | None = None
    tint: float | None = None
    lut_id: str | None = None
    lut_intensity: float | None = None
    skin_hue: float | None = None
    skin_saturation: float | None = None
    skin_luminance: float | None = None
    skin_texture: float | None = None
    skin_clarity: float | None = None
    skin_detection_range: float | None = None
    crop: CropRect | None = None

    clear_lut: bool = False
    clear_crop: bool = False

    def is_empty(self) -> bool:
        """True if merging this patch changes nothing."""
        return (
            all(getattr(self, f.name) is None for f in fields(EditSettings))
            and not self.clear_lut
            and not self.clear_crop
        )

    def changed_fields(self) -> list[str]:
        """Names of the fields this patch sets or clears."""
        names = [f.name for f in fields(EditSettings) if getattr(self, f.name) is not None]
        if self.clear_lut and "lut_id" not in names:
            names.append("lut_id")
        if self.clear_crop and "crop" not in names:
            names.append("crop")
        return names

    def __add__(self, other: SettingsPatch) -> SettingsPatch:
        """Combine two patches; fields set in ``other`` win."""
        if not isinstance(other, SettingsPatch):
            return NotImplemented

        merged = {}
        for f in fields(self):
            theirs = getattr(other, f.name)
            if f.name in ("clear_lut", "clear_crop"):
                continue
            merged[f.name] = theirs if theirs is not None else getattr(self, f.name)

        # A later set overrides an earlier clear and vice versa
        clear_lut = other.clear_lut or (self.clear_lut and other.lut_id is None)
        clear_crop = other.clear_crop or (self.clear_crop and other.crop is None)
        if other.clear_lut:
            merged["lut_id"] = None
        if other.clear_crop:
            merged["crop"] = None
        return SettingsPatch(**merged, clear_lut=clear_lut, clear_crop=clear_crop)


@dataclass(frozen=True)
class EditSettings:
    """Full per-image adjustment record.

    Domains (not enforced; see ``clamp``):
    - exposure, saturation, skin_saturation, skin_luminance: -100 to 100
    - contrast: open interval (-255, 255); +/-259 divides by zero
    - lut_intensity, skin_hue, skin_detection_range: 0 to 100

    highlights, shadows, temperature, tint, skin_texture and skin_clarity are
    stored for the editing UI but do not affect the pixel math yet.
    """

    exposure: float = 0.0
    contrast: float = 0.0
    highlights: float = 0.0
    shadows: float = 0.0
    saturation: float = 0.0
    temperature: float = 0.0
    tint: float = 0.0

    lut_id: str | None = None
    lut_intensity: float = 100.0

    skin_hue: float = SKIN_NEUTRAL_HUE
    skin_saturation: float = 0.0
    skin_luminance: float = 0.0
    skin_texture: float = 0.0
    skin_clarity: float = 0.0
    skin_detection_range: float = 40.0

    crop: CropRect | None = field(default=None)

    def merge(self, patch: SettingsPatch) -> EditSettings:
        """Apply a partial update.

        :param patch: Fields to change
        :returns: New EditSettings
        """
        changes = {
            f.name: getattr(patch, f.name)
            for f in fields(self)
            if getattr(patch, f.name) is not None
        }
        if patch.clear_lut:
            changes["lut_id"] = None
        if patch.clear_crop:
            changes["crop"] = None
        if not changes:
            return self
        return replace(self, **changes)

    def __add__(self, other: SettingsPatch) -> EditSettings:
        if not isinstance(other, SettingsPatch):
            return NotImplemented
        return self.merge(other)

    def replace(self, **changes) -> EditSettings:
        """Typed single or multi-field update (unknown names raise TypeError)."""
        return replace(self, **changes)

    def with_lut(self, lut_id: str | None, intensity: float | None = None) -> EditSettings:
        """Select (or with ``None`` deselect) the active LUT."""
        if intensity is None:
            return replace(self, lut_id=lut_id)
        return replace(self, lut_id=lut_id, lut_intensity=intensity)

    def with_crop(self, crop: CropRect | None) -> EditSettings:
        return replace(self, crop=crop)

    def skin_is_neutral(self) -> bool:
        """True if the skin controls are at their resting position.

        With the target hue slider centred and no saturation/luminance change
        the skin step is a no-op.

        The centred slider maps to a target hue of about 30 degrees, slightly
        warmer than the mask's 21.6 degree reference. Moving any skin control
        off rest therefore also switches on the pull toward that target, so
        e.g. ``skin_saturation=1`` shifts skin hues noticeably more than the
        1% saturation change alone would suggest.
        """
        return (
            self.skin_hue == SKIN_NEUTRAL_HUE
            and self.skin_saturation == 0.0
            and self.skin_luminance == 0.0
        )

    def is_neutral(self) -> bool:
        """Check whether the global and skin adjustments are all at rest.

        The LUT is not considered here: the engine checks the LUT it is handed.

        :returns: True if exposure, contrast, saturation and skin are neutral
        """
        return (
            self.exposure == 0.0
            and self.contrast == 0.0
            and self.saturation == 0.0
            and self.skin_is_neutral()
        )

    def clamp(self) -> EditSettings:
        """Clamp every wired field to its documented domain.

        :returns: New EditSettings with clamped values
        """
        return replace(
            self,
            exposure=_clip(self.exposure, -100.0, 100.0),
            contrast=_clip(self.contrast, -CONTRAST_LIMIT, CONTRAST_LIMIT),
            saturation=_clip(self.saturation, -100.0, 100.0),
            lut_intensity=_clip(self.lut_intensity, 0.0, 100.0),
            skin_hue=_clip(self.skin_hue, 0.0, 100.0),
            skin_saturation=_clip(self.skin_saturation, -100.0, 100.0),
            skin_luminance=_clip(self.skin_luminance, -100.0, 100.0),
            skin_detection_range=_clip(self.skin_detection_range, 0.0, 100.0),
        )

    def to_dict(self) -> dict:
        """Serialize to a plain dict with camelCase keys."""
        raw = asdict(self)
        out = {FIELD_KEYS[name]: value for name, value in raw.items()}
        out["crop"] = self.crop.to_dict() if self.crop is not None else None
        return out


DEFAULT_SETTINGS = EditSettings()
