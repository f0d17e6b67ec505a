"""Build settings and patches from plain dicts and assistant replies.

Accepts the camelCase keys used by the editing UI and snake_case field names
interchangeably.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from numbers import Real
from typing import Any

from photograde.config.values import (
    DEFAULT_SETTINGS,
    FIELD_KEYS,
    CropRect,
    EditSettings,
    SettingsPatch,
)

logger = logging.getLogger(__name__)

# camelCase key -> field name, plus identity for snake_case
_KEY_TO_FIELD: dict[str, str] = {key: name for name, key in FIELD_KEYS.items()}
_KEY_TO_FIELD.update({name: name for name in FIELD_KEYS})

# Fields an assistant suggestion may set, and the aliases it may use for them
SUGGESTION_KEYS: dict[str, str] = {
    "exposure": "exposure",
    "contrast": "contrast",
    "saturation": "saturation",
    "temperature": "temperature",
    "temp": "temperature",
}

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


def _as_number(value: Any, key: str) -> float:
    # bool is a Real subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f'"{key}" must be a number, got {type(value).__name__}')
    return float(value)


def _as_crop(value: Any) -> CropRect:
    if isinstance(value, CropRect):
        return value
    if not isinstance(value, Mapping):
        raise TypeError(f'"crop" must be a mapping or None, got {type(value).__name__}')
    missing = {"x", "y", "width", "height"} - set(value)
    if missing:
        raise KeyError(f'"crop" is missing keys: {sorted(missing)}')
    return CropRect(
        x=_as_number(value["x"], "crop.x"),
        y=_as_number(value["y"], "crop.y"),
        width=_as_number(value["width"], "crop.width"),
        height=_as_number(value["height"], "crop.height"),
    )


def patch_from_dict(data: Mapping[str, Any]) -> SettingsPatch:
    """Create a SettingsPatch from a dictionary.

    ``lutId: None`` and ``crop: None`` clear the LUT selection and the crop.

    :param data: Mapping of field keys (camelCase or snake_case) to values
    :returns: SettingsPatch with the given fields set
    :raises KeyError: If a key is not a settings field
    :raises TypeError: If a value has the wrong type

    Example:
        >>> patch = patch_from_dict({"exposure": 12, "skinHue": 70})
        >>> settings = DEFAULT_SETTINGS + patch
    """
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        name = _KEY_TO_FIELD.get(key)
        if name is None:
            valid = sorted(FIELD_KEYS.values())
            raise KeyError(f'Unknown settings key "{key}". Valid keys: {valid}')

        if name == "lut_id":
            if value is None:
                kwargs["clear_lut"] = True
            elif isinstance(value, str):
                kwargs["lut_id"] = value
            else:
                raise TypeError(f'"{key}" must be a string or None, got {type(value).__name__}')
        elif name == "crop":
            if value is None:
                kwargs["clear_crop"] = True
            else:
                kwargs["crop"] = _as_crop(value)
        else:
            kwargs[name] = _as_number(value, key)

    return SettingsPatch(**kwargs)


def settings_from_dict(data: Mapping[str, Any], base: EditSettings = DEFAULT_SETTINGS) -> EditSettings:
    """Create EditSettings from a (possibly partial) dictionary.

    :param data: Mapping of field keys to values
    :param base: Record supplying fields missing from ``data``
    :returns: EditSettings
    """
    return base + patch_from_dict(data)


def suggestion_from_text(text: str) -> SettingsPatch:
    """Extract a settings patch from an assistant reply.

    The reply is free text ending in a JSON object such as
    ``{"exposure": 10, "contrast": 20}``. Only numeric exposure, contrast,
    saturation and temperature (or ``temp``) values are kept; anything else
    in the object is ignored.

    :param text: Assistant reply
    :returns: SettingsPatch, empty if no usable JSON was found
    """
    match = _JSON_BLOCK.search(text or "")
    if match is None:
        return SettingsPatch()

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning("[Suggestion] Failed to parse suggestion JSON: %s", e)
        return SettingsPatch()

    if not isinstance(payload, dict):
        return SettingsPatch()

    kwargs: dict[str, float] = {}
    for key, name in SUGGESTION_KEYS.items():
        value = payload.get(key)
        if name in kwargs:
            continue
        if isinstance(value, Real) and not isinstance(value, bool):
            kwargs[name] = float(value)

    logger.debug("[Suggestion] Parsed fields: %s", sorted(kwargs))
    return SettingsPatch(**kwargs)
