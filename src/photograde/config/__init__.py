"""Settings value objects and dict/suggestion loaders."""

from photograde.config.loaders import (
    patch_from_dict,
    settings_from_dict,
    suggestion_from_text,
)
from photograde.config.values import (
    DEFAULT_SETTINGS,
    CropRect,
    EditSettings,
    SettingsPatch,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "CropRect",
    "EditSettings",
    "SettingsPatch",
    "patch_from_dict",
    "settings_from_dict",
    "suggestion_from_text",
]
