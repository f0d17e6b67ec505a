"""
Unified render entry point for export, preview and thumbnails.

All three call sites extract the crop region first, resolve the active LUT by
id, and run the same grading pass, so a thumbnail and an export of the same
settings differ only in resolution.
"""

from __future__ import annotations

import logging

from photograde.buffer import PixelBuffer
from photograde.color.apply import process
from photograde.config.values import DEFAULT_SETTINGS, EditSettings
from photograde.lut.registry import LutRegistry

logger = logging.getLogger(__name__)


class GradingProcessor:
    """Renders buffers against a session LUT registry.

    Example:
        >>> processor = GradingProcessor(registry)
        >>> graded = processor.render(source, settings)
    """

    def __init__(self, registry: LutRegistry | None = None):
        self.registry = registry if registry is not None else LutRegistry()

    def render(
        self,
        buffer: PixelBuffer,
        settings: EditSettings = DEFAULT_SETTINGS,
        apply_crop: bool = True,
    ) -> PixelBuffer:
        """Crop, resolve the LUT and grade.

        :param buffer: Full source image (or an already-scaled version of it)
        :param settings: Edit settings; ``crop`` and ``lut_id`` are honoured here
        :param apply_crop: Set False when the caller already extracted the crop
            (e.g. while the crop is being edited)
        :returns: Graded buffer
        """
        source = buffer.crop(settings.crop) if apply_crop and settings.crop is not None else buffer
        lut = self.registry.resolve(settings)
        logger.debug(
            "[Processor] Rendering %dx%d -> %dx%d",
            buffer.width,
            buffer.height,
            source.width,
            source.height,
        )
        return process(source, settings, lut)

    def render_batch(
        self, items: list[tuple[PixelBuffer, EditSettings]]
    ) -> list[PixelBuffer]:
        """Render several (buffer, settings) pairs, e.g. for export-all."""
        results = [self.render(buffer, settings) for buffer, settings in items]
        logger.info("[Processor] Rendered %d images", len(results))
        return results
