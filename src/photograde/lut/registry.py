"""Session store of decoded LUTs keyed by id."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from photograde.lut.cube import Lut, parse_cube

if TYPE_CHECKING:
    from photograde.config.values import EditSettings

logger = logging.getLogger(__name__)


class LutRegistry:
    """Holds the LUTs imported during a session.

    LUTs are immutable, so the registry hands out the stored instances
    directly. Settings refer to them by ``lut_id``.

    Example:
        >>> registry = LutRegistry()
        >>> lut_id = registry.add(parse_cube("film", text))
        >>> settings = DEFAULT_SETTINGS.with_lut(lut_id)
        >>> registry.resolve(settings)
    """

    def __init__(self, luts: list[Lut] | None = None):
        self._luts: dict[str, Lut] = {}
        for lut in luts or ():
            self.add(lut)

    def add(self, lut: Lut) -> str:
        """Register a LUT.

        :param lut: Decoded LUT
        :returns: The LUT's id
        """
        if lut.id in self._luts and self._luts[lut.id] is not lut:
            logger.warning("[LutRegistry] Replacing LUT with duplicate id %s", lut.id)
        self._luts[lut.id] = lut
        logger.info("[LutRegistry] Added %r (id=%s, size=%d)", lut.name, lut.id, lut.size)
        return lut.id

    def add_text(self, name: str, text: str) -> Lut:
        """Decode ``.cube`` text and register the result."""
        lut = parse_cube(name, text)
        self.add(lut)
        return lut

    def get(self, lut_id: str | None) -> Lut | None:
        if lut_id is None:
            return None
        return self._luts.get(lut_id)

    def remove(self, lut_id: str) -> Lut | None:
        lut = self._luts.pop(lut_id, None)
        if lut is not None:
            logger.info("[LutRegistry] Removed %r (id=%s)", lut.name, lut_id)
        return lut

    def resolve(self, settings: EditSettings) -> Lut | None:
        """Return the LUT selected by ``settings.lut_id``.

        :returns: The Lut, or None when no LUT is selected or the id is unknown
        """
        if settings.lut_id is None:
            return None
        lut = self._luts.get(settings.lut_id)
        if lut is None:
            logger.warning("[LutRegistry] Unknown LUT id %s, rendering without LUT", settings.lut_id)
        return lut

    def names(self) -> dict[str, str]:
        """Map of id to display name, in insertion order."""
        return {lut_id: lut.name for lut_id, lut in self._luts.items()}

    def __contains__(self, lut_id: object) -> bool:
        return lut_id in self._luts

    def __len__(self) -> int:
        return len(self._luts)

    def __iter__(self) -> Iterator[Lut]:
        return iter(list(self._luts.values()))
