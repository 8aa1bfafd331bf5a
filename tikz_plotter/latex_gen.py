from __future__ import annotations

import logging
from typing import Any, Optional

from . import config
from .settings import DOCUMENT_CLOSE, DOCUMENT_SETUP, SettingDescriptor
from .store import SettingsStore

logger = logging.getLogger(__name__)

_BOOKENDS = frozenset({DOCUMENT_SETUP, DOCUMENT_CLOSE})


def tidy_tikz_source(source: str) -> str:
    """Normalise generated text for the renderer.

    Removes non-breaking-space markers, strips every line and drops the
    empty ones.
    """
    text = source.replace(config.NBSP_MARKER, "")
    lines = (line.strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line)


# ===========================================================================
# TikZ generator
# ===========================================================================

class TikzGenerator:
    """Assembles the TikZ document from a :class:`SettingsStore`.

    Every call reads the store as it is at that moment; the output depends
    only on the stored values, so repeated calls without a mutation in
    between return identical text.
    """

    def __init__(self, store: SettingsStore) -> None:
        self._store = store
        # Built once, registry order is fixed for the store's lifetime
        self._by_id: dict[str, SettingDescriptor] = {d.id: d for d in store.registry}

    @property
    def store(self) -> SettingsStore:
        return self._store

    def generate(self) -> str:
        code = ""

        setup = self._bookend(DOCUMENT_SETUP)
        if setup is not None:
            code += self._fragment(setup, True)

        for descriptor in self._store.registry:
            if descriptor.id in _BOOKENDS or not self._visible(descriptor):
                continue
            code += self._fragment(descriptor, self._store.get_value(descriptor.id))

        close = self._bookend(DOCUMENT_CLOSE)
        if close is not None:
            code += self._fragment(close, True)

        return code

    def render(self) -> str:
        """Generated document after :func:`tidy_tikz_source`."""
        return tidy_tikz_source(self.generate())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _bookend(self, setting_id: str) -> Optional[SettingDescriptor]:
        descriptor = self._by_id.get(setting_id)
        if descriptor is None or not self._store.get_value(setting_id):
            return None
        return descriptor

    def _visible(self, descriptor: SettingDescriptor) -> bool:
        gate = descriptor.visible_when
        return gate is None or bool(self._store.get_value(gate))

    @staticmethod
    def _fragment(descriptor: SettingDescriptor, value: Any) -> str:
        try:
            return descriptor.fragment(value)
        except (TypeError, ValueError, ArithmeticError) as exc:
            logger.warning("Skipping setting %r: %s", descriptor.id, exc)
            return ""
