from __future__ import annotations

import copy
from dataclasses import replace
from typing import Any, Iterable, Mapping, Sequence

from .errors import UnknownSetting
from .functions import FunctionLike, FunctionSpec, as_function_spec
from .settings import FUNCTIONS, TIKZ_SETTINGS, SettingDescriptor


class SettingsStore:
    """Current value of every registered setting.

    Values start at the descriptor defaults and change only through
    :meth:`set_value`, :meth:`set_functions`, :meth:`update` and
    :meth:`reset`. The store is owned by one editing session.
    """

    def __init__(self, registry: Sequence[SettingDescriptor] = TIKZ_SETTINGS) -> None:
        self._registry: tuple[SettingDescriptor, ...] = tuple(registry)
        self._values: dict[str, Any] = {}
        self.reset()

    @property
    def registry(self) -> tuple[SettingDescriptor, ...]:
        return self._registry

    def reset(self) -> None:
        self._values = {d.id: self._initial(d) for d in self._registry}

    @staticmethod
    def _initial(descriptor: SettingDescriptor) -> Any:
        if descriptor.id == FUNCTIONS:
            return [as_function_spec(item) for item in descriptor.default]
        return copy.deepcopy(descriptor.default)

    def _check(self, setting_id: str) -> None:
        if setting_id not in self._values:
            raise UnknownSetting(f"Unknown setting {setting_id!r}")

    def get_value(self, setting_id: str) -> Any:
        self._check(setting_id)
        return self._values[setting_id]

    def set_value(self, setting_id: str, value: Any) -> None:
        self._check(setting_id)
        if setting_id == FUNCTIONS:
            self.set_functions(value)
            return
        self._values[setting_id] = value

    def set_functions(self, functions: Iterable[FunctionLike]) -> None:
        """Replace the plotted functions, keeping list order.

        Rows without an expression or domain are left out, and the tangent
        point is cleared on rows with the tangent switched off.
        """
        self._check(FUNCTIONS)
        specs: list[FunctionSpec] = []
        for item in functions or ():
            spec = as_function_spec(item)
            if not spec.is_complete:
                continue
            if not spec.tangent and spec.tangent_point:
                spec = replace(spec, tangent_point="")
            specs.append(spec)
        self._values[FUNCTIONS] = specs

    def update(self, values: Mapping[str, Any]) -> None:
        for setting_id, value in values.items():
            self.set_value(setting_id, value)

    def as_dict(self) -> dict[str, Any]:
        snapshot = dict(self._values)
        if FUNCTIONS in snapshot:
            snapshot[FUNCTIONS] = list(snapshot[FUNCTIONS])
        return snapshot

    def __contains__(self, setting_id: object) -> bool:
        return setting_id in self._values

