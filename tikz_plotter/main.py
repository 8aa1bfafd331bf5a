"""
Command-line front end: settings in, TikZ document out.

    tikz-plotter plot.json --set title=Parabola --set showSmallGrid=on

``plot.json`` maps setting ids to values; ``functions`` is a list of
function objects (``{"expression": "x^2", "domain": "-5:5", "extrema": true}``).
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from . import config
from .errors import TikzPlotError
from .latex_gen import TikzGenerator
from .log import setup_logger
from .settings import FUNCTIONS, SettingDescriptor, SettingType, get_descriptor
from .store import SettingsStore

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def coerce_value(descriptor: SettingDescriptor, raw: str) -> Any:
    """Convert command-line text to the type the setting expects."""
    if descriptor.id == FUNCTIONS:
        value = json.loads(raw)
        if not isinstance(value, list):
            raise ValueError("functions must be a JSON list")
        return value
    if descriptor.type is SettingType.TOGGLE:
        text = raw.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ValueError(f"{descriptor.id}: expected a boolean, got {raw!r}")
    if descriptor.type is SettingType.SLIDER:
        number = float(raw)
        return int(number) if number.is_integer() else number
    return raw


def load_settings(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object of setting values")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tikz-plotter",
        description="Generate a pgfplots/TikZ document for 2D function plots.",
    )
    parser.add_argument("config", nargs="?", type=Path,
                        help="JSON file mapping setting ids to values.")
    parser.add_argument("--set", dest="overrides", action="append", default=[],
                        metavar="ID=VALUE", help="Override one setting (repeatable).")
    parser.add_argument("--raw", action="store_true",
                        help="Print the untidied text instead of the normalised document.")
    parser.add_argument("--log-level", default=config.LOG_LEVEL,
                        help="Logging level (default: %(default)s).")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger("tikz_plotter", args.log_level)

    store = SettingsStore()
    try:
        if args.config is not None:
            store.update(load_settings(args.config))
        for item in args.overrides:
            setting_id, sep, raw = item.partition("=")
            if not sep:
                raise ValueError(f"--set expects ID=VALUE, got {item!r}")
            store.set_value(setting_id, coerce_value(get_descriptor(setting_id), raw))
    except (OSError, ValueError, TikzPlotError) as exc:
        print(f"tikz-plotter: error: {exc}", file=sys.stderr)
        return 2

    generator = TikzGenerator(store)
    text = generator.generate() if args.raw else generator.render()
    sys.stdout.write(text + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
