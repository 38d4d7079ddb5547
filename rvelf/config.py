"""JSON configuration for the disassembler."""
import json
import logging
from pathlib import Path
from typing import Optional

DEFAULT_PATH = Path("rvelf.json")

DEFAULTS = {
    "color": False,
    "gp_symbols": ["_gp", "__global_pointer$"],
    "label_format": "LOC_{:06d}",
    "label_scope": "global",
    "history_size": 4,
}

LABEL_SCOPES = ("global", "region")


def load_config(path: Optional[Path] = None) -> dict:
    """Load configuration from *path* (or ./rvelf.json) merged over DEFAULTS."""
    config = dict(DEFAULTS)
    explicit = path is not None
    path = Path(path) if explicit else DEFAULT_PATH
    if not path.exists():
        if explicit:
            logging.warning("%s not found; using defaults", path)
        return config
    with path.open("r", encoding="utf-8") as fh:
        try:
            loaded = json.load(fh)
        except json.JSONDecodeError as exc:
            logging.error("Failed to parse %s: %s", path, exc)
            return config
    if not isinstance(loaded, dict):
        logging.error("%s must contain a JSON object", path)
        return config

    for key, value in loaded.items():
        if key not in DEFAULTS:
            logging.warning("Ignoring unknown config key %r", key)
            continue
        config[key] = value
    _validate(config)
    logging.debug("Loaded config from %s", path)
    return config


def _validate(config: dict) -> None:
    """Reject values the disassembler cannot use; normalise ``gp_symbols``."""
    if config["label_scope"] not in LABEL_SCOPES:
        raise ValueError(f"label_scope must be one of {LABEL_SCOPES}, got {config['label_scope']!r}")

    history = config["history_size"]
    if isinstance(history, bool) or not isinstance(history, int) or history < 1:
        raise ValueError(f"history_size must be an integer of at least 1, got {history!r}")

    fmt = config["label_format"]
    if not isinstance(fmt, str):
        raise ValueError(f"label_format must be a string, got {fmt!r}")
    try:
        first, second = fmt.format(1), fmt.format(2)
    except (AttributeError, IndexError, KeyError, ValueError) as exc:
        raise ValueError(f"label_format {fmt!r} does not accept a counter: {exc}") from exc
    if first == second:
        raise ValueError(f"label_format {fmt!r} does not include the counter")

    gp_symbols = config["gp_symbols"]
    if isinstance(gp_symbols, str):
        gp_symbols = [gp_symbols]
    if not isinstance(gp_symbols, list) or not all(isinstance(name, str) for name in gp_symbols):
        raise ValueError(f"gp_symbols must be a name or a list of names, got {gp_symbols!r}")
    config["gp_symbols"] = gp_symbols
