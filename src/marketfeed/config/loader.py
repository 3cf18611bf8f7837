"""Loading of the feed's YAML configuration.

A config file has four optional sections: ``query`` (static fixtures or a
live RPC service), ``feed`` (page size and debounce delays), ``snapshot``
(instant-snapshot store and age limits) and ``logging``. Missing sections
fall back to the model defaults, so an empty file is valid.
"""

from pathlib import Path

import yaml

from marketfeed.config.models import MarketFeedConfig

_REPO_ROOT = Path(__file__).resolve().parents[3]


def load_config(path: Path | str) -> MarketFeedConfig:
    """Read a feed config file.

    Args:
        path: YAML file, e.g. ``configs/default.yaml``.

    Returns:
        Validated MarketFeedConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If a section has an unknown ``type`` or
            a bad value such as a non-positive ``page_size``.
    """
    with Path(path).open() as f:
        raw = yaml.safe_load(f)

    return MarketFeedConfig.model_validate(raw or {})


def get_default_config_path() -> Path:
    """Path of the bundled demo config (``configs/default.yaml``)."""
    return _REPO_ROOT / "configs" / "default.yaml"
