"""Regulatory configuration loading.

The packaged ``data/cte_wfactors.yaml`` holds the default user-definable
weighting factors and the supply factor tables for each location. It is
read once per process; callers may load and inject any other file.
"""

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Optional

import yaml

from epbd_engine.core.schemas import RegulatoryConfig

DEFAULT_CONFIG_RESOURCE = "cte_wfactors.yaml"


def load_regulatory_config(path: Optional[str | Path] = None) -> RegulatoryConfig:
    """Load a regulatory configuration file.

    Args:
        path: YAML file path. Uses the packaged configuration if None

    Returns:
        Validated RegulatoryConfig
    """
    if path is None:
        text = resources.files("epbd_engine.data").joinpath(DEFAULT_CONFIG_RESOURCE).read_text(
            encoding="utf-8"
        )
    else:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Regulatory configuration not found: {path}")
        text = path.read_text(encoding="utf-8")

    return RegulatoryConfig(**yaml.safe_load(text))


@lru_cache(maxsize=1)
def default_regulatory_config() -> RegulatoryConfig:
    """Packaged regulatory configuration, loaded once."""
    return load_regulatory_config()
