"""Run bundle I/O operations.

A run bundle is a folder containing:
- run_config.yaml: Run configuration
- components.csv: Energy components
- factors.csv: Weighting factors (optional if run_config sets a location)
- (outputs):
  - factors_completed.csv: Completed weighting factors
  - components_prepared.csv: Balanced (and partitioned) components
  - run_metadata.json: Reproducibility metadata
  - balance.json: Energy balance, if a balance algorithm was run
"""

import json
from pathlib import Path
from typing import Optional

import yaml

from epbd_engine import __version__
from epbd_engine.core.schemas import (
    Balance,
    BundleMetadata,
    Components,
    Factors,
    RegulatoryConfig,
    RunConfig,
)
from epbd_engine.io.formats import (
    components_to_string,
    factors_to_string,
    read_components,
    read_factors,
)

RUN_CONFIG_FILE = "run_config.yaml"
COMPONENTS_FILE = "components.csv"
FACTORS_FILE = "factors.csv"
FACTORS_OUT_FILE = "factors_completed.csv"
COMPONENTS_OUT_FILE = "components_prepared.csv"
METADATA_FILE = "run_metadata.json"
BALANCE_FILE = "balance.json"


def load_bundle(bundle_path: str | Path) -> tuple[RunConfig, Components, Optional[Factors]]:
    """Load a run bundle.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        Tuple of (run_config, components, wfactors or None)
    """
    bundle_path = Path(bundle_path)

    if not bundle_path.exists():
        raise FileNotFoundError(f"Bundle not found: {bundle_path}")

    with open(bundle_path / RUN_CONFIG_FILE, encoding="utf-8") as f:
        run_config = RunConfig(**yaml.safe_load(f))

    components = read_components((bundle_path / COMPONENTS_FILE).read_text(encoding="utf-8"))

    wfactors = None
    factors_path = bundle_path / FACTORS_FILE
    if factors_path.exists():
        wfactors = read_factors(factors_path.read_text(encoding="utf-8"))

    return run_config, components, wfactors


def write_results(
    bundle_path: str | Path,
    wfactors: Factors,
    components: Components,
    regulatory_config: RegulatoryConfig,
    balance: Optional[Balance] = None,
) -> BundleMetadata:
    """Write prepared inputs (and balance, if any) to the bundle.

    Args:
        bundle_path: Path to bundle directory
        wfactors: Completed weighting factors
        components: Prepared components
        regulatory_config: Regulatory configuration used
        balance: Optional energy balance

    Returns:
        Metadata written to the bundle
    """
    bundle_path = Path(bundle_path)
    bundle_path.mkdir(exist_ok=True)

    (bundle_path / FACTORS_OUT_FILE).write_text(factors_to_string(wfactors), encoding="utf-8")
    (bundle_path / COMPONENTS_OUT_FILE).write_text(
        components_to_string(components), encoding="utf-8"
    )

    if balance is not None:
        with open(bundle_path / BALANCE_FILE, "w", encoding="utf-8") as f:
            json.dump(balance.model_dump(mode="json"), f, indent=2, default=str)

    metadata = BundleMetadata(
        epbd_engine_version=__version__,
        regulatory_config_version=regulatory_config.version,
        wfactors_meta={m.key: m.value for m in wfactors.meta},
        components_meta={m.key: m.value for m in components.meta},
        num_factors=len(wfactors.data),
        num_components=len(components.data),
    )
    with open(bundle_path / METADATA_FILE, "w", encoding="utf-8") as f:
        json.dump(metadata.model_dump(mode="json"), f, indent=2, default=str)

    return metadata


def init_bundle(
    bundle_path: str | Path,
    run_config: RunConfig,
    components: Components,
    wfactors: Optional[Factors] = None,
) -> None:
    """Initialize a new run bundle.

    Args:
        bundle_path: Path to bundle directory
        run_config: Run configuration
        components: Energy components
        wfactors: Optional weighting factors
    """
    bundle_path = Path(bundle_path)
    bundle_path.mkdir(parents=True, exist_ok=True)

    with open(bundle_path / RUN_CONFIG_FILE, "w", encoding="utf-8") as f:
        yaml.dump(run_config.model_dump(mode="json", exclude_none=True), f, default_flow_style=False)

    (bundle_path / COMPONENTS_FILE).write_text(components_to_string(components), encoding="utf-8")

    if wfactors is not None:
        (bundle_path / FACTORS_FILE).write_text(factors_to_string(wfactors), encoding="utf-8")


def validate_bundle(bundle_path: str | Path) -> bool:
    """Validate that a bundle has all required files.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        True if valid

    Raises:
        ValueError: If bundle is invalid
    """
    bundle_path = Path(bundle_path)

    for filename in [RUN_CONFIG_FILE, COMPONENTS_FILE]:
        if not (bundle_path / filename).exists():
            raise ValueError(f"Missing required file: {filename}")

    with open(bundle_path / RUN_CONFIG_FILE, encoding="utf-8") as f:
        run_config = RunConfig(**yaml.safe_load(f))

    if run_config.location is None and not (bundle_path / FACTORS_FILE).exists():
        raise ValueError(f"Missing {FACTORS_FILE} and no location set in {RUN_CONFIG_FILE}")

    return True
