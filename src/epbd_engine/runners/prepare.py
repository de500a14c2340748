"""Preparation runner for a run bundle.

Takes the raw components and weighting factors of a bundle and produces
the inputs of the energy balance: balanced (optionally per-service)
components and a completed (optionally nearby, optionally pruned) weighting
factor table.
"""

from typing import Optional

from epbd_engine.balance.interface import BalanceAlgorithm
from epbd_engine.components.balance import fix_components
from epbd_engine.components.service import components_by_service
from epbd_engine.core.config import default_regulatory_config
from epbd_engine.core.schemas import Components, Factors, RegulatoryConfig, RunConfig
from epbd_engine.core.validate import validate_unique_keys
from epbd_engine.io.bundle import load_bundle, write_results
from epbd_engine.wfactors.complete import complete_wfactors, location_wfactors
from epbd_engine.wfactors.nearby import wfactors_to_nearby
from epbd_engine.wfactors.prune import strip_wfactors


def prepare_inputs(
    run_config: RunConfig,
    components: Components,
    wfactors: Optional[Factors] = None,
    regulatory_config: Optional[RegulatoryConfig] = None,
) -> tuple[Components, Factors]:
    """Prepare components and weighting factors for the energy balance.

    Order: balance components, select service, resolve user factors and
    complete the table, convert to nearby, prune.

    Args:
        run_config: Run configuration
        components: Raw energy components (not modified)
        wfactors: Raw weighting factors (used if run_config has no location)
        regulatory_config: Regulatory configuration (packaged one if None)

    Returns:
        Tuple of (components, wfactors)
    """
    regulatory_config = regulatory_config or default_regulatory_config()

    components = components.model_copy(deep=True)
    fix_components(components)
    if run_config.service is not None:
        components = components_by_service(components, run_config.service)

    if run_config.location is not None:
        raw_wfactors = location_wfactors(run_config.location, regulatory_config)
    elif wfactors is not None:
        raw_wfactors = wfactors
    else:
        raise ValueError("No weighting factors: set a location or provide a factor table")

    validate_unique_keys(raw_wfactors)

    completed = complete_wfactors(
        raw_wfactors,
        cogen=run_config.cogen,
        cogennepb=run_config.cogennepb,
        red1=run_config.red1,
        red2=run_config.red2,
        strip_nepb=run_config.strip_nepb,
        config=regulatory_config,
    )
    if run_config.nearby:
        completed = wfactors_to_nearby(completed)
    if run_config.prune:
        completed = strip_wfactors(completed, components)

    return components, completed


def run_prepare(
    bundle_path: str,
    balance_algorithm: Optional[BalanceAlgorithm] = None,
    regulatory_config: Optional[RegulatoryConfig] = None,
) -> tuple:
    """Run preparation (and optionally the energy balance) on a bundle.

    Args:
        bundle_path: Path to run bundle
        balance_algorithm: Optional balance algorithm to run on the prepared inputs
        regulatory_config: Regulatory configuration (packaged one if None)

    Returns:
        Tuple of (components, wfactors, balance or None)
    """
    regulatory_config = regulatory_config or default_regulatory_config()

    print(f"Loading bundle from {bundle_path}...")
    run_config, components, wfactors = load_bundle(bundle_path)

    print(f"Run: {run_config.run_id}")
    print(
        f"Components: {len(components.data)} rows, {components.num_steps()} timesteps, "
        f"carriers: {', '.join(str(c) for c in components.carriers())}"
    )
    if run_config.location is not None:
        print(f"Weighting factors: location {run_config.location}")
    else:
        print("Weighting factors: bundle factor table")

    print("Preparing components and weighting factors...")
    components, wfactors = prepare_inputs(run_config, components, wfactors, regulatory_config)
    print(f"✓ {len(components.data)} components, {len(wfactors.data)} weighting factors")

    balance = None
    if balance_algorithm is not None:
        print("Computing energy balance...")
        balance = balance_algorithm(components, wfactors, run_config.k_exp, run_config.arearef)
        step_b = balance.balance_m2.B
        print(
            f"C_ep [kWh/m2.an]: ren = {step_b.ren:.1f}, nren = {step_b.nren:.1f}, "
            f"tot = {step_b.tot():.1f}, RER = {step_b.rer():.2f}"
        )

    print(f"\nWriting results to {bundle_path}...")
    write_results(bundle_path, wfactors, components, regulatory_config, balance)

    return components, wfactors, balance
