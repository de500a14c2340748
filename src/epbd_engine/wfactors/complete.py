"""Weighting factor completion.

Completes a weighting factor table with the rows required by the standard
that the input omits, deriving them from existing rows or from the
resolved user-definable factors. Rules run in a fixed order since later
rules use rows appended by earlier ones. Existing rows are never
overwritten, and a missing derivation source aborts the whole completion.
"""

import logging
from typing import Optional

from epbd_engine.core.config import default_regulatory_config
from epbd_engine.core.constants import (
    COMMENT_COGEN_SUPPLY,
    COMMENT_COGEN_TO_GRID_A,
    COMMENT_COGEN_TO_NEPB_A,
    COMMENT_DEFAULT_VALUE,
    COMMENT_EL_INSITU,
    COMMENT_MA_INSITU,
    COMMENT_MA_RED,
    COMMENT_RED1,
    COMMENT_RED2,
    COMMENT_TO_GRID_A,
    COMMENT_TO_GRID_B,
    COMMENT_TO_NEPB_A,
    COMMENT_TO_NEPB_B,
    COMMENT_USER_VALUE,
    EXPORT_CARRIERS,
    META_LOCATION,
    Carrier,
    Dest,
    Source,
    Step,
)
from epbd_engine.core.rennren import RenNren
from epbd_engine.core.schemas import Factor, Factors, Meta, RegulatoryConfig
from epbd_engine.core.validate import (
    MissingDerivationSourceError,
    MissingGridFactorError,
    UnknownLocationError,
)
from epbd_engine.io.formats import read_factors
from epbd_engine.wfactors.user import UserWFactors, find_user_wfactors, update_user_wfactors

logger = logging.getLogger(__name__)


def _push(wfactors: Factors, factor: Factor) -> None:
    logger.debug(
        "Generated weighting factor %s, %s, %s, %s, %.3f, %.3f",
        factor.carrier,
        factor.source,
        factor.dest,
        factor.step,
        factor.ren,
        factor.nren,
    )
    wfactors.data.append(factor)


def _value_origin(value: RenNren, default: RenNren) -> str:
    return COMMENT_DEFAULT_VALUE if value.is_close(default) else COMMENT_USER_VALUE


def _ensure_export_factors(
    wfactors: Factors,
    carrier: Carrier,
    source: Source,
    user_wfactors: UserWFactors,
    config: RegulatoryConfig,
) -> None:
    """Ensure A_RED and A_NEPB factors, steps A and B, for an exporting carrier."""
    supply_a = wfactors.find(carrier, source, Dest.SUMINISTRO, Step.A)

    # Step A: resources used to produce the exported energy
    for dest, comment, cogen_value, cogen_default, cogen_comment in (
        (
            Dest.A_RED,
            COMMENT_TO_GRID_A,
            user_wfactors.cogen,
            config.defaults.cogen_to_grid,
            COMMENT_COGEN_TO_GRID_A,
        ),
        (
            Dest.A_NEPB,
            COMMENT_TO_NEPB_A,
            user_wfactors.cogennepb,
            config.defaults.cogen_to_nepb,
            COMMENT_COGEN_TO_NEPB_A,
        ),
    ):
        if wfactors.has(carrier, source, dest, Step.A):
            continue
        if source == Source.COGENERACION:
            # See EN ISO 52000-1 9.6.6.2.3
            origin = _value_origin(cogen_value, cogen_default)
            _push(
                wfactors,
                Factor(
                    carrier=carrier,
                    source=source,
                    dest=dest,
                    step=Step.A,
                    ren=cogen_value.ren,
                    nren=cogen_value.nren,
                    comment=f"{cogen_comment} {origin}",
                ),
            )
        elif supply_a is not None:
            _push(wfactors, supply_a.model_copy(update={"dest": dest, "step": Step.A, "comment": comment}))
        else:
            raise MissingDerivationSourceError(
                carrier, source, dest, Step.A, f"{carrier}, {source}, {Dest.SUMINISTRO}, {Step.A}"
            )

    # Step B: resources saved at the grid by the exported energy
    grid_supply_a = wfactors.find(carrier, Source.RED, Dest.SUMINISTRO, Step.A)
    for dest, comment in ((Dest.A_RED, COMMENT_TO_GRID_B), (Dest.A_NEPB, COMMENT_TO_NEPB_B)):
        if wfactors.has(carrier, source, dest, Step.B):
            continue
        if grid_supply_a is None:
            raise MissingDerivationSourceError(
                carrier, source, dest, Step.B, f"{carrier}, {Source.RED}, {Dest.SUMINISTRO}, {Step.A}"
            )
        _push(
            wfactors,
            Factor(
                carrier=carrier,
                source=source,
                dest=dest,
                step=Step.B,
                ren=grid_supply_a.ren,
                nren=grid_supply_a.nren,
                comment=comment,
            ),
        )


def fix_wfactors(
    wfactors: Factors,
    user_wfactors: UserWFactors,
    strip_nepb: bool = True,
    config: Optional[RegulatoryConfig] = None,
) -> Factors:
    """Ensure consistency of the weighting factors and derive the missing ones.

    Steps:
    1. MEDIOAMBIENTE, INSITU, SUMINISTRO, A (1.0, 0.0)
    2. MEDIOAMBIENTE, RED, SUMINISTRO, A (1.0, 0.0), fictitious grid
    3. ELECTRICIDAD, INSITU, SUMINISTRO, A (1.0, 0.0) if there is electricity
    4. every carrier has RED, SUMINISTRO, A factors (required, never defaulted)
    5. ELECTRICIDAD, COGENERACION, SUMINISTRO, A (0.0, 0.0); the impact of
       cogeneration is accounted for in the carrier that feeds it
    6. A_RED and A_NEPB factors, steps A and B, for exporting carriers
    7. RED1 and RED2 supply factors from the user-definable values
    8. remove A_NEPB factors if strip_nepb is set

    Args:
        wfactors: Weighting factor table (not modified)
        user_wfactors: Resolved user-definable factors
        strip_nepb: Remove factors with A_NEPB destination
        config: Regulatory configuration (packaged one if None)

    Returns:
        New, completed weighting factor table

    Raises:
        MissingGridFactorError: If a carrier has no grid supply factor
        MissingDerivationSourceError: If an export factor cannot be derived
    """
    config = config or default_regulatory_config()
    wfactors = wfactors.model_copy(deep=True)

    carriers = wfactors.carriers()

    if not wfactors.has(Carrier.MEDIOAMBIENTE, Source.INSITU, Dest.SUMINISTRO, Step.A):
        _push(
            wfactors,
            Factor(
                carrier=Carrier.MEDIOAMBIENTE,
                source=Source.INSITU,
                dest=Dest.SUMINISTRO,
                step=Step.A,
                ren=1.0,
                nren=0.0,
                comment=COMMENT_MA_INSITU,
            ),
        )

    if not wfactors.has(Carrier.MEDIOAMBIENTE, Source.RED, Dest.SUMINISTRO, Step.A):
        _push(
            wfactors,
            Factor(
                carrier=Carrier.MEDIOAMBIENTE,
                source=Source.RED,
                dest=Dest.SUMINISTRO,
                step=Step.A,
                ren=1.0,
                nren=0.0,
                comment=COMMENT_MA_RED,
            ),
        )

    if Carrier.ELECTRICIDAD in carriers and not wfactors.has(
        Carrier.ELECTRICIDAD, Source.INSITU, Dest.SUMINISTRO
    ):
        _push(
            wfactors,
            Factor(
                carrier=Carrier.ELECTRICIDAD,
                source=Source.INSITU,
                dest=Dest.SUMINISTRO,
                step=Step.A,
                ren=1.0,
                nren=0.0,
                comment=COMMENT_EL_INSITU,
            ),
        )

    missing_grid = [
        c for c in carriers if not wfactors.has(c, Source.RED, Dest.SUMINISTRO, Step.A)
    ]
    if missing_grid:
        raise MissingGridFactorError(missing_grid)

    if not wfactors.has(source=Source.COGENERACION, dest=Dest.SUMINISTRO):
        _push(
            wfactors,
            Factor(
                carrier=Carrier.ELECTRICIDAD,
                source=Source.COGENERACION,
                dest=Dest.SUMINISTRO,
                step=Step.A,
                ren=0.0,
                nren=0.0,
                comment=COMMENT_COGEN_SUPPLY,
            ),
        )

    for carrier, source in EXPORT_CARRIERS:
        _ensure_export_factors(wfactors, carrier, source, user_wfactors, config)

    for carrier, value, comment in (
        (Carrier.RED1, user_wfactors.red1, COMMENT_RED1),
        (Carrier.RED2, user_wfactors.red2, COMMENT_RED2),
    ):
        if not wfactors.has(carrier, Source.RED, Dest.SUMINISTRO, Step.A):
            _push(
                wfactors,
                Factor(
                    carrier=carrier,
                    source=Source.RED,
                    dest=Dest.SUMINISTRO,
                    step=Step.A,
                    ren=value.ren,
                    nren=value.nren,
                    comment=comment,
                ),
            )

    if strip_nepb:
        wfactors.data = [f for f in wfactors.data if f.dest != Dest.A_NEPB]

    logger.info("Completed weighting factor table with %d rows", len(wfactors.data))
    return wfactors


def complete_wfactors(
    wfactors: Factors,
    cogen: Optional[RenNren] = None,
    cogennepb: Optional[RenNren] = None,
    red1: Optional[RenNren] = None,
    red2: Optional[RenNren] = None,
    strip_nepb: bool = True,
    config: Optional[RegulatoryConfig] = None,
) -> Factors:
    """Resolve the user-definable factors and complete a weighting factor table.

    The resolved user factors are recorded in the metadata of the returned
    table; the input table is not modified.
    """
    config = config or default_regulatory_config()
    wfactors = wfactors.model_copy(deep=True)
    user_wfactors = find_user_wfactors(wfactors, cogen, cogennepb, red1, red2, config=config)
    update_user_wfactors(wfactors, user_wfactors)
    return fix_wfactors(wfactors, user_wfactors, strip_nepb, config=config)


def location_wfactors(location: str, config: Optional[RegulatoryConfig] = None) -> Factors:
    """Raw weighting factor table configured for a location.

    Raises:
        UnknownLocationError: If the location is not configured
    """
    config = config or default_regulatory_config()
    table = config.locations.get(location)
    if table is None:
        raise UnknownLocationError(location, list(config.locations))

    wfactors = Factors(
        meta=[Meta(key=k, value=v) for k, v in table.meta.items()],
        data=[f.model_copy() for f in table.factors],
    )
    if wfactors.get_meta(META_LOCATION) is None:
        wfactors.update_meta(META_LOCATION, location)
    return wfactors


def new_wfactors(
    location: str,
    cogen: Optional[RenNren] = None,
    cogennepb: Optional[RenNren] = None,
    red1: Optional[RenNren] = None,
    red2: Optional[RenNren] = None,
    strip_nepb: bool = True,
    config: Optional[RegulatoryConfig] = None,
) -> Factors:
    """Generate a completed weighting factor table for a location.

    Args:
        location: PENINSULA, BALEARES, CANARIAS or CEUTAMELILLA (or any
            location in the injected configuration)
        cogen, cogennepb, red1, red2: Explicit user-definable factors
        strip_nepb: Remove factors with A_NEPB destination
        config: Regulatory configuration (packaged one if None)

    Raises:
        UnknownLocationError: If the location is not configured
    """
    config = config or default_regulatory_config()
    wfactors = location_wfactors(location, config)
    return complete_wfactors(wfactors, cogen, cogennepb, red1, red2, strip_nepb, config)


def parse_wfactors(
    text: str,
    cogen: Optional[RenNren] = None,
    cogennepb: Optional[RenNren] = None,
    red1: Optional[RenNren] = None,
    red2: Optional[RenNren] = None,
    strip_nepb: bool = True,
    config: Optional[RegulatoryConfig] = None,
) -> Factors:
    """Parse a weighting factor table from text and complete it."""
    return complete_wfactors(read_factors(text), cogen, cogennepb, red1, red2, strip_nepb, config)
