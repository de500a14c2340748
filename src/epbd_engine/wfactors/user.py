"""Resolution of the user-definable weighting factors.

Four factor families may be set by the user: cogeneration exported to the
grid, cogeneration exported to non EPB uses, and district networks 1 and 2.
Each one is taken, in order, from:

1. the explicit argument
2. the factor table metadata (CTE_COGEN, CTE_COGENNEPB, CTE_RED1, CTE_RED2)
3. an existing factor row for that family
4. the regulatory default

The resolved values are written back to the table metadata.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from epbd_engine.core.config import default_regulatory_config
from epbd_engine.core.constants import (
    META_COGEN,
    META_COGENNEPB,
    META_RED1,
    META_RED2,
    Carrier,
    Dest,
    Source,
    Step,
)
from epbd_engine.core.rennren import RenNren
from epbd_engine.core.schemas import Factors, RegulatoryConfig

logger = logging.getLogger(__name__)


class UserWFactors(BaseModel):
    """Resolved user-definable weighting factors."""

    cogen: RenNren
    cogennepb: RenNren
    red1: RenNren
    red2: RenNren


def _row_value(wfactors: Factors, **key) -> Optional[RenNren]:
    f = wfactors.find(**key)
    return f.factors() if f is not None else None


def _resolve(
    name: str,
    explicit: Optional[RenNren],
    wfactors: Factors,
    meta_key: str,
    row_key: dict,
    default: RenNren,
) -> RenNren:
    for origin, value in (
        ("argument", explicit),
        ("metadata", wfactors.get_meta_rennren(meta_key)),
        ("factor table", _row_value(wfactors, **row_key)),
    ):
        if value is not None:
            logger.debug("User factor %s = %s (from %s)", name, value, origin)
            return value
    logger.debug("User factor %s = %s (regulatory default)", name, default)
    return default


def find_user_wfactors(
    wfactors: Factors,
    cogen: Optional[RenNren] = None,
    cogennepb: Optional[RenNren] = None,
    red1: Optional[RenNren] = None,
    red2: Optional[RenNren] = None,
    config: Optional[RegulatoryConfig] = None,
) -> UserWFactors:
    """Select the effective user-definable weighting factors.

    Args:
        wfactors: Weighting factor table
        cogen: Explicit cogeneration to grid factor
        cogennepb: Explicit cogeneration to NEPB factor
        red1: Explicit district network 1 factor
        red2: Explicit district network 2 factor
        config: Regulatory configuration (packaged one if None)

    Returns:
        Resolved UserWFactors
    """
    defaults = (config or default_regulatory_config()).defaults

    return UserWFactors(
        cogen=_resolve(
            "cogen",
            cogen,
            wfactors,
            META_COGEN,
            {"source": Source.COGENERACION, "dest": Dest.A_RED, "step": Step.A},
            defaults.cogen_to_grid,
        ),
        cogennepb=_resolve(
            "cogennepb",
            cogennepb,
            wfactors,
            META_COGENNEPB,
            {"source": Source.COGENERACION, "dest": Dest.A_NEPB, "step": Step.A},
            defaults.cogen_to_nepb,
        ),
        red1=_resolve(
            "red1",
            red1,
            wfactors,
            META_RED1,
            {"carrier": Carrier.RED1, "dest": Dest.SUMINISTRO, "step": Step.A},
            defaults.district1,
        ),
        red2=_resolve(
            "red2",
            red2,
            wfactors,
            META_RED2,
            {"carrier": Carrier.RED2, "dest": Dest.SUMINISTRO, "step": Step.A},
            defaults.district2,
        ),
    )


def update_user_wfactors(wfactors: Factors, user_wfactors: UserWFactors) -> None:
    """Record the resolved user factors in the table metadata (3 decimals)."""
    wfactors.update_meta(META_COGEN, user_wfactors.cogen.to_meta_value())
    wfactors.update_meta(META_COGENNEPB, user_wfactors.cogennepb.to_meta_value())
    wfactors.update_meta(META_RED1, user_wfactors.red1.to_meta_value())
    wfactors.update_meta(META_RED2, user_wfactors.red2.to_meta_value())
