"""Removal of weighting factors that a dataset does not use."""

import logging

from epbd_engine.core.constants import Carrier, CSubtype, Dest, Source
from epbd_engine.core.schemas import Components, Factors

logger = logging.getLogger(__name__)


def strip_wfactors(wfactors: Factors, components: Components) -> Factors:
    """Remove weighting factors not needed for the given components.

    Removes the factors:
    - of carriers that do not appear in the components
    - of cogeneration, if there is no cogeneration component
    - with A_NEPB destination, if there is no NEPB component
    - of on-site electricity, if there is no on-site electricity component

    Args:
        wfactors: Completed weighting factor table (not modified)
        components: Energy components

    Returns:
        New, pruned weighting factor table
    """
    carriers = set(components.carriers())
    has_cogen = any(c.csubtype == CSubtype.COGENERACION for c in components.data)
    has_nepb = any(c.csubtype == CSubtype.NEPB for c in components.data)
    has_elec_insitu = any(
        c.carrier == Carrier.ELECTRICIDAD and c.csubtype == CSubtype.INSITU for c in components.data
    )

    def is_used(f) -> bool:
        if f.carrier not in carriers:
            return False
        if f.source == Source.COGENERACION and not has_cogen:
            return False
        if f.dest == Dest.A_NEPB and not has_nepb:
            return False
        if f.carrier == Carrier.ELECTRICIDAD and f.source == Source.INSITU and not has_elec_insitu:
            return False
        return True

    pruned = wfactors.model_copy(deep=True)
    pruned.data = [f for f in pruned.data if is_used(f)]
    logger.info("Pruned weighting factors from %d to %d rows", len(wfactors.data), len(pruned.data))
    return pruned
