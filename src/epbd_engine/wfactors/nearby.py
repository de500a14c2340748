"""Conversion of weighting factors between assessment perimeters."""

import logging

from epbd_engine.core.constants import (
    COMMENT_NEARBY_PREFIX,
    META_PERIMETER,
    NEARBY_CARRIERS,
    PERIMETER_NEARBY,
    Source,
)
from epbd_engine.core.schemas import Factor, Factors

logger = logging.getLogger(__name__)


def is_nearby(factor: Factor) -> bool:
    """Whether a factor already belongs to the nearby perimeter."""
    return factor.source in (Source.INSITU, Source.COGENERACION) or factor.carrier in NEARBY_CARRIERS


def wfactors_to_nearby(wfactors: Factors) -> Factors:
    """Convert "distant" perimeter weighting factors to the "nearby" perimeter.

    Factors from the grid whose carrier is not in the nearby list become
    fully non renewable: ren' = 0 and nren' = ren + nren. Cogenerated
    electricity keeps its (0, 0) supply factors.

    Args:
        wfactors: Completed weighting factor table (not modified)

    Returns:
        New weighting factor table tagged with CTE_PERIMETRO = NEARBY
    """
    converted = wfactors.model_copy(deep=True)
    data = []
    for f in converted.data:
        if is_nearby(f):
            data.append(f)
        else:
            data.append(
                f.model_copy(
                    update={
                        "ren": 0.0,
                        "nren": f.ren + f.nren,
                        "comment": f"{COMMENT_NEARBY_PREFIX}{f.comment}",
                    }
                )
            )
    converted.data = data
    converted.update_meta(META_PERIMETER, PERIMETER_NEARBY)
    logger.info(
        "Converted %d weighting factors to the nearby perimeter",
        sum(1 for f in wfactors.data if not is_nearby(f)),
    )
    return converted
