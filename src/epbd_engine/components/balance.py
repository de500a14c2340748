"""Balancing of ambient energy components.

Ambient energy (MEDIOAMBIENTE) consumed by a service must be matched by an
on-site production. Data sources usually declare only the consumption, so
the missing production is generated here, per service.
"""

import logging

from epbd_engine.core.constants import COMMENT_BALANCED_MA, Carrier, CSubtype, CType
from epbd_engine.core.schemas import Component, Components
from epbd_engine.core.vecops import veclistsum, vecsum, vecvecdif
from epbd_engine.io.formats import read_components

logger = logging.getLogger(__name__)


def unbalanced_environment_components(components: Components) -> list[Component]:
    """Production components needed to balance ambient energy consumption.

    For each service with MEDIOAMBIENTE consumption, the consumption not
    covered by declared production (clamped at zero per timestep) becomes
    a new INSITU production component.

    Args:
        components: Energy components

    Returns:
        New production components (one per unbalanced service)
    """
    envcomps = [c for c in components.data if c.carrier == Carrier.MEDIOAMBIENTE]
    services = list(dict.fromkeys(c.service for c in envcomps))

    balancecomps = []
    for service in services:
        consumed = [c.values for c in envcomps if c.service == service and c.is_consumption()]
        if not consumed:
            continue
        unbalanced = veclistsum(consumed)

        produced = [c.values for c in envcomps if c.service == service and c.is_production()]
        if produced:
            unbalanced = [max(v, 0.0) for v in vecvecdif(unbalanced, veclistsum(produced))]

        if vecsum(unbalanced) == 0.0:
            continue

        logger.debug("Balancing %.2f kWh of ambient energy for service %s", vecsum(unbalanced), service)
        balancecomps.append(
            Component(
                carrier=Carrier.MEDIOAMBIENTE,
                ctype=CType.PRODUCCION,
                csubtype=CSubtype.INSITU,
                service=service,
                values=unbalanced,
                comment=COMMENT_BALANCED_MA,
            )
        )
    return balancecomps


def fix_components(components: Components) -> None:
    """Append the productions that balance ambient energy consumption (in place)."""
    balancecomps = unbalanced_environment_components(components)
    components.data.extend(balancecomps)
    if balancecomps:
        logger.info("Added %d ambient energy production components", len(balancecomps))


def balance_components(components: Components) -> Components:
    """Copy of the components with ambient energy consumption balanced."""
    balanced = components.model_copy(deep=True)
    fix_components(balanced)
    return balanced


def parse_components(text: str) -> Components:
    """Parse energy components from text and balance ambient energy."""
    components = read_components(text)
    fix_components(components)
    return components
