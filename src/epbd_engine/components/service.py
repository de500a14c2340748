"""Selection of the components that belong to a single service."""

import logging

from epbd_engine.core.constants import (
    COMMENT_REASSIGNED,
    META_PERIMETER,
    META_SERVICE,
    PERIMETER_NEARBY,
    Carrier,
    CSubtype,
    CType,
    Service,
)
from epbd_engine.core.schemas import Component, Components
from epbd_engine.core.vecops import veckmul

logger = logging.getLogger(__name__)


def electricity_share(components: Components, service: Service) -> float:
    """Fraction of the total electricity consumption used by a service.

    Returns 0.0 if there is no electricity consumption.
    """
    consumed = [
        c for c in components.data if c.carrier == Carrier.ELECTRICIDAD and c.is_consumption()
    ]
    total = sum(c.total() for c in consumed)
    service_total = sum(c.total() for c in consumed if c.service == service)
    if total > 0.0 and service_total > 0.0:
        return service_total / total
    return 0.0


def components_by_service(components: Components, service: Service) -> Components:
    """Select the components related to a service.

    1. Takes every consumption and production assigned to the service.
       Ambient energy is expected to be balanced already.
    2. Assigns the on-site electricity production of undefined service
       (NDEF) in proportion to the service share of the total electricity
       consumption. If that share is zero, the undefined production is left
       out.

    Args:
        components: Energy components (not modified)
        service: Selected service

    Returns:
        New components tagged with CTE_PERIMETRO = NEARBY and
        CTE_SERVICIO = service
    """
    data = [c.model_copy(deep=True) for c in components.data if c.service == service]

    pr_el_ndef = [
        c
        for c in components.data
        if c.carrier == Carrier.ELECTRICIDAD
        and c.ctype == CType.PRODUCCION
        and c.csubtype == CSubtype.INSITU
        and c.service == Service.NDEF
    ]

    if pr_el_ndef:
        share = electricity_share(components, service)
        if share > 0.0:
            logger.debug("Reassigning undefined electricity production to %s (share %.3f)", service, share)
            for c in pr_el_ndef:
                data.append(
                    Component(
                        carrier=Carrier.ELECTRICIDAD,
                        ctype=CType.PRODUCCION,
                        csubtype=CSubtype.INSITU,
                        service=service,
                        values=veckmul(c.values, share),
                        comment=f"{c.comment} {COMMENT_REASSIGNED}".strip(),
                    )
                )

    selected = Components(meta=[m.model_copy() for m in components.meta], data=data)
    selected.update_meta(META_PERIMETER, PERIMETER_NEARBY)
    selected.update_meta(META_SERVICE, str(service))
    return selected
