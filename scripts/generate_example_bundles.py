"""Generate synthetic example bundles for testing and demonstration."""

import numpy as np
from pathlib import Path

# Add src to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from epbd_engine.core.constants import Carrier, CSubtype, CType, Service, Source, Dest, Step
from epbd_engine.core.schemas import Component, Components, Factor, Factors, Meta, RunConfig
from epbd_engine.io.bundle import init_bundle

BUNDLES_DIR = Path(__file__).parent.parent / "examples" / "bundles"

# Monthly steps, January first
MONTHS = np.arange(12)
# 1.0 in January, 0.0 in July
WINTER = (np.cos(MONTHS * np.pi / 6) + 1.0) / 2.0
SUMMER = 1.0 - WINTER


def _series(values: np.ndarray) -> list[float]:
    return np.round(np.maximum(values, 0.0), 2).tolist()


def _component(carrier, ctype, csubtype, service, values, comment="") -> Component:
    return Component(
        carrier=carrier,
        ctype=ctype,
        csubtype=csubtype,
        service=service,
        values=_series(values),
        comment=comment,
    )


def generate_heat_pump_pv():
    """Generate dwelling with heat pump, PV and regulatory factors for the peninsula."""
    print("Generating heat_pump_pv bundle...")

    # Heat pump with seasonal COP 3: 1/3 electricity, 2/3 ambient energy
    heating_demand = 600.0 * WINTER
    dhw_demand = 150.0 + 30.0 * WINTER
    pv = 80.0 + 120.0 * SUMMER

    components = Components(
        meta=[Meta(key="CTE_AREAREF", value="100.0")],
        data=[
            _component(Carrier.ELECTRICIDAD, CType.CONSUMO, CSubtype.EPB, Service.CAL, heating_demand / 3.0, "Bomba de calor"),
            _component(Carrier.MEDIOAMBIENTE, CType.CONSUMO, CSubtype.EPB, Service.CAL, heating_demand * 2.0 / 3.0, "Bomba de calor"),
            _component(Carrier.ELECTRICIDAD, CType.CONSUMO, CSubtype.EPB, Service.ACS, dhw_demand / 3.0, "Bomba de calor ACS"),
            _component(Carrier.MEDIOAMBIENTE, CType.CONSUMO, CSubtype.EPB, Service.ACS, dhw_demand * 2.0 / 3.0, "Bomba de calor ACS"),
            _component(Carrier.ELECTRICIDAD, CType.CONSUMO, CSubtype.NEPB, Service.NDEF, np.full(12, 120.0), "Electrodomésticos"),
            _component(Carrier.ELECTRICIDAD, CType.PRODUCCION, CSubtype.INSITU, Service.NDEF, pv, "Fotovoltaica"),
        ],
    )

    run_config = RunConfig(
        run_id="heat_pump_pv_001",
        location="PENINSULA",
        strip_nepb=False,
        prune=True,
        k_exp=0.0,
        arearef=100.0,
    )

    bundle_path = BUNDLES_DIR / "heat_pump_pv"
    init_bundle(bundle_path, run_config, components)
    print(f"✓ Created {bundle_path}")


def generate_district_heating_nearby():
    """Generate dwelling on a district network, with own factor table and nearby perimeter."""
    print("Generating district_heating_nearby bundle...")

    components = Components(
        meta=[Meta(key="CTE_AREAREF", value="80.0")],
        data=[
            _component(Carrier.RED1, CType.CONSUMO, CSubtype.EPB, Service.CAL, 500.0 * WINTER, "Red de distrito"),
            _component(Carrier.RED1, CType.CONSUMO, CSubtype.EPB, Service.ACS, np.full(12, 120.0), "Red de distrito"),
            _component(Carrier.ELECTRICIDAD, CType.CONSUMO, CSubtype.EPB, Service.REF, 90.0 * SUMMER, "Enfriadora"),
        ],
    )

    wfactors = Factors(
        meta=[
            Meta(key="CTE_FUENTE", value="USUARIO"),
            Meta(key="CTE_RED1", value="0.650, 0.350"),
        ],
        data=[
            Factor(
                carrier=Carrier.ELECTRICIDAD,
                source=Source.RED,
                dest=Dest.SUMINISTRO,
                step=Step.A,
                ren=0.414,
                nren=1.954,
                comment="Recursos usados para suministrar electricidad (peninsular) desde la red",
            ),
        ],
    )

    run_config = RunConfig(
        run_id="district_heating_001",
        service=Service.CAL,
        nearby=True,
        arearef=80.0,
    )

    bundle_path = BUNDLES_DIR / "district_heating_nearby"
    init_bundle(bundle_path, run_config, components, wfactors)
    print(f"✓ Created {bundle_path}")


def generate_cogeneration_islands():
    """Generate hotel with gas cogeneration in the Balearic Islands."""
    print("Generating cogeneration_islands bundle...")

    chp_gas = np.full(12, 900.0)

    components = Components(
        meta=[Meta(key="CTE_AREAREF", value="1500.0")],
        data=[
            _component(Carrier.GASNATURAL, CType.CONSUMO, CSubtype.EPB, Service.ACS, chp_gas, "Cogeneración"),
            _component(Carrier.GASNATURAL, CType.CONSUMO, CSubtype.EPB, Service.CAL, 2000.0 * WINTER, "Caldera"),
            _component(Carrier.ELECTRICIDAD, CType.CONSUMO, CSubtype.EPB, Service.REF, 1500.0 * SUMMER, "Enfriadora"),
            _component(Carrier.ELECTRICIDAD, CType.CONSUMO, CSubtype.EPB, Service.ILU, np.full(12, 400.0), "Iluminación"),
            _component(Carrier.ELECTRICIDAD, CType.PRODUCCION, CSubtype.COGENERACION, Service.NDEF, chp_gas * 0.3, "Cogeneración"),
        ],
    )

    run_config = RunConfig(
        run_id="cogeneration_001",
        location="BALEARES",
        cogen="0.000, 2.200",
        k_exp=1.0,
        arearef=1500.0,
    )

    bundle_path = BUNDLES_DIR / "cogeneration_islands"
    init_bundle(bundle_path, run_config, components)
    print(f"✓ Created {bundle_path}")


if __name__ == "__main__":
    print("Generating example bundles...\n")
    generate_heat_pump_pv()
    generate_district_heating_nearby()
    generate_cogeneration_islands()
    print("\n✓ All example bundles generated")
