"""Test text table parsing and serialisation."""

import pytest

from epbd_engine.components.balance import parse_components
from epbd_engine.core.constants import Carrier, CSubtype, CType, Dest, Service, Source, Step
from epbd_engine.core.validate import ParseError
from epbd_engine.io.formats import (
    components_summary,
    components_to_string,
    factors_to_frame,
    factors_to_string,
    read_components,
    read_factors,
)

FACTORS_TEXT = """#META CTE_FUENTE: CTE2013
#META CTE_LOCALIZACION: PENINSULA
vector, fuente, uso, step, ren, nren

# Electricidad
ELECTRICIDAD, RED, SUMINISTRO, A, 0.414, 1.954 # Electricidad de red
GASNATURAL, RED, SUMINISTRO, A, 0.005, 1.190
"""

COMPONENTS_TEXT = """#META CTE_AREAREF: 100.0
# Componentes
1, ELECTRICIDAD, CONSUMO, EPB, CAL, 10.0, 12.0 # calefacción
2, ELECTRICIDAD, PRODUCCION, INSITU, 5.0, 6.0
MEDIOAMBIENTE, CONSUMO, EPB, ACS, 3.0, 3.0
"""


def test_read_factors():
    """Rows, metadata and comments are parsed, header and blank lines skipped."""
    wfactors = read_factors(FACTORS_TEXT)

    assert wfactors.get_meta("CTE_FUENTE") == "CTE2013"
    assert wfactors.get_meta("CTE_LOCALIZACION") == "PENINSULA"
    assert len(wfactors.data) == 2
    elec = wfactors.data[0]
    assert elec.key() == (Carrier.ELECTRICIDAD, Source.RED, Dest.SUMINISTRO, Step.A)
    assert elec.ren == pytest.approx(0.414)
    assert elec.nren == pytest.approx(1.954)
    assert elec.comment == "Electricidad de red"
    assert wfactors.data[1].comment == ""


def test_read_components():
    """Ids are dropped and a missing service means NDEF."""
    components = read_components(COMPONENTS_TEXT)

    assert components.get_meta("CTE_AREAREF") == "100.0"
    assert len(components.data) == 3
    assert components.data[0].service == Service.CAL
    assert components.data[0].values == [10.0, 12.0]
    assert components.data[0].comment == "calefacción"
    assert components.data[1].service == Service.NDEF
    assert components.data[1].ctype == CType.PRODUCCION
    assert components.data[1].csubtype == CSubtype.INSITU
    assert components.data[2].carrier == Carrier.MEDIOAMBIENTE


def test_parse_components_balances_ambient_energy():
    """parse_components adds the ambient energy production."""
    components = parse_components(COMPONENTS_TEXT)

    assert len(components.data) == 4
    added = components.data[-1]
    assert added.carrier == Carrier.MEDIOAMBIENTE
    assert added.ctype == CType.PRODUCCION
    assert added.service == Service.ACS


@pytest.mark.parametrize(
    "text",
    [
        "ELECTRICIDAD, RED, SUMINISTRO, A, 0.414\n",
        "PLUTONIO, RED, SUMINISTRO, A, 0.1, 0.2\n",
        "ELECTRICIDAD, RED, SUMINISTRO, C, 0.1, 0.2\n",
        "ELECTRICIDAD, RED, SUMINISTRO, A, x, 0.2\n",
        "#META SIN_VALOR\n",
    ],
)
def test_malformed_factors(text):
    """Malformed factor lines raise ParseError."""
    with pytest.raises(ParseError):
        read_factors(text)


@pytest.mark.parametrize(
    "text",
    [
        "ELECTRICIDAD, CONSUMO, EPB\n",
        "ELECTRICIDAD, CONSUMO, EPB, CAL, 1.0, abc\n",
        "ELECTRICIDAD, CONSUMO, INSITU, CAL, 1.0\n",
        "ELECTRICIDAD, GASTO, EPB, CAL, 1.0\n",
        "ELECTRICIDAD, CONSUMO, EPB, CAL, 1.0, 2.0\nGASNATURAL, CONSUMO, EPB, CAL, 1.0\n",
    ],
)
def test_malformed_components(text):
    """Malformed component lines raise ParseError."""
    with pytest.raises(ParseError):
        read_components(text)


def test_factors_to_string():
    """Serialised tables can be read back."""
    wfactors = read_factors(FACTORS_TEXT)

    text = factors_to_string(wfactors)

    assert text.startswith("#META CTE_FUENTE: CTE2013\n")
    assert "ELECTRICIDAD, RED, SUMINISTRO, A, 0.414, 1.954 # Electricidad de red\n" in text
    assert read_factors(text) == wfactors


def test_components_to_string():
    """Components are written with explicit service and 2 decimals."""
    text = components_to_string(read_components(COMPONENTS_TEXT))

    assert "ELECTRICIDAD, PRODUCCION, INSITU, NDEF, 5.00, 6.00\n" in text
    assert "ELECTRICIDAD, CONSUMO, EPB, CAL, 10.00, 12.00 # calefacción\n" in text


def test_dataframes():
    """Tables convert to dataframes for inspection."""
    df = factors_to_frame(read_factors(FACTORS_TEXT))
    assert list(df["carrier"]) == ["ELECTRICIDAD", "GASNATURAL"]

    summary = components_summary(read_components(COMPONENTS_TEXT))
    elec = summary[(summary["carrier"] == "ELECTRICIDAD") & (summary["ctype"] == "CONSUMO")]
    assert elec["total_kwh"].iloc[0] == pytest.approx(22.0)


def test_duplicated_metadata_keeps_every_line():
    """Repeated metadata keys are all kept and lookups use the first one."""
    wfactors = read_factors("#META CTE_COGEN: 0.0, 1.0\n#META CTE_COGEN: 0.0, 2.0\n")
    components = read_components("#META CTE_AREAREF: 100.0\n#META CTE_AREAREF: 200.0\n")

    assert [m.value for m in wfactors.meta] == ["0.0, 1.0", "0.0, 2.0"]
    assert wfactors.get_meta("CTE_COGEN") == "0.0, 1.0"
    assert components.get_meta("CTE_AREAREF") == "100.0"
