"""Test run bundles and the preparation pipeline."""

import json

import pytest
import yaml

from epbd_engine.core.constants import (
    META_PERIMETER,
    META_SERVICE,
    Carrier,
    CSubtype,
    CType,
    Dest,
    Service,
    Source,
    Step,
)
from epbd_engine.core.rennren import RenNren
from epbd_engine.core.schemas import (
    Balance,
    BalanceSteps,
    Component,
    Components,
    Factor,
    Factors,
    RunConfig,
)
from epbd_engine.io.bundle import (
    BALANCE_FILE,
    COMPONENTS_OUT_FILE,
    FACTORS_OUT_FILE,
    METADATA_FILE,
    RUN_CONFIG_FILE,
    init_bundle,
    load_bundle,
    validate_bundle,
)
from epbd_engine.io.formats import read_components, read_factors
from epbd_engine.runners.prepare import prepare_inputs, run_prepare


@pytest.fixture
def components():
    """Heat pump for hot water, electric heating and undefined PV."""
    return Components(
        data=[
            Component(carrier=Carrier.ELECTRICIDAD, ctype=CType.CONSUMO, csubtype=CSubtype.EPB, service=Service.ACS, values=[10.0, 10.0]),
            Component(carrier=Carrier.ELECTRICIDAD, ctype=CType.CONSUMO, csubtype=CSubtype.EPB, service=Service.CAL, values=[30.0, 30.0]),
            Component(carrier=Carrier.MEDIOAMBIENTE, ctype=CType.CONSUMO, csubtype=CSubtype.EPB, service=Service.ACS, values=[20.0, 20.0]),
            Component(carrier=Carrier.ELECTRICIDAD, ctype=CType.PRODUCCION, csubtype=CSubtype.INSITU, service=Service.NDEF, values=[8.0, 4.0]),
        ]
    )


def fake_balance(components, wfactors, k_exp, arearef):
    """Balance stand-in: delivered grid electricity weighted with step A factors."""
    grid = wfactors.find(Carrier.ELECTRICIDAD, Source.RED, Dest.SUMINISTRO, Step.A).factors()
    delivered = sum(c.total() for c in components.data if c.carrier == Carrier.ELECTRICIDAD and c.is_consumption())
    total = delivered * grid
    return Balance(
        components=components,
        wfactors=wfactors,
        k_exp=k_exp,
        arearef=arearef,
        balance=BalanceSteps(A=total, B=total),
        balance_m2=BalanceSteps(A=total * (1.0 / arearef), B=total * (1.0 / arearef)),
    )


def test_prepare_inputs_with_location(components):
    """Components are balanced and partitioned, factors completed and pruned."""
    run_config = RunConfig(run_id="t", location="peninsula", service="ACS", prune=True)

    prepared, wfactors = prepare_inputs(run_config, components)

    assert {c.service for c in prepared.data} == {Service.ACS}
    assert prepared.get_meta(META_SERVICE) == "ACS"
    # Ambient production added and PV share reassigned
    assert any(c.carrier == Carrier.MEDIOAMBIENTE and c.is_production() for c in prepared.data)
    assert any(c.carrier == Carrier.ELECTRICIDAD and c.is_production() for c in prepared.data)
    assert set(wfactors.carriers()) == {Carrier.ELECTRICIDAD, Carrier.MEDIOAMBIENTE}
    assert not wfactors.has(source=Source.COGENERACION)
    # Input untouched
    assert len(components.data) == 4


def test_prepare_inputs_with_factor_table(components):
    """A bundle factor table is used when no location is set."""
    wfactors = Factors(
        data=[Factor(carrier=Carrier.ELECTRICIDAD, source=Source.RED, dest=Dest.SUMINISTRO, step=Step.A, ren=0.5, nren=2.0)]
    )
    run_config = RunConfig(run_id="t", nearby=True, red1="0.1, 0.9")

    _, completed = prepare_inputs(run_config, components, wfactors)

    elec = completed.find(Carrier.ELECTRICIDAD, Source.RED, Dest.SUMINISTRO, Step.A)
    assert elec.ren == 0.0
    assert elec.nren == pytest.approx(2.5)
    red1 = completed.find(Carrier.RED1, Source.RED, Dest.SUMINISTRO, Step.A)
    assert red1.factors().is_close(RenNren(ren=0.1, nren=0.9))
    assert completed.get_meta(META_PERIMETER) == "NEARBY"


def test_prepare_inputs_without_factors(components):
    """Preparing without location or factor table fails."""
    with pytest.raises(ValueError):
        prepare_inputs(RunConfig(run_id="t"), components)


def test_bundle_roundtrip(tmp_path, components):
    """Bundles written with init_bundle load back."""
    run_config = RunConfig(run_id="bundle_001", location="CANARIAS", cogen="0.0, 2.0")
    init_bundle(tmp_path / "bundle", run_config, components)

    loaded_config, loaded_components, wfactors = load_bundle(tmp_path / "bundle")

    assert loaded_config == run_config
    assert len(loaded_components.data) == len(components.data)
    assert wfactors is None
    assert validate_bundle(tmp_path / "bundle")


def test_validate_bundle_requires_factors_without_location(tmp_path, components):
    """A bundle without location must ship its factor table."""
    init_bundle(tmp_path, RunConfig(run_id="t"), components)

    with pytest.raises(ValueError, match="factors.csv"):
        validate_bundle(tmp_path)


def test_validate_bundle_missing_files(tmp_path):
    """Missing required files are reported."""
    with pytest.raises(ValueError, match=RUN_CONFIG_FILE):
        validate_bundle(tmp_path)


def test_run_prepare_writes_results(tmp_path, components):
    """The runner writes completed factors, prepared components and metadata."""
    init_bundle(tmp_path, RunConfig(run_id="run_001", location="PENINSULA", service="ACS"), components)

    prepared, wfactors, balance = run_prepare(str(tmp_path))

    assert balance is None
    assert read_factors((tmp_path / FACTORS_OUT_FILE).read_text(encoding="utf-8")) == wfactors
    written = read_components((tmp_path / COMPONENTS_OUT_FILE).read_text(encoding="utf-8"))
    assert len(written.data) == len(prepared.data)
    assert not (tmp_path / BALANCE_FILE).exists()

    with open(tmp_path / METADATA_FILE) as f:
        metadata = json.load(f)
    assert metadata["num_factors"] == len(wfactors.data)
    assert metadata["num_components"] == len(prepared.data)
    assert metadata["regulatory_config_version"] == "CTE2013-RITE2014"
    assert metadata["wfactors_meta"]["CTE_LOCALIZACION"] == "PENINSULA"


def test_run_prepare_with_balance(tmp_path, components):
    """A balance algorithm runs on the prepared inputs and its result is saved."""
    wfactors = Factors(
        data=[Factor(carrier=Carrier.ELECTRICIDAD, source=Source.RED, dest=Dest.SUMINISTRO, step=Step.A, ren=0.5, nren=2.0)]
    )
    init_bundle(tmp_path, RunConfig(run_id="run_002", arearef=10.0), components, wfactors)

    _, _, balance = run_prepare(str(tmp_path), balance_algorithm=fake_balance)

    # 80 kWh of delivered electricity
    assert balance.balance.A.ren == pytest.approx(40.0)
    assert balance.balance.A.nren == pytest.approx(160.0)
    assert balance.balance_m2.B.tot() == pytest.approx(20.0)
    assert balance.balance_m2.B.rer() == pytest.approx(0.2)

    with open(tmp_path / BALANCE_FILE) as f:
        saved = json.load(f)
    assert saved["arearef"] == 10.0
    assert saved["balance"]["A"]["nren"] == pytest.approx(160.0)


def test_run_config_yaml_accepts_strings(tmp_path, components):
    """Hand-written run configs may use "ren, nren" strings and lowercase locations."""
    init_bundle(tmp_path, RunConfig(run_id="t"), components)
    with open(tmp_path / RUN_CONFIG_FILE, "w") as f:
        yaml.safe_dump({"run_id": "t", "location": "baleares", "cogen": "0.1, 2.2"}, f)

    run_config, _, _ = load_bundle(tmp_path)

    assert run_config.location == "BALEARES"
    assert run_config.cogen.is_close(RenNren(ren=0.1, nren=2.2))
