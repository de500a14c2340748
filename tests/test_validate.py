"""Test duplicate key validation and error messages."""

import logging

import pytest

from epbd_engine.core.constants import Carrier, Dest, Source, Step
from epbd_engine.core.schemas import Factor, Factors
from epbd_engine.core.validate import (
    DuplicateFactorError,
    MissingGridFactorError,
    ValidationError,
    find_duplicate_keys,
    validate_unique_keys,
)


@pytest.fixture
def duplicated():
    """Table with grid electricity declared twice."""
    return Factors(
        data=[
            Factor(carrier=Carrier.ELECTRICIDAD, source=Source.RED, dest=Dest.SUMINISTRO, step=Step.A, ren=0.4, nren=2.0),
            Factor(carrier=Carrier.GASNATURAL, source=Source.RED, dest=Dest.SUMINISTRO, step=Step.A, ren=0.0, nren=1.1),
            Factor(carrier=Carrier.ELECTRICIDAD, source=Source.RED, dest=Dest.SUMINISTRO, step=Step.A, ren=0.5, nren=1.5),
        ]
    )


def test_find_duplicate_keys(duplicated):
    """Duplicated keys are listed once."""
    assert find_duplicate_keys(duplicated) == [
        (Carrier.ELECTRICIDAD, Source.RED, Dest.SUMINISTRO, Step.A)
    ]


def test_lookup_uses_first_duplicate(duplicated):
    """The earliest row wins in lookups."""
    f = duplicated.find(Carrier.ELECTRICIDAD, Source.RED, Dest.SUMINISTRO, Step.A)
    assert f.ren == pytest.approx(0.4)


def test_duplicates_warn_by_default(duplicated, caplog):
    """Duplicates are logged and returned."""
    with caplog.at_level(logging.WARNING, logger="epbd_engine.core.validate"):
        duplicates = validate_unique_keys(duplicated)

    assert len(duplicates) == 1
    assert "ELECTRICIDAD, RED, SUMINISTRO, A" in caplog.text


def test_duplicates_fail_when_strict(duplicated):
    """Strict validation raises."""
    with pytest.raises(DuplicateFactorError):
        validate_unique_keys(duplicated, strict=True)


def test_unique_table_passes():
    """No duplicates, no complaints."""
    assert validate_unique_keys(Factors(), strict=True) == []


def test_errors_share_base_class():
    """Completion errors can be caught as ValidationError."""
    error = MissingGridFactorError([Carrier.GLP, Carrier.CARBON])

    assert isinstance(error, ValidationError)
    assert "GLP, CARBON" in str(error)
