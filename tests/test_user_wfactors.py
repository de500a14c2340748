"""Test resolution of the user-definable weighting factors."""

import logging

import pytest

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
from epbd_engine.core.schemas import Factor, Factors
from epbd_engine.wfactors.user import find_user_wfactors, update_user_wfactors


@pytest.fixture
def grid_only():
    """Factor table with grid electricity only."""
    return Factors(
        data=[
            Factor(
                carrier=Carrier.ELECTRICIDAD,
                source=Source.RED,
                dest=Dest.SUMINISTRO,
                step=Step.A,
                ren=0.414,
                nren=1.954,
            )
        ]
    )


def test_defaults_used_when_nothing_given(grid_only):
    """Regulatory defaults are the last fallback."""
    defaults = default_regulatory_config().defaults
    user = find_user_wfactors(grid_only)

    assert user.cogen.is_close(defaults.cogen_to_grid)
    assert user.cogennepb.is_close(defaults.cogen_to_nepb)
    assert user.red1.is_close(defaults.district1)
    assert user.red2.is_close(defaults.district2)
    assert user.cogen.is_close(RenNren(ren=0.0, nren=2.5))
    assert user.red1.is_close(RenNren(ren=0.0, nren=1.3))


def test_factor_rows_override_defaults(grid_only):
    """Existing rows of a user-definable family are used."""
    grid_only.data.append(
        Factor(
            carrier=Carrier.ELECTRICIDAD,
            source=Source.COGENERACION,
            dest=Dest.A_RED,
            step=Step.A,
            ren=0.3,
            nren=1.5,
        )
    )
    grid_only.data.append(
        Factor(
            carrier=Carrier.RED1,
            source=Source.RED,
            dest=Dest.SUMINISTRO,
            step=Step.A,
            ren=0.2,
            nren=0.9,
        )
    )

    user = find_user_wfactors(grid_only)

    assert user.cogen.is_close(RenNren(ren=0.3, nren=1.5))
    assert user.red1.is_close(RenNren(ren=0.2, nren=0.9))
    # Families without rows keep their defaults
    assert user.cogennepb.is_close(RenNren(ren=0.0, nren=2.5))


def test_metadata_overrides_rows(grid_only):
    """Metadata takes precedence over factor rows."""
    grid_only.data.append(
        Factor(
            carrier=Carrier.ELECTRICIDAD,
            source=Source.COGENERACION,
            dest=Dest.A_RED,
            step=Step.A,
            ren=0.3,
            nren=1.5,
        )
    )
    grid_only.update_meta(META_COGEN, "0.100, 2.000")

    user = find_user_wfactors(grid_only)

    assert user.cogen.is_close(RenNren(ren=0.1, nren=2.0))


def test_arguments_override_everything(grid_only):
    """Explicit arguments take precedence over metadata and rows."""
    grid_only.update_meta(META_RED2, "0.500, 0.500")

    user = find_user_wfactors(
        grid_only,
        red2=RenNren(ren=0.7, nren=0.3),
        cogennepb=RenNren(ren=0.0, nren=1.0),
    )

    assert user.red2.is_close(RenNren(ren=0.7, nren=0.3))
    assert user.cogennepb.is_close(RenNren(ren=0.0, nren=1.0))


def test_malformed_metadata_is_ignored(grid_only):
    """A metadata value that is not a pair falls through to the next source."""
    grid_only.update_meta(META_RED1, "not a pair")

    user = find_user_wfactors(grid_only)

    assert user.red1.is_close(RenNren(ren=0.0, nren=1.3))


def test_update_user_wfactors_writes_metadata(grid_only):
    """Resolved values are recorded with 3 decimals, updating existing keys."""
    grid_only.update_meta(META_COGEN, "9, 9")
    user = find_user_wfactors(grid_only, cogen=RenNren(ren=0.1234, nren=2.0))

    update_user_wfactors(grid_only, user)

    assert grid_only.get_meta(META_COGEN) == "0.123, 2.000"
    assert grid_only.get_meta(META_COGENNEPB) == "0.000, 2.500"
    assert grid_only.get_meta(META_RED1) == "0.000, 1.300"
    assert grid_only.get_meta(META_RED2) == "0.000, 1.300"
    assert [m.key for m in grid_only.meta].count(META_COGEN) == 1


def test_malformed_metadata_is_reported(grid_only, caplog):
    """Ignored override values are logged with their key."""
    grid_only.update_meta(META_COGEN, "2.5")

    with caplog.at_level(logging.WARNING, logger="epbd_engine.core.schemas"):
        user = find_user_wfactors(grid_only)

    assert user.cogen.is_close(RenNren(ren=0.0, nren=2.5))
    assert "CTE_COGEN" in caplog.text
    assert "2.5" in caplog.text
