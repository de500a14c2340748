"""Energy balance algorithm interface."""

from typing import Protocol

from epbd_engine.core.schemas import Balance, Components, Factors


class BalanceAlgorithm(Protocol):
    """Protocol for energy balance algorithms.

    Balance algorithms take balanced components and a completed weighting
    factor table and compute the renewable / non-renewable primary energy
    of the building. Inputs are expected to come out of this package:
    every carrier has its supply and export factors and every ambient
    energy consumption has a production counterpart.
    """

    def __call__(
        self, components: Components, wfactors: Factors, k_exp: float, arearef: float
    ) -> Balance:
        """Compute the energy balance.

        Args:
            components: Balanced energy components
            wfactors: Completed weighting factor table
            k_exp: Export credit coefficient (0.0 to 1.0)
            arearef: Reference area in m2

        Returns:
            Balance with step A and step B totals, absolute and per m2
        """
        ...
