"""Error types and validation of weighting factor tables."""

import logging
from collections import Counter

from epbd_engine.core.constants import Carrier, Dest, Source, Step
from epbd_engine.core.schemas import Factors

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


class MissingGridFactorError(ValidationError):
    """A carrier has no RED, SUMINISTRO, A weighting factor."""

    def __init__(self, carriers: list[Carrier]):
        self.carriers = carriers
        names = ", ".join(str(c) for c in carriers)
        super().__init__(
            f"Grid supply weighting factors are not defined for carriers: {names}. "
            f"Add a \"CARRIER, RED, SUMINISTRO, A, fren, fnren\" row for each of them"
        )


class MissingDerivationSourceError(ValidationError):
    """An export weighting factor cannot be derived from the existing rows."""

    def __init__(self, carrier: Carrier, source: Source, dest: Dest, step: Step, required: str):
        self.carrier = carrier
        self.source = source
        self.dest = dest
        self.step = step
        super().__init__(
            f"Supply weighting factor \"{required}\" is not defined for carrier {carrier} and is "
            f"required to derive the export factor \"{carrier}, {source}, {dest}, {step}\""
        )


class UnknownLocationError(ValidationError):
    """The requested location has no configured factor table."""

    def __init__(self, location: str, known: list[str]):
        self.location = location
        super().__init__(
            f"Unknown location \"{location}\" when generating weighting factors. "
            f"Valid locations: {', '.join(known)}"
        )


class DuplicateFactorError(ValidationError):
    """The factor table has more than one row for the same key."""

    pass


class ParseError(ValidationError):
    """A text record is malformed."""

    pass


def find_duplicate_keys(factors: Factors) -> list[tuple[Carrier, Source, Dest, Step]]:
    """List the (carrier, source, dest, step) keys that appear more than once.

    Args:
        factors: Weighting factor table

    Returns:
        Duplicated keys in first-seen order
    """
    counts = Counter(f.key() for f in factors.data)
    return [key for key, n in counts.items() if n > 1]


def validate_unique_keys(factors: Factors, strict: bool = False) -> list[tuple]:
    """Check that every weighting factor key is unique.

    Lookups resolve duplicated keys to their first row, so duplicates are
    tolerated unless ``strict`` is set.

    Args:
        factors: Weighting factor table
        strict: Raise instead of warning

    Returns:
        Duplicated keys (empty if the table is well formed)

    Raises:
        DuplicateFactorError: If strict and duplicates are found
    """
    duplicates = find_duplicate_keys(factors)
    if duplicates:
        described = "; ".join(", ".join(str(k) for k in key) for key in duplicates)
        if strict:
            raise DuplicateFactorError(f"Duplicated weighting factor keys: {described}")
        logger.warning("Duplicated weighting factor keys (first row is used): %s", described)
    return duplicates
