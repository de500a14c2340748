"""Renewable / non-renewable primary energy pair."""

from pydantic import BaseModel, ConfigDict


class RenNren(BaseModel):
    """Primary energy split into renewable and non-renewable parts.

    Both parts share units (kWh or kWh/m2). Instances are immutable and
    support addition and scaling by a number.
    """

    model_config = ConfigDict(frozen=True)

    ren: float = 0.0
    nren: float = 0.0

    @classmethod
    def from_str(cls, value: str) -> "RenNren":
        """Build from a "ren, nren" string (as stored in metadata).

        Raises:
            ValueError: If the string does not hold two numbers
        """
        parts = [p.strip() for p in value.split(",")]
        if len(parts) != 2:
            raise ValueError(f"Expected 'ren, nren' pair, got: {value!r}")
        return cls(ren=float(parts[0]), nren=float(parts[1]))

    def tot(self) -> float:
        """Total primary energy."""
        return self.ren + self.nren

    def rer(self) -> float:
        """Renewable energy ratio, ren / tot.

        Defined as 0.0 when the total is zero or negative.
        """
        tot = self.tot()
        if tot <= 0.0:
            return 0.0
        return self.ren / tot

    def is_close(self, other: "RenNren", tol: float = 1e-6) -> bool:
        return abs(self.ren - other.ren) < tol and abs(self.nren - other.nren) < tol

    def __add__(self, other: "RenNren") -> "RenNren":
        if not isinstance(other, RenNren):
            return NotImplemented
        return RenNren(ren=self.ren + other.ren, nren=self.nren + other.nren)

    def __mul__(self, k: float) -> "RenNren":
        if isinstance(k, RenNren) or not isinstance(k, (int, float)):
            return NotImplemented
        return RenNren(ren=self.ren * k, nren=self.nren * k)

    __rmul__ = __mul__

    def __str__(self) -> str:
        return f"{{ ren: {self.ren:.3f}, nren: {self.nren:.3f} }}"

    def to_meta_value(self) -> str:
        """Format as a metadata value with 3 decimals."""
        return f"{self.ren:.3f}, {self.nren:.3f}"
