"""Pydantic schemas for the data model, configuration and results."""

import logging
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from epbd_engine.core.constants import (
    CTYPE_SUBTYPES,
    Carrier,
    CSubtype,
    CType,
    Dest,
    Service,
    Source,
    Step,
)
from epbd_engine.core.rennren import RenNren

logger = logging.getLogger(__name__)


class Meta(BaseModel):
    """Metadata entry (key -> value)."""

    key: str
    value: str


class MetaCollection(BaseModel):
    """Base for collections carrying a metadata side channel."""

    meta: list[Meta] = Field(default_factory=list)

    def get_meta(self, key: str) -> Optional[str]:
        """Value of the first entry with this key, if any."""
        for m in self.meta:
            if m.key == key:
                return m.value
        return None

    def get_meta_rennren(self, key: str) -> Optional[RenNren]:
        """Value of a "ren, nren" metadata entry, if present and well formed."""
        value = self.get_meta(key)
        if value is None:
            return None
        try:
            return RenNren.from_str(value)
        except ValueError:
            logger.warning("Ignoring metadata %s: expected \"ren, nren\", got %r", key, value)
            return None

    def update_meta(self, key: str, value: str) -> None:
        """Update the first entry with this key or append a new one."""
        for m in self.meta:
            if m.key == key:
                m.value = value
                return
        self.meta.append(Meta(key=key, value=value))


class Factor(BaseModel):
    """Weighting factor for a (carrier, source, dest, step) key."""

    carrier: Carrier
    source: Source
    dest: Dest
    step: Step
    ren: float
    nren: float
    comment: str = ""

    def key(self) -> tuple[Carrier, Source, Dest, Step]:
        return (self.carrier, self.source, self.dest, self.step)

    def factors(self) -> RenNren:
        return RenNren(ren=self.ren, nren=self.nren)

    def matches(
        self,
        carrier: Optional[Carrier] = None,
        source: Optional[Source] = None,
        dest: Optional[Dest] = None,
        step: Optional[Step] = None,
    ) -> bool:
        """Check the row against the given key fields (None matches anything)."""
        return (
            (carrier is None or self.carrier == carrier)
            and (source is None or self.source == source)
            and (dest is None or self.dest == dest)
            and (step is None or self.step == step)
        )


class Factors(MetaCollection):
    """Weighting factor table.

    Rows keep insertion order. Lookups are sequential scans returning the
    first matching row, so a duplicated key resolves to its earliest row.
    """

    data: list[Factor] = Field(default_factory=list)

    def find(
        self,
        carrier: Optional[Carrier] = None,
        source: Optional[Source] = None,
        dest: Optional[Dest] = None,
        step: Optional[Step] = None,
    ) -> Optional[Factor]:
        """First row matching the given key fields, or None."""
        for f in self.data:
            if f.matches(carrier, source, dest, step):
                return f
        return None

    def has(
        self,
        carrier: Optional[Carrier] = None,
        source: Optional[Source] = None,
        dest: Optional[Dest] = None,
        step: Optional[Step] = None,
    ) -> bool:
        return self.find(carrier, source, dest, step) is not None

    def carriers(self) -> list[Carrier]:
        """Distinct carriers in first-seen order."""
        return list(dict.fromkeys(f.carrier for f in self.data))


class Component(BaseModel):
    """Energy consumed or produced by a carrier for a service, per timestep."""

    carrier: Carrier
    ctype: CType
    csubtype: CSubtype
    service: Service = Service.NDEF
    values: list[float]
    comment: str = ""

    @model_validator(mode="after")
    def check_subtype(self) -> "Component":
        """Ensure the subtype is valid for the component type."""
        if self.csubtype not in CTYPE_SUBTYPES[self.ctype]:
            raise ValueError(f"Subtype {self.csubtype} is not valid for component type {self.ctype}")
        return self

    def is_consumption(self) -> bool:
        return self.ctype == CType.CONSUMO

    def is_production(self) -> bool:
        return self.ctype == CType.PRODUCCION

    def total(self) -> float:
        return float(sum(self.values))


class Components(MetaCollection):
    """Energy component collection."""

    data: list[Component] = Field(default_factory=list)

    def carriers(self) -> list[Carrier]:
        """Distinct carriers in first-seen order."""
        return list(dict.fromkeys(c.carrier for c in self.data))

    def services(self) -> list[Service]:
        """Distinct services in first-seen order."""
        return list(dict.fromkeys(c.service for c in self.data))

    def num_steps(self) -> int:
        """Number of timesteps (longest series)."""
        return max((len(c.values) for c in self.data), default=0)


class BalanceSteps(BaseModel):
    """Step A and step B primary energy."""

    A: RenNren = Field(default_factory=RenNren)
    B: RenNren = Field(default_factory=RenNren)


class Balance(BaseModel):
    """Result of the energy balance (produced by an external algorithm)."""

    components: Components
    wfactors: Factors
    k_exp: float
    arearef: float = Field(..., gt=0)
    balance: BalanceSteps
    balance_m2: BalanceSteps


class UserWFactorDefaults(BaseModel):
    """Regulatory defaults for the user-definable weighting factors."""

    cogen_to_grid: RenNren
    cogen_to_nepb: RenNren
    district1: RenNren
    district2: RenNren


class LocationTable(BaseModel):
    """Weighting factor rows and metadata for one location."""

    meta: dict[str, str] = Field(default_factory=dict)
    factors: list[Factor]

    @field_validator("factors", mode="before")
    @classmethod
    def rows_to_factors(cls, v):
        """Accept compact rows: [carrier, source, dest, step, ren, nren, comment?]."""
        rows = []
        for row in v:
            if isinstance(row, (list, tuple)):
                fields = ["carrier", "source", "dest", "step", "ren", "nren", "comment"]
                row = dict(zip(fields, row))
            rows.append(row)
        return rows


class RegulatoryConfig(BaseModel):
    """Versioned regulatory configuration (defaults and location tables)."""

    version: str
    defaults: UserWFactorDefaults
    locations: dict[str, LocationTable]

    @field_validator("locations")
    @classmethod
    def validate_locations(cls, v: dict[str, LocationTable]) -> dict[str, LocationTable]:
        """Ensure at least one location is configured."""
        if not v:
            raise ValueError("At least one location table must be configured")
        return v


class RunConfig(BaseModel):
    """Configuration of one preparation run."""

    run_id: str = Field(..., description="Unique run identifier")
    location: Optional[str] = Field(default=None, description="Location for regulatory factors")
    cogen: Optional[RenNren] = Field(default=None, description="Cogeneration to grid factor")
    cogennepb: Optional[RenNren] = Field(default=None, description="Cogeneration to NEPB factor")
    red1: Optional[RenNren] = Field(default=None, description="District network 1 factor")
    red2: Optional[RenNren] = Field(default=None, description="District network 2 factor")
    strip_nepb: bool = Field(default=True, description="Remove A_NEPB factors after completion")
    service: Optional[Service] = Field(default=None, description="Partition components by service")
    nearby: bool = Field(default=False, description="Convert factors to the nearby perimeter")
    prune: bool = Field(default=False, description="Remove factors unused by the components")
    k_exp: float = Field(default=0.0, description="Export credit coefficient")
    arearef: float = Field(default=1.0, gt=0, description="Reference area in m2")

    @field_validator("cogen", "cogennepb", "red1", "red2", mode="before")
    @classmethod
    def parse_rennren(cls, v):
        """Accept "ren, nren" strings as well as mappings."""
        if isinstance(v, str):
            return RenNren.from_str(v)
        return v

    @field_validator("location")
    @classmethod
    def normalize_location(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v is not None else v


class BundleMetadata(BaseModel):
    """Metadata for reproducibility tracking."""

    created_at: datetime = Field(default_factory=datetime.utcnow)
    epbd_engine_version: str
    regulatory_config_version: str
    wfactors_meta: dict[str, str] = Field(default_factory=dict)
    components_meta: dict[str, str] = Field(default_factory=dict)
    num_factors: int = Field(..., ge=0)
    num_components: int = Field(..., ge=0)
