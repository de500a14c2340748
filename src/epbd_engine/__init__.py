"""EPBD engine: weighting factors and energy components for building energy performance (EN ISO 52000-1, CTE DB-HE)."""

__version__ = "0.1.0"
