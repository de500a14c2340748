"""Text table formats for weighting factors and energy components.

Weighting factors::

    #META CTE_FUENTE: CTE2013
    vector, fuente, uso, step, ren, nren
    ELECTRICIDAD, RED, SUMINISTRO, A, 0.414, 1.954 # comment

Energy components::

    #META CTE_AREAREF: 100.0
    ELECTRICIDAD, CONSUMO, EPB, CAL, 10.0, 12.0, ... # comment

Blank lines and lines starting with ``#`` are ignored. Component rows may
start with a numeric id (ignored) and may omit the service (NDEF).
"""

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from epbd_engine.core.constants import Service
from epbd_engine.core.schemas import Component, Components, Factor, Factors, Meta
from epbd_engine.core.validate import ParseError

META_PREFIX = "#META"
SERVICE_TOKENS = frozenset(s.value for s in Service)
FACTORS_HEADER = "vector, fuente, uso, step, ren, nren"


def _split_comment(line: str) -> tuple[str, str]:
    body, _, comment = line.partition("#")
    return body.strip(), comment.strip()


def _parse_meta(line: str) -> Meta:
    body = line[len(META_PREFIX) :].strip()
    key, sep, value = body.partition(":")
    if not sep or not key.strip():
        raise ParseError(f"Malformed metadata line: {line}")
    return Meta(key=key.strip(), value=value.strip())


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True


def read_factors(text: str) -> Factors:
    """Parse a weighting factor table.

    Raises:
        ParseError: If a line is malformed
    """
    wfactors = Factors()
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        if line.startswith(META_PREFIX):
            wfactors.meta.append(_parse_meta(line))
            continue
        if line.startswith("#"):
            continue

        body, comment = _split_comment(line)
        items = [item.strip() for item in body.split(",")]
        if items[0].lower() == "vector":
            continue
        if len(items) != 6:
            raise ParseError(f"Weighting factor line must have 6 fields: {raw}")
        try:
            factor = Factor(
                carrier=items[0],
                source=items[1],
                dest=items[2],
                step=items[3],
                ren=items[4],
                nren=items[5],
                comment=comment,
            )
        except PydanticValidationError as e:
            raise ParseError(f"Malformed weighting factor line: {raw} ({e.error_count()} errors)") from e
        wfactors.data.append(factor)
    return wfactors


def read_components(text: str) -> Components:
    """Parse an energy component table.

    Raises:
        ParseError: If a line is malformed or rows have different lengths
    """
    components = Components()
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        if line.startswith(META_PREFIX):
            components.meta.append(_parse_meta(line))
            continue
        if line.startswith("#"):
            continue

        body, comment = _split_comment(line)
        items = [item.strip() for item in body.split(",")]

        # Optional leading id
        if items and items[0].lstrip("-").isdigit():
            items = items[1:]

        # carrier + type + subtype + at least one value
        if len(items) < 4:
            raise ParseError(f"Component line has too few fields: {raw}")

        carrier, ctype, csubtype = items[:3]
        if items[3] in SERVICE_TOKENS:
            service = items[3]
            values = items[4:]
        else:
            service = Service.NDEF
            values = items[3:]

        if not values or not all(_is_number(v) for v in values):
            raise ParseError(f"Component line has non numeric values: {raw}")

        try:
            component = Component(
                carrier=carrier,
                ctype=ctype,
                csubtype=csubtype,
                service=service,
                values=[float(v) for v in values],
                comment=comment,
            )
        except PydanticValidationError as e:
            raise ParseError(f"Malformed component line: {raw} ({e.error_count()} errors)") from e
        components.data.append(component)

    lengths = {len(c.values) for c in components.data}
    if len(lengths) > 1:
        raise ParseError(f"Components have different number of values: {sorted(lengths)}")
    return components


def factors_to_string(wfactors: Factors) -> str:
    """Serialise a weighting factor table (ren/nren with 3 decimals)."""
    lines = [f"{META_PREFIX} {m.key}: {m.value}" for m in wfactors.meta]
    lines.append(FACTORS_HEADER)
    for f in wfactors.data:
        line = f"{f.carrier}, {f.source}, {f.dest}, {f.step}, {f.ren:.3f}, {f.nren:.3f}"
        if f.comment:
            line += f" # {f.comment}"
        lines.append(line)
    return "\n".join(lines) + "\n"


def components_to_string(components: Components) -> str:
    """Serialise an energy component table (values with 2 decimals)."""
    lines = [f"{META_PREFIX} {m.key}: {m.value}" for m in components.meta]
    for c in components.data:
        values = ", ".join(f"{v:.2f}" for v in c.values)
        line = f"{c.carrier}, {c.ctype}, {c.csubtype}, {c.service}, {values}"
        if c.comment:
            line += f" # {c.comment}"
        lines.append(line)
    return "\n".join(lines) + "\n"


def factors_to_frame(wfactors: Factors) -> pd.DataFrame:
    """Weighting factor rows as a dataframe (one row per factor)."""
    return pd.DataFrame(
        [
            {
                "carrier": str(f.carrier),
                "source": str(f.source),
                "dest": str(f.dest),
                "step": str(f.step),
                "ren": f.ren,
                "nren": f.nren,
                "comment": f.comment,
            }
            for f in wfactors.data
        ],
        columns=["carrier", "source", "dest", "step", "ren", "nren", "comment"],
    )


def components_summary(components: Components) -> pd.DataFrame:
    """Total energy per carrier, type, subtype and service."""
    df = pd.DataFrame(
        [
            {
                "carrier": str(c.carrier),
                "ctype": str(c.ctype),
                "csubtype": str(c.csubtype),
                "service": str(c.service),
                "total_kwh": c.total(),
            }
            for c in components.data
        ],
        columns=["carrier", "ctype", "csubtype", "service", "total_kwh"],
    )
    return df.groupby(["carrier", "ctype", "csubtype", "service"], as_index=False)["total_kwh"].sum()
