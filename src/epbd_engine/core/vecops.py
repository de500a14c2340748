"""Elementwise operations on timestep series.

Operands of different length are zero-padded up to the longest one, so
results always have the length of the longest operand.
"""

from typing import Sequence

import numpy as np


def _padded(*vecs: Sequence[float]) -> list[np.ndarray]:
    maxlen = max((len(v) for v in vecs), default=0)
    return [np.pad(np.asarray(v, dtype=float), (0, maxlen - len(v))) for v in vecs]


def veclistsum(veclist: Sequence[Sequence[float]]) -> list[float]:
    """Elementwise sum of a list of series: res[i] = v1[i] + v2[i] + ... + vj[i]."""
    if len(veclist) == 0:
        return []
    return np.sum(_padded(*veclist), axis=0).tolist()


def vecvecmin(vec1: Sequence[float], vec2: Sequence[float]) -> list[float]:
    """Elementwise minimum: res[i] = min(vec1[i], vec2[i])."""
    a, b = _padded(vec1, vec2)
    return np.minimum(a, b).tolist()


def vecvecsum(vec1: Sequence[float], vec2: Sequence[float]) -> list[float]:
    """Elementwise sum: res[i] = vec1[i] + vec2[i]."""
    a, b = _padded(vec1, vec2)
    return (a + b).tolist()


def vecvecdif(vec1: Sequence[float], vec2: Sequence[float]) -> list[float]:
    """Elementwise difference: res[i] = vec1[i] - vec2[i]."""
    a, b = _padded(vec1, vec2)
    return (a - b).tolist()


def vecvecmul(vec1: Sequence[float], vec2: Sequence[float]) -> list[float]:
    """Elementwise product: res[i] = vec1[i] * vec2[i]."""
    a, b = _padded(vec1, vec2)
    return (a * b).tolist()


def veckmul(vec: Sequence[float], k: float) -> list[float]:
    """Multiply a series by a scalar."""
    return (np.asarray(vec, dtype=float) * k).tolist()


def vecsum(vec: Sequence[float]) -> float:
    """Sum of all elements."""
    return float(np.sum(np.asarray(vec, dtype=float)))
