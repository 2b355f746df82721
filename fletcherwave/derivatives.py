"""Eighth-order finite-difference derivatives on 3D grids.

Derivatives are evaluated at every point at least ``bord`` points away from
each face of the array; the result has the shape of that interior block.
Axes are numpy axes of an array shaped (sz, sy, sx).
"""

from __future__ import annotations

import numpy as np

RADIUS = 4

_f = np.float32

L1, L2, L3, L4 = _f(0.8), _f(-0.2), _f(0.0380952380952381), _f(-0.0035714285714285713)
FIRST = (L1, L2, L3, L4)

K0 = _f(-2.84722222222222222222)
K1, K2, K3, K4 = _f(1.6), _f(-0.2), _f(0.02539682539682539682), _f(-0.00178571428571428571)
SECOND = (K1, K2, K3, K4)

CROSS = {
    (1, 1): _f(0.64),
    (1, 2): _f(-0.16),
    (1, 3): _f(0.03047619047619047618),
    (1, 4): _f(-0.00285714285714285713),
    (2, 2): _f(0.04),
    (2, 3): _f(-0.00761904761904761904),
    (2, 4): _f(0.00071428571428571428),
    (3, 3): _f(0.00145124716553287981),
    (3, 4): _f(-0.00013605442176870748),
    (4, 4): _f(0.00001275510204081632),
}


def _check(p: np.ndarray, bord: int, *axes: int) -> None:
    if p.ndim != 3:
        raise ValueError("field must be three-dimensional")
    if bord < RADIUS:
        raise ValueError(f"border of {bord} is narrower than the stencil radius {RADIUS}")
    if any(n < 2 * bord for n in p.shape):
        raise ValueError("field is smaller than twice the border")
    for axis in axes:
        if axis not in (0, 1, 2):
            raise ValueError(f"invalid axis {axis}")


def _at(p: np.ndarray, bord: int, shifts: dict[int, int]) -> np.ndarray:
    """Interior block of ``p`` displaced by the given per-axis shifts."""
    return p[
        tuple(
            slice(bord + shifts.get(axis, 0), n - bord + shifts.get(axis, 0))
            for axis, n in enumerate(p.shape)
        )
    ]


def der1(p: np.ndarray, axis: int, dinv: float, bord: int) -> np.ndarray:
    """First derivative of ``p`` along ``axis``."""
    _check(p, bord, axis)
    total = sum(
        c * (_at(p, bord, {axis: k}) - _at(p, bord, {axis: -k}))
        for k, c in enumerate(FIRST, start=1)
    )
    return total * _f(dinv)


def der2(p: np.ndarray, axis: int, d2inv: float, bord: int) -> np.ndarray:
    """Second derivative of ``p`` along ``axis``."""
    _check(p, bord, axis)
    total = K0 * _at(p, bord, {})
    for k, c in enumerate(SECOND, start=1):
        total = total + c * (_at(p, bord, {axis: k}) + _at(p, bord, {axis: -k}))
    return total * _f(d2inv)


def _cross_term(p: np.ndarray, bord: int, axis1: int, axis2: int, a: int, b: int) -> np.ndarray:
    # a steps along axis2, b along axis1
    return (
        _at(p, bord, {axis2: a, axis1: b})
        - _at(p, bord, {axis2: a, axis1: -b})
        - _at(p, bord, {axis2: -a, axis1: b})
        + _at(p, bord, {axis2: -a, axis1: -b})
    )


def der_cross(p: np.ndarray, axis1: int, axis2: int, dinv: float, bord: int) -> np.ndarray:
    """Mixed second derivative of ``p`` along ``axis1`` and ``axis2``."""
    _check(p, bord, axis1, axis2)
    if axis1 == axis2:
        raise ValueError("cross derivative needs two different axes")
    total = 0
    for (a, b), c in CROSS.items():
        term = _cross_term(p, bord, axis1, axis2, a, b)
        if a != b:
            term = term + _cross_term(p, bord, axis1, axis2, b, a)
        total = total + c * term
    return total * _f(dinv)