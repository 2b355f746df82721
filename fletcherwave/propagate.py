"""Time stepping of the coupled p/q pseudo-acoustic wave equations."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .derivatives import der2, der_cross

_X, _Y, _Z = 2, 1, 0
_f = np.float32


@dataclass
class Coefficients:
    """Per-point coefficients of the H1 operator and of the PDE right-hand sides."""

    ch1dxx: np.ndarray
    ch1dyy: np.ndarray
    ch1dzz: np.ndarray
    ch1dxy: np.ndarray
    ch1dyz: np.ndarray
    ch1dxz: np.ndarray
    v2px: np.ndarray
    v2pz: np.ndarray
    v2sz: np.ndarray
    v2pn: np.ndarray


def precompute(vpz, vsv, epsilon, delta, phi, theta) -> Coefficients:
    """Compute the coefficient fields from the anisotropy model."""
    arrays = [np.asarray(a) for a in (vpz, vsv, epsilon, delta, phi, theta)]
    if len({a.shape for a in arrays}) != 1:
        raise ValueError("all model arrays must have the same shape")
    vpz, vsv, epsilon, delta, phi, theta = arrays

    theta64 = theta.astype(np.float64)
    phi64 = phi.astype(np.float64)
    sin_t = np.sin(theta64).astype(_f)
    cos_t = np.cos(theta64).astype(_f)
    sin2_t = np.sin(2.0 * theta64).astype(_f)
    sin_p = np.sin(phi64).astype(_f)
    cos_p = np.cos(phi64).astype(_f)
    sin2_p = np.sin(2.0 * phi64).astype(_f)

    vpz32 = vpz.astype(_f)
    vsv32 = vsv.astype(_f)
    v2pz = vpz32 * vpz32
    return Coefficients(
        ch1dxx=sin_t * sin_t * cos_p * cos_p,
        ch1dyy=sin_t * sin_t * sin_p * sin_p,
        ch1dzz=cos_t * cos_t,
        ch1dxy=sin_t * sin_t * sin2_p,
        ch1dyz=sin2_t * sin_p,
        ch1dxz=sin2_t * cos_p,
        v2px=(v2pz * (1.0 + 2.0 * epsilon.astype(np.float64))).astype(_f),
        v2pz=v2pz,
        v2sz=vsv32 * vsv32,
        v2pn=(v2pz * (1.0 + 2.0 * delta.astype(np.float64))).astype(_f),
    )


def _operators(field, ch, inv, bord):
    """H1 and H2 operators of ``field`` on the interior block."""
    dxx, dyy, dzz, dxy, dxz, dyz = inv
    fxx = der2(field, _X, dxx, bord)
    fyy = der2(field, _Y, dyy, bord)
    fzz = der2(field, _Z, dzz, bord)
    fxy = der_cross(field, _X, _Y, dxy, bord)
    fyz = der_cross(field, _Y, _Z, dyz, bord)
    fxz = der_cross(field, _X, _Z, dxz, bord)
    cxx, cyy, czz, cxy, cxz, cyz = ch
    h1 = cxx * fxx + cyy * fyy + czz * fzz + cxy * fxy + cxz * fxz + cyz * fyz
    h2 = fxx + fyy + fzz - h1
    return h1, h2


def propagate(coef: Coefficients, pp, pc, qp, qc, dx, dy, dz, dt, bord) -> None:
    """Advance p and q one time step.

    ``pp`` and ``qp`` hold the previous fields on entry and are overwritten
    with the next ones on the interior points; border points are left alone.
    """
    shape = pc.shape
    for a in (pp, qp, qc, coef.v2pz):
        if a.shape != shape:
            raise ValueError("fields and coefficients must have the same shape")
    dx, dy, dz, dt = _f(dx), _f(dy), _f(dz), _f(dt)
    inv = (
        _f(1.0) / (dx * dx),
        _f(1.0) / (dy * dy),
        _f(1.0) / (dz * dz),
        _f(1.0) / (dx * dy),
        _f(1.0) / (dx * dz),
        _f(1.0) / (dy * dz),
    )
    inner = tuple(slice(bord, n - bord) for n in shape)
    ch = tuple(
        a[inner]
        for a in (coef.ch1dxx, coef.ch1dyy, coef.ch1dzz, coef.ch1dxy, coef.ch1dxz, coef.ch1dyz)
    )

    h1p, h2p = _operators(pc, ch, inv, bord)
    h1q, h2q = _operators(qc, ch, inv, bord)
    h1pmq = h1p - h1q
    h2pmq = h2p - h2q

    v2px, v2pz, v2sz, v2pn = (a[inner] for a in (coef.v2px, coef.v2pz, coef.v2sz, coef.v2pn))
    rhsp = v2px * h2p + v2pz * h1q + v2sz * h1pmq
    rhsq = v2pn * h2p + v2pz * h1q - v2sz * h2pmq

    pp[inner] = _f(2.0) * pc[inner] - pp[inner] + rhsp * dt * dt
    qp[inner] = _f(2.0) * qc[inner] - qp[inner] + rhsq * dt * dt


def insert_source(p, q, index: int, value: float) -> None:
    """Add ``value`` to both fields at flat index ``index``."""
    p.flat[index] = p.flat[index] + _f(value)
    q.flat[index] = q.flat[index] + _f(value)