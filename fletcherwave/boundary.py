"""Random-velocity absorbing boundary around the modelled domain."""

from __future__ import annotations

import numpy as np


def _axis_profile(total: int, n: int, bord: int, absorb: int):
    i = np.arange(total)
    first_in = bord + absorb
    last_in = first_in - 1 + n
    upper = 2 * (first_in - 1) + n
    dist = np.where(i > last_in, i - last_in, np.where(i < first_in, first_in - i, 0))
    ref = np.clip(i, first_in, last_in)
    inside = (i >= first_in) & (i <= last_in)
    zone = (i >= bord) & (i <= upper)
    return dist, ref, inside, zone


def random_velocity_boundary(
    vpz: np.ndarray,
    vsv: np.ndarray,
    nx: int,
    ny: int,
    nz: int,
    bord: int,
    absorb: int,
    rng: np.random.Generator | None = None,
) -> None:
    """Fill the zones around the input grid of ``vpz`` and ``vsv`` in place.

    Inside the absorption zone each speed blends the nearest interior speed
    with a random fraction of the interior maximum, weighted by the distance
    to the interior; the outermost points get zero speed.
    """
    if min(nx, ny, nz) < 1:
        raise ValueError("grid needs at least one point in every direction")
    if absorb < 1:
        raise ValueError("absorption zone must be at least one point wide")
    shape = (nz + 2 * (bord + absorb), ny + 2 * (bord + absorb), nx + 2 * (bord + absorb))
    if vpz.shape != shape or vsv.shape != shape:
        raise ValueError(f"speed arrays must have shape {shape}")
    rng = np.random.default_rng() if rng is None else rng

    first = bord + absorb
    block = (slice(first, first + nz), slice(first, first + ny), slice(first, first + nx))
    max_p = max(0.0, float(vpz[block].max()))
    max_s = max(0.0, float(vsv[block].max()))

    dz, rz, in_z, zone_z = _axis_profile(shape[0], nz, bord, absorb)
    dy, ry, in_y, zone_y = _axis_profile(shape[1], ny, bord, absorb)
    dx, rx, in_x, zone_x = _axis_profile(shape[2], nx, bord, absorb)

    inside = in_z[:, None, None] & in_y[None, :, None] & in_x[None, None, :]
    within = zone_z[:, None, None] & zone_y[None, :, None] & zone_x[None, None, :]
    zone = within & ~inside
    outer = ~within

    dist = np.maximum(np.maximum(dz[:, None, None], dy[None, :, None]), dx[None, None, :])
    bord_dist = (dist.astype(np.float32) * np.float32(1.0 / absorb))[zone].astype(np.float64)

    ref = (rz[:, None, None], ry[None, :, None], rx[None, None, :])
    ref_p = vpz[ref][zone].astype(np.float64)
    ref_s = vsv[ref][zone].astype(np.float64)

    rfac = rng.random(bord_dist.size)
    vpz[zone] = ref_p * (1.0 - bord_dist) + max_p * rfac * bord_dist
    vsv[zone] = ref_s * (1.0 - bord_dist) + max_s * rfac * bord_dist
    vpz[outer] = 0.0
    vsv[outer] = 0.0