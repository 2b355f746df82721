"""Ricker wavelet used as the seismic source."""

from __future__ import annotations

import numpy as np

FCUT = 40.0
PICUBE = 31.00627668029982017537
TWOSQRTPI = 3.54490770181103205458
THREESQRTPI = 5.31736155271654808184


def ricker(dt: float, it: int) -> float:
    """Source amplitude at time ``it * dt``, computed in single precision."""
    f32 = np.float32
    tf = f32(TWOSQRTPI / FCUT)
    fc = f32(FCUT / THREESQRTPI)
    fct = f32(fc * (f32(it) * f32(dt) - tf))
    expo = f32(PICUBE * float(fct) * float(fct))
    return float(f32((f32(1.0) - f32(2.0) * expo) * np.exp(-expo, dtype=np.float32)))