import numpy as np
import pytest

from fletcherwave.boundary import random_velocity_boundary

N, BORD, ABSORB = 3, 4, 2
S = N + 2 * BORD + 2 * ABSORB
FIRST = BORD + ABSORB
INNER = slice(FIRST, FIRST + N)


def _fields(value=3000.0):
    vpz = np.full((S, S, S), value, dtype=np.float32)
    vsv = np.zeros((S, S, S), dtype=np.float32)
    return vpz, vsv


def test_interior_untouched():
    rng = np.random.default_rng(1)
    vpz, vsv = _fields()
    vpz[INNER, INNER, INNER] = rng.random((N, N, N)).astype(np.float32) * 1000 + 2000
    before = vpz[INNER, INNER, INNER].copy()
    random_velocity_boundary(vpz, vsv, N, N, N, BORD, ABSORB, np.random.default_rng(2))
    assert np.array_equal(vpz[INNER, INNER, INNER], before)


def test_outer_layers_zeroed():
    vpz, vsv = _fields()
    random_velocity_boundary(vpz, vsv, N, N, N, BORD, ABSORB, np.random.default_rng(0))
    assert np.all(vpz[:BORD] == 0.0)
    assert np.all(vpz[:, :BORD] == 0.0)
    assert np.all(vpz[:, :, :BORD] == 0.0)
    assert np.all(vpz[-1] == 0.0)
    assert np.all(vpz[:, :, -1] == 0.0)


def test_zero_shear_speed_stays_zero():
    vpz, vsv = _fields()
    random_velocity_boundary(vpz, vsv, N, N, N, BORD, ABSORB, np.random.default_rng(0))
    assert np.all(vsv == 0.0)


def test_lower_absorption_zone_bounded_by_interior_maximum():
    rng = np.random.default_rng(5)
    vpz, vsv = _fields()
    vpz[INNER, INNER, INNER] = rng.random((N, N, N)).astype(np.float32) * 1000 + 2000
    top = float(vpz[INNER, INNER, INNER].max())
    random_velocity_boundary(vpz, vsv, N, N, N, BORD, ABSORB, np.random.default_rng(6))
    zone = vpz[BORD:FIRST, INNER, INNER]
    assert np.all(zone <= top + 1e-3)
    assert np.all(zone >= 0.0)


def test_blend_of_constant_speed():
    vpz, vsv = _fields(3000.0)
    random_velocity_boundary(vpz, vsv, N, N, N, BORD, ABSORB, np.random.default_rng(9))
    # one point below the interior: half weight on the interior speed
    cell = vpz[FIRST - 1, INNER, INNER]
    assert np.all(cell >= 1500.0 - 1e-3)
    assert np.all(cell <= 3000.0 + 1e-3)


def test_same_seed_same_result():
    a, sa = _fields()
    b, sb = _fields()
    random_velocity_boundary(a, sa, N, N, N, BORD, ABSORB, np.random.default_rng(11))
    random_velocity_boundary(b, sb, N, N, N, BORD, ABSORB, np.random.default_rng(11))
    assert np.array_equal(a, b)


def test_wrong_shape_rejected():
    vpz = np.zeros((S, S, S - 1), dtype=np.float32)
    vsv = np.zeros((S, S, S - 1), dtype=np.float32)
    with pytest.raises(ValueError):
        random_velocity_boundary(vpz, vsv, N, N, N, BORD, ABSORB, np.random.default_rng(0))


def test_zero_absorption_rejected():
    vpz, vsv = _fields()
    with pytest.raises(ValueError):
        random_velocity_boundary(vpz, vsv, N, N, N, BORD, 0, np.random.default_rng(0))