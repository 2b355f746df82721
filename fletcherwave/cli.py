"""Command line entry point of the wave propagation simulator."""

from __future__ import annotations

import sys

import numpy as np

from .boundary import random_velocity_boundary
from .grid import Grid
from .model import (
    SIGMA,
    Formulation,
    Problem,
    build_medium,
    recommended_dt,
    run_model,
)
from .rsf import SliceFile

ARGS = 11
BORD = 4
_SEED = 1  # fixed so that boundaries are reproducible from run to run
_f = np.float32


def parse_args(argv) -> Problem:
    """Build a problem from: formulation nx ny nz absorb dx dy dz dt tmax."""
    argv = list(argv)
    if len(argv) < ARGS - 1:
        raise ValueError(f"program requires {ARGS - 1} input arguments; execution halted")
    name = argv[0]
    try:
        formulation = Formulation(name)
    except ValueError:
        raise ValueError(f"Input problem formulation ({name}) is unknown") from None
    try:
        nx, ny, nz, absorb = (int(a) for a in argv[1:5])
        dx, dy, dz, dt, tmax = (float(a) for a in argv[5:10])
    except ValueError as exc:
        raise ValueError(f"invalid numeric argument: {exc}") from None
    if absorb < 1:
        raise ValueError("absorption zone must be at least one point wide")
    grid = Grid(nx, ny, nz, absorb, bord=BORD)
    return Problem(formulation, grid, dx, dy, dz, dt, tmax)


def _describe(formulation: Formulation) -> str:
    if formulation is Formulation.ISO:
        return "isotropic"
    if formulation is Formulation.VTI:
        return f"anisotropic with vertical transversely isotropy using sigma={SIGMA:f}"
    return f"anisotropic with tilted transversely isotropy using sigma={SIGMA:f}"


def _print_summary(problem: Problem) -> None:
    g = problem.grid
    dx, dy, dz, dt = (_f(v) for v in (problem.dx, problem.dy, problem.dz, problem.dt))
    st = problem.steps()
    print(f"Problem is {_describe(problem.formulation)}")
    print(
        f"Grid size is ({g.nx},{g.ny},{g.nz}) with spacing "
        f"({float(dx):.2f},{float(dy):.2f},{float(dz):.2f}); simulated area "
        f"({float(_f(g.nx - 1) * dx):.2f},{float(_f(g.ny - 1) * dy):.2f},"
        f"{float(_f(g.nz - 1) * dz):.2f}) "
    )
    print(
        f"Grid is extended by {g.absorb} absortion points and {g.bord} border points at each extreme"
    )
    print(
        "Wave is propagated at internal+absortion points of size "
        f"({g.nx + 2 * g.absorb},{g.ny + 2 * g.absorb},{g.nz + 2 * g.absorb})"
    )
    print(f"Source at coordinates ({g.sx // 2},{g.sy // 2},{g.sz // 2})")
    print(f"Will run {st} time steps of {float(dt):f} to reach time {float(_f(st) * dt):f}")


def main(argv=None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    try:
        problem = parse_args(argv)
    except ValueError as exc:
        print(exc)
        return 1

    _print_summary(problem)
    grid = problem.grid

    medium = build_medium(problem.formulation, grid)
    recdt = recommended_dt(medium.vpz, medium.epsilon, problem.dx, problem.dy, problem.dz)
    print(f"Recomended maximum time step is {recdt:f}; used time step is {float(_f(problem.dt)):f}")

    random_velocity_boundary(
        medium.vpz, medium.vsv, grid.nx, grid.ny, grid.nz, grid.bord, grid.absorb,
        np.random.default_rng(_SEED),
    )

    with SliceFile(
        problem.formulation.value,
        0, grid.sx - 1,
        0, grid.sy - 1,
        0, grid.sz - 1,
        problem.dx, problem.dy, problem.dz, problem.dt,
    ) as slice_file:
        slice_file.write(np.zeros(grid.shape, dtype=_f))
        print(slice_file.describe())
        run_model(problem, medium, slice_file, False)
    return 0


if __name__ == "__main__":
    sys.exit(main())