"""Problem definition, medium construction and the time-stepping driver."""

from __future__ import annotations

import math
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

import numpy as np

from .grid import Grid
from .propagate import Coefficients, insert_source, precompute, propagate
from .rsf import SliceFile
from .source import ricker

MI = 0.2
SIGMA = 0.75
MAX_SIGMA = 10.0
DT_OUTPUT = 0.01
MEGA = 1.0e-6
REPORT_NAME = "Report.csv"
STATUS_PATH = "/proc/self/status"

_f = np.float32


class Formulation(Enum):
    """Formulation of the wave equation."""

    ISO = "ISO"
    VTI = "VTI"
    TTI = "TTI"


@dataclass(frozen=True)
class Problem:
    """Grid, spacings and time parameters of one simulation."""

    formulation: Formulation
    grid: Grid
    dx: float
    dy: float
    dz: float
    dt: float
    tmax: float
    dt_output: float = DT_OUTPUT

    def __post_init__(self) -> None:
        if min(self.dx, self.dy, self.dz) <= 0:
            raise ValueError("grid spacings must be positive")
        if self.dt <= 0:
            raise ValueError("time step must be positive")
        if self.tmax < 0:
            raise ValueError("final time must not be negative")
        if self.dt_output <= 0:
            raise ValueError("output interval must be positive")

    def steps(self) -> int:
        """Number of time steps needed to reach ``tmax``."""
        return int(math.ceil(float(_f(self.tmax) / _f(self.dt))))


@dataclass
class Medium:
    """Anisotropy model: speeds, Thomsen parameters and symmetry angles."""

    vpz: np.ndarray
    vsv: np.ndarray
    epsilon: np.ndarray
    delta: np.ndarray
    phi: np.ndarray
    theta: np.ndarray

    def __post_init__(self) -> None:
        shapes = {a.shape for a in (self.vpz, self.vsv, self.epsilon, self.delta, self.phi, self.theta)}
        if len(shapes) != 1:
            raise ValueError("all medium arrays must have the same shape")

    @property
    def shape(self) -> tuple[int, ...]:
        return self.vpz.shape


@dataclass
class RunReport:
    """Timings and sizes measured during a run, and the final p field."""

    steps: int
    samples: int
    walltime: float
    execution_time: float
    msamples: float
    hwm: int
    hwm_unit: str
    start_ns: int
    end_ns: int
    field: np.ndarray


def build_medium(formulation: Formulation, grid: Grid) -> Medium:
    """Homogeneous medium for the given formulation over the whole grid."""
    shape = grid.shape
    vpz = np.full(shape, 3000.0, dtype=_f)
    phi = np.zeros(shape, dtype=_f)
    theta = np.zeros(shape, dtype=_f)
    if formulation is Formulation.ISO:
        epsilon = np.zeros(shape, dtype=_f)
        delta = np.zeros(shape, dtype=_f)
        vsv = np.zeros(shape, dtype=_f)
        return Medium(vpz, vsv, epsilon, delta, phi, theta)

    epsilon = np.full(shape, 0.24, dtype=_f)
    delta = np.full(shape, 0.1, dtype=_f)
    if formulation is Formulation.TTI:
        phi[...] = 1.0  # avoids null coefficients
        theta[...] = _f(math.atan(1.0))
    if SIGMA > MAX_SIGMA:
        print(
            f"Since sigma ({SIGMA:f}) is greater that threshold ({MAX_SIGMA:f}), "
            "sigma is considered infinity and vsv is set to zero"
        )
        vsv = np.zeros(shape, dtype=_f)
    else:
        vsv = (vpz * np.sqrt(np.abs(epsilon - delta) / _f(SIGMA))).astype(_f)
    return Medium(vpz, vsv, epsilon, delta, phi, theta)


def recommended_dt(vpz, epsilon, dx: float, dy: float, dz: float) -> float:
    """Largest stable time step for the fastest speed and smallest spacing."""
    vpz = np.asarray(vpz, dtype=np.float64)
    epsilon = np.asarray(epsilon, dtype=np.float64)
    if vpz.size == 0:
        raise ValueError("speed array is empty")
    maxvel = float(_f(np.max(vpz * np.sqrt(1.0 + 2.0 * epsilon))))
    mindelta = float(min(_f(dx), _f(dy), _f(dz)))
    return float(_f((MI * mindelta) / maxvel))


def report_problem_size_csv(sx: int, sy: int, sz: int, bord: int, st: int, stream: TextIO) -> None:
    """Write the problem size line of the CSV report."""
    stream.write(f"sx; {sx}; sy; {sy}; sz; {sz}; bord; {bord};  st; {st}; \n")


def report_metrics_csv(walltime: float, msamples: float, hwm: int, hwm_unit: str, stream: TextIO) -> None:
    """Write the metrics line of the CSV report."""
    stream.write(
        f"walltime; {walltime:f}; MSamples; {msamples:f}; HWM;  {hwm}; HWMUnit;  {hwm_unit};\n"
    )


def read_high_water_mark(path: str = STATUS_PATH) -> tuple[int, str]:
    """Peak resident memory and its unit from a process status file.

    Returns ``(0, "")`` when the file has no VmHWM line.
    """
    with open(path) as status:
        for line in status:
            if line.startswith("VmHWM"):
                parts = line[6:].split()
                if not parts:
                    break
                return int(parts[0]), parts[1] if len(parts) > 1 else ""
    return 0, ""


def _dump_coefficients(coef: Coefficients, medium: Medium, grid: Grid) -> None:
    i = grid.index(grid.bord + 1, grid.bord + 1, grid.bord + 1)

    def at(a: np.ndarray) -> float:
        return float(a.flat[i])

    print(
        f"ch1dxx={at(coef.ch1dxx):f}; ch1dyy={at(coef.ch1dyy):f}; ch1dzz={at(coef.ch1dzz):f}; "
        f"ch1dxy={at(coef.ch1dxy):f}; ch1dxz={at(coef.ch1dxz):f}; ch1dyz={at(coef.ch1dyz):f}"
    )
    print(f"vsv={at(medium.vsv):e}; vpz={at(medium.vpz):e}, v2pz={at(coef.v2pz):e}")
    print(
        f"v2sz={at(coef.v2sz):e}; v2pz={at(coef.v2pz):e}, "
        f"v2px={at(coef.v2px):e}, v2pn={at(coef.v2pn):e}"
    )


def run_model(
    problem: Problem,
    medium: Medium,
    slice_file: SliceFile,
    parallel_write: bool = False,
) -> RunReport:
    """Run the time loop, recording p in ``slice_file`` every output interval.

    With ``parallel_write`` the recorded fields are written by a background
    thread while the computation goes on. Writes ``Report.csv`` in the
    current directory and prints a summary.
    """
    grid = problem.grid
    if medium.shape != grid.shape:
        raise ValueError(f"medium shape {medium.shape} does not match grid shape {grid.shape}")
    bord = grid.bord
    st = problem.steps()
    i_source = grid.source_index()
    dt = _f(problem.dt)
    dt_output = _f(problem.dt_output)
    n_out = 1
    t_out = _f(n_out) * dt_output

    samples_propagate = (grid.sx - 2 * bord) * (grid.sy - 2 * bord) * (grid.sz - 2 * bord)
    total_samples = samples_propagate * st

    coef = precompute(medium.vpz, medium.vsv, medium.epsilon, medium.delta, medium.phi, medium.theta)
    _dump_coefficients(coef, medium, grid)

    pp, pc, qp, qc = (np.zeros(grid.shape, dtype=_f) for _ in range(4))

    walltime = 0.0
    start_ns = time.time_ns()
    writer = ThreadPoolExecutor(max_workers=1) if parallel_write else None
    pending = []
    try:
        for it in range(1, st + 1):
            src = ricker(problem.dt, it - 1)
            insert_source(pc, qc, i_source, src)

            t0 = time.perf_counter()
            propagate(coef, pp, pc, qp, qc, problem.dx, problem.dy, problem.dz, problem.dt, bord)
            pp, pc = pc, pp
            qp, qc = qc, qp
            walltime += time.perf_counter() - t0

            t_sim = _f(it) * dt
            if t_sim >= t_out:
                if writer is not None:
                    pending.append(writer.submit(slice_file.write_full, pc.copy(), False))
                    slice_file.it_count += 1
                else:
                    slice_file.write_full(pc)
                n_out += 1
                t_out = _f(n_out) * dt_output
    finally:
        if writer is not None:
            writer.shutdown(wait=True)
    for job in pending:
        job.result()
    end_ns = time.time_ns()

    try:
        hwm, hwm_unit = read_high_water_mark()
    except OSError:
        hwm, hwm_unit = 0, ""

    msamples = (MEGA * total_samples) / walltime if walltime > 0 else 0.0
    execution_time = (end_ns - start_ns) * 1e-9

    label = "parallel-write" if parallel_write else "serial-write"
    print(f"Execution time (s) is {walltime:f}")
    print(f"Total execution time (s) is {execution_time:f}")
    print(f"MSamples/s {msamples:.0f}")
    print(f"Memory High Water Mark is {hwm} {hwm_unit}")
    print(
        f"{label},{slice_file.name},{grid.nx},{grid.ny},{grid.nz},{grid.absorb},"
        f"{float(_f(problem.dx)):.2f},{float(_f(problem.dy)):.2f},{float(_f(problem.dz)):.2f},"
        f"{float(dt):f},{float(_f(st) * dt):f},{start_ns},{end_ns},"
        f"{walltime:f},{execution_time:f},{msamples:.0f}"
    )

    with open(REPORT_NAME, "w") as report:
        report_problem_size_csv(grid.sx, grid.sy, grid.sz, bord, st, report)
        report_metrics_csv(walltime, msamples, hwm, hwm_unit, report)
    sys.stdout.flush()

    return RunReport(
        steps=st,
        samples=total_samples,
        walltime=walltime,
        execution_time=execution_time,
        msamples=msamples,
        hwm=hwm,
        hwm_unit=hwm_unit,
        start_ns=start_ns,
        end_ns=end_ns,
        field=pc,
    )