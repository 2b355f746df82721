# fletcherwave

fletcherwave models pseudo-acoustic waves in three dimensions. It handles
isotropic media (ISO), vertical transversely isotropic media (VTI) and tilted
transversely isotropic media (TTI). The coupled p/q equations are solved with
eighth-order finite differences on numpy arrays. A zone of random velocities
surrounds the model to absorb outgoing waves. Snapshots of the p field are
written in RSF format: an `.rsf` text header plus a raw `native_float` binary
file.

## Installation

```
pip install .
```

numpy is the only runtime dependency. To run the tests, install the `test`
extra (`pip install .[test]`) and run `pytest`.

## Command line

```
fletcherwave FORM NX NY NZ ABSORB DX DY DZ DT TMAX
```

The arguments are:

- `FORM` is `ISO`, `VTI` or `TTI`. It also names the output files.
- `NX NY NZ` give the number of grid points in each direction.
- `ABSORB` is the width of the absorbing zone on each side. It must be at
  least 1.
- `DX DY DZ` are the grid spacings.
- `DT` is the time step.
- `TMAX` is the simulated end time.

A border of 4 points is added outside the absorbing zone. The source is a
Ricker-type wavelet placed at the centre of the grid.

If an argument is missing or invalid, or the formulation is unknown, the
command prints a message and exits with status 1.

Before the run, the command prints a summary of the problem and the
recommended largest time step.

Example:

```
fletcherwave TTI 40 40 40 8 12.5 12.5 12.5 0.001 0.05
```

This run writes:

- `TTI.rsf` and `TTI.rsf@`, the header and the binary data. The whole grid
  is written once at the start, when it is all zeros. After that it is
  written every 0.01 s of simulated time. If the environment variable
  `DISKP1` is set, these files go to that directory.
- `Report.csv` in the current directory. It holds the grid size, the number
  of steps, the wall time, MSamples/s and the peak resident memory (VmHWM).
  The peak memory is read from `/proc/self/status`; if that file cannot be
  read, it is reported as 0.

The random boundary uses a fixed seed, so repeated runs give the same result.

## Library use

Arrays are shaped `(sz, sy, sx)`. Here `s = n + 2*bord + 2*absorb` in each
direction.

```python
from fletcherwave.grid import Grid
from fletcherwave.model import Formulation, Problem, build_medium, run_model
from fletcherwave.boundary import random_velocity_boundary
from fletcherwave.rsf import SliceFile

grid = Grid(20, 20, 20, absorb=4)
problem = Problem(Formulation.VTI, grid, 10.0, 10.0, 10.0, 0.001, 0.02)
medium = build_medium(problem.formulation, grid)
random_velocity_boundary(medium.vpz, medium.vsv, grid.nx, grid.ny, grid.nz,
                         grid.bord, grid.absorb)

with SliceFile("VTI", 0, grid.sx - 1, 0, grid.sy - 1, 0, grid.sz - 1,
               problem.dx, problem.dy, problem.dz, problem.dt,
               directory="out") as out:
    report = run_model(problem, medium, out, parallel_write=True)
print(report.steps, report.msamples)
```

`run_model` prints a summary and writes `Report.csv` in the current
directory. It returns a `RunReport` that holds the timings, the peak memory
and the final p field. With `parallel_write=True`, snapshots are written by a
background thread while the computation continues.

### Modules

- `fletcherwave.grid`
  - `Grid`: grid sizes, `shape`, `index`, `coord` and `source_index`.
  - The module-level functions `index` and `coord`.
- `fletcherwave.source`
  - `ricker(dt, it)`: the source amplitude at time `it * dt`.
- `fletcherwave.derivatives`
  - `der1`, `der2` and `der_cross`: eighth-order first, second and mixed
    derivatives over the interior block of a field.
- `fletcherwave.boundary`
  - `random_velocity_boundary`: fills the absorbing and border zones of
    `vpz` and `vsv` in place. It takes an optional `numpy.random.Generator`.
- `fletcherwave.propagate`
  - `precompute`: builds `Coefficients` from the medium.
  - `propagate`: advances p and q one time step.
  - `insert_source`: adds the source value at a flat index.
- `fletcherwave.rsf`
  - `SliceFile`: a context manager with `write`, `write_full`, `describe` and
    `close`. It writes the header on `close`.
  - `SliceDirection`.
  - `dump_field_to_file`: writes a standalone RSF file and returns its header
    and binary paths.
  - `slice_summary`: a one-line summary of a field's extremes.
- `fletcherwave.model`
  - `Formulation`, `Problem`, `Medium` and `RunReport`.
  - `build_medium` and `recommended_dt`.
  - `run_model`.
  - The CSV helpers `report_problem_size_csv` and `report_metrics_csv`.
  - `read_high_water_mark`.
- `fletcherwave.cli`
  - `parse_args` and `main`, the `fletcherwave` command.

## Limitations

- All computation runs on the CPU with numpy. There is no GPU execution.
- Hardware performance counters are not collected. The report holds only
  timings, throughput and peak memory.
- The medium built by the command is homogeneous, apart from the random
  boundary. There is no option to read a velocity model from a file.