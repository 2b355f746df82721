"""Writing wavefields in the RSF format: a text header plus raw native floats."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

import numpy as np

_f = np.float32
ESIZE = np.dtype(np.float32).itemsize


class SliceDirection(Enum):
    """Which part of the grid a slice file records."""

    XSLICE = "XSlice"
    YSLICE = "YSlice"
    ZSLICE = "ZSlice"
    FULL = "Grid Section"


def _fmt(value: float) -> str:
    """Format a single-precision value the way the header expects."""
    return f"{float(_f(value)):f}"


def _region(start: tuple[int, int, int], end: tuple[int, int, int]) -> tuple[slice, slice, slice]:
    (ix0, iy0, iz0), (ix1, iy1, iz1) = start, end
    return slice(iz0, iz1 + 1), slice(iy0, iy1 + 1), slice(ix0, ix1 + 1)


def _check_region(field: np.ndarray, start, end) -> None:
    if field.ndim != 3:
        raise ValueError("field must be three-dimensional, shaped (sz, sy, sx)")
    sz, sy, sx = field.shape
    for lo, hi, n, axis in zip(start, end, (sx, sy, sz), "xyz"):
        if not 0 <= lo <= hi < n:
            raise ValueError(f"{axis} range {lo}:{hi} does not fit in {n} points")


class SliceFile:
    """An RSF file that grows by one section of a field per recorded time step.

    The binary part is written as fields arrive; the header is written on
    :meth:`close`, when the number of recorded steps is known.
    """

    def __init__(
        self,
        name: str,
        ix_start: int,
        ix_end: int,
        iy_start: int,
        iy_end: int,
        iz_start: int,
        iz_end: int,
        dx: float,
        dy: float,
        dz: float,
        dt: float,
        directory: str | os.PathLike | None = None,
    ) -> None:
        for lo, hi, axis in ((ix_start, ix_end, "x"), (iy_start, iy_end, "y"), (iz_start, iz_end, "z")):
            if lo < 0 or hi < lo:
                raise ValueError(f"invalid {axis} range {lo}:{hi}")
        if ix_start == ix_end:
            self.direction = SliceDirection.XSLICE
        elif iy_start == iy_end:
            self.direction = SliceDirection.YSLICE
        elif iz_start == iz_end:
            self.direction = SliceDirection.ZSLICE
        else:
            self.direction = SliceDirection.FULL

        if directory is None:
            directory = os.environ.get("DISKP1", "./")
        self.name = os.path.join(os.fspath(directory), name)
        self.header_path = self.name + ".rsf"
        self.binary_path = self.header_path + "@"

        self.start = (ix_start, iy_start, iz_start)
        self.end = (ix_end, iy_end, iz_end)
        self.dx, self.dy, self.dz, self.dt = dx, dy, dz, dt
        self.it_count = 0

        self._head = open(self.header_path, "w")
        self._binary = open(self.binary_path, "wb")
        self.closed = False

    @property
    def ix_start(self) -> int:
        return self.start[0]

    @property
    def ix_end(self) -> int:
        return self.end[0]

    @property
    def iy_start(self) -> int:
        return self.start[1]

    @property
    def iy_end(self) -> int:
        return self.end[1]

    @property
    def iz_start(self) -> int:
        return self.start[2]

    @property
    def iz_end(self) -> int:
        return self.end[2]

    def _ensure_open(self) -> None:
        if self.closed:
            raise ValueError("slice file is closed")

    def write(self, field: np.ndarray) -> None:
        """Append the recorded section of ``field`` and count one time step."""
        self._ensure_open()
        field = np.asarray(field)
        _check_region(field, self.start, self.end)
        section = field[_region(self.start, self.end)]
        self._binary.write(np.ascontiguousarray(section, dtype=np.float32).tobytes())
        self.it_count += 1

    def write_full(self, field: np.ndarray, count: bool = True) -> None:
        """Append the whole of ``field``; count a time step only if ``count``."""
        self._ensure_open()
        data = np.ascontiguousarray(field, dtype=np.float32)
        self._binary.write(data.tobytes())
        if count:
            self.it_count += 1

    def describe(self) -> str:
        """One-line description of the file and the recorded region."""
        (ix0, iy0, iz0), (ix1, iy1, iz1) = self.start, self.end
        return (
            f"File {self.header_path} contains time evolution of "
            f"({ix0}:{ix1},{iy0}:{iy1},{iz0}:{iz1})"
        )

    def _header_lines(self) -> list[str]:
        (ix0, iy0, iz0), (ix1, iy1, iz1) = self.start, self.end
        nx, ny, nz = ix1 - ix0 + 1, iy1 - iy0 + 1, iz1 - iz0 + 1
        lines = [
            f'in="{self.binary_path}"',
            'data_format="native_float"',
            f"esize={ESIZE}",
        ]
        if self.direction is SliceDirection.XSLICE:
            sizes, steps = (ny, nz, self.it_count), (self.dy, self.dz, self.dt)
        elif self.direction is SliceDirection.YSLICE:
            sizes, steps = (nx, nz, self.it_count), (self.dx, self.dz, self.dt)
        elif self.direction is SliceDirection.ZSLICE:
            sizes, steps = (nx, ny, self.it_count), (self.dx, self.dy, self.dt)
        else:
            sizes, steps = (nx, ny, nz, self.it_count), (self.dx, self.dy, self.dz, self.dt)
        lines += [f"n{k}={n}" for k, n in enumerate(sizes, start=1)]
        lines += [f"d{k}={_fmt(d)}" for k, d in enumerate(steps, start=1)]
        return lines

    def close(self) -> None:
        """Write the header and close both files."""
        if self.closed:
            return
        try:
            self._head.write("".join(line + "\n" for line in self._header_lines()))
        finally:
            self._head.close()
            self._binary.close()
            self.closed = True

    def __enter__(self) -> SliceFile:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def dump_field_to_file(
    field: np.ndarray,
    name: str | os.PathLike,
    start: tuple[int, int, int],
    end: tuple[int, int, int],
    d1: float,
    d2: float,
    d3: float,
) -> tuple[Path, Path]:
    """Write one section of ``field`` as a standalone RSF file.

    ``start`` and ``end`` are inclusive (ix, iy, iz) corners. Returns the
    header and binary paths.
    """
    field = np.asarray(field)
    _check_region(field, start, end)
    header_name = os.fspath(name) + ".rsf"
    binary_name = header_name + "@"
    (ix0, iy0, iz0), (ix1, iy1, iz1) = start, end
    lines = [
        f'in="./{binary_name}"',
        'data_format="native_float"',
        f"esize={ESIZE}",
        f"n1={ix1 - ix0 + 1}",
        f"d1={_fmt(d1)}",
        f"n2={iy1 - iy0 + 1}",
        f"d2={_fmt(d2)}",
        f"n3={iz1 - iz0 + 1}",
        f"d3={_fmt(d3)}",
    ]
    with open(header_name, "w") as head:
        head.write("".join(line + "\n" for line in lines))
    with open(binary_name, "wb") as binary:
        section = field[_region(start, end)]
        binary.write(np.ascontiguousarray(section, dtype=np.float32).tobytes())
    return Path(header_name), Path(binary_name)


def slice_summary(field: np.ndarray, slice_file: SliceFile, dt: float, it: int, src: float) -> str:
    """One-line summary of the extremes of ``field`` over the slice region."""
    field = np.asarray(field)
    _check_region(field, slice_file.start, slice_file.end)
    section = field[_region(slice_file.start, slice_file.end)].astype(np.float32)
    max_p = float(section.max())
    min_p = float(section.min())
    time = float(_f(dt) * _f(it))
    return (
        f"Slice of {slice_file.header_path} at iteration; {it:05d}; time(s); {time:f}; "
        f"max; {max_p:9.2e}; min; {min_p:9.2e}; src; {float(_f(src)):9.2e};"
    )