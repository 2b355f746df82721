"""Mapping between 3D grid coordinates and flat row-major indices."""

from __future__ import annotations

from dataclasses import dataclass


def index(ix: int, iy: int, iz: int, sx: int, sy: int) -> int:
    """Flat index of point (ix, iy, iz) in an array laid out as [sz][sy][sx]."""
    return (iz * sy + iy) * sx + ix


def coord(i: int, sx: int, sy: int, sz: int) -> tuple[int, int, int]:
    """Return (ix, iy, iz) for the flat index ``i``."""
    if not 0 <= i < sx * sy * sz:
        raise ValueError(f"index {i} outside a grid of {sx}x{sy}x{sz} points")
    rest, ix = divmod(i, sx)
    iz, iy = divmod(rest, sy)
    return ix, iy, iz


@dataclass(frozen=True)
class Grid:
    """Problem grid extended by absorption and border zones on every side."""

    nx: int
    ny: int
    nz: int
    absorb: int
    bord: int = 4

    def __post_init__(self) -> None:
        if min(self.nx, self.ny, self.nz) < 1:
            raise ValueError("grid needs at least one point in every direction")
        if self.absorb < 0 or self.bord < 0:
            raise ValueError("absorption and border sizes must not be negative")

    @property
    def sx(self) -> int:
        return self.nx + 2 * self.bord + 2 * self.absorb

    @property
    def sy(self) -> int:
        return self.ny + 2 * self.bord + 2 * self.absorb

    @property
    def sz(self) -> int:
        return self.nz + 2 * self.bord + 2 * self.absorb

    @property
    def shape(self) -> tuple[int, int, int]:
        """Array shape (sz, sy, sx) matching the row-major layout."""
        return self.sz, self.sy, self.sx

    @property
    def size(self) -> int:
        return self.sx * self.sy * self.sz

    def index(self, ix: int, iy: int, iz: int) -> int:
        return index(ix, iy, iz, self.sx, self.sy)

    def coord(self, i: int) -> tuple[int, int, int]:
        return coord(i, self.sx, self.sy, self.sz)

    def source_index(self) -> int:
        """Flat index of the grid centre, where the source is placed."""
        return self.index(self.sx // 2, self.sy // 2, self.sz // 2)