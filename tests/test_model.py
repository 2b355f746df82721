import io
import math

import numpy as np
import pytest

from fletcherwave.grid import Grid
from fletcherwave.model import (
    Formulation,
    Medium,
    Problem,
    build_medium,
    read_high_water_mark,
    recommended_dt,
    report_metrics_csv,
    report_problem_size_csv,
    run_model,
)
from fletcherwave.rsf import SliceFile

GRID = Grid(2, 2, 2, 1)


def _problem(formulation=Formulation.ISO, **kw):
    params = dict(dx=10.0, dy=10.0, dz=10.0, dt=0.001, tmax=0.01, dt_output=0.002)
    params.update(kw)
    return Problem(formulation, GRID, **params)


def _slice(directory):
    directory.mkdir(exist_ok=True)
    return SliceFile(
        "ISO", 0, GRID.sx - 1, 0, GRID.sy - 1, 0, GRID.sz - 1, 10.0, 10.0, 10.0, 0.001,
        directory=directory,
    )


@pytest.mark.parametrize("dt,tmax", [(0.5, 2.0), (0.5, 2.1), (0.001, 0.012), (0.3, 0.0)])
def test_steps_cover_final_time(dt, tmax):
    problem = _problem(dt=dt, tmax=tmax)
    st = problem.steps()
    assert st * dt >= tmax - 1e-6
    assert (st - 1) * dt < tmax + 1e-6


@pytest.mark.parametrize("kw", [{"dt": 0.0}, {"dx": -1.0}, {"tmax": -1.0}, {"dt_output": 0.0}])
def test_problem_rejects_bad_parameters(kw):
    with pytest.raises(ValueError):
        _problem(**kw)


def test_iso_medium():
    medium = build_medium(Formulation.ISO, GRID)
    assert medium.shape == GRID.shape
    assert np.all(medium.vpz == 3000.0)
    assert np.all(medium.vsv == 0.0)
    assert np.all(medium.epsilon == 0.0)


def test_vti_medium():
    medium = build_medium(Formulation.VTI, GRID)
    assert np.allclose(medium.epsilon, 0.24)
    assert np.allclose(medium.delta, 0.1)
    assert np.all(medium.phi == 0.0) and np.all(medium.theta == 0.0)
    assert np.all(medium.vsv > 0) and np.all(medium.vsv < medium.vpz)
    assert np.ptp(medium.vsv) == 0


def test_tti_medium():
    medium = build_medium(Formulation.TTI, GRID)
    assert np.all(medium.phi == 1.0)
    assert np.allclose(medium.theta, math.pi / 4)
    assert np.allclose(medium.vsv, build_medium(Formulation.VTI, GRID).vsv)


def test_medium_shape_mismatch():
    a = np.zeros((2, 2, 2), np.float32)
    with pytest.raises(ValueError):
        Medium(a, a, a, a, a, np.zeros((3, 2, 2), np.float32))


def test_recommended_dt_uses_smallest_spacing():
    medium = build_medium(Formulation.VTI, GRID)
    a = recommended_dt(medium.vpz, medium.epsilon, 10.0, 20.0, 30.0)
    b = recommended_dt(medium.vpz, medium.epsilon, 30.0, 10.0, 20.0)
    c = recommended_dt(medium.vpz, medium.epsilon, 10.0, 10.0, 10.0)
    assert a == b == c
    assert recommended_dt(medium.vpz, medium.epsilon, 20.0, 20.0, 20.0) == pytest.approx(2 * a)


def test_recommended_dt_smaller_for_anisotropy():
    iso = build_medium(Formulation.ISO, GRID)
    vti = build_medium(Formulation.VTI, GRID)
    assert recommended_dt(vti.vpz, vti.epsilon, 10, 10, 10) < recommended_dt(iso.vpz, iso.epsilon, 10, 10, 10)


def test_recommended_dt_empty():
    with pytest.raises(ValueError):
        recommended_dt(np.array([]), np.array([]), 1, 1, 1)


def test_report_problem_size_csv():
    out = io.StringIO()
    report_problem_size_csv(1, 2, 3, 4, 5, out)
    assert out.getvalue() == "sx; 1; sy; 2; sz; 3; bord; 4;  st; 5; \n"


def test_report_metrics_csv():
    out = io.StringIO()
    report_metrics_csv(1.5, 2.0, 10, "kB", out)
    assert out.getvalue() == "walltime; 1.500000; MSamples; 2.000000; HWM;  10; HWMUnit;  kB;\n"


def test_read_high_water_mark(tmp_path):
    status = tmp_path / "status"
    status.write_text("Name:\tpython\nVmPeak:\t  999 kB\nVmHWM:\t    1234 kB\nVmRSS:\t 1 kB\n")
    assert read_high_water_mark(str(status)) == (1234, "kB")


def test_read_high_water_mark_absent(tmp_path):
    status = tmp_path / "status"
    status.write_text("Name:\tpython\n")
    assert read_high_water_mark(str(status)) == (0, "")


def test_run_model_records_fields(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    problem = _problem()
    medium = build_medium(Formulation.ISO, GRID)
    sf = _slice(tmp_path / "out")
    report = run_model(problem, medium, sf, False)
    sf.close()

    assert report.steps == problem.steps()
    assert report.samples == (GRID.sx - 2 * GRID.bord) ** 3 * report.steps
    assert np.abs(report.field).max() > 0
    assert sf.it_count >= 1
    assert (tmp_path / "out" / "ISO.rsf@").stat().st_size == sf.it_count * GRID.size * 4

    expected = io.StringIO()
    report_problem_size_csv(GRID.sx, GRID.sy, GRID.sz, GRID.bord, report.steps, expected)
    lines = (tmp_path / "Report.csv").read_text().splitlines(keepends=True)
    assert lines[0] == expected.getvalue()
    assert lines[1].startswith("walltime; ")
    assert "MSamples/s" in capsys.readouterr().out


def test_parallel_write_matches_serial(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    problem = _problem()
    serial = _slice(tmp_path / "serial")
    run_model(problem, build_medium(Formulation.ISO, GRID), serial, False)
    serial.close()
    parallel = _slice(tmp_path / "parallel")
    run_model(problem, build_medium(Formulation.ISO, GRID), parallel, True)
    parallel.close()

    assert parallel.it_count == serial.it_count
    a = (tmp_path / "serial" / "ISO.rsf@").read_bytes()
    b = (tmp_path / "parallel" / "ISO.rsf@").read_bytes()
    assert a == b and len(a) > 0


def test_run_model_rejects_mismatched_medium(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    medium = build_medium(Formulation.ISO, Grid(3, 2, 2, 1))
    sf = _slice(tmp_path / "out")
    with pytest.raises(ValueError):
        run_model(_problem(), medium, sf, False)
    sf.close()