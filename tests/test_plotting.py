import os

import numpy as np
import pytest

from shuttle_sim.main import FlightLog, run_simulation
from shuttle_sim.plotting import extract_log_data, generate_flight_plots


@pytest.fixture(scope="module")
def flight_log():
    _, log, _ = run_simulation(max_time=4.0, verbose=False)
    return log


def test_extract_log_data(flight_log):
    data = extract_log_data(flight_log)
    assert data.time.shape == (len(flight_log),)
    np.testing.assert_allclose(data.altitude_km * 1000.0, flight_log.altitude)
    assert data.stage_index[0] == 1  # ENGINE_STARTUP
    assert data.stage_index[-1] == 2  # LIFTOFF


def test_generate_flight_plots(flight_log, tmp_path):
    written = generate_flight_plots(flight_log, str(tmp_path / "plots"))
    assert set(written) == {'altitude', 'speed', 'mass_fuel', 'stage_timeline'}
    for path in written.values():
        assert os.path.exists(path)
        assert os.path.getsize(path) > 0


def test_empty_log_makes_no_plots(tmp_path, caplog):
    assert generate_flight_plots(FlightLog(), str(tmp_path)) == {}
    assert "empty" in caplog.text
