import logging
import time

import numpy as np
import pytest

from link_mlp.errors import DegenerateMappingError
from link_mlp.utils import Timer, configure_logging, map_range, rand_range


def test_timer_measures_elapsed_time():
    timer = Timer()
    time.sleep(0.01)
    assert timer.elapsed() >= 0.009
    assert timer.elapsed("ms") >= 9.0


def test_timer_restart():
    timer = Timer()
    time.sleep(0.02)
    timer.restart()
    assert timer.elapsed() < 0.02


def test_timer_unknown_unit():
    with pytest.raises(ValueError, match="Unknown time unit"):
        Timer().elapsed("fortnights")


def test_rand_range_bounds():
    rng = np.random.default_rng(0)
    values = rand_range(-2.0, 3.0, size=1000, rng=rng)
    assert values.shape == (1000,)
    assert values.min() >= -2.0
    assert values.max() < 3.0


def test_rand_range_scalar():
    value = rand_range(0.0, 1.0, rng=np.random.default_rng(1))
    assert isinstance(value, float)
    assert 0.0 <= value < 1.0


def test_rand_range_empty_range_is_clamped():
    assert rand_range(0.5, 0.5) == 0.5
    assert np.array_equal(rand_range(0.5, 0.5, size=3), [0.5, 0.5, 0.5])


def test_rand_range_inverted():
    with pytest.raises(ValueError):
        rand_range(1.0, 0.0)


def test_map_range():
    assert map_range(5, 0, 10, 0, 100) == pytest.approx(50)
    assert map_range(0, -1, 1, 10, 20) == pytest.approx(15)
    # reversed output range
    assert map_range(2, 0, 4, 1, 0) == pytest.approx(0.5)


def test_map_range_degenerate():
    with pytest.raises(DegenerateMappingError):
        map_range(1.0, 2.0, 2.0, 0.0, 1.0)


def test_configure_logging_writes_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    log_file = tmp_path / "train.log"
    try:
        configure_logging(logging.DEBUG, log_file=str(log_file))
        logging.getLogger("test").debug("hello from test")
        for handler in root.handlers:
            handler.flush()
        assert "hello from test" in log_file.read_text()
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
