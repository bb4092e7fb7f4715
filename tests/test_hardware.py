from unittest.mock import patch

import pytest

from hyperion.miner.hardware import SystemInfo, detect_optimal_threads, get_system_info


@pytest.mark.parametrize("cores", [1, 2])
def test_small_machines_use_every_core(cores):
    with patch("hyperion.miner.hardware.os.cpu_count", return_value=cores):
        assert detect_optimal_threads() == cores


def test_larger_machines_leave_one_core_free():
    with patch("hyperion.miner.hardware.os.cpu_count", return_value=8):
        assert detect_optimal_threads() == 7


def test_three_cores():
    with patch("hyperion.miner.hardware.os.cpu_count", return_value=3):
        assert detect_optimal_threads() == 2


def test_unknown_cpu_count_counts_as_one():
    with patch("hyperion.miner.hardware.os.cpu_count", return_value=None):
        assert detect_optimal_threads() == 1


def test_system_info_is_consistent():
    with patch("hyperion.miner.hardware.os.cpu_count", return_value=16):
        info = get_system_info()
    assert info == SystemInfo(cpu_cores=16, optimal_threads=15)


def test_system_info_threads_never_exceed_cores():
    info = get_system_info()
    assert 1 <= info.optimal_threads <= info.cpu_cores